"""
处理流水线模块

功能说明:
    将一帧依次经过 解码 -> 分类 -> 注册表更新 -> (ACK 时) 集合同步。
    单线程同步执行，一帧处理完成后才接受下一帧；任何单帧错误只导致该帧被丢弃。
"""
import logging
from typing import Iterable, Optional
from analysis.classifier import classify
from analysis.decoder import decode_frame
from analysis.registry import ClientRegistry
from dhcp_ipset.ipset import SetSynchronizer, build_comment
from schemas.dhcp import ClientRequest, DhcpEvent, RawFrame, ServerAck
from utils.errors import DecodeError

logger = logging.getLogger(__name__)


class DhcpPipeline:
    """
    DHCP 观测流水线

    功能: 持有客户端注册表与同步端口，逐帧处理抓包源产出的帧
    """

    def __init__(self, registry: ClientRegistry, synchronizer: SetSynchronizer):
        self.registry = registry
        self.synchronizer = synchronizer
        self.frames = 0
        self.dropped = 0

    def process_frame(self, frame: RawFrame) -> Optional[DhcpEvent]:
        """
        处理单个帧

        参数: frame: 原始帧
        返回: 识别出的事件；解码失败或不跟踪的报文返回 None
        """
        self.frames += 1
        try:
            msg = decode_frame(frame)
        except DecodeError as e:
            self.dropped += 1
            logger.warning(f"丢弃帧 (长度 {frame.length}): {e}")
            return None

        event = classify(msg, frame.timestamp)
        if isinstance(event, ClientRequest):
            self._handle_request(event)
        elif isinstance(event, ServerAck):
            self._handle_ack(event)
        return event

    def _handle_request(self, event: ClientRequest) -> None:
        self.registry.record_request(event.hwaddr, event.fields, event.timestamp)
        fields = " ".join(f"{name}={value!r}" for name, value in event.fields.items())
        logger.info(f"REQUEST {event.hwaddr} {fields}")

    def _handle_ack(self, event: ServerAck) -> None:
        record = self.registry.record_ack(event.hwaddr, event.lease, event.ip, event.timestamp)
        logger.info(f"ACK {event.hwaddr} ip={event.ip} lease={event.lease}")

        if event.lease is None:
            logger.warning(f"ACK {event.hwaddr} 缺少租期选项，跳过集合更新")
            return
        self.synchronizer.upsert(event.ip, event.hwaddr, event.lease, build_comment(record))

    def run(self, frames: Iterable[RawFrame]) -> None:
        """消费帧序列直到其结束，单帧异常只丢弃该帧"""
        for frame in frames:
            try:
                self.process_frame(frame)
            except Exception:
                self.dropped += 1
                logger.exception(f"处理帧失败 (长度 {frame.length})，已丢弃")
        self.log_summary()

    def log_summary(self) -> None:
        """记录处理统计与已知客户端"""
        clients = self.registry.snapshot()
        logger.info(
            f"处理结束: 共 {self.frames} 帧，丢弃 {self.dropped} 帧，已知客户端 {len(clients)} 个"
        )
        for hwaddr, record in clients.items():
            logger.debug(
                f"客户端 {hwaddr}: ip={record.ip} lease={record.lease} "
                f"hostname={record.hostname!r} vendor={record.vendor_class_id!r} updated={record.updated}"
            )
