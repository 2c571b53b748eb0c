"""
离线回放模块

功能说明:
    读取本地 pcap 文件，按所选过滤程序筛选帧，产出与实时抓包相同的 RawFrame 序列，
    便于用历史抓包验证处理流程。
"""
import logging
import os
from typing import Iterator
from capture.filters import CaptureFilter
from capture.pcapstream import PcapStreamReader
from schemas.dhcp import RawFrame
from utils.errors import CaptureSetupError

logger = logging.getLogger(__name__)


def read_pcap(file_path: str, capture_filter: CaptureFilter) -> Iterator[RawFrame]:
    """
    离线读取 pcap 文件

    参数:
        file_path: pcap 文件路径 (经典 libpcap 格式，以太网链路)
        capture_filter: 过滤程序，仅产出其接受的帧
    返回: RawFrame 迭代器
    异常: CaptureSetupError: 文件不存在或文件头非法 (在首次迭代时抛出)
    """
    if not os.path.exists(file_path):
        raise CaptureSetupError(f"找不到文件: {file_path}")

    with open(file_path, "rb") as f:
        reader = PcapStreamReader(f)
        reader.read_header()
        logger.info(f"开始回放: 文件={file_path} 模式={capture_filter.name}")

        total = 0
        matched = 0
        for frame in reader:
            total += 1
            if capture_filter.matches(frame.data):
                matched += 1
                yield frame

    logger.info(f"回放结束: 共 {total} 帧，匹配 {matched} 帧")
