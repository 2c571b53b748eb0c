"""
pcap 流读取模块

功能说明:
    用 scapy 的 PcapReader 从二进制流 (tshark -w - 的标准输出或本地 pcap 文件)
    中逐条读取记录，产出 RawFrame。链路类型必须是以太网。
"""
from typing import BinaryIO, Iterator, Optional, Union
from scapy.error import Scapy_Exception
from scapy.utils import PcapReader
from schemas.dhcp import RawFrame
from utils.errors import CaptureSetupError

LINKTYPE_ETHERNET = 1


class PcapStreamReader:
    """
    pcap 流读取器

    功能: 构造时不读取数据；read_header() 解析全局头，之后可迭代获取帧
    """

    def __init__(self, stream: Union[str, BinaryIO]):
        self.stream = stream
        self.reader: Optional[PcapReader] = None
        self.linktype: Optional[int] = None

    def read_header(self) -> None:
        """
        读取并校验全局头

        异常: CaptureSetupError: 流在全局头之前结束、格式未知或链路类型不是以太网
        """
        try:
            reader = PcapReader(self.stream)
        except (Scapy_Exception, EOFError) as e:
            raise CaptureSetupError(f"无法读取 pcap 流: {e}") from e

        # pcapng 的链路类型按接口记录，此处只校验经典 pcap 头
        linktype = getattr(reader, "linktype", LINKTYPE_ETHERNET)
        if linktype != LINKTYPE_ETHERNET:
            reader.close()
            raise CaptureSetupError(f"不支持的链路类型: {linktype} (仅支持以太网)")

        self.reader = reader
        self.linktype = linktype

    def __iter__(self) -> Iterator[RawFrame]:
        if self.reader is None:
            self.read_header()
        for pkt in self.reader:
            data = bytes(pkt)
            yield RawFrame(data=data, timestamp=int(pkt.time), length=len(data))

    def close(self) -> None:
        if self.reader is not None:
            self.reader.close()
            self.reader = None
