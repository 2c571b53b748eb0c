"""
帧解码模块

功能说明:
    跳过固定长度的以太网 + IPv4 + UDP 头部，将剩余负载按 BOOTP/DHCP
    线格式解码为 DhcpMessage。缺少 DHCP 魔数或字段越界时抛出 DecodeError。
"""
import socket
from typing import Dict
from schemas.dhcp import DhcpMessage, RawFrame, OPTION_PAD, OPTION_END
from utils.errors import DecodeError

ETH_HDR_LEN = 14
IPV4_HDR_LEN = 20
UDP_HDR_LEN = 8
HEADER_PREFIX_LEN = ETH_HDR_LEN + IPV4_HDR_LEN + UDP_HDR_LEN

BOOTP_FIXED_LEN = 236
DHCP_MAGIC = b"\x63\x82\x53\x63"
CHADDR_OFFSET = 28
CHADDR_LEN = 16
YIADDR_OFFSET = 16


def parse_options(opts: bytes) -> Dict[int, bytes]:
    """
    解析 TLV 编码的选项列表

    功能: 跳过填充，遇到结束标记或缓冲区耗尽时停止；末尾被截断的选项丢弃，
          重复出现的选项以最后一次为准
    参数: opts: 魔数之后的选项字节
    返回: 选项码 -> 原始值
    """
    out: Dict[int, bytes] = {}
    i = 0
    while i < len(opts):
        code = opts[i]
        if code == OPTION_PAD:
            i += 1
            continue
        if code == OPTION_END:
            break
        if i + 1 >= len(opts):
            break
        ln = opts[i + 1]
        if i + 2 + ln > len(opts):
            break
        out[code] = opts[i + 2 : i + 2 + ln]
        i += 2 + ln
    return out


def decode_payload(payload: bytes) -> DhcpMessage:
    """
    解码 UDP 负载 (BOOTP 报文)

    参数: payload: UDP 负载
    返回: DhcpMessage
    异常: DecodeError: 长度不足、缺少魔数或硬件地址长度非法
    """
    if len(payload) < BOOTP_FIXED_LEN + len(DHCP_MAGIC):
        raise DecodeError(f"负载过短: {len(payload)} 字节")
    if payload[BOOTP_FIXED_LEN : BOOTP_FIXED_LEN + len(DHCP_MAGIC)] != DHCP_MAGIC:
        raise DecodeError("未找到 DHCP 魔数")

    hwlen = payload[2]
    if hwlen == 0 or hwlen > CHADDR_LEN:
        raise DecodeError(f"非法硬件地址长度: {hwlen}")

    return DhcpMessage(
        op=payload[0],
        hwlen=hwlen,
        chaddr=payload[CHADDR_OFFSET : CHADDR_OFFSET + CHADDR_LEN],
        yiaddr=socket.inet_ntoa(payload[YIADDR_OFFSET : YIADDR_OFFSET + 4]),
        options=parse_options(payload[BOOTP_FIXED_LEN + len(DHCP_MAGIC) :]),
    )


def decode_frame(frame: RawFrame) -> DhcpMessage:
    """
    解码一个以太网帧

    功能: 以太网帧布局假设下，跳过固定的 42 字节头部后解码 DHCP
    参数: frame: 原始帧
    返回: DhcpMessage
    异常: DecodeError
    """
    if len(frame.data) <= HEADER_PREFIX_LEN:
        raise DecodeError(f"帧过短: {len(frame.data)} 字节")
    return decode_payload(frame.data[HEADER_PREFIX_LEN:])
