"""
抓包过滤器模块

功能说明:
    定义两种互斥的过滤程序，由中继模式开关选择:
        - 普通模式: IPv4/UDP，任一端口为 67 或 68 (覆盖共享链路上的双向流量)
        - 中继模式: IPv4/UDP，源端口与目的端口均为 67 (仅中继转发的服务器应答)
    每个过滤程序同时提供 BPF 表达式 (交给 tshark) 与等价的 Python 判定函数
    (用于离线回放与测试)。
"""
import struct
from typing import Callable, NamedTuple, Optional, Tuple

ETH_HDR_LEN = 14
ETH_P_IP = 0x0800
UDP_PROTO = 17
DHCP_SERVER_PORT = 67
DHCP_CLIENT_PORT = 68


class CaptureFilter(NamedTuple):
    """过滤程序: 名称、BPF 表达式与端口判定"""
    name: str
    bpf: str
    port_match: Callable[[int, int], bool]

    def matches(self, frame: bytes) -> bool:
        """判断以太网帧是否被该过滤程序接受"""
        ports = udp_ports(frame)
        if ports is None:
            return False
        return self.port_match(*ports)


NORMAL_FILTER = CaptureFilter(
    name="normal",
    bpf=f"ip and udp and (port {DHCP_SERVER_PORT} or port {DHCP_CLIENT_PORT})",
    port_match=lambda sport, dport: bool(
        {sport, dport} & {DHCP_SERVER_PORT, DHCP_CLIENT_PORT}
    ),
)

RELAY_FILTER = CaptureFilter(
    name="relay",
    bpf=f"ip and udp and src port {DHCP_SERVER_PORT} and dst port {DHCP_SERVER_PORT}",
    port_match=lambda sport, dport: sport == DHCP_SERVER_PORT and dport == DHCP_SERVER_PORT,
)


def select_filter(relay_mode: bool) -> CaptureFilter:
    """按中继模式选择过滤程序"""
    return RELAY_FILTER if relay_mode else NORMAL_FILTER


def udp_ports(frame: bytes) -> Optional[Tuple[int, int]]:
    """
    取出以太网/IPv4/UDP 帧的 (源端口, 目的端口)

    功能: 按 IHL 计算 UDP 头位置；非 IPv4、非 UDP、分片后续片或长度不足时返回 None
    """
    if len(frame) < ETH_HDR_LEN + 20:
        return None
    if struct.unpack("!H", frame[12:14])[0] != ETH_P_IP:
        return None

    ip_off = ETH_HDR_LEN
    if frame[ip_off] >> 4 != 4:
        return None
    ihl = (frame[ip_off] & 0x0F) * 4
    if ihl < 20 or frame[ip_off + 9] != UDP_PROTO:
        return None
    # 非首个分片不携带 UDP 头
    if struct.unpack("!H", frame[ip_off + 6 : ip_off + 8])[0] & 0x1FFF:
        return None

    udp_off = ip_off + ihl
    if len(frame) < udp_off + 8:
        return None
    src_port, dst_port = struct.unpack("!HH", frame[udp_off : udp_off + 4])
    return src_port, dst_port
