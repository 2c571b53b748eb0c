import socket
import struct
import pytest
from scapy.layers.l2 import Ether
from scapy.packet import Raw
from scapy.utils import wrpcap

DHCP_MAGIC = b"\x63\x82\x53\x63"


def build_bootp(op, msg_type=None, chaddr=b"\xaa\xbb\xcc\xdd\xee\xff", hwlen=None,
                yiaddr="0.0.0.0", options=None, magic=DHCP_MAGIC):
    """构造 BOOTP/DHCP 负载"""
    hwlen = len(chaddr) if hwlen is None else hwlen
    header = struct.pack("!BBBBIHH", op, 1, hwlen, 0, 0x12345678, 0, 0)
    header += socket.inet_aton("0.0.0.0")       # ciaddr
    header += socket.inet_aton(yiaddr)          # yiaddr
    header += socket.inet_aton("0.0.0.0") * 2   # siaddr, giaddr
    header += chaddr.ljust(16, b"\x00")
    header += b"\x00" * 192                     # sname + file
    opts = b""
    if msg_type is not None:
        opts += bytes([53, 1, msg_type])
    for code, value in (options or []):
        opts += bytes([code, len(value)]) + value
    return header + magic + opts + b"\xff"


def build_frame(payload, sport=68, dport=67, ethertype=0x0800, proto=17):
    """构造以太网 + IPv4 + UDP 帧"""
    eth = b"\xff" * 6 + b"\xaa\xbb\xcc\xdd\xee\xff" + struct.pack("!H", ethertype)
    udp = struct.pack("!HHHH", sport, dport, 8 + len(payload), 0)
    ip = struct.pack(
        "!BBHHHBBH4s4s", 0x45, 0, 20 + len(udp) + len(payload), 0, 0, 64, proto, 0,
        socket.inet_aton("0.0.0.0"), socket.inet_aton("255.255.255.255")
    )
    return eth + ip + udp + payload


def write_pcap(path, frames, linktype=1):
    """用 wrpcap 写出 pcap 文件，frames 为 (时间戳, 以太网帧字节) 列表"""
    packets = []
    for ts, data in frames:
        pkt = Ether(data) if linktype == 1 else Raw(data)
        pkt.time = ts
        packets.append(pkt)
    wrpcap(str(path), packets, linktype=linktype)
    return path


@pytest.fixture
def bootp():
    return build_bootp


@pytest.fixture
def eth_frame():
    return build_frame


@pytest.fixture
def pcap_file(tmp_path):
    def _write(frames, linktype=1, name="capture.pcap"):
        return write_pcap(tmp_path / name, frames, linktype)
    return _write
