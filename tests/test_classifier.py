import pytest
from analysis.classifier import classify
from analysis.decoder import decode_payload
from schemas.dhcp import (
    ClientRequest, ServerAck,
    DHCPDISCOVER, DHCPOFFER, DHCPREQUEST, DHCPDECLINE, DHCPACK, DHCPNAK, DHCPRELEASE, DHCPINFORM,
)


def test_classify_request(bootp):
    """测试请求方向 + REQUEST"""
    msg = decode_payload(bootp(1, DHCPREQUEST, options=[(60, b"docsis3.0"), (12, b"router1")]))
    event = classify(msg, 1000)

    assert isinstance(event, ClientRequest)
    assert event.hwaddr == "aa:bb:cc:dd:ee:ff"
    assert event.fields == {"vendor_class_id": "docsis3.0", "hostname": "router1"}
    assert event.timestamp == 1000


def test_classify_request_missing_and_empty_options(bootp):
    """测试缺失选项得到 None，空选项得到空字符串"""
    msg = decode_payload(bootp(1, DHCPREQUEST, options=[(12, b"")]))
    event = classify(msg, 1)
    assert event.fields == {"vendor_class_id": None, "hostname": ""}


def test_classify_request_strips_trailing_nul(bootp):
    """测试主机名尾部 NUL 被去除"""
    msg = decode_payload(bootp(1, DHCPREQUEST, options=[(12, b"host1\x00")]))
    assert classify(msg, 1).fields["hostname"] == "host1"


def test_classify_ack(bootp):
    """测试应答方向 + ACK"""
    msg = decode_payload(bootp(2, DHCPACK, yiaddr="10.0.0.5", options=[(51, b"\x00\x00\x0e\x10")]))
    event = classify(msg, 2000)

    assert isinstance(event, ServerAck)
    assert event.hwaddr == "aa:bb:cc:dd:ee:ff"
    assert event.ip == "10.0.0.5"
    assert event.lease == 3600


def test_classify_ack_without_lease(bootp):
    """测试 ACK 缺少租期选项"""
    msg = decode_payload(bootp(2, DHCPACK, yiaddr="10.0.0.5"))
    assert classify(msg, 1).lease is None


@pytest.mark.parametrize("hwlen,expected", [
    (6, "aa:bb:cc:dd:ee:ff"),
    (4, "aa:bb:cc:dd"),
    (8, "aa:bb:cc:dd:ee:ff:01:02"),
])
def test_hwaddr_uses_declared_length(bootp, hwlen, expected):
    """测试硬件地址按报文声明的长度生成"""
    chaddr = b"\xaa\xbb\xcc\xdd\xee\xff\x01\x02"
    msg = decode_payload(bootp(1, DHCPREQUEST, chaddr=chaddr, hwlen=hwlen))
    assert classify(msg, 1).hwaddr == expected


@pytest.mark.parametrize("op,msg_type", [
    (1, DHCPDISCOVER),
    (2, DHCPOFFER),
    (1, DHCPDECLINE),
    (2, DHCPNAK),
    (1, DHCPRELEASE),
    (1, DHCPINFORM),
    (2, DHCPREQUEST),
    (1, DHCPACK),
    (1, None),
    (2, None),
])
def test_untracked_messages_discarded(bootp, op, msg_type):
    """测试其余报文类型组合被丢弃"""
    msg = decode_payload(bootp(op, msg_type))
    assert classify(msg, 1) is None
