from analysis.registry import ClientRegistry

MAC = "aa:bb:cc:dd:ee:ff"


def test_record_request_creates_record():
    """测试首次 REQUEST 创建记录"""
    reg = ClientRegistry()
    reg.record_request(MAC, {"vendor_class_id": "docsis3.0", "hostname": "router1"}, 100)

    rec = reg.get(MAC)
    assert rec.hostname == "router1"
    assert rec.vendor_class_id == "docsis3.0"
    assert rec.lease is None and rec.ip is None
    assert rec.updated == 100
    assert MAC in reg and len(reg) == 1


def test_missing_option_clears_field():
    """测试缺失的选项清空之前的值"""
    reg = ClientRegistry()
    reg.record_request(MAC, {"vendor_class_id": "docsis3.0", "hostname": "router1"}, 100)
    reg.record_request(MAC, {"vendor_class_id": None, "hostname": ""}, 200)

    rec = reg.get(MAC)
    assert rec.vendor_class_id is None
    assert rec.hostname == ""
    assert rec.updated == 200


def test_ack_idempotent_keeps_latest():
    """测试两次 ACK 仅保留后一次的值"""
    reg = ClientRegistry()
    reg.record_ack(MAC, 3600, "10.0.0.5", 100)
    reg.record_ack(MAC, 600, "10.0.0.6", 200)

    rec = reg.get(MAC)
    assert (rec.lease, rec.ip, rec.updated) == (600, "10.0.0.6", 200)
    assert len(reg) == 1


def test_ack_without_request():
    """测试没有 REQUEST 的 ACK 只填充租期与 IP"""
    reg = ClientRegistry()
    rec = reg.record_ack(MAC, 3600, "10.0.0.5", 100)
    assert rec.hostname is None and rec.vendor_class_id is None
    assert rec.ip == "10.0.0.5"


def test_request_keeps_lease_and_ip():
    """测试后续 REQUEST 不清除租期与 IP"""
    reg = ClientRegistry()
    reg.record_ack(MAC, 3600, "10.0.0.5", 100)
    reg.record_request(MAC, {"vendor_class_id": None, "hostname": "h"}, 200)

    rec = reg.get(MAC)
    assert rec.lease == 3600 and rec.ip == "10.0.0.5"
    assert rec.updated == 200


def test_snapshot_is_copy():
    """测试快照与内部记录相互独立"""
    reg = ClientRegistry()
    reg.record_ack(MAC, 3600, "10.0.0.5", 100)
    snap = reg.snapshot()
    snap[MAC].ip = "1.1.1.1"
    assert reg.get(MAC).ip == "10.0.0.5"
    assert list(reg) == [MAC]
