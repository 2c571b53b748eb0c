import copy
import pytest
from unittest.mock import patch, MagicMock
from dhcp_ipset import main as cli
from dhcp_ipset.config import config
from utils.errors import CaptureSetupError


@pytest.fixture(autouse=True)
def restore_config():
    """每个测试结束后恢复全局配置"""
    saved = copy.deepcopy(config.data)
    yield
    config.data.clear()
    config.update(saved)


def test_apply_args_overrides_config():
    """测试命令行参数覆盖配置"""
    args = cli.parse_args(["-i", "eth9", "-r", "-s", "cm_leases", "--dry-run"])
    cli.apply_args(args)
    assert config.capture.interface == "eth9"
    assert config.capture.relay_mode is True
    assert config.ipset.set_name == "cm_leases"
    assert config.ipset.dry_run is True


def test_config_restored_between_tests():
    """测试上一个测试的覆盖项不会残留"""
    assert config.capture.interface != "eth9"
    assert config.ipset.set_name != "cm_leases"


def test_replay_end_to_end(pcap_file, bootp, eth_frame):
    """测试回放 pcap: REQUEST + ACK 产生一次集合更新"""
    request = eth_frame(bootp(1, 3, options=[(60, b"docsis3.0"), (12, b"router1")]))
    ack = eth_frame(bootp(2, 5, yiaddr="10.0.0.5", options=[(51, b"\x00\x00\x0e\x10")]), sport=67, dport=68)
    path = pcap_file([(1, request), (2, ack)], name="lease.pcap")

    synchronizer = MagicMock()
    with patch("dhcp_ipset.main.build_synchronizer", return_value=synchronizer), \
         patch("dhcp_ipset.main.setup_logging"):
        assert cli.main(["--read", str(path)]) == 0

    synchronizer.upsert.assert_called_once_with(
        "10.0.0.5", "aa:bb:cc:dd:ee:ff", 3600, "router1/docsis3.0"
    )


def test_setup_failure_exit_code():
    """测试启动失败返回 1"""
    with patch("dhcp_ipset.main.build_synchronizer", return_value=MagicMock()), \
         patch("dhcp_ipset.main.setup_logging"), \
         patch("dhcp_ipset.main.signal.signal"), \
         patch("dhcp_ipset.main.LiveCapture") as mock_capture:
        mock_capture.return_value.__enter__.side_effect = CaptureSetupError("接口不存在: eth0")
        assert cli.main(["-i", "eth0"]) == 1
