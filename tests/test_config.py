import pytest
from pydantic import ValidationError
from dhcp_ipset.config import Config


def test_defaults(tmp_path, monkeypatch):
    """测试无配置文件时的默认值"""
    monkeypatch.delenv("DHCP_IPSET_INTERFACE", raising=False)
    monkeypatch.delenv("DHCP_IPSET_RELAY_MODE", raising=False)
    cfg = Config(base_dir=tmp_path)
    assert cfg.capture.interface == "eth0"
    assert cfg.capture.relay_mode is False
    assert cfg.capture.snaplen == 0
    assert cfg.ipset.ipset_path == "ipset"


def test_yaml_and_env(tmp_path, monkeypatch):
    """测试 YAML 加载、${VAR} 替换与环境变量覆盖"""
    monkeypatch.setenv("LEASE_SET", "cm_leases")
    monkeypatch.setenv("DHCP_IPSET_RELAY_MODE", "yes")
    monkeypatch.setenv("DHCP_IPSET_INTERFACE", "br0")
    (tmp_path / "config.yaml").write_text(
        "capture:\n  interface: eth1\nipset:\n  set_name: ${LEASE_SET}\n  dry_run: true\n",
        encoding="utf-8"
    )
    cfg = Config(base_dir=tmp_path)
    assert cfg.ipset.set_name == "cm_leases"
    assert cfg.ipset.dry_run is True
    assert cfg.capture.interface == "br0"
    assert cfg.capture.relay_mode is True


def test_json_config(tmp_path, monkeypatch):
    """测试 JSON 配置文件"""
    monkeypatch.delenv("DHCP_IPSET_SET_NAME", raising=False)
    (tmp_path / "config.json").write_text('{"ipset": {"set_name": "from_json"}}', encoding="utf-8")
    assert Config(base_dir=tmp_path).ipset.set_name == "from_json"


def test_update_validates(tmp_path):
    """测试命令行覆盖项重新校验"""
    cfg = Config(base_dir=tmp_path)
    cfg.update({"ipset": {"set_name": "cli_set"}, "logging": {"level": "DEBUG"}})
    assert cfg.ipset.set_name == "cli_set"
    assert cfg.logging.level == "DEBUG"

    with pytest.raises(ValidationError):
        cfg.update({"capture": {"snaplen": -1}})
