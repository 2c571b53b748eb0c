"""
dhcp-ipset 配置模块

包含抓包、ipset 同步与日志三部分配置。
支持从配置文件与环境变量加载配置，命令行参数在 main 中最后覆盖。
"""

import json
import os
from pathlib import Path
from typing import Dict, Any, Optional
import yaml
from pydantic import BaseModel, Field


class CaptureConfig(BaseModel):
    """
    抓包配置模型
    """
    interface: str = Field(default="eth0", description="抓包接口")
    relay_mode: bool = Field(default=False, description="中继模式: 仅匹配 67 -> 67 的中继转发应答")
    tshark_path: str = Field(default="tshark", description="TShark 可执行文件路径")
    snaplen: int = Field(default=0, ge=0, description="快照长度，0 表示 tshark 的最大值")


class IpsetConfig(BaseModel):
    """
    ipset 同步配置模型
    """
    set_name: str = Field(default="dhcp_leases", description="ipset 集合名称")
    ipset_path: str = Field(default="ipset", description="ipset 可执行文件路径")
    dry_run: bool = Field(default=False, description="仅记录日志，不调用 ipset")
    create_set: bool = Field(default=False, description="启动时创建集合 (hash:ip,mac)")
    default_timeout: int = Field(default=3600, ge=0, description="创建集合时的默认超时(秒)")


class LoggingConfig(BaseModel):
    """
    日志配置模型
    """
    level: str = Field(default="INFO", description="日志级别")
    use_colors: bool = Field(default=True, description="控制台彩色输出")
    log_file: Optional[str] = Field(default=None, description="日志文件路径")


class AppConfig(BaseModel):
    """
    应用全局配置模型
    """
    capture: CaptureConfig = Field(default_factory=CaptureConfig)
    ipset: IpsetConfig = Field(default_factory=IpsetConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    """
    配置管理器（单例模式）

    配置加载优先级（由高到低）：
    1. 命令行参数 (main 中通过 update() 应用)
    2. 环境变量 (ENV)
    3. config.yaml
    4. config.json
    5. 默认值
    """
    _instance = None
    _model: AppConfig = None

    def __init__(self, base_dir: Path = None) -> None:
        """
        初始化配置管理器

        Args:
            base_dir: 配置文件所在目录，默认为项目根目录
        """
        base_dir = base_dir or Path(__file__).resolve().parent.parent
        self.config_json = base_dir / "config.json"
        self.config_yaml = base_dir / "config.yaml"

        self.data = self._load_config()
        self._model = AppConfig(**self.data)

    @classmethod
    def get_instance(cls) -> 'Config':
        """
        获取配置单例实例

        Returns:
            Config: 配置管理器单例
        """
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    def _load_config(self) -> Dict[str, Any]:
        """
        加载配置文件并合并

        Returns:
            Dict[str, Any]: 合并后的配置字典
        """
        config = self._default_config()

        # 1. 尝试加载 config.yaml (优先级高于 json)
        if self.config_yaml.exists():
            try:
                with open(self.config_yaml, 'r', encoding='utf-8') as f:
                    content = f.read()
                    # 简单的环境变量替换支持 (仅用于替换 ${VAR} 格式)
                    for key, value in os.environ.items():
                        content = content.replace(f"${{{key}}}", value)

                    yaml_config = yaml.safe_load(content)
                    if yaml_config:
                        self._deep_update(config, yaml_config)
            except (OSError, yaml.YAMLError) as e:
                print(f"警告: 加载 config.yaml 失败: {e}")

        # 2. 尝试加载 config.json
        elif self.config_json.exists():
            try:
                with open(self.config_json, 'r', encoding='utf-8') as f:
                    self._deep_update(config, json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                print(f"警告: 加载 config.json 失败: {e}")

        # 3. 环境变量覆盖
        self._apply_env_vars(config)

        return config

    def _deep_update(self, base_dict: Dict[str, Any], update_dict: Dict[str, Any]) -> None:
        """
        递归合并字典

        Args:
            base_dict: 基础字典 (将被修改)
            update_dict: 更新字典
        """
        for key, value in update_dict.items():
            if isinstance(value, dict) and key in base_dict and isinstance(base_dict[key], dict):
                self._deep_update(base_dict[key], value)
            else:
                base_dict[key] = value

    def _apply_env_vars(self, config: Dict[str, Any]) -> None:
        """
        应用环境变量覆盖配置

        支持的环境变量:
        - DHCP_IPSET_INTERFACE: 覆盖 capture.interface
        - DHCP_IPSET_RELAY_MODE: 覆盖 capture.relay_mode (1/true/yes/on)
        - DHCP_IPSET_TSHARK_PATH: 覆盖 capture.tshark_path
        - DHCP_IPSET_SET_NAME: 覆盖 ipset.set_name
        - DHCP_IPSET_IPSET_PATH: 覆盖 ipset.ipset_path
        - DHCP_IPSET_LOG_LEVEL: 覆盖 logging.level
        """
        env_interface = os.environ.get("DHCP_IPSET_INTERFACE")
        if env_interface:
            config["capture"]["interface"] = env_interface

        env_relay = os.environ.get("DHCP_IPSET_RELAY_MODE")
        if env_relay:
            config["capture"]["relay_mode"] = _env_bool(env_relay)

        env_tshark = os.environ.get("DHCP_IPSET_TSHARK_PATH")
        if env_tshark:
            config["capture"]["tshark_path"] = env_tshark

        env_set = os.environ.get("DHCP_IPSET_SET_NAME")
        if env_set:
            config["ipset"]["set_name"] = env_set

        env_ipset = os.environ.get("DHCP_IPSET_IPSET_PATH")
        if env_ipset:
            config["ipset"]["ipset_path"] = env_ipset

        env_level = os.environ.get("DHCP_IPSET_LOG_LEVEL")
        if env_level:
            config["logging"]["level"] = env_level

    def _default_config(self) -> Dict[str, Any]:
        """
        生成默认配置

        Returns:
            Dict[str, Any]: 默认配置字典
        """
        return AppConfig().model_dump()

    def update(self, overrides: Dict[str, Any]) -> None:
        """
        合并覆盖项并重新校验 (用于命令行参数)

        Args:
            overrides: 与配置文件同结构的嵌套字典
        """
        self._deep_update(self.data, overrides)
        self._model = AppConfig(**self.data)

    @property
    def capture(self) -> CaptureConfig:
        """获取抓包配置"""
        return self._model.capture

    @property
    def ipset(self) -> IpsetConfig:
        """获取 ipset 同步配置"""
        return self._model.ipset

    @property
    def logging(self) -> LoggingConfig:
        """获取日志配置"""
        return self._model.logging


# 全局配置单例
config = Config.get_instance()
