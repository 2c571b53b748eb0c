"""
集合同步模块

功能说明:
    将确认的租约 (IP, MAC) 以租期为超时写入外部集合。
    同步端口只有一个能力 upsert(ip, mac, ttl_seconds, comment)，
    更换后端实现不需要改动注册表或分类器。
"""
import logging
import subprocess
from abc import ABC, abstractmethod
from typing import List
from schemas.dhcp import ClientRecord
from utils.errors import SetUpdateError
from utils.subproc import run_command

logger = logging.getLogger(__name__)

UNKNOWN_HOSTNAME = "???"
# ipset 注释的最大长度
MAX_COMMENT_LEN = 255


def build_comment(record: ClientRecord) -> str:
    """
    生成集合条目注释

    功能: 主机名 (未知时为 "???")，已知厂商类标识时追加 "/<厂商类标识>"
    示例: "router1/docsis3.0"、"???"、"???/docsis3.0"
    """
    comment = record.hostname if record.hostname is not None else UNKNOWN_HOSTNAME
    if record.vendor_class_id is not None:
        comment += f"/{record.vendor_class_id}"
    return comment[:MAX_COMMENT_LEN]


class SetSynchronizer(ABC):
    """
    集合同步端口基类
    """

    @abstractmethod
    def upsert(self, ip: str, mac: str, ttl_seconds: int, comment: str) -> None:
        """
        创建或刷新 (ip, mac) 条目

        Args:
            ip: 分配的 IP 地址
            mac: 规范硬件地址
            ttl_seconds: 超时(秒)，等于租期
            comment: 条目注释
        """
        pass


class IpsetSynchronizer(SetSynchronizer):
    """
    基于 ipset 命令行的同步实现

    每次调用阻塞执行 `ipset add <set> <ip>,<mac> -exist timeout <ttl> comment <comment>`，
    退出码仅记录日志，失败不重试，下一次 ACK 会重新写入。
    """

    def __init__(self, set_name: str, ipset_path: str = "ipset"):
        self.set_name = set_name
        self.ipset_path = ipset_path

    def build_add_command(self, ip: str, mac: str, ttl_seconds: int, comment: str) -> List[str]:
        return [
            self.ipset_path, "add", self.set_name, f"{ip},{mac}",
            "-exist", "timeout", str(ttl_seconds), "comment", comment
        ]

    def upsert(self, ip: str, mac: str, ttl_seconds: int, comment: str) -> None:
        cmd = self.build_add_command(ip, mac, ttl_seconds, comment)
        logger.info(f"更新集合: {' '.join(cmd)}")
        try:
            code, _, err = run_command(cmd)
        except (OSError, ValueError) as e:
            logger.error(f"无法执行 ipset: {e}")
            return
        if code != 0:
            logger.warning(f"ipset 退出码 {code}: {err.strip()}")

    def ensure_set(self, default_timeout: int) -> None:
        """
        创建集合 (已存在时不报错)

        异常: SetUpdateError: ipset 无法执行或返回非零
        """
        cmd = [
            self.ipset_path, "create", self.set_name, "hash:ip,mac",
            "timeout", str(default_timeout), "comment", "-exist"
        ]
        logger.info(f"创建集合: {' '.join(cmd)}")
        try:
            code, _, err = run_command(cmd, timeout=30)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise SetUpdateError(f"无法执行 ipset: {e}", cmd, "") from e
        if code != 0:
            raise SetUpdateError(f"创建集合失败: {err.strip()}", cmd, err)


class DryRunSynchronizer(SetSynchronizer):
    """只记录日志、不调用外部命令的同步实现"""

    def __init__(self, set_name: str):
        self.set_name = set_name

    def upsert(self, ip: str, mac: str, ttl_seconds: int, comment: str) -> None:
        logger.info(
            f"[dry-run] 更新集合 {self.set_name}: {ip},{mac} timeout {ttl_seconds} comment \"{comment}\""
        )
