"""
数据格式化工具模块

功能说明:
    硬件地址规范化以及 DHCP 选项原始值到 Python 值的转换。
"""
import struct
from typing import Optional


def format_hwaddr(chaddr: bytes, hwlen: int) -> str:
    """
    生成规范硬件地址字符串

    功能: 取前 hwlen 个字节，转为小写十六进制并以冒号连接
    参数: chaddr: 硬件地址字段; hwlen: 报文声明的硬件地址长度
    返回: 如 "aa:bb:cc:dd:ee:ff"
    """
    return ":".join(f"{b:02x}" for b in chaddr[:hwlen])


def option_text(value: Optional[bytes]) -> Optional[str]:
    """文本型选项: 缺失返回 None，截断到第一个 NUL 后按 UTF-8 解码"""
    if value is None:
        return None
    return value.split(b"\x00", 1)[0].decode("utf-8", errors="replace")


def option_uint32(value: Optional[bytes]) -> Optional[int]:
    """32 位大端整数选项 (如租期)，缺失或长度不为 4 时返回 None"""
    if value is None or len(value) != 4:
        return None
    return struct.unpack("!I", value)[0]
