"""
DHCP 数据模型定义模块

功能说明:
    定义抓包帧、DHCP 报文、客户端记录以及两类跟踪事件的 Pydantic 模型。
"""
from typing import Dict, Optional, Union
from pydantic import BaseModel, Field

# BOOTP 操作码
BOOTREQUEST = 1
BOOTREPLY = 2

# DHCP 报文类型 (option 53)
DHCPDISCOVER = 1
DHCPOFFER = 2
DHCPREQUEST = 3
DHCPDECLINE = 4
DHCPACK = 5
DHCPNAK = 6
DHCPRELEASE = 7
DHCPINFORM = 8

# DHCP 选项码
OPTION_PAD = 0
OPTION_HOST_NAME = 12
OPTION_LEASE_TIME = 51
OPTION_MESSAGE_TYPE = 53
OPTION_VENDOR_CLASS_ID = 60
OPTION_END = 255


class RawFrame(BaseModel):
    """
    抓到的原始帧

    功能: 由抓包源产生，立即交给帧解码器消费
    """
    data: bytes = Field(..., description="帧字节")
    timestamp: int = Field(..., description="捕获时间戳(秒)")
    length: int = Field(..., ge=0, description="捕获长度(字节)")


class DhcpMessage(BaseModel):
    """
    解码后的 DHCP 报文

    功能: 保存分类器需要的 BOOTP 固定字段与全部选项
    """
    op: int = Field(..., description="操作码 (1=请求方向, 2=应答方向)")
    hwlen: int = Field(..., ge=1, le=16, description="硬件地址长度")
    chaddr: bytes = Field(..., description="客户端硬件地址字段(16 字节)")
    yiaddr: str = Field(default="0.0.0.0", description="分配的 IP 地址 (仅应答有意义)")
    options: Dict[int, bytes] = Field(default_factory=dict, description="选项码 -> 原始值")

    @property
    def message_type(self) -> Optional[int]:
        """DHCP 报文类型，缺失或为空时返回 None"""
        value = self.options.get(OPTION_MESSAGE_TYPE)
        if not value:
            return None
        return value[0]


class ClientRecord(BaseModel):
    """
    单个客户端的记录

    功能: 以规范硬件地址为键，各字段由两类事件分别覆盖
    """
    hostname: Optional[str] = Field(default=None, description="主机名 (option 12)")
    vendor_class_id: Optional[str] = Field(default=None, description="厂商类标识 (option 60)")
    lease: Optional[int] = Field(default=None, description="租期(秒) (option 51)")
    ip: Optional[str] = Field(default=None, description="分配的 IP 地址")
    updated: int = Field(default=0, description="最后更新时间戳(秒)")


class ClientRequest(BaseModel):
    """客户端 REQUEST 事件"""
    hwaddr: str = Field(..., description="规范硬件地址")
    fields: Dict[str, Optional[str]] = Field(default_factory=dict, description="请求字段名 -> 值")
    timestamp: int = Field(..., description="捕获时间戳(秒)")


class ServerAck(BaseModel):
    """服务器 ACK 事件"""
    hwaddr: str = Field(..., description="规范硬件地址")
    ip: str = Field(..., description="分配的 IP 地址")
    lease: Optional[int] = Field(default=None, description="租期(秒)")
    timestamp: int = Field(..., description="捕获时间戳(秒)")


DhcpEvent = Union[ClientRequest, ServerAck]
