"""
报文分类模块

功能说明:
    将解码后的 DhcpMessage 归类为两类跟踪事件之一:
        - ClientRequest: 请求方向 + REQUEST
        - ServerAck:     应答方向 + ACK
    其余组合 (DISCOVER/OFFER/NAK/RELEASE/INFORM/DECLINE、缺少类型选项等) 一律静默丢弃。
"""
from typing import Callable, Dict, Optional, Tuple
from schemas.dhcp import (
    DhcpMessage, DhcpEvent, ClientRequest, ServerAck,
    BOOTREQUEST, BOOTREPLY, DHCPREQUEST, DHCPACK,
    OPTION_HOST_NAME, OPTION_VENDOR_CLASS_ID, OPTION_LEASE_TIME,
)
from utils.formatting import format_hwaddr, option_text, option_uint32

# 字段名 -> (选项码, 值转换函数)
FieldTable = Dict[str, Tuple[int, Callable[[Optional[bytes]], object]]]

REQUEST_FIELDS: FieldTable = {
    "vendor_class_id": (OPTION_VENDOR_CLASS_ID, option_text),
    "hostname": (OPTION_HOST_NAME, option_text),
}

ACK_FIELDS: FieldTable = {
    "lease": (OPTION_LEASE_TIME, option_uint32),
}


def extract_fields(msg: DhcpMessage, table: FieldTable) -> Dict[str, object]:
    """按字段表逐项取出选项并转换，缺失的选项得到 None"""
    return {name: convert(msg.options.get(code)) for name, (code, convert) in table.items()}


def classify(msg: DhcpMessage, timestamp: int) -> Optional[DhcpEvent]:
    """
    分类 DHCP 报文

    参数: msg: 解码后的报文; timestamp: 帧捕获时间(秒)
    返回: ClientRequest / ServerAck，不跟踪的报文返回 None
    """
    msg_type = msg.message_type
    if msg.op == BOOTREQUEST and msg_type == DHCPREQUEST:
        return ClientRequest(
            hwaddr=format_hwaddr(msg.chaddr, msg.hwlen),
            fields=extract_fields(msg, REQUEST_FIELDS),
            timestamp=timestamp,
        )
    if msg.op == BOOTREPLY and msg_type == DHCPACK:
        fields = extract_fields(msg, ACK_FIELDS)
        return ServerAck(
            hwaddr=format_hwaddr(msg.chaddr, msg.hwlen),
            ip=msg.yiaddr,
            lease=fields["lease"],
            timestamp=timestamp,
        )
    return None
