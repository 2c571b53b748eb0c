from typing import Dict, Iterator, Mapping, Optional
from schemas.dhcp import ClientRecord


class ClientRegistry:
    """按硬件地址索引的客户端记录表（进程生命周期内有效，无淘汰）"""

    def __init__(self):
        self._records: Dict[str, ClientRecord] = {}

    def _upsert(self, hwaddr: str) -> ClientRecord:
        record = self._records.get(hwaddr)
        if record is None:
            record = ClientRecord()
            self._records[hwaddr] = record
        return record

    def record_request(self, hwaddr: str, fields: Mapping[str, Optional[str]], timestamp: int) -> ClientRecord:
        """
        记录 REQUEST 事件

        Args:
            hwaddr: 规范硬件地址
            fields: 请求字段名 -> 值，值为 None 表示该选项缺失，会清空对应字段
            timestamp: 事件时间(秒)

        Returns:
            更新后的记录
        """
        record = self._upsert(hwaddr)
        for name, value in fields.items():
            setattr(record, name, value)
        record.updated = timestamp
        return record

    def record_ack(self, hwaddr: str, lease: Optional[int], ip: str, timestamp: int) -> ClientRecord:
        """记录 ACK 事件，覆盖租期与 IP，不影响主机名/厂商字段"""
        record = self._upsert(hwaddr)
        record.lease = lease
        record.ip = ip
        record.updated = timestamp
        return record

    def get(self, hwaddr: str) -> Optional[ClientRecord]:
        return self._records.get(hwaddr)

    def snapshot(self) -> Dict[str, ClientRecord]:
        """返回当前全部记录的副本"""
        return {hwaddr: record.model_copy() for hwaddr, record in self._records.items()}

    def __contains__(self, hwaddr: str) -> bool:
        return hwaddr in self._records

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)
