"""
dhcp-ipset 异常定义模块

功能说明:
    定义项目中使用的统一异常体系，区分启动阶段的致命错误与单帧可丢弃的错误。
"""

class DhcpIpsetError(Exception):
    """dhcp-ipset 项目基类异常"""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.original_error = original_error

class CaptureSetupError(DhcpIpsetError):
    """抓包启动失败（接口查找、句柄打开、过滤器编译/应用）时抛出，属致命错误"""
    def __init__(self, message: str, command: list = None, stderr: str = ""):
        super().__init__(message)
        self.command = command or []
        self.stderr = stderr

class DecodeError(DhcpIpsetError):
    """单帧解码失败（无 DHCP 标记、字段越界），该帧被丢弃"""
    pass

class SetUpdateError(DhcpIpsetError):
    """ipset 集合创建失败时抛出"""
    def __init__(self, message: str, command: list, stderr: str):
        super().__init__(message)
        self.command = command
        self.stderr = stderr
