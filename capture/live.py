"""
实时抓包模块

功能说明:
    以 tshark 子进程在指定接口上进行实时抓包 (非混杂模式、完整快照长度、
    无读超时)，将其 pcap 格式的标准输出解析为 RawFrame 序列。
    启动阶段的任何失败均为致命错误，抛出 CaptureSetupError。
"""
import logging
import os
import shutil
import subprocess
import tempfile
from typing import Iterator, List, Optional
from capture.filters import CaptureFilter
from capture.pcapstream import PcapStreamReader
from schemas.dhcp import RawFrame
from utils.errors import CaptureSetupError
from utils.subproc import run_command, spawn_stream

logger = logging.getLogger(__name__)


def list_interfaces(tshark_path: str) -> List[str]:
    """
    列出 tshark 可用的接口名称

    功能: 解析 `tshark -D` 输出，格式为 "1. eth0" 或 "1. eth0 (描述)"
    异常: CaptureSetupError: tshark 无法执行或返回非零
    """
    try:
        code, out, err = run_command([tshark_path, "-D"], timeout=30)
    except (OSError, subprocess.TimeoutExpired) as e:
        raise CaptureSetupError(f"无法执行 tshark: {e}", [tshark_path, "-D"]) from e

    if code != 0:
        raise CaptureSetupError(f"获取接口列表失败: {err.strip()}", [tshark_path, "-D"], err)

    names = []
    for line in out.splitlines():
        parts = line.strip().split(".", 1)
        if len(parts) != 2 or not parts[1].strip():
            continue
        names.append(parts[1].strip().split(" ", 1)[0])
    return names


class LiveCapture:
    """
    实时抓包源

    功能: 可迭代、不可重启的帧序列。open() 完成全部启动检查，
          迭代直到 tshark 退出或调用 stop()，close() 释放子进程。

    用法:
        with LiveCapture("eth0", select_filter(False)) as cap:
            for frame in cap:
                ...
    """

    def __init__(
        self,
        interface: str,
        capture_filter: CaptureFilter,
        tshark_path: str = "tshark",
        snaplen: int = 0
    ):
        self.interface = interface
        self.capture_filter = capture_filter
        self.tshark_path = tshark_path
        self.snaplen = snaplen
        self.proc: Optional[subprocess.Popen] = None
        self._reader: Optional[PcapStreamReader] = None
        self._stderr = None
        self.returncode: Optional[int] = None

    def build_command(self) -> List[str]:
        """构建 tshark 命令: 非混杂 (-p)、pcap 格式写到标准输出、逐包刷新"""
        return [
            self.tshark_path, "-i", self.interface, "-p",
            "-s", str(self.snaplen),
            "-f", self.capture_filter.bpf,
            "-q", "-l",
            "-F", "pcap", "-w", "-"
        ]

    def open(self) -> None:
        """
        打开抓包句柄

        异常: CaptureSetupError: 找不到 tshark、接口不存在、过滤器无法编译/应用
        """
        if not shutil.which(self.tshark_path) and not os.path.isfile(self.tshark_path):
            raise CaptureSetupError(f"找不到 tshark: {self.tshark_path}")

        interfaces = list_interfaces(self.tshark_path)
        if self.interface not in interfaces:
            raise CaptureSetupError(f"接口不存在: {self.interface} (可用: {', '.join(interfaces) or '无'})")

        cmd = self.build_command()
        try:
            self._stderr = tempfile.TemporaryFile()
            self.proc = spawn_stream(cmd, stderr=self._stderr)
        except OSError as e:
            self._close_stderr()
            raise CaptureSetupError(f"启动 tshark 失败: {e}", cmd) from e

        # tshark 打开接口或编译过滤器失败时会在输出 pcap 头之前退出
        self._reader = PcapStreamReader(self.proc.stdout)
        try:
            self._reader.read_header()
        except CaptureSetupError as e:
            stderr = self._terminate()
            self._close_stderr()
            raise CaptureSetupError(f"抓包启动失败: {stderr.strip() or e}", cmd, stderr)

        logger.info(
            f"开始抓包: 接口={self.interface} 模式={self.capture_filter.name} "
            f"过滤器=\"{self.capture_filter.bpf}\""
        )

    def __iter__(self) -> Iterator[RawFrame]:
        if self._reader is None:
            raise CaptureSetupError("抓包句柄尚未打开")
        yield from self._reader
        self.returncode = self.proc.wait()
        logger.info(f"抓包结束: tshark 退出码={self.returncode}")

    def stop(self) -> None:
        """请求停止抓包，迭代在读到流结束后退出"""
        if self.proc and self.proc.poll() is None:
            self.proc.terminate()

    def _terminate(self) -> str:
        """结束子进程并返回其 stderr 输出"""
        if self.proc is None:
            return ""
        if self.proc.poll() is None:
            self.proc.terminate()
        try:
            self.returncode = self.proc.wait(timeout=5)
        except subprocess.TimeoutExpired:
            self.proc.kill()
            self.returncode = self.proc.wait()
        if self._reader is not None:
            self._reader.close()
        if self.proc.stdout is not None:
            self.proc.stdout.close()
        return self._read_stderr()

    def _read_stderr(self) -> str:
        if self._stderr is None:
            return ""
        self._stderr.seek(0)
        return self._stderr.read().decode("utf-8", errors="replace")

    def _close_stderr(self) -> None:
        if self._stderr is not None:
            self._stderr.close()
            self._stderr = None

    def close(self) -> None:
        """释放抓包句柄"""
        self._terminate()
        self._close_stderr()
        self.proc = None
        self._reader = None

    def __enter__(self) -> "LiveCapture":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
