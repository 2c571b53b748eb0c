#!/usr/bin/env python3
"""
dhcp-ipset 主程序
被动观测 DHCP 流量，将确认的租约同步到 ipset 集合

功能说明:
    - 实时抓包 (普通/中继两种过滤模式) 或离线回放 pcap
    - 跟踪 REQUEST / ACK 两类事件
    - 以租期为超时写入 ipset (hash:ip,mac)
"""
import argparse
import os
import signal
import sys
from typing import Optional

# 将项目根目录添加到 Python 路径
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from analysis.registry import ClientRegistry
from capture.filters import select_filter
from capture.live import LiveCapture
from capture.offline import read_pcap
from dhcp_ipset.config import config
from dhcp_ipset.ipset import DryRunSynchronizer, IpsetSynchronizer, SetSynchronizer
from dhcp_ipset.logging_config import setup_logging, get_logger
from dhcp_ipset.pipeline import DhcpPipeline
from utils.errors import CaptureSetupError, SetUpdateError

logger = get_logger(__name__)


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="被动观测 DHCP 租约并同步到 ipset")
    parser.add_argument("-i", "--interface", default=None, help="抓包接口")
    parser.add_argument("-r", "--relay", action="store_true", default=None, help="中继模式 (仅匹配 67 -> 67)")
    parser.add_argument("-s", "--set-name", default=None, help="ipset 集合名称")
    parser.add_argument("--read", default=None, metavar="PCAP", help="回放 pcap 文件而不是实时抓包")
    parser.add_argument("--dry-run", action="store_true", default=None, help="仅记录日志，不调用 ipset")
    parser.add_argument("--create-set", action="store_true", default=None, help="启动时创建集合")
    parser.add_argument("--tshark-path", default=None, help="tshark 可执行文件路径")
    parser.add_argument("--ipset-path", default=None, help="ipset 可执行文件路径")
    parser.add_argument("-v", "--verbose", action="store_true", help="输出调试日志")
    parser.add_argument("--log-file", default=None, help="日志文件路径")
    return parser.parse_args(argv)


def apply_args(args: argparse.Namespace) -> None:
    """将命令行参数应用到配置"""
    overrides = {"capture": {}, "ipset": {}, "logging": {}}
    if args.interface:
        overrides["capture"]["interface"] = args.interface
    if args.relay:
        overrides["capture"]["relay_mode"] = True
    if args.tshark_path:
        overrides["capture"]["tshark_path"] = args.tshark_path
    if args.set_name:
        overrides["ipset"]["set_name"] = args.set_name
    if args.ipset_path:
        overrides["ipset"]["ipset_path"] = args.ipset_path
    if args.dry_run:
        overrides["ipset"]["dry_run"] = True
    if args.create_set:
        overrides["ipset"]["create_set"] = True
    if args.verbose:
        overrides["logging"]["level"] = "DEBUG"
    if args.log_file:
        overrides["logging"]["log_file"] = args.log_file
    config.update(overrides)


def build_synchronizer() -> SetSynchronizer:
    """按配置构建同步实现，需要时先创建集合"""
    settings = config.ipset
    if settings.dry_run:
        return DryRunSynchronizer(settings.set_name)

    synchronizer = IpsetSynchronizer(settings.set_name, settings.ipset_path)
    if settings.create_set:
        synchronizer.ensure_set(settings.default_timeout)
    return synchronizer


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    apply_args(args)
    setup_logging(
        level=config.logging.level,
        use_colors=config.logging.use_colors,
        log_file=config.logging.log_file
    )

    capture_filter = select_filter(config.capture.relay_mode)
    registry = ClientRegistry()

    try:
        pipeline = DhcpPipeline(registry, build_synchronizer())

        if args.read:
            pipeline.run(read_pcap(args.read, capture_filter))
            return 0

        capture = LiveCapture(
            config.capture.interface,
            capture_filter,
            tshark_path=config.capture.tshark_path,
            snaplen=config.capture.snaplen
        )

        def handle_exit(signum, frame) -> None:
            logger.info("收到退出信号，正在停止抓包...")
            capture.stop()

        signal.signal(signal.SIGINT, handle_exit)
        signal.signal(signal.SIGTERM, handle_exit)

        with capture:
            pipeline.run(capture)
    except (CaptureSetupError, SetUpdateError) as e:
        logger.error(f"启动失败: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
