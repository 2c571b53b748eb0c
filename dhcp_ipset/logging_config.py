"""
日志配置

日志流是运行期唯一的可观测输出: 每行带时间戳前缀，终端上按级别着色，
可选同时写入日志文件。
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """按级别着色的时间戳格式化器"""

    COLORS = {
        logging.DEBUG: "\x1b[38;21m",
        logging.INFO: "\x1b[38;5;39m",
        logging.WARNING: "\x1b[38;5;226m",
        logging.ERROR: "\x1b[38;5;196m",
        logging.CRITICAL: "\x1b[31;1m",
    }
    RESET = "\x1b[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(LOG_FORMAT, datefmt=DATE_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = self.COLORS.get(record.levelno)
        if self.use_colors and color:
            return f"{color}{line}{self.RESET}"
        return line


def setup_logging(level: str = "INFO", use_colors: bool = True, log_file: Optional[str] = None) -> None:
    """
    配置根日志器

    Args:
        level: 日志级别名，未知名称按 INFO 处理
        use_colors: 控制台着色 (stderr 不是终端时忽略)
        log_file: 额外写入的日志文件路径
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ColoredFormatter(use_colors=use_colors and sys.stderr.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
