"""
子进程管理模块

功能说明:
    封装 subprocess 调用，提供统一的外部命令执行接口（tshark、ipset），
    包含错误处理、超时控制与日志记录。
"""
import subprocess
import logging
from typing import IO, List, Tuple, Optional

logger = logging.getLogger(__name__)

def run_command(cmd: List[str], timeout: Optional[int] = None) -> Tuple[int, str, str]:
    """
    运行外部命令（同步阻塞模式）

    功能: 执行传入命令并返回状态码与输出，支持超时控制。

    参数:
        cmd: 命令及参数列表
        timeout: 超时时间（秒），默认为 None

    返回:
        (returncode, stdout, stderr)

    异常:
        subprocess.TimeoutExpired: 执行超时
        OSError: 可执行文件不存在或无法启动
    """
    try:
        logger.debug(f"执行命令: {' '.join(cmd)}")
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            timeout=timeout,
            encoding='utf-8',
            errors='replace'
        )
        return proc.returncode, proc.stdout, proc.stderr
    except subprocess.TimeoutExpired:
        logger.error(f"命令执行超时: {' '.join(cmd)}")
        raise
    except Exception as e:
        logger.error(f"命令执行异常: {e}")
        raise

def spawn_stream(cmd: List[str], stderr: Optional[IO] = None) -> subprocess.Popen:
    """
    启动长期运行的子进程，stdout 以二进制流方式读取

    参数:
        cmd: 命令及参数列表
        stderr: stderr 的去向 (文件对象)；长期运行时不能使用无人读取的管道

    返回:
        subprocess.Popen 对象（stdout 为管道）
    """
    logger.debug(f"启动子进程: {' '.join(cmd)}")
    return subprocess.Popen(
        cmd,
        stdout=subprocess.PIPE,
        stderr=stderr if stderr is not None else subprocess.DEVNULL,
        bufsize=0
    )
