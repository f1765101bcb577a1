"""
环境变量加载与日志配置

    load_env()      — 从 .env 文件加载 TELEGRAM_BOT_TOKEN、HTTP_PORT 等变量
    setup_logging() — 按 LogConfig 配置控制台与文件日志
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import LogConfig

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def load_env(env_path: Optional[str] = None) -> bool:
    """加载 .env 到 os.environ，未指定时使用当前目录下的 .env；返回是否找到文件"""
    path = Path(env_path) if env_path else Path.cwd() / ".env"
    return load_dotenv(path)


def _log_file(log_dir: str) -> Path:
    dir_path = Path(log_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path / (datetime.now().strftime("%Y%m%d_%H%M%S") + ".log")


def setup_logging(config: Optional[LogConfig] = None, log_dir: Optional[str] = None):
    """
    配置全局日志。

    日志始终输出到控制台；log_dir（命令行）或 config.dir 指定目录时，
    同时写入以启动时间命名的日志文件。非 DEBUG 级别下屏蔽 aiohttp 的访问日志，
    避免每次 Webhook 推送都刷一行。

    Args:
        config:  日志配置，None 时使用默认值 (INFO, 仅控制台)
        log_dir: 覆盖 config.dir 的日志目录
    """
    config = config or LogConfig()
    level = logging.getLevelName(config.level)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    target_dir = log_dir or config.dir
    if target_dir:
        handlers.append(logging.FileHandler(_log_file(target_dir), encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT,
                        handlers=handlers, force=True)
    logging.getLogger("aiohttp.access").setLevel(
        logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    )
