"""
Telegram Adapter 入口脚本

用法:
    python -m telegram_adapter                           # 使用 config.yaml 与 .env 启动
    python -m telegram_adapter --host 0.0.0.0 --port 9090  # 指定 HTTP 监听地址
    python -m telegram_adapter --log-dir logs            # 日志同时输出到目录
    python -m telegram_adapter --env /path/to/.env       # 指定环境变量文件

启动流程:
    1. 解析命令行参数
    2. 加载 .env 环境变量与 config.yaml
    3. 初始化日志
    4. 创建 App（事件管线）
    5. 创建 TelegramHTTPServer 并注册 Webhook
    6. 持续运行，Ctrl+C 优雅退出
"""

import argparse
import asyncio
import logging
import os

from telegram_adapter_protocol import App, Session

from .config import load_env, setup_logging
from .core import TelegramHTTPServer
from .models import AppConfig, BotConfig

logger = logging.getLogger("telegram-adapter")


def parse_args(argv=None):
    p = argparse.ArgumentParser(
        prog="telegram-adapter",
        description="Telegram Adapter — 将 Telegram Bot API 接入事件管线的适配器",
    )
    p.add_argument(
        "--env", default=None,
        help=".env 文件路径 (默认: 当前目录下的 .env)",
    )
    p.add_argument(
        "--config", default="config.yaml",
        help="配置文件路径 (默认: config.yaml)",
    )
    p.add_argument(
        "--log-dir", default=None,
        help="日志输出目录，不指定则使用配置文件，仍未指定则仅输出到控制台",
    )
    p.add_argument(
        "--host", default=None,
        help="HTTP 服务监听地址 (可通过环境变量 HTTP_HOST 覆盖配置文件)",
    )
    p.add_argument(
        "--port", type=int, default=None,
        help="HTTP 服务监听端口 (可通过环境变量 HTTP_PORT 覆盖配置文件)",
    )
    return p.parse_args(argv)


def build_config(args) -> AppConfig:
    """命令行参数优先，其次环境变量，最后使用配置文件"""
    config = AppConfig.from_yaml(args.config)
    server = config.server

    server.host = args.host or os.environ.get("HTTP_HOST") or server.host
    if args.port:
        server.port = args.port
    elif os.environ.get("HTTP_PORT"):
        server.port = int(os.environ["HTTP_PORT"])
    server.url = os.environ.get("WEBHOOK_URL") or server.url

    token = os.environ.get("TELEGRAM_BOT_TOKEN")
    if token and not config.bots:
        config.bots.append(BotConfig(token=token))
    return config


async def _log_message(session: Session):
    logger.info("收到消息 [%s] %s: %s", session.message_type,
                session.user_id, session.message[:100])


async def main(argv=None):
    args = parse_args(argv)

    load_env(args.env)
    config = build_config(args)
    setup_logging(config.log, log_dir=args.log_dir)

    app = App()
    app.on("message", _log_message)
    server = TelegramHTTPServer(app, config)

    try:
        await server.start()
        await asyncio.Event().wait()
    finally:
        await server.stop()


def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
