"""
telegram-adapter — 将 Telegram Bot API 接入宿主事件管线的适配器

用法:
    from telegram_adapter import AppConfig, TelegramHTTPServer
    from telegram_adapter_protocol import App

    app = App()
    server = TelegramHTTPServer(app, AppConfig.from_yaml("config.yaml"))
    await server.start()
"""

from .core import TelegramBot, TelegramHTTPServer
from .errors import SenderError
from .models import AppConfig, BotConfig, LogConfig, ServerConfig

__all__ = [
    "TelegramHTTPServer",
    "TelegramBot",
    "SenderError",
    "AppConfig",
    "BotConfig",
    "ServerConfig",
    "LogConfig",
]
