from .http_server import QuickOperation, TelegramHTTPServer
from .telegram_bot import CONSTANT_ACTIONS, SYNC_ACTIONS, ActionSpec, TelegramBot
from .updates import session_from_update

__all__ = [
    "TelegramHTTPServer",
    "QuickOperation",
    "TelegramBot",
    "ActionSpec",
    "SYNC_ACTIONS",
    "CONSTANT_ACTIONS",
    "session_from_update",
]
