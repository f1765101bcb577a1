"""
telegram-adapter-protocol — 宿主与适配器之间的公共协议

定义宿主侧的会话模型、Bot 能力接口和事件管线，
适配器实现 Bot 接口后注入 App 即可接入。

使用:
    from telegram_adapter_protocol import App, Session, ResponsePayload

    app = App()

    @app.on("message")
    async def echo(session: Session):
        if not session.quick_reply(ResponsePayload(reply=session.message)):
            await session.send(session.message)
"""

from .app import App
from .bot import Bot
from .cqcode import CQSegment, escape, parse_all, unescape
from .models import (
    AccountInfo,
    BotStatusCode,
    CQResponse,
    FriendInfo,
    GroupInfo,
    GroupMemberInfo,
    ListedGroupInfo,
    ResponsePayload,
    Session,
)

__all__ = [
    "App",
    "Bot",
    "BotStatusCode",
    "Session",
    "ResponsePayload",
    "CQResponse",
    "AccountInfo",
    "FriendInfo",
    "ListedGroupInfo",
    "GroupInfo",
    "GroupMemberInfo",
    "CQSegment",
    "parse_all",
    "escape",
    "unescape",
]
