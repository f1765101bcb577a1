"""
Telegram Bot API 适配

负责:
    - 调用: get() 统一完成字段命名转换、请求与返回码判定
    - 发送: 将 CQ 码消息拆分为图片/文字，依次调用 send_photo / send_message
    - 拦截: 发送前触发 before-send，发送后触发 send 事件
    - 查询: 按动作表把各查询方法转发到 get()

返回码约定:
    0       成功，返回 data
    1       静默成功，不返回也不报错
    负数    失败（silent 时忽略）
    大于 1  失败（无论是否 silent）
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import aiohttp

from telegram_adapter_protocol import (
    AccountInfo,
    App,
    Bot,
    BotStatusCode,
    CQResponse,
    CQSegment,
    FriendInfo,
    GroupInfo,
    GroupMemberInfo,
    ListedGroupInfo,
    parse_all,
)
from telegram_adapter_protocol.bot import ChatId

from ..errors import SenderError
from ..models import TELEGRAM_API_BASE, BotConfig
from ..utils import snake_case_keys

logger = logging.getLogger("telegram-adapter")

# 请求函数签名: (action, params) -> CQResponse
RequestFunc = Callable[[str, dict], Awaitable[CQResponse]]


def _list_of(record):
    def convert(data):
        return [record.from_dict(item) for item in data or []]
    return convert


@dataclass(frozen=True)
class ActionSpec:
    """动作名 → 有序参数名 → 返回值结构"""
    params: tuple[str, ...] = ()
    result: Optional[Callable[[Any], Any]] = None


# 直接转发到 get() 的动作
SYNC_ACTIONS: dict[str, ActionSpec] = {
    "delete_msg": ActionSpec(("message_id",)),
    "get_login_info": ActionSpec((), AccountInfo.from_dict),
    "get_group_info": ActionSpec(("group_id", "no_cache"), GroupInfo.from_dict),
    "get_group_member_info": ActionSpec(
        ("group_id", "user_id", "no_cache"), GroupMemberInfo.from_dict
    ),
    "get_group_member_list": ActionSpec(("group_id",), _list_of(GroupMemberInfo)),
}

# 直连官方 Bot API 时的动作名与参数名映射
NATIVE_METHODS: dict[str, tuple[str, dict[str, str]]] = {
    "send_message": ("sendMessage", {"message": "text"}),
    "send_photo": ("sendPhoto", {}),
    "delete_msg": ("deleteMessage", {}),
    "leave_chat": ("leaveChat", {}),
}

# 平台没有对应查询，直接返回固定值
CONSTANT_ACTIONS: dict[str, Any] = {
    "can_send_image": True,
    "can_send_record": True,
    "get_group_list": (),
    "get_friend_list": (),
}


class TelegramBot(Bot):
    """Telegram Bot 的 Bot 接口实现"""

    def __init__(self, app: App, config: BotConfig):
        super().__init__(app, config.self_id)
        self.config = config
        self.server = (config.server or "").rstrip("/")
        self.native = self.server.startswith(TELEGRAM_API_BASE)
        self._request: Optional[RequestFunc] = None

    def attach(self, request: RequestFunc):
        """绑定底层请求函数（由 HTTP 服务端在启动时注入）"""
        self._request = request

    # -------- 核心调用 --------

    def _remote(self, action: str, params: dict) -> tuple[str, dict]:
        """网关沿用 CQ 动作名；直连官方 Bot API 时换成对应的方法名与参数名"""
        if not self.native or action not in NATIVE_METHODS:
            return action, params
        method, renames = NATIVE_METHODS[action]
        return method, {renames.get(key, key): value for key, value in params.items()}

    async def get(self, action: str, params: Optional[dict] = None,
                  silent: bool = False) -> Any:
        if self._request is None:
            raise RuntimeError("Bot 尚未连接, 请先启动服务端")
        params = params or {}
        logger.debug("[request] %s %s", action, params)
        response = await self._request(*self._remote(action, snake_case_keys(params)))
        logger.debug("[response] %s", response)

        retcode = response.retcode
        if retcode == 0 and not silent:
            return snake_case_keys(response.data)
        elif retcode < 0 and not silent:
            raise SenderError(params, action, retcode, self.self_id)
        elif retcode > 1:
            raise SenderError(params, action, retcode, self.self_id)
        return None

    async def _call(self, action: str, *args: Any) -> Any:
        entry = SYNC_ACTIONS[action]
        params = dict(zip(entry.params, args))
        data = await self.get(action, params)
        if entry.result is None or data is None:
            return data
        return entry.result(data)

    async def _constant(self, action: str) -> Any:
        value = CONSTANT_ACTIONS[action]
        return list(value) if isinstance(value, tuple) else value

    # -------- 发送 --------

    async def _send_msg(self, chat_id: ChatId, message: str):
        if not message:
            return None
        return await self.get("send_message", {"chat_id": chat_id, "message": message})

    async def _send_photo(self, chat_id: ChatId, caption: str, photo: str):
        if not photo:
            return None
        return await self.get("send_photo", {
            "chat_id": chat_id,
            "caption": caption,
            "photo": photo,
        })

    async def send_msg(self, chat_id: ChatId, message: str) -> Optional[int]:
        """
        发送 CQ 码消息。

        文字累积为下一张图片的说明；遇到新图片时先发出上一张图片及其说明。
        遍历结束后优先发出剩余图片，否则发出剩余文字。

        Returns:
            最后一次发送的消息 ID，什么都没发送时返回 None
        """
        text = ""
        image = ""
        result = None
        for node in parse_all(message):
            if isinstance(node, str):
                text += node
            elif isinstance(node, CQSegment) and node.type == "image":
                if image:
                    result = await self._send_photo(chat_id, text, image)
                    text = ""
                image = node.data.get("url") or node.data.get("file", "")
            else:
                logger.debug("忽略不支持的消息段: %s", node)

        if image:
            result = await self._send_photo(chat_id, text, image)
        elif text:
            result = await self._send_msg(chat_id, text)

        if isinstance(result, dict):
            return result.get("message_id")
        return None

    async def _send_with_hooks(self, message_type: str, target_id: ChatId,
                               message: str) -> Optional[int]:
        if not message:
            return None
        session = self.create_session(message_type, target_id, message)
        if await self.app.bail(session, "before-send", session):
            return None
        session.message_id = await self.send_msg(target_id, session.message)
        await self.app.emit(session, "send", session)
        return session.message_id

    async def send_group_msg(self, group_id: ChatId, message: str) -> Optional[int]:
        return await self._send_with_hooks("group", group_id, message)

    async def send_private_msg(self, user_id: ChatId, message: str) -> Optional[int]:
        return await self._send_with_hooks("private", user_id, message)

    # -------- 账号与状态 --------

    async def get_self_id(self) -> int:
        data = await self.get("getMe")
        return data["id"]

    async def get_status_code(self) -> BotStatusCode:
        if not self.ready:
            return BotStatusCode.BOT_IDLE
        try:
            await self.get("getMe")
            return BotStatusCode.GOOD
        except (SenderError, aiohttp.ClientError, asyncio.TimeoutError):
            return BotStatusCode.NET_ERROR

    async def set_group_leave(self, group_id: ChatId) -> bool:
        return await self.get("leave_chat", {"chat_id": group_id})

    # -------- 动作表 --------

    async def delete_msg(self, message_id: int) -> None:
        await self._call("delete_msg", message_id)

    async def get_login_info(self) -> AccountInfo:
        return await self._call("get_login_info")

    async def get_group_info(self, group_id: ChatId,
                             no_cache: Optional[bool] = None) -> GroupInfo:
        return await self._call("get_group_info", group_id, no_cache)

    async def get_group_member_info(self, group_id: ChatId, user_id: ChatId,
                                    no_cache: Optional[bool] = None) -> GroupMemberInfo:
        return await self._call("get_group_member_info", group_id, user_id, no_cache)

    async def get_group_member_list(self, group_id: ChatId) -> list[GroupMemberInfo]:
        return await self._call("get_group_member_list", group_id)

    async def can_send_image(self) -> bool:
        return await self._constant("can_send_image")

    async def can_send_record(self) -> bool:
        return await self._constant("can_send_record")

    async def get_group_list(self) -> list[ListedGroupInfo]:
        return await self._constant("get_group_list")

    async def get_friend_list(self) -> list[FriendInfo]:
        return await self._constant("get_friend_list")
