"""
Telegram Adapter 通信协议数据结构

所有模型基于标准库 dataclass，零外部依赖。
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from .bot import Bot


class BotStatusCode(IntEnum):
    """Bot 运行状态"""

    GOOD = 0
    BOT_IDLE = 1
    BOT_OFFLINE = 2
    NET_ERROR = 3
    SERVER_ERROR = 4


@dataclass
class ResponsePayload:
    """
    快速操作载体

    事件处理函数可以在超时前通过 Session.quick_reply() 提交，
    服务端会把它作为 Webhook 响应体直接返回。所有字段均可选。
    """
    delete: Optional[bool] = None
    ban: Optional[bool] = None
    ban_duration: Optional[int] = None
    kick: Optional[bool] = None
    reply: Optional[str] = None
    auto_escape: Optional[bool] = None
    at_sender: Optional[bool] = None
    approve: Optional[bool] = None
    remark: Optional[str] = None
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        """仅保留已设置的字段"""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }


ResponseHook = Callable[[Any], bool]


@dataclass
class Session:
    """
    单个事件的会话对象

    Attributes:
        event_type:   事件类型: message / message-updated / send
        self_id:      处理该事件的 Bot ID
        message_type: 消息类型: group / private
        sub_type:     子类型（收到的消息为 Telegram 的 chat.type）
        message_id:   消息 ID
        user_id:      发送者（或私聊目标）ID
        group_id:     群 ID，仅群消息有值
        message:      消息内容（CQ 码格式）
        sender:       发送者信息
        time:         事件时间戳（秒）
        raw:          原始 update 数据
        bot:          所属 Bot
    """
    event_type: str
    self_id: Optional[int] = None
    message_type: Optional[str] = None
    sub_type: Optional[str] = None
    message_id: Optional[int] = None
    user_id: Optional[int] = None
    group_id: Optional[int] = None
    message: str = ""
    sender: dict = field(default_factory=dict)
    time: int = 0
    raw: dict = field(default_factory=dict, repr=False)
    bot: Optional["Bot"] = field(default=None, repr=False, compare=False)
    _response: Optional[ResponseHook] = field(default=None, repr=False, compare=False)

    @property
    def target_id(self) -> Optional[int]:
        """回复目标：群消息为群 ID，私聊为用户 ID"""
        if self.message_type == "group":
            return self.group_id
        return self.user_id

    def quick_reply(self, payload: "ResponsePayload | dict") -> bool:
        """
        通过快速操作通道回复。

        Returns:
            True 表示载体已被服务端接收；未开启快速操作或已超时时返回 False
        """
        hook = self._response
        if hook is None:
            return False
        return hook(payload)

    async def send(self, message: str) -> Optional[int]:
        """向会话来源发送消息，返回消息 ID"""
        if self.bot is None:
            raise RuntimeError("会话未绑定 Bot")
        if self.message_type == "group":
            return await self.bot.send_group_msg(self.group_id, message)
        return await self.bot.send_private_msg(self.user_id, message)


@dataclass
class CQResponse:
    """
    远端接口返回的统一信封

    retcode: 0 成功; 1 静默成功; 负数或大于 1 为失败
    """
    status: str
    retcode: int
    data: Any = None
    echo: Optional[int] = None

    @classmethod
    def from_body(cls, body: Any) -> "CQResponse":
        """
        解析响应体。

        同时兼容两种格式:
            - CQ 信封:       {"status", "retcode", "data", "echo"}
            - Bot API 原生:  {"ok", "result", "error_code", "description"}
        """
        if not isinstance(body, dict):
            return cls(status="failed", retcode=-1, data=body)
        if "retcode" in body:
            return cls(
                status=body.get("status", ""),
                retcode=int(body["retcode"]),
                data=body.get("data"),
                echo=body.get("echo"),
            )
        if body.get("ok"):
            return cls(status="ok", retcode=0, data=body.get("result"))
        return cls(
            status="failed",
            retcode=int(body.get("error_code", -1)),
            data=body.get("description"),
        )


class _Record:
    """从字典构建 dataclass，忽略未知字段"""

    @classmethod
    def from_dict(cls, data: dict):
        names = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in names})


@dataclass
class AccountInfo(_Record):
    user_id: Optional[int] = None
    nickname: str = ""


@dataclass
class FriendInfo(AccountInfo):
    remark: str = ""


@dataclass
class ListedGroupInfo(_Record):
    group_id: Optional[int] = None
    group_name: str = ""


@dataclass
class GroupInfo(ListedGroupInfo):
    member_count: int = 0
    max_member_count: int = 0


@dataclass
class GroupMemberInfo(_Record):
    user_id: Optional[int] = None
    nickname: str = ""
    card: str = ""
    role: str = ""
    group_id: Optional[int] = None
    card_changeable: bool = False
    join_time: int = 0
    last_sent_time: int = 0
    title_expire_time: int = 0
    unfriendly: bool = False
