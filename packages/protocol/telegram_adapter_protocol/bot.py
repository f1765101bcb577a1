"""
Bot 能力接口

由宿主定义，各平台适配器实现后通过 App.add_bot() 注入。
宿主只依赖这里声明的方法，不关心具体平台如何完成调用。
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional, Union

from .models import (
    AccountInfo,
    BotStatusCode,
    FriendInfo,
    GroupInfo,
    GroupMemberInfo,
    ListedGroupInfo,
    Session,
)

if TYPE_CHECKING:
    from .app import App

ChatId = Union[int, str]


class Bot(ABC):
    """单个已接入账号的长期句柄"""

    def __init__(self, app: "App", self_id: Optional[int] = None):
        self.app = app
        self.self_id = self_id
        self.ready = False

    def create_session(self, message_type: str, target_id: ChatId,
                       message: str) -> Session:
        """构建一个待发送消息的会话"""
        session = Session(
            event_type="send",
            self_id=self.self_id,
            message_type=message_type,
            message=message,
            bot=self,
        )
        if message_type == "group":
            session.group_id = target_id
        else:
            session.user_id = target_id
        return session

    # -------- 发送 --------

    @abstractmethod
    async def send_group_msg(self, group_id: ChatId, message: str) -> Optional[int]:
        ...

    @abstractmethod
    async def send_private_msg(self, user_id: ChatId, message: str) -> Optional[int]:
        ...

    @abstractmethod
    async def delete_msg(self, message_id: int) -> None:
        ...

    # -------- 账号与状态 --------

    @abstractmethod
    async def get_self_id(self) -> int:
        ...

    @abstractmethod
    async def get_status_code(self) -> BotStatusCode:
        ...

    @abstractmethod
    async def get_login_info(self) -> AccountInfo:
        ...

    @abstractmethod
    async def get_friend_list(self) -> list[FriendInfo]:
        ...

    # -------- 群 --------

    @abstractmethod
    async def get_group_list(self) -> list[ListedGroupInfo]:
        ...

    @abstractmethod
    async def get_group_info(self, group_id: ChatId,
                             no_cache: Optional[bool] = None) -> GroupInfo:
        ...

    @abstractmethod
    async def get_group_member_info(self, group_id: ChatId, user_id: ChatId,
                                    no_cache: Optional[bool] = None) -> GroupMemberInfo:
        ...

    @abstractmethod
    async def get_group_member_list(self, group_id: ChatId) -> list[GroupMemberInfo]:
        ...

    @abstractmethod
    async def set_group_leave(self, group_id: ChatId) -> bool:
        ...

    # -------- 能力查询 --------

    @abstractmethod
    async def can_send_image(self) -> bool:
        ...

    @abstractmethod
    async def can_send_record(self) -> bool:
        ...
