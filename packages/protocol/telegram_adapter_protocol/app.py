"""
宿主事件管线

负责:
    - Bot 注册:   适配器通过 add_bot() 注入实现了 Bot 接口的对象
    - 事件监听:   on() / off() 注册同步或异步监听函数
    - 事件触发:   emit() 依次调用所有监听函数
    - 拦截钩子:   bail() 返回第一个真值结果，用于在动作执行前否决
    - 会话分发:   dispatch() 把收到的会话送入事件管线
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Optional, Union

from .bot import Bot
from .models import Session

logger = logging.getLogger("telegram-adapter")

Listener = Callable[..., Union[Any, Awaitable[Any]]]


class App:
    """事件管线与 Bot 容器"""

    def __init__(self):
        self._bots: dict[Optional[int], Bot] = {}
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    # -------- Bot --------

    @property
    def bots(self) -> list[Bot]:
        return list(self._bots.values())

    def add_bot(self, bot: Bot) -> Bot:
        if bot.self_id in self._bots:
            raise ValueError(f"Bot {bot.self_id} 已注册")
        self._bots[bot.self_id] = bot
        return bot

    def get_bot(self, self_id: Optional[int]) -> Optional[Bot]:
        return self._bots.get(self_id)

    # -------- 监听 --------

    def on(self, event: str, listener: Optional[Listener] = None):
        """注册监听函数，可作装饰器使用"""
        if listener is not None:
            self._listeners[event].append(listener)
            return listener

        def decorator(fn: Listener) -> Listener:
            self._listeners[event].append(fn)
            return fn

        return decorator

    def off(self, event: str, listener: Listener) -> bool:
        try:
            self._listeners[event].remove(listener)
        except ValueError:
            return False
        return True

    async def _call(self, event: str, listener: Listener, args: tuple) -> Any:
        result = listener(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def emit(self, session: Session, event: str, *args: Any) -> None:
        """依次调用监听函数，单个监听函数异常不影响其他监听函数"""
        for listener in list(self._listeners.get(event, ())):
            try:
                await self._call(event, listener, args)
            except Exception:
                logger.exception("事件 %s 的监听函数出错 (bot=%s)", event, session.self_id)

    async def bail(self, session: Session, event: str, *args: Any) -> Any:
        """返回第一个真值结果，全部为假时返回 None"""
        for listener in list(self._listeners.get(event, ())):
            try:
                result = await self._call(event, listener, args)
            except Exception:
                logger.exception("事件 %s 的监听函数出错 (bot=%s)", event, session.self_id)
                continue
            if result:
                return result
        return None

    async def dispatch(self, session: Session) -> None:
        """分发会话: 先触发 event_type，再触发 event_type/message_type"""
        logger.debug("分发事件 %s (bot=%s)", session.event_type, session.self_id)
        await self.emit(session, session.event_type, session)
        if session.message_type:
            await self.emit(session, f"{session.event_type}/{session.message_type}", session)
