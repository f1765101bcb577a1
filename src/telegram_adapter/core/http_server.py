"""
Webhook HTTP 服务端

负责:
    - 启动:   为每个 Bot 建立 HTTP 客户端、注入请求函数并注册 Webhook
    - 接收:   POST <回调路径> 接收 Telegram 推送的 update，解析为 Session 后分发
    - 快速操作: 在超时前由事件处理函数直接提供响应体
    - 停止:   取消未完成的分发任务，关闭客户端与监听端口

响应:
    403            update 无法解析，不分发
    200 空响应体    已接收（未开启快速操作，或快速操作超时）
    200 JSON       事件处理函数在超时前提交的快速操作
"""

import asyncio
import json
import logging
from typing import Optional
from urllib.parse import urlencode

import aiohttp
from aiohttp import web

from telegram_adapter_protocol import App, CQResponse, ResponsePayload, Session

from ..models import AppConfig
from ..utils import encode_query, snake_case_keys
from .telegram_bot import TelegramBot
from .updates import session_from_update

logger = logging.getLogger("telegram-adapter")

# 出站请求超时秒数
REQUEST_TIMEOUT = 30


class QuickOperation:
    """
    快速操作的单次完成标记

    回调与定时器谁先到达谁生效，另一方的结果被丢弃。
    所有回调都运行在同一个事件循环线程里，done() 检查无需加锁。
    """

    def __init__(self, session: Session, timeout: float):
        self.session = session
        self._future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._timer = asyncio.get_running_loop().call_later(timeout, self._expire)
        session._response = self.respond

    def respond(self, payload) -> bool:
        if self._future.done():
            return False
        self.session._response = None
        self._timer.cancel()
        self._future.set_result(payload)
        return True

    def _expire(self):
        if self._future.done():
            return
        self.session._response = None
        self._future.set_result(None)

    def cancel(self):
        self._timer.cancel()
        if not self._future.done():
            self.session._response = None
            self._future.cancel()

    async def wait(self):
        """返回处理函数提交的载体，超时返回 None"""
        return await self._future


def _serialize(payload) -> bytes:
    if isinstance(payload, ResponsePayload):
        payload = payload.to_dict()
    return json.dumps(snake_case_keys(payload), ensure_ascii=False).encode("utf-8")


def _query_self_id(request: web.Request) -> Optional[int]:
    """Webhook 地址上的 ?self_id= 用于区分多个 Bot"""
    try:
        return int(request.query["self_id"])
    except (KeyError, ValueError):
        return None


class TelegramHTTPServer:
    """接收 Telegram Webhook 并分发到 App 的 HTTP 服务端"""

    def __init__(self, app: App, config: AppConfig):
        if config.server.port is None:
            raise ValueError('missing configuration "server.port"')

        entry = next((bot for bot in config.bots if bot.server), None)
        if entry is None:
            raise ValueError("没有配置 server 地址的 Bot")
        if not entry.type:
            logger.info("infer type as telegram")
            entry.type = "telegram"

        self.app = app
        self.config = config
        self.host = config.server.host
        self.port = config.server.port
        self.path = config.server.callback_path
        self.quick_operation = config.server.quick_operation

        entries = [bot for bot in config.bots if bot.server and bot.type == "telegram"]
        if len(entries) > 1 and any(bot.self_id is None for bot in entries):
            # 多个 Bot 依靠 self_id 区分 Webhook 与注册表
            raise ValueError('配置了多个 Bot 时, 每个 Bot 都需要 "self_id" 或 "token"')
        self.bots: list[TelegramBot] = [app.add_bot(TelegramBot(app, bot)) for bot in entries]

        self._runner: Optional[web.AppRunner] = None
        self._clients: list[aiohttp.ClientSession] = []
        self._tasks: set[asyncio.Task] = set()

    # -------- 出站请求 --------

    def _make_request(self, http: aiohttp.ClientSession, server: str):
        async def request(action: str, params: dict) -> CQResponse:
            async with http.get(f"{server}/{action}", params=encode_query(params)) as resp:
                body = await resp.json(content_type=None)
            return CQResponse.from_body(body)
        return request

    def _webhook_url(self, bot: TelegramBot) -> Optional[str]:
        url = self.config.server.url
        if not url or bot.self_id is None:
            return url
        sep = "&" if "?" in url else "?"
        return f"{url}{sep}{urlencode({'self_id': bot.self_id})}"

    async def _listen_bot(self, bot: TelegramBot):
        bot.ready = True
        http = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)
        )
        self._clients.append(http)
        bot.attach(self._make_request(http, bot.server))
        response = await bot._request("setWebhook", {"url": self._webhook_url(bot)})
        if response.retcode != 0:
            logger.warning("注册 Webhook 失败 (bot=%s): %s", bot.self_id, response.data)
        logger.info("connected to %s", bot.server)

    # -------- 入站解析 --------

    def prepare(self, body, self_id: Optional[int] = None) -> Optional[Session]:
        """将 update 解析为 Session，无法解析或找不到 Bot 时返回 None"""
        if self_id is not None:
            bot = self.app.get_bot(self_id)
        else:
            bot = self.bots[0] if self.bots else None
        if bot is None:
            return None
        return session_from_update(body, bot)

    def _spawn_task(self, coro) -> asyncio.Task:
        """创建后台任务并自动管理生命周期"""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _handle_webhook(self, request: web.Request) -> web.StreamResponse:
        """POST <回调路径> — Telegram 推送入口"""
        try:
            body = await request.json()
            logger.debug("receive %s", body)
            session = self.prepare(body, _query_self_id(request))
        except (TypeError, LookupError, ValueError) as e:
            # JSONDecodeError / UnicodeDecodeError 属于 ValueError；未知 charset 与 KeyError 属于 LookupError
            logger.debug("无法解析的请求体: %r", e)
            return web.Response(status=403)
        if session is None:
            return web.Response(status=403)

        if self.quick_operation <= 0:
            self._spawn_task(self.app.dispatch(session))
            return web.Response(status=200)

        response = web.StreamResponse(
            status=200, headers={"Content-Type": "application/json"}
        )
        await response.prepare(request)
        quick = QuickOperation(session, self.quick_operation)

        self._spawn_task(self.app.dispatch(session))

        try:
            payload = await quick.wait()
        finally:
            quick.cancel()
        if payload is not None:
            await response.write(_serialize(payload))
        await response.write_eof()
        return response

    # -------- 启停 --------

    def _create_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(self.path, self._handle_webhook)
        return app

    async def start(self):
        """启动 HTTP 服务并为所有 Bot 注册 Webhook"""
        app = self._create_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("HTTP 服务端已启动: http://%s:%d%s", self.host, self.port, self.path)

        await asyncio.gather(*(self._listen_bot(bot) for bot in self.bots))

    async def stop(self):
        """停止服务，关闭所有出站客户端"""
        logger.debug("http server closing")
        for task in self._tasks:
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

        for http in self._clients:
            if not http.closed:
                await http.close()
        self._clients.clear()

        for bot in self.bots:
            bot.ready = False

        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("HTTP 服务端已停止")
