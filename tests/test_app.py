"""事件管线测试"""

import pytest

from telegram_adapter import BotConfig, TelegramBot
from telegram_adapter_protocol import App, Session


def make_session(**kwargs) -> Session:
    kwargs.setdefault("event_type", "message")
    return Session(**kwargs)


class TestBots:

    def test_add_and_get(self):
        app = App()
        bot = app.add_bot(TelegramBot(app, BotConfig(server="http://api", self_id=1)))
        assert app.get_bot(1) is bot
        assert app.bots == [bot]
        assert app.get_bot(2) is None

    def test_duplicate_rejected(self):
        app = App()
        app.add_bot(TelegramBot(app, BotConfig(server="http://api", self_id=1)))
        with pytest.raises(ValueError):
            app.add_bot(TelegramBot(app, BotConfig(server="http://api", self_id=1)))


class TestEmit:

    @pytest.mark.asyncio
    async def test_sync_and_async_listeners(self):
        app = App()
        calls = []

        @app.on("message")
        def sync_listener(session):
            calls.append("sync")

        @app.on("message")
        async def async_listener(session):
            calls.append("async")

        await app.emit(make_session(), "message", make_session())
        assert calls == ["sync", "async"]

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_stop_others(self, caplog):
        app = App()
        calls = []

        def broken(session):
            raise RuntimeError("boom")

        app.on("message", broken)
        app.on("message", lambda session: calls.append(1))

        await app.emit(make_session(), "message", make_session())
        assert calls == [1]
        assert "boom" in caplog.text

    @pytest.mark.asyncio
    async def test_off(self):
        app = App()
        calls = []
        listener = app.on("message", lambda session: calls.append(1))
        assert app.off("message", listener) is True
        assert app.off("message", listener) is False

        await app.emit(make_session(), "message", make_session())
        assert calls == []

    @pytest.mark.asyncio
    async def test_no_listeners(self):
        await App().emit(make_session(), "nothing")


class TestBail:

    @pytest.mark.asyncio
    async def test_first_truthy_wins(self):
        app = App()
        calls = []

        app.on("before-send", lambda s: calls.append("a"))
        app.on("before-send", lambda s: calls.append("b") or "veto")
        app.on("before-send", lambda s: calls.append("c") or "later")

        result = await app.bail(make_session(), "before-send", make_session())
        assert result == "veto"
        assert calls == ["a", "b"]

    @pytest.mark.asyncio
    async def test_all_falsy(self):
        app = App()
        app.on("before-send", lambda s: None)
        app.on("before-send", lambda s: False)
        assert await app.bail(make_session(), "before-send", make_session()) is None

    @pytest.mark.asyncio
    async def test_failing_listener_skipped(self):
        app = App()

        async def broken(session):
            raise RuntimeError("boom")

        app.on("before-send", broken)
        app.on("before-send", lambda s: True)
        assert await app.bail(make_session(), "before-send", make_session()) is True


class TestDispatch:

    @pytest.mark.asyncio
    async def test_emits_type_then_subtype(self):
        app = App()
        seen = []
        app.on("message", lambda s: seen.append("message"))
        app.on("message/group", lambda s: seen.append("message/group"))
        app.on("message/private", lambda s: seen.append("message/private"))

        await app.dispatch(make_session(message_type="group"))
        assert seen == ["message", "message/group"]

    @pytest.mark.asyncio
    async def test_without_message_type(self):
        app = App()
        seen = []
        app.on("message-updated", lambda s: seen.append(s))
        session = make_session(event_type="message-updated")
        await app.dispatch(session)
        assert seen == [session]
