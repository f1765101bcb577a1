"""入口脚本配置合并测试"""

import pytest

from telegram_adapter.__main__ import build_config, parse_args


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "WEBHOOK_URL", "TELEGRAM_BOT_TOKEN"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "server:\n  host: 127.0.0.1\n  port: 9000\n  url: https://a.com/hook\n",
        encoding="utf-8",
    )
    return path


class TestParseArgs:

    def test_defaults(self):
        args = parse_args([])
        assert args.config == "config.yaml"
        assert args.env is None
        assert args.host is None
        assert args.port is None

    def test_port_is_int(self):
        assert parse_args(["--port", "9090"]).port == 9090


class TestBuildConfig:

    def test_from_file(self, config_file):
        config = build_config(parse_args(["--config", str(config_file)]))
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9000
        assert config.server.url == "https://a.com/hook"

    def test_env_overrides_file(self, config_file, monkeypatch):
        monkeypatch.setenv("HTTP_HOST", "0.0.0.0")
        monkeypatch.setenv("HTTP_PORT", "8081")
        monkeypatch.setenv("WEBHOOK_URL", "https://b.com/tg")
        config = build_config(parse_args(["--config", str(config_file)]))
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 8081
        assert config.server.url == "https://b.com/tg"

    def test_args_override_env(self, config_file, monkeypatch):
        monkeypatch.setenv("HTTP_PORT", "8081")
        args = parse_args(["--config", str(config_file), "--port", "7000", "--host", "::"])
        config = build_config(args)
        assert config.server.port == 7000
        assert config.server.host == "::"

    def test_token_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "777:secret")
        config = build_config(parse_args(["--config", str(tmp_path / "none.yaml")]))
        assert len(config.bots) == 1
        assert config.bots[0].self_id == 777

    def test_token_ignored_when_bots_configured(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("bots:\n  - server: http://api\n    self_id: 1\n", encoding="utf-8")
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "777:secret")
        config = build_config(parse_args(["--config", str(path)]))
        assert [bot.self_id for bot in config.bots] == [1]
