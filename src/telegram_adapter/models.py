"""
Pydantic 配置模型

通过 config.yaml 管理服务端、Bot 与日志配置。
Bot Token 也可以由 .env 中的 TELEGRAM_BOT_TOKEN 提供。
"""

from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator
import yaml

TELEGRAM_API_BASE = "https://api.telegram.org"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class BotConfig(BaseModel):
    type: Optional[str] = Field(None, description="接入方式，不指定时推断为 telegram")
    server: Optional[str] = Field(None, description="Bot API 基础地址")
    token: Optional[str] = Field(None, description="BotFather 颁发的 Token")
    self_id: Optional[int] = Field(None, description="Bot 账号 ID")

    @model_validator(mode="after")
    def _fill_from_token(self) -> "BotConfig":
        if self.token:
            if not self.server:
                self.server = f"{TELEGRAM_API_BASE}/bot{self.token}"
            # Token 格式为 <bot_id>:<secret>
            prefix = self.token.split(":", 1)[0]
            if self.self_id is None and prefix.isdigit():
                self.self_id = int(prefix)
        return self


class ServerConfig(BaseModel):
    host: str = Field("0.0.0.0", description="HTTP 监听地址")
    port: Optional[int] = Field(None, description="HTTP 监听端口")
    url: Optional[str] = Field(None, description="对外公开的 Webhook 地址")
    path: Optional[str] = Field(None, description="回调路径，不指定时取 url 的路径")
    quick_operation: float = Field(0, description="快速操作超时秒数，0 表示关闭")

    @property
    def callback_path(self) -> str:
        if self.path:
            return self.path
        if self.url:
            return urlparse(self.url).path or "/"
        return "/"


class LogConfig(BaseModel):
    level: str = Field("INFO", description="日志级别")
    dir: Optional[str] = Field(None, description="日志输出目录，不指定则仅控制台")

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        value = value.upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"未知的日志级别: {value}")
        return value


class AppConfig(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    bots: list[BotConfig] = Field(default_factory=list)
    log: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_yaml(cls, path: str | Path = "config.yaml") -> "AppConfig":
        p = Path(path)
        if not p.exists():
            return cls()
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls.model_validate(data)
