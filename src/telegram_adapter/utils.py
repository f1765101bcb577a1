"""字段命名转换与查询参数编码"""

import json
import re
from typing import Any

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    """chatId -> chat_id，已是 snake_case 的名称保持不变"""
    return _CAMEL_BOUNDARY.sub(r"_\1", name).lower()


def snake_case_keys(value: Any) -> Any:
    """递归转换字典键名为 snake_case"""
    if isinstance(value, dict):
        return {
            camel_to_snake(k) if isinstance(k, str) else k: snake_case_keys(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [snake_case_keys(v) for v in value]
    return value


def encode_query(params: dict) -> dict[str, str]:
    """
    编码为 GET 查询参数。

    None 丢弃；布尔值写为 true/false；列表与字典按 Bot API 约定序列化为 JSON。
    """
    query: dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, bool):
            query[key] = "true" if value else "false"
        elif isinstance(value, (dict, list)):
            query[key] = json.dumps(value, ensure_ascii=False)
        else:
            query[key] = str(value)
    return query
