"""
CQ 码消息段

消息内容统一使用 CQ 码表示富媒体，例如:
    "看这张图[CQ:image,url=https://example.com/a.png]"

纯文本中的 & [ ] 需要转义，参数值中还需额外转义逗号。
"""

import re
from dataclasses import dataclass, field
from typing import Union

_CQ_PATTERN = re.compile(r"\[CQ:([\w-]+)((?:,[^,\]]*)*)\]")


def escape(text: str, in_param: bool = False) -> str:
    text = text.replace("&", "&amp;").replace("[", "&#91;").replace("]", "&#93;")
    if in_param:
        text = text.replace(",", "&#44;")
    return text


def unescape(text: str) -> str:
    return (
        text.replace("&#91;", "[")
        .replace("&#93;", "]")
        .replace("&#44;", ",")
        .replace("&amp;", "&")
    )


@dataclass
class CQSegment:
    """单个 CQ 码消息段"""
    type: str
    data: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        params = "".join(
            f",{key}={escape(str(value), in_param=True)}"
            for key, value in self.data.items()
        )
        return f"[CQ:{self.type}{params}]"


Node = Union[str, CQSegment]


def _parse_params(raw: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for part in raw.split(","):
        if not part:
            continue
        key, _, value = part.partition("=")
        data[key] = unescape(value)
    return data


def parse_all(message: str) -> list[Node]:
    """将消息拆分为纯文本与 CQ 码消息段的序列，空文本不会出现在结果中"""
    nodes: list[Node] = []
    pos = 0
    for match in _CQ_PATTERN.finditer(message):
        if match.start() > pos:
            nodes.append(unescape(message[pos:match.start()]))
        nodes.append(CQSegment(match.group(1), _parse_params(match.group(2))))
        pos = match.end()
    if pos < len(message):
        nodes.append(unescape(message[pos:]))
    return nodes
