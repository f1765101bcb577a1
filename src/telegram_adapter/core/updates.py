"""Telegram Update → Session 解析"""

from typing import Any, Optional

from telegram_adapter_protocol import Bot, CQSegment, Session, escape

# update 字段 → 事件类型
_UPDATE_EVENT_MAP: dict[str, str] = {
    "message": "message",
    "channel_post": "message",
    "edited_message": "message-updated",
    "edited_channel_post": "message-updated",
}


def _largest_photo(msg: dict) -> Optional[str]:
    # Telegram 按尺寸升序给出同一图片的多个版本，取最大的
    photos = msg.get("photo")
    if not isinstance(photos, list) or not photos:
        return None
    largest = photos[-1]
    if not isinstance(largest, dict):
        return None
    file_id = largest.get("file_id")
    return file_id if isinstance(file_id, str) and file_id else None


def _build_content(msg: dict) -> Optional[str]:
    """文字/说明转义后作为正文，图片追加为 CQ 码；结构不合法时返回 None"""
    text = msg.get("text") or msg.get("caption") or ""
    if not isinstance(text, str):
        return None
    content = escape(text)
    if "photo" in msg:
        file_id = _largest_photo(msg)
        if file_id is None:
            return None
        content += str(CQSegment("image", {"file": file_id}))
    return content


def session_from_update(update: Any, bot: Optional[Bot]) -> Optional[Session]:
    """解析 Webhook 推送的 update，无法识别或结构不合法时返回 None"""
    if not isinstance(update, dict) or "update_id" not in update:
        return None

    for key, event_type in _UPDATE_EVENT_MAP.items():
        msg = update.get(key)
        if isinstance(msg, dict) and isinstance(msg.get("chat"), dict):
            break
    else:
        return None

    content = _build_content(msg)
    if content is None:
        return None

    chat = msg["chat"]
    sender = msg.get("from")
    if not isinstance(sender, dict):
        sender = {}
    chat_type = chat.get("type") if isinstance(chat.get("type"), str) else ""

    session = Session(
        event_type=event_type,
        self_id=bot.self_id if bot else None,
        message_type="private" if chat_type == "private" else "group",
        sub_type=chat_type,
        message_id=msg.get("message_id"),
        user_id=sender.get("id"),
        message=content,
        sender=sender,
        time=msg.get("edit_date") or msg.get("date") or 0,
        raw=update,
        bot=bot,
    )
    if session.message_type == "group":
        session.group_id = chat.get("id")
    elif session.user_id is None:
        session.user_id = chat.get("id")
    return session
