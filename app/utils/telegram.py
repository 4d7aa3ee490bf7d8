from typing import Any, Dict, Final, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from app.password.generator import CODE_DELIMITER, strip_delimiters
from app.types import FormatHint, KeyboardHint, Reply

API_BASE: Final[str] = "https://api.telegram.org"
SECRET_HEADER: Final[str] = "X-Telegram-Bot-Api-Secret-Token"
MARKDOWN_V2: Final[str] = "MarkdownV2"
YES_NO_BUTTONS: Final[tuple] = ("Yes", "No")


class TelegramUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    is_bot: bool = False
    first_name: Optional[str] = None


class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    type: Optional[str] = None


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message_id: int
    chat: TelegramChat
    from_user: Optional[TelegramUser] = Field(None, alias="from")
    text: Optional[str] = None


class TelegramUpdate(BaseModel):
    """The subset of a Bot API Update the bot consumes."""
    model_config = ConfigDict(extra="ignore")

    update_id: int
    message: Optional[TelegramMessage] = None


def escape_code(text: str) -> str:
    """
    Escape backslash and backtick for use inside a MarkdownV2 code entity.
    """
    if text is None:
        return ""
    # Order matters: escape the backslash first so new escapes are not doubled
    return text.replace("\\", "\\\\").replace("`", "\\`")


def render_code(text: str) -> str:
    """
    Render a delimited password as a MarkdownV2 inline code span.
    """
    return f"{CODE_DELIMITER}{escape_code(strip_delimiters(text))}{CODE_DELIMITER}"


def reply_markup(keyboard: KeyboardHint) -> Optional[Dict[str, Any]]:
    if keyboard is KeyboardHint.YES_NO:
        return {
            "keyboard": [[{"text": label} for label in YES_NO_BUTTONS]],
            "resize_keyboard": True,
        }
    if keyboard is KeyboardHint.CLEAR:
        return {"remove_keyboard": True}
    return None


def to_send_message(chat_id: int, reply: Reply) -> Dict[str, Any]:
    """
    Build a sendMessage call to return as the webhook response body.
    """
    payload: Dict[str, Any] = {"method": "sendMessage", "chat_id": chat_id}
    if reply.format is FormatHint.CODE:
        payload["text"] = render_code(reply.text)
        payload["parse_mode"] = MARKDOWN_V2
    else:
        payload["text"] = reply.text
    markup = reply_markup(reply.keyboard)
    if markup is not None:
        payload["reply_markup"] = markup
    return payload


def register_webhook(token: str, url: str, secret: Optional[str] = None, timeout: float = 10.0) -> Dict[str, Any]:
    """
    Point the bot's updates at our webhook URL via setWebhook.
    """
    params: Dict[str, Any] = {"url": url, "allowed_updates": ["message"]}
    if secret:
        params["secret_token"] = secret
    resp = httpx.post(f"{API_BASE}/bot{token}/setWebhook", json=params, timeout=timeout)
    resp.raise_for_status()
    data = resp.json()
    if not data.get("ok"):
        raise RuntimeError(f"setWebhook failed: {data.get('description', 'unknown error')}")
    return data
