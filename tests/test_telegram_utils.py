from unittest.mock import Mock, patch

import pytest

from app.types import FormatHint, KeyboardHint, Reply
from app.utils.telegram import (
    MARKDOWN_V2,
    TelegramUpdate,
    escape_code,
    register_webhook,
    render_code,
    reply_markup,
    to_send_message,
)


def test_escape_code():
    assert escape_code("a\\b`c") == "a\\\\b\\`c"
    assert escape_code(None) == ""


def test_render_code_escapes_inside_delimiters():
    assert render_code("`ab\\c`") == "`ab\\\\c`"
    assert render_code("`x'\"|`") == "`x'\"|`"


def test_reply_markup_variants():
    yes_no = reply_markup(KeyboardHint.YES_NO)
    assert yes_no["keyboard"] == [[{"text": "Yes"}, {"text": "No"}]]
    assert yes_no["resize_keyboard"] is True
    assert reply_markup(KeyboardHint.CLEAR) == {"remove_keyboard": True}
    assert reply_markup(KeyboardHint.NONE) is None


def test_send_message_plain():
    payload = to_send_message(55, Reply(text="hi & <there>"))
    assert payload == {"method": "sendMessage", "chat_id": 55, "text": "hi & <there>"}


def test_send_message_code_with_keyboard_cleared():
    payload = to_send_message(55, Reply(text="`abc`", format=FormatHint.CODE, keyboard=KeyboardHint.CLEAR))
    assert payload["parse_mode"] == MARKDOWN_V2
    assert payload["text"] == "`abc`"
    assert payload["reply_markup"] == {"remove_keyboard": True}


def test_update_parsing_uses_from_alias():
    update = TelegramUpdate.model_validate(
        {
            "update_id": 10,
            "message": {
                "message_id": 3,
                "date": 1700000000,
                "chat": {"id": 99, "type": "private"},
                "from": {"id": 12345, "is_bot": False, "first_name": "A"},
                "text": "/start",
            },
        }
    )
    assert update.message.from_user.id == 12345
    assert update.message.chat.id == 99
    assert update.message.text == "/start"


def test_update_without_text():
    update = TelegramUpdate.model_validate(
        {"update_id": 11, "message": {"message_id": 4, "chat": {"id": 1}, "from": {"id": 1}, "sticker": {}}}
    )
    assert update.message.text is None


def test_register_webhook_posts_set_webhook():
    response = Mock()
    response.json.return_value = {"ok": True, "result": True}
    with patch("app.utils.telegram.httpx.post", return_value=response) as post:
        data = register_webhook("TOKEN", "https://example.org/telegram/webhook", secret="s3cret")

    assert data["ok"] is True
    url = post.call_args.args[0]
    assert url == "https://api.telegram.org/botTOKEN/setWebhook"
    body = post.call_args.kwargs["json"]
    assert body["url"] == "https://example.org/telegram/webhook"
    assert body["secret_token"] == "s3cret"
    response.raise_for_status.assert_called_once()


def test_register_webhook_reports_api_failure():
    response = Mock()
    response.json.return_value = {"ok": False, "description": "bad url"}
    with patch("app.utils.telegram.httpx.post", return_value=response):
        with pytest.raises(RuntimeError, match="bad url"):
            register_webhook("TOKEN", "nope")
