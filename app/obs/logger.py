"""Structured JSON logging to stdout.

One JSON object per line. Passwords and raw message text must never be passed
in as fields; log lengths and phases instead. Telegram user ids are replaced
by a keyed hash so lines from one user correlate without exposing the id.
Set ``LOG_REDACTION_KEY`` to keep the hashes stable across restarts.
"""

from typing import Any, Dict
from datetime import datetime, timezone
import hashlib
import hmac
import json
import secrets

from app.config import settings
from app.obs.context import request_id_var, update_id_var, user_id_var

_REDACTION_KEY: bytes = (
    settings.LOG_REDACTION_KEY.encode("utf-8")
    if settings.LOG_REDACTION_KEY
    else secrets.token_bytes(32)
)


def _redact_user(value: Any) -> Any:
    s = str(value) if value is not None else ""
    if not s:
        return s
    digest = hmac.new(_REDACTION_KEY, s.encode("utf-8"), hashlib.sha256).hexdigest()
    return f"usr_{digest[:12]}"


def log_event(event: str, **fields: Any) -> None:
    now = datetime.now(timezone.utc).isoformat()
    payload: Dict[str, Any] = {
        "ts": now,
        "level": fields.pop("level", "INFO"),
        "event": event,
        "request_id": request_id_var.get(),
    }
    payload.setdefault("update_id", update_id_var.get())
    if "user_from" not in fields:
        payload["user_from"] = _redact_user(user_id_var.get())

    for k, v in fields.items():
        if k in ("user_from", "user_id"):
            payload["user_from"] = _redact_user(v)
        else:
            payload[k] = v

    try:
        print(json.dumps(payload, separators=(",", ":"), default=str), flush=True)
    except (TypeError, ValueError, OSError):
        # Logging must never take the bot down
        pass
