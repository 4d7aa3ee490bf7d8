"""Request context helpers using ContextVars.

Holds request-scoped identifiers (request id, Telegram update id and the
sender's user id) so log lines can be correlated without threading them
through every call.
"""

from contextvars import ContextVar
from typing import Optional


# Public ContextVars (names are stable API)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
update_id_var: ContextVar[Optional[int]] = ContextVar("update_id", default=None)
user_id_var: ContextVar[Optional[int]] = ContextVar("user_id", default=None)


def clear_context() -> None:
    """Reset context variables to defaults."""
    request_id_var.set(None)
    update_id_var.set(None)
    user_id_var.set(None)
