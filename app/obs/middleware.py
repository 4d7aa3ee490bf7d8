"""ASGI middleware tying each webhook call to one request id.

The request id is taken from an incoming ``X-Request-ID`` header when the
caller sends one, otherwise generated, and echoed back on the response. The
closing ``request`` log line carries the Telegram update id and sender that
the webhook route put into the context.
"""

from typing import Callable, Any, List, Tuple
import time
import uuid

from fastapi import FastAPI

from app.obs.context import clear_context, request_id_var, update_id_var, user_id_var
from app.obs.logger import log_event
from app.obs.metrics import record_timing, inc_counter

REQUEST_ID_HEADER = b"x-request-id"


def _incoming_request_id(headers: List[Tuple[bytes, bytes]]) -> str:
    for name, value in headers:
        if name.lower() == REQUEST_ID_HEADER and value:
            return value.decode("latin-1")[:128]
    return str(uuid.uuid4())


class ObservabilityMiddleware:
    def __init__(self, app: FastAPI):
        self.app = app

    async def __call__(self, scope: dict, receive: Callable, send: Callable[[dict], Any]):
        if scope.get("type") != "http":
            return await self.app(scope, receive, send)

        clear_context()
        req_id = _incoming_request_id(scope.get("headers") or [])
        request_id_var.set(req_id)
        route = scope.get("path", "")
        start = time.monotonic()
        status_code = 500

        async def send_wrapper(message: dict):
            nonlocal status_code
            if message.get("type") == "http.response.start":
                status_code = int(message.get("status", 200))
                headers = list(message.get("headers") or [])
                headers.append((REQUEST_ID_HEADER, req_id.encode("latin-1")))
                message = {**message, "headers": headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        finally:
            elapsed_ms = (time.monotonic() - start) * 1000.0
            record_timing("request_latency_ms", elapsed_ms, {"route": route})
            inc_counter("requests_total", {"route": route, "status": str(status_code)})
            # The route sets these in this same task, so they are visible here
            log_event(
                "request",
                method=scope.get("method", ""),
                route=route,
                status=status_code,
                ms_total=round(elapsed_ms, 2),
                update_id=update_id_var.get(),
                user_from=user_id_var.get(),
            )
