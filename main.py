import os
import secrets
import signal
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from dotenv import load_dotenv

from app.config import settings
from app.conversation.engine import ConversationEngine
from app.formatters import messages
from app.password.generator import EntropyUnavailableError
from app.session.store import SessionStore
from app.session.sweeper import SessionSweeper
from app.types import KeyboardHint, Reply
from app.utils.telegram import SECRET_HEADER, TelegramUpdate, register_webhook, to_send_message
from app.obs.context import update_id_var, user_id_var
from app.obs.logger import log_event
from app.obs.middleware import ObservabilityMiddleware

load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    log_event("startup", service=settings.BOT_NAME, version=settings.BOT_VERSION)

    app.state.session_store = SessionStore(ttl_seconds=settings.SESSION_TTL_SECONDS)
    app.state.engine = ConversationEngine(
        session_store=app.state.session_store,
        quick_length=settings.QUICK_GENERATE_LENGTH,
    )
    app.state.sweeper = SessionSweeper(
        app.state.session_store,
        interval_seconds=settings.SWEEP_INTERVAL_SECONDS,
    )
    app.state.sweeper.start()

    if settings.TELEGRAM_BOT_TOKEN and settings.WEBHOOK_URL:
        try:
            register_webhook(settings.TELEGRAM_BOT_TOKEN, settings.WEBHOOK_URL, settings.TELEGRAM_WEBHOOK_SECRET)
            log_event("webhook_registered", url=settings.WEBHOOK_URL)
        except Exception as e:
            # The bot still answers if the webhook was registered earlier
            log_event("webhook_registration_failed", level="WARNING", error=str(e))

    yield

    # Shutdown
    await app.state.sweeper.stop()
    log_event("shutdown", service=settings.BOT_NAME)


app = FastAPI(
    title=settings.BOT_NAME,
    version=settings.BOT_VERSION,
    lifespan=lifespan
)
app.add_middleware(ObservabilityMiddleware)


def _secret_matches(received: Optional[str], expected: str) -> bool:
    if received is None:
        return False
    return secrets.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


def _terminate_process() -> None:
    """Ask the server to shut down; no password may come from a weaker source."""
    os.kill(os.getpid(), signal.SIGTERM)


@app.get("/")
async def root():
    return {
        "service": settings.BOT_NAME,
        "version": settings.BOT_VERSION,
        "status": "running",
    }


@app.get("/health")
async def health():
    return {"status": "healthy", "service": "password-generator-bot"}


@app.get("/metrics")
async def metrics(request: Request):
    from app.obs.metrics import get_metrics_snapshot
    store = getattr(request.app.state, "session_store", None)
    snapshot = get_metrics_snapshot()
    snapshot["active_sessions"] = len(store) if store is not None else 0
    return snapshot


@app.post("/telegram/webhook")
async def telegram_webhook(
    request: Request,
    update: TelegramUpdate,
    secret_token: Optional[str] = Header(None, alias=SECRET_HEADER),
):
    if settings.TELEGRAM_WEBHOOK_SECRET and not _secret_matches(secret_token, settings.TELEGRAM_WEBHOOK_SECRET):
        raise HTTPException(status_code=401, detail="Invalid secret token")

    update_id_var.set(update.update_id)
    message = update.message
    if message is None or message.from_user is None:
        # Edited messages, channel posts etc. are acknowledged and ignored
        return {}

    user_id = message.from_user.id
    user_id_var.set(user_id)
    log_event(
        "webhook_received",
        user_from=user_id,
        has_text=message.text is not None,
        message_length=len(message.text or ""),
    )

    try:
        # Each update runs the engine on its own threadpool worker
        reply = await run_in_threadpool(request.app.state.engine.handle_message, user_id, message.text)
    except EntropyUnavailableError as e:
        log_event("entropy_unavailable", level="CRITICAL", error=str(e))
        _terminate_process()
        raise HTTPException(status_code=500, detail="Secure random source unavailable")
    except Exception as e:
        log_event("webhook_error", level="ERROR", error=str(e))
        reply = Reply(text=messages.GENERIC_ERROR_TEXT, keyboard=KeyboardHint.CLEAR)

    return to_send_message(message.chat.id, reply)


@app.get("/admin/sessions/count")
async def session_count(request: Request):
    """Admin endpoint to see how many configuration flows are in progress"""
    return {"active_sessions": len(request.app.state.session_store)}


@app.post("/admin/sessions/sweep")
def sweep_sessions(request: Request):
    """Admin endpoint to run one sweeper tick immediately"""
    removed = request.app.state.sweeper.tick()
    return {"status": "swept", "removed": removed}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.APP_ENV == "dev",
        log_level="info"
    )
