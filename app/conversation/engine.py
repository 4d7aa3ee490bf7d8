"""
Conversation engine for the password configuration flow.

Top-level commands are answered directly. Any other text is treated as a reply
to the prompt of the caller's current phase: the engine runs exactly one
transition on the session held by the SessionStore and returns the next
prompt together with format and keyboard hints for the channel.
"""

from typing import Callable, Dict, Optional

from app.formatters import messages
from app.obs.logger import log_event
from app.obs.metrics import inc_counter
from app.parse.length import parse_length
from app.password.generator import generate_password
from app.session.store import SessionStore
from app.types import FormatHint, KeyboardHint, PasswordResult, Phase, Reply, Session


YES = "Yes"

# Prompt shown once the session has entered the given phase
_PROMPTS: Dict[Phase, str] = {
    Phase.AWAITING_LOWERCASE: messages.LOWERCASE_PROMPT,
    Phase.AWAITING_UPPERCASE: messages.UPPERCASE_PROMPT,
    Phase.AWAITING_NUMBERS: messages.NUMBERS_PROMPT,
    Phase.AWAITING_SYMBOLS: messages.SYMBOLS_PROMPT,
}


class ConversationEngine:
    """
    Drives the /password flow and the out-of-band commands.

    Args:
        session_store: Owner of all session state; injected so tests can use
            their own instance.
        quick_length: Length used by /generate.
        password_generator: Callable with the signature of
            ``generate_password``; swapped in tests to control entropy.
    """

    def __init__(
        self,
        session_store: SessionStore,
        quick_length: int = 16,
        password_generator: Callable[..., PasswordResult] = generate_password,
    ) -> None:
        self.session_store = session_store
        self.quick_length = quick_length
        self.password_generator = password_generator
        self._commands: Dict[str, Callable[[int], Reply]] = {
            "/start": self._cmd_start,
            "/about": self._cmd_about,
            "/generate": self._cmd_generate,
            "/password": self._cmd_password,
            "/help": self._cmd_help,
        }

    def handle_message(self, user_id: int, text: Optional[str]) -> Reply:
        """Answer one inbound message from user_id."""
        if text is None:
            return Reply(text=messages.format_help(self.quick_length))

        command = self._commands.get(text)
        if command is not None:
            inc_counter("commands_total", {"command": text})
            log_event("command_handled", user_from=user_id, command=text)
            return command(user_id)

        reply = self.session_store.with_session_mut(
            user_id, lambda session: self.transition(user_id, session, text)
        )
        if reply is None:
            # Not mid-flow
            return Reply(text=messages.format_help(self.quick_length), keyboard=KeyboardHint.CLEAR)
        return reply

    def transition(self, user_id: int, session: Session, text: str) -> Reply:
        """Apply one input to session; must run under the store's entry lock."""
        phase = session.phase

        if phase is Phase.AWAITING_LENGTH:
            value, error = parse_length(text)
            if error is None and value == 0:
                error = messages.ZERO_LENGTH_TEXT
            if error is not None:
                inc_counter("length_rejected_total")
                log_event("length_rejected", user_from=user_id, reason=error)
                return Reply(text=error, keyboard=KeyboardHint.CLEAR)
            session.length = value
            return self._advance(user_id, session, Phase.AWAITING_LOWERCASE)

        answer = text == YES
        if phase is Phase.AWAITING_LOWERCASE:
            session.lowercase = answer
            return self._advance(user_id, session, Phase.AWAITING_UPPERCASE)
        if phase is Phase.AWAITING_UPPERCASE:
            session.uppercase = answer
            return self._advance(user_id, session, Phase.AWAITING_NUMBERS)
        if phase is Phase.AWAITING_NUMBERS:
            session.numbers = answer
            return self._advance(user_id, session, Phase.AWAITING_SYMBOLS)

        # AWAITING_SYMBOLS: last answer, generate and end the flow
        result = self.password_generator(
            session.length,
            bool(session.lowercase),
            bool(session.uppercase),
            bool(session.numbers),
            answer,
        )
        self.session_store.remove(user_id)
        inc_counter("sessions_completed_total")
        log_event("session_completed", user_from=user_id, generated=result.generated)
        if result.generated:
            inc_counter("passwords_generated_total", {"source": "password"})
            log_event("password_generated", user_from=user_id, source="password", length=session.length)
        return self._password_reply(result, KeyboardHint.CLEAR)

    def _advance(self, user_id: int, session: Session, next_phase: Phase) -> Reply:
        log_event(
            "session_transition",
            user_from=user_id,
            from_phase=session.phase.value,
            to_phase=next_phase.value,
        )
        session.phase = next_phase
        return Reply(text=_PROMPTS[next_phase], keyboard=KeyboardHint.YES_NO)

    @staticmethod
    def _password_reply(result: PasswordResult, keyboard: KeyboardHint) -> Reply:
        fmt = FormatHint.CODE if result.generated else FormatHint.PLAIN
        return Reply(text=result.text, format=fmt, keyboard=keyboard)

    def _cmd_start(self, user_id: int) -> Reply:
        return Reply(text=messages.START_TEXT)

    def _cmd_about(self, user_id: int) -> Reply:
        return Reply(text=messages.format_about())

    def _cmd_generate(self, user_id: int) -> Reply:
        result = self.password_generator(self.quick_length, True, True, True, False)
        inc_counter("passwords_generated_total", {"source": "generate"})
        log_event("password_generated", user_from=user_id, source="generate", length=self.quick_length)
        return self._password_reply(result, KeyboardHint.NONE)

    def _cmd_password(self, user_id: int) -> Reply:
        self.session_store.create(user_id)
        inc_counter("sessions_created_total")
        log_event("session_created", user_from=user_id, ttl_seconds=self.session_store.ttl_seconds)
        return Reply(text=messages.LENGTH_PROMPT)

    def _cmd_help(self, user_id: int) -> Reply:
        return Reply(text=messages.format_help(self.quick_length))
