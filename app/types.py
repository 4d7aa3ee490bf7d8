from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    """Step of the /password flow the session is waiting on."""
    AWAITING_LENGTH = "awaiting_length"
    AWAITING_LOWERCASE = "awaiting_lowercase"
    AWAITING_UPPERCASE = "awaiting_uppercase"
    AWAITING_NUMBERS = "awaiting_numbers"
    AWAITING_SYMBOLS = "awaiting_symbols"


class Session(BaseModel):
    # Fields for phases not reached yet stay None
    model_config = ConfigDict(validate_assignment=True)

    phase: Phase = Phase.AWAITING_LENGTH
    length: Optional[int] = Field(None, ge=1, le=255)
    lowercase: Optional[bool] = None
    uppercase: Optional[bool] = None
    numbers: Optional[bool] = None
    expires_at: float  # epoch seconds


class FormatHint(str, Enum):
    PLAIN = "plain"
    CODE = "code"  # fixed-width, rendered as MarkdownV2 code span


class KeyboardHint(str, Enum):
    NONE = "none"
    YES_NO = "yes_no"
    CLEAR = "clear"


class Reply(BaseModel):
    text: str
    format: FormatHint = FormatHint.PLAIN
    keyboard: KeyboardHint = KeyboardHint.NONE


class PasswordResult(BaseModel):
    text: str
    generated: bool  # False when text is the validation message
