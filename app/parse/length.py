"""Parsing of the password length reply."""

from typing import Optional, Tuple

EMPTY_ERROR = "cannot parse integer from empty string"
INVALID_DIGIT_ERROR = "invalid digit found in string"
TOO_LARGE_ERROR = "number too large to fit in target type"

MAX_VALUE = 255


def parse_length(text: str) -> Tuple[Optional[int], Optional[str]]:
    """Parse an unsigned 8-bit integer.

    Accepts an optional leading "+" followed by ASCII digits and nothing else.
    Returns (value, None) on success or (None, error_message) on failure.
    A value of 0 parses successfully; rejecting it is the caller's job.
    """
    if text is None or text == "":
        return None, EMPTY_ERROR

    digits = text[1:] if text.startswith("+") else text
    if not digits or not all("0" <= c <= "9" for c in digits):
        return None, INVALID_DIGIT_ERROR

    significant = digits.lstrip("0")
    # More than 3 significant digits is always above 255
    if len(significant) > 3:
        return None, TOO_LARGE_ERROR
    value = int(significant or "0")
    if value > MAX_VALUE:
        return None, TOO_LARGE_ERROR
    return value, None
