"""Secure password generation.

Characters are sampled independently and uniformly from the alphabet built
out of the enabled character classes. Each index comes from a single byte of
the OS CSPRNG, masked down to the smallest 2^k - 1 covering the alphabet and
rejected when out of range, so there is no modulo bias.
"""

import secrets
from typing import Callable, Final, Optional

from app.types import PasswordResult


LOWERCASE: Final[str] = "abcdefghijklmnopqrstuvwxyz"
UPPERCASE: Final[str] = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NUMBERS: Final[str] = "0123456789"
SYMBOLS: Final[str] = "!@#$%^&*()_+=-[]{};:'\"\\|,./~?"

CODE_DELIMITER: Final[str] = "`"
NO_CHARACTER_CLASS_MESSAGE: Final[str] = "Please at least choose one of the character types"

MIN_LENGTH: Final[int] = 1
MAX_LENGTH: Final[int] = 255

_MASKS: Final[tuple] = (15, 31, 63, 127)

ByteSource = Callable[[int], bytes]


class EntropyUnavailableError(RuntimeError):
    """The secure random source could not produce bytes."""


def build_alphabet(lowercase: bool, uppercase: bool, numbers: bool, symbols: bool) -> str:
    """Concatenate the enabled classes in fixed order."""
    parts = []
    if lowercase:
        parts.append(LOWERCASE)
    if uppercase:
        parts.append(UPPERCASE)
    if numbers:
        parts.append(NUMBERS)
    if symbols:
        parts.append(SYMBOLS)
    return "".join(parts)


def mask_for(alphabet_size: int) -> int:
    """Return the smallest mask in {15, 31, 63, 127} covering indexes [0, alphabet_size)."""
    if alphabet_size < 1 or alphabet_size > _MASKS[-1] + 1:
        raise ValueError(f"alphabet size out of range: {alphabet_size}")
    for mask in _MASKS:
        if mask >= alphabet_size - 1:
            return mask
    return _MASKS[-1]


def _random_byte(source: ByteSource) -> int:
    try:
        data = source(1)
    except (OSError, NotImplementedError) as e:
        raise EntropyUnavailableError("Cannot initialize rng.") from e
    if not data:
        raise EntropyUnavailableError("Secure random source returned no bytes")
    return data[0]


def random_index(alphabet_size: int, source: Optional[ByteSource] = None) -> int:
    """Draw a uniform index in [0, alphabet_size) by rejection sampling."""
    source = source or secrets.token_bytes
    mask = mask_for(alphabet_size)
    while True:
        value = _random_byte(source) & mask
        if value < alphabet_size:
            return value


def generate_password(
    length: int,
    lowercase: bool,
    uppercase: bool,
    numbers: bool,
    symbols: bool,
    source: Optional[ByteSource] = None,
) -> PasswordResult:
    """Generate a password wrapped in the code delimiter pair.

    Returns a result with ``generated=False`` and the validation message when
    every character class is disabled. Raises ``EntropyUnavailableError`` if
    the byte source fails; no fallback source is ever used.
    """
    if not MIN_LENGTH <= length <= MAX_LENGTH:
        raise ValueError(f"length must be between {MIN_LENGTH} and {MAX_LENGTH}, got {length}")

    alphabet = build_alphabet(lowercase, uppercase, numbers, symbols)
    if not alphabet:
        return PasswordResult(text=NO_CHARACTER_CLASS_MESSAGE, generated=False)

    size = len(alphabet)
    chars = [alphabet[random_index(size, source)] for _ in range(length)]
    return PasswordResult(text=f"{CODE_DELIMITER}{''.join(chars)}{CODE_DELIMITER}", generated=True)


def strip_delimiters(text: str) -> str:
    """Return the bare password from a wrapped generator result."""
    if len(text) >= 2 and text.startswith(CODE_DELIMITER) and text.endswith(CODE_DELIMITER):
        return text[1:-1]
    return text
