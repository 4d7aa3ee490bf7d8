from typing import Final, Optional

from app.config import settings

HELP_TEXT: Final[str] = (
    "This bot helps you generate random passwords. I DO NOT STORE ANYTHING ON MY SERVER, "
    "you can read the source code. Also this bot uses the OS secure random source to "
    "generate passwords.\n"
    "To quickly generate password use /generate , it generates a {length} letter password "
    "with combination of letters and numbers\n"
    "If you want to create a customizable password, use /password"
)

START_TEXT: Final[str] = (
    "Hello and welcome to password generator bot!\n"
    "To quickly generate a password send run /generate\n"
    "To customize your password use /password"
)

LENGTH_PROMPT: Final[str] = "Select the length of your password(1-255)"
LOWERCASE_PROMPT: Final[str] = "Do you want your password contain lowercase characters? (a,b,c...)"
UPPERCASE_PROMPT: Final[str] = "Do you want your password contain uppercase characters? (A,B,C...)"
NUMBERS_PROMPT: Final[str] = "Do you want your password contain numbers characters? (1,2,3...)"
SYMBOLS_PROMPT: Final[str] = "Do you want your password contain special characters? (!,#,%...)"

ZERO_LENGTH_TEXT: Final[str] = "Please do not enter 0!"
GENERIC_ERROR_TEXT: Final[str] = "Sorry, something went wrong on my side. Please try again."


def format_help(quick_length: Optional[int] = None) -> str:
    return HELP_TEXT.format(length=quick_length or settings.QUICK_GENERATE_LENGTH)


def format_about() -> str:
    return (
        f"{settings.BOT_NAME} v{settings.BOT_VERSION}\n"
        f"By {settings.BOT_AUTHOR}\n"
        f"Source: {settings.BOT_SOURCE_URL}"
    )
