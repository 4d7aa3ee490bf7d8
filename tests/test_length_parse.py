import pytest

from app.parse.length import EMPTY_ERROR, INVALID_DIGIT_ERROR, TOO_LARGE_ERROR, parse_length


@pytest.mark.parametrize(
    "text,expected",
    [
        ("1", 1),
        ("7", 7),
        ("255", 255),
        ("+16", 16),
        ("007", 7),
        ("0" * 5000 + "42", 42),
        ("0", 0),
    ],
)
def test_valid(text, expected):
    assert parse_length(text) == (expected, None)


@pytest.mark.parametrize(
    "text,error",
    [
        ("", EMPTY_ERROR),
        ("+", INVALID_DIGIT_ERROR),
        ("-1", INVALID_DIGIT_ERROR),
        ("12a", INVALID_DIGIT_ERROR),
        (" 12", INVALID_DIGIT_ERROR),
        ("1.5", INVALID_DIGIT_ERROR),
        ("٣", INVALID_DIGIT_ERROR),
        ("256", TOO_LARGE_ERROR),
        ("99999999999", TOO_LARGE_ERROR),
        ("9" * 5000, TOO_LARGE_ERROR),
        ("1" + "0" * 4400, TOO_LARGE_ERROR),
    ],
)
def test_invalid(text, error):
    assert parse_length(text) == (None, error)
