"""Card number checks used at checkout.

Validation only: format, issuer prefix, Luhn checksum, expiry and CVC
length. Nothing is charged and full card numbers are never stored.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from django.utils import timezone  # type: ignore

VISA = "VISA"
MASTERCARD = "MASTERCARD"
AMEX = "AMEX"
DISCOVER = "DISCOVER"
UNKNOWN = "UNKNOWN"

_SEPARATORS = re.compile(r"[\s-]+")


class CardValidationError(ValueError):
    """Raised with a user-facing message when card details are invalid."""


@dataclass(frozen=True)
class ValidatedCard:
    card_type: str
    last4: str
    expiry_month: int
    expiry_year: int


def clean_card_number(number: str) -> str:
    return _SEPARATORS.sub("", str(number or ""))


def detect_card_type(number: str) -> str:
    """Issuer from the number prefix (IIN ranges)."""
    if number.startswith("4"):
        return VISA
    if number[:2] in {"51", "52", "53", "54", "55"}:
        return MASTERCARD
    if len(number) >= 6 and 222100 <= int(number[:6]) <= 272099:
        return MASTERCARD
    if number[:2] in {"34", "37"}:
        return AMEX
    if (
        number.startswith("6011")
        or number[:3] in {"644", "645", "646", "647", "648", "649"}
        or number.startswith("65")
        or number[:6] in {"622126", "622925"}
    ):
        return DISCOVER
    return UNKNOWN


def luhn_checksum_ok(number: str) -> bool:
    total = 0
    for position, char in enumerate(reversed(number)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_card(
    number: str,
    expiry_month,
    expiry_year,
    cvc: str,
    *,
    today: date | None = None,
) -> ValidatedCard:
    """
    Check card details, returning the detected type and last four digits.

    Two-digit years are read as 20YY. A card expiring this month is still valid.
    """
    digits = clean_card_number(number)
    if not digits.isdigit():
        raise CardValidationError("Card number must contain only digits.")
    if not 13 <= len(digits) <= 19:
        raise CardValidationError("Card number should be between 13 and 19 digits.")

    card_type = detect_card_type(digits)
    if card_type == UNKNOWN:
        raise CardValidationError("Unsupported card type.")
    if not luhn_checksum_ok(digits):
        raise CardValidationError("Invalid card number.")

    try:
        month = int(expiry_month)
        year = int(expiry_year)
    except (TypeError, ValueError):
        raise CardValidationError("Invalid expiry date.")
    if not 1 <= month <= 12:
        raise CardValidationError("Invalid expiry month.")
    if year < 100:
        year += 2000

    today = today or timezone.localdate()
    if (year, month) < (today.year, today.month):
        raise CardValidationError("Card has expired.")

    expected_cvc = 4 if card_type == AMEX else 3
    cvc_digits = str(cvc or "").strip()
    if not cvc_digits.isdigit() or len(cvc_digits) != expected_cvc:
        raise CardValidationError(f"CVC should be {expected_cvc} digits.")

    return ValidatedCard(card_type=card_type, last4=digits[-4:], expiry_month=month, expiry_year=year)
