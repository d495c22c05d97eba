"""Shared validation utilities"""

import re
from datetime import datetime
from typing import Optional

RUT_WEIGHTS = (2, 3, 4, 5, 6, 7)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
RUT_BODY_PATTERN = re.compile(r"[0-9]+")
PHONE_PATTERN = re.compile(r"^\+?[0-9]{8,15}$")
HOUR_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})(?::[0-9]{2}(?:\.[0-9]+)?)?$")


def rut_check_digit(body: str) -> str:
    """
    Compute the Chilean RUT check character for the given body digits.

    Digits are weighted from the least significant with the cycle
    2,3,4,5,6,7,2,3,... and the check is 11 - (sum mod 11), where 11 maps
    to "0" and 10 maps to "K".
    """
    total = 0
    for index, digit in enumerate(reversed(body)):
        total += int(digit) * RUT_WEIGHTS[index % len(RUT_WEIGHTS)]

    expected = 11 - (total % 11)
    if expected == 11:
        return "0"
    if expected == 10:
        return "K"
    return str(expected)


def split_rut(rut: Optional[str]) -> Optional[tuple[str, str]]:
    """Strip separators and split into (body, check); None when the body is not ASCII digits"""
    if not rut:
        return None

    cleaned = re.sub(r"[.\-\s]", "", rut)
    if len(cleaned) < 2:
        return None

    body, check = cleaned[:-1], cleaned[-1].upper()
    if not RUT_BODY_PATTERN.fullmatch(body):
        return None
    return body, check


def is_valid_rut(rut: Optional[str]) -> bool:
    """Validate a RUT such as "7.520.873-1", "7520873-1" or "75208731" """
    parts = split_rut(rut)
    if parts is None:
        return False

    body, check = parts
    return rut_check_digit(body) == check


def normalize_rut(rut: str) -> str:
    """Canonical stored form "7520873-1"; expects a RUT that passed is_valid_rut"""
    parts = split_rut(rut)
    if parts is None:
        raise ValueError(f"Malformed RUT: {rut!r}")
    body, check = parts
    return f"{body.lstrip('0') or '0'}-{check}"


def is_valid_email(email: Optional[str]) -> bool:
    """An "@" with something before it and a dot inside the domain part"""
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


def is_valid_phone(phone: Optional[str]) -> bool:
    """8 to 15 digits with an optional leading "+" """
    if not phone:
        return False
    return bool(PHONE_PATTERN.match(phone.strip()))


def normalize_hour_label(label: str) -> str:
    """
    Normalize an hour label to "HH:MM".

    "9:00", "09:00" and "09:00:00" all become "09:00". Labels that are not a
    clock time are returned stripped and otherwise untouched.
    """
    label = label.strip()
    match = HOUR_PATTERN.match(label)
    if not match:
        return label

    hour, minute = int(match.group(1)), int(match.group(2))
    if hour > 23 or minute > 59:
        return label
    return f"{hour:02d}:{minute:02d}"


def slot_key(moment: datetime) -> tuple[str, str]:
    """Reduce a timestamp to its (YYYY-MM-DD, HH:MM) slot key, dropping seconds"""
    return moment.strftime("%Y-%m-%d"), moment.strftime("%H:%M")
