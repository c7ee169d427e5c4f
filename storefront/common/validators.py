from typing import Optional
from storefront.auth.dependencies import normalize_email_address


def min_length(value: Optional[str], n: int, message: str) -> str:
    v = (value or "").strip()
    if len(v) < n:
        raise ValueError(message)
    return v


def valid_email(value: Optional[str], message: str = "Invalid email address") -> str:
    try:
        return normalize_email_address((value or "").strip())
    except ValueError:
        raise ValueError(message)


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    v = value.strip()
    return v or None
