
from typing import Optional
from email_validator import validate_email, EmailNotValidError
from fastapi import Request
from storefront.auth.constants import AUTH_COOKIE_NAME, GUEST_COOKIE_NAME


def normalize_email_address(email: str) -> str:
    """
    Validate and return normalized email (lowercased, normalized by email-validator).
    Raises ValueError if invalid.
    """
    try:
        v = validate_email(email, check_deliverability=False)
        return v.normalized.lower()
    except EmailNotValidError as e:
        raise ValueError(str(e))


def bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if not auth:
        return None
    scheme, _, token = auth.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


#** header wins over cookie so API clients can override a stale browser cookie
def auth_token_from_request(request: Request) -> Optional[str]:
    return bearer_token(request) or request.cookies.get(AUTH_COOKIE_NAME)


def guest_token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(GUEST_COOKIE_NAME)
    return token or None
