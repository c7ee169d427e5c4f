import pytest
from datetime import datetime, timedelta, timezone
from jose import jwt
from storefront.auth.principal import GuestPrincipal, UserPrincipal, resolve_principal
from storefront.auth.utils import create_access_token
from storefront.config.settings import config_settings


@pytest.mark.asyncio
async def test_valid_token_resolves_user():
    token = create_access_token(42, "rahim@example.com", "admin")
    principal, minted = resolve_principal(token, "some-guest")
    assert principal == UserPrincipal(user_id=42, email="rahim@example.com", role="admin")
    assert principal.is_admin
    assert minted is None


@pytest.mark.asyncio
async def test_guest_cookie_used_without_token():
    principal, minted = resolve_principal(None, "guest-abc")
    assert principal == GuestPrincipal(token="guest-abc")
    assert minted is None


@pytest.mark.asyncio
async def test_bad_token_falls_back_to_guest():
    principal, minted = resolve_principal("garbage", "guest-abc")
    assert principal == GuestPrincipal(token="guest-abc")
    assert minted is None


@pytest.mark.asyncio
async def test_expired_token_falls_back_to_guest():
    past = datetime.now(timezone.utc) - timedelta(days=1)
    token = jwt.encode({"sub": "42", "email": "x@example.com", "role": "user", "exp": past},
                       config_settings.JWT_SECRET, algorithm=config_settings.JWT_ALGO)
    principal, _ = resolve_principal(token, "guest-abc")
    assert isinstance(principal, GuestPrincipal)


@pytest.mark.asyncio
async def test_nothing_mints_a_fresh_guest_token():
    principal, minted = resolve_principal(None, None)
    assert isinstance(principal, GuestPrincipal)
    assert minted and principal.token == minted
    _, minted_again = resolve_principal(None, None)
    assert minted_again != minted
