"""Who is asking. Every cart and order call takes one of these explicitly."""
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from fastapi import Depends, Request
from storefront.auth.dependencies import auth_token_from_request, guest_token_from_request
from storefront.auth.utils import decode_token, make_guest_token
from storefront.common.custom_exceptions import Forbidden, Unauthorized
from storefront.schema.full_schema import UserRoleName


@dataclass(frozen=True)
class UserPrincipal:
    user_id: int
    email: str
    role: str = UserRoleName.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleName.ADMIN.value


@dataclass(frozen=True)
class GuestPrincipal:
    token: str


Principal = Union[UserPrincipal, GuestPrincipal]


def resolve_principal(auth_token: Optional[str], guest_token: Optional[str]) -> Tuple[Principal, Optional[str]]:
    """
    Never fails. A bad or expired auth token falls back to the guest path.
    Second item is the freshly minted guest token, if one had to be created,
    so the caller can set the cookie.
    """
    if auth_token:
        claims = decode_token(auth_token)
        if claims:
            try:
                user_id = int(claims["sub"])
            except (TypeError, ValueError):
                user_id = None
            if user_id is not None:
                return UserPrincipal(user_id=user_id, email=claims.get("email") or "",
                                     role=claims.get("role") or UserRoleName.USER.value), None

    if guest_token:
        return GuestPrincipal(token=guest_token), None

    minted = make_guest_token()
    return GuestPrincipal(token=minted), minted


def get_principal(request: Request) -> Principal:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        # middleware not mounted (e.g. a bare router in tests)
        principal, _ = resolve_principal(auth_token_from_request(request), guest_token_from_request(request))
        request.state.principal = principal
    return principal


def require_user(principal: Principal = Depends(get_principal)) -> UserPrincipal:
    if not isinstance(principal, UserPrincipal):
        raise Unauthorized("Authentication required")
    return principal


def require_admin(principal: UserPrincipal = Depends(require_user)) -> UserPrincipal:
    if not principal.is_admin:
        raise Forbidden("Admin access required")
    return principal
