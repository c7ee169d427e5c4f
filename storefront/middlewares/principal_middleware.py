from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from storefront.auth.constants import GUEST_COOKIE_NAME, GUEST_SESSION_TTL_SECONDS
from storefront.auth.dependencies import auth_token_from_request, guest_token_from_request
from storefront.auth.principal import UserPrincipal, resolve_principal
from storefront.config.admin_config import admin_config
from storefront.middlewares.constants import logger

secure_flag = False if admin_config.ENV == "dev" else True


class PrincipalMiddleware(BaseHTTPMiddleware):
    """Resolves the caller once per request into request.state.principal. Never rejects."""

    def __init__(self, app, *, skip_paths=()):
        super().__init__(app)
        self.skip_paths = tuple(skip_paths)

    async def dispatch(self, request: Request, call_next):

        if self.skip_paths and request.url.path.startswith(self.skip_paths):
            return await call_next(request)

        principal, minted = resolve_principal(auth_token_from_request(request), guest_token_from_request(request))
        request.state.principal = principal

        if isinstance(principal, UserPrincipal):
            logger.debug("principal.user", extra={"user_id": principal.user_id, "path": request.url.path})

        response = await call_next(request)

        # the route may have set or cleared the guest cookie itself (login does)
        touched = any(v.startswith(f"{GUEST_COOKIE_NAME}=") for v in response.headers.getlist("set-cookie"))
        if minted and not touched:
            response.set_cookie(GUEST_COOKIE_NAME, minted, httponly=True, secure=secure_flag, samesite="Lax",
                                path="/", max_age=int(GUEST_SESSION_TTL_SECONDS))
            logger.debug("principal.guest.minted", extra={"path": request.url.path})

        return response
