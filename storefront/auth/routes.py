from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import  AsyncSession
from storefront.auth.constants import AUTH_COOKIE_NAME, AUTH_TOKEN_TTL_SECONDS, GUEST_COOKIE_NAME, logger
from storefront.auth.dependencies import guest_token_from_request
from storefront.auth.models import LoginIn, RegisterIn
from storefront.auth.principal import UserPrincipal, require_user
from storefront.auth.services import current_user, login_user, register_user
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.config.admin_config import admin_config

current_env = admin_config.ENV
secure_flag = False if current_env == "dev" else True

auth_router = APIRouter()


@auth_router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterIn, session: AsyncSession = Depends(get_session)):

    logger.info("signup.attempt", extra={"email": payload.email})

    user = await register_user(session, payload)
    return success_response({"user": user}, status_code=status.HTTP_201_CREATED,
                            message="Registration successful! Please login to continue.")


@auth_router.post("/login")
async def login(request: Request, payload: LoginIn, session: AsyncSession = Depends(get_session)):

    logger.info("login.attempt", extra={"email": payload.email})

    data = await login_user(session, payload, guest_token_from_request(request))

    response = success_response(data, message="Login successful")
    response.set_cookie(AUTH_COOKIE_NAME, data["token"], httponly=True, secure=secure_flag, path="/",
                        max_age=int(AUTH_TOKEN_TTL_SECONDS), samesite="Lax")
    # guest cart is merged , the guest identity is done
    response.delete_cookie(GUEST_COOKIE_NAME, path="/", httponly=True, secure=secure_flag, samesite="Lax")
    return response


@auth_router.post("/logout")
async def logout():
    response = success_response(message="Logout successful")
    response.delete_cookie(AUTH_COOKIE_NAME, path="/", httponly=True, secure=secure_flag, samesite="Lax")
    return response


@auth_router.get("/me")
async def me(principal: UserPrincipal = Depends(require_user), session: AsyncSession = Depends(get_session)):
    user = await current_user(session, principal.user_id)
    return success_response(user)
