from typing import Any, Dict, Optional
from sqlalchemy.exc import IntegrityError
from storefront.auth.constants import logger
from storefront.auth.models import LoginIn, RegisterIn
from storefront.auth.repository import insert_user, user_by_email, user_by_id, user_id_by_email
from storefront.auth.utils import DEFAULT_ROLE, create_access_token, hash_password, verify_password
from storefront.cart.services import merge_guest_into_user
from storefront.common.custom_exceptions import Conflict, NotFound, Unauthorized
from storefront.notifications.services import send_welcome
from storefront.schema.full_schema import Users


def public_user(user: Users) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "phone": user.phone,
        "role": user.role,
        "is_verified": user.is_verified,
        "created_at": user.created_at,
    }


async def register_user(session, payload: RegisterIn) -> Dict[str, Any]:

    if await user_id_by_email(session, payload.email):
        logger.warning("user.duplicate", extra={"email": payload.email})
        raise Conflict("Email already registered")

    try:
        user = await insert_user(session, {
            "email": payload.email,
            "password_hash": hash_password(payload.password),
            "first_name": payload.first_name.strip(),
            "last_name": payload.last_name.strip(),
            "phone": (payload.phone or "").strip() or None,
            "role": DEFAULT_ROLE,
            "is_verified": False,
        })
        await session.commit()
    except IntegrityError:
        await session.rollback()
        logger.warning("user.create.integrity_error", extra={"email": payload.email})
        raise Conflict("Email already registered")

    logger.info("user.created", extra={"user_id": user.id, "email": payload.email})

    await send_welcome(user.email, user.first_name)
    return public_user(user)


async def authenticate(session, payload: LoginIn) -> Users:
    user = await user_by_email(session, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning("auth.user.invalid_credentials", extra={"email": payload.email})
        raise Unauthorized("Invalid email or password")
    return user


async def login_user(session, payload: LoginIn, guest_token: Optional[str]) -> Dict[str, Any]:
    """
    Verify credentials, fold the guest cart (if any) into the user's cart and
    issue a session token. The caller drops the guest cookie afterwards.
    """
    user = await authenticate(session, payload)

    merged = await merge_guest_into_user(session, guest_token, user.id)

    token = create_access_token(user.id, user.email, user.role)
    logger.info("auth.login.success", extra={"user_id": user.id, **merged})
    return {"user": public_user(user), "token": token}


async def current_user(session, user_id: int) -> Dict[str, Any]:
    user = await user_by_id(session, user_id)
    if not user:
        raise NotFound("User not found")
    return public_user(user)
