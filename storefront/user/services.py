from typing import Any, Dict, List
from sqlalchemy.exc import IntegrityError
from storefront.auth.repository import user_by_id, user_id_by_email
from storefront.auth.services import public_user
from storefront.auth.utils import hash_password, verify_password
from storefront.common.custom_exceptions import Conflict, InvalidInput, NotFound, StoreError
from storefront.user.constants import logger
from storefront.user.models import AddressIn, ChangePasswordIn, ProfileUpdateIn
from storefront.user.repository import (delete_address, get_address, get_password_hash, insert_address, list_addresses,
                                        lock_address_owner, unset_defaults, update_address_fields, update_user_fields)


async def update_profile(session, user_id: int, payload: ProfileUpdateIn) -> Dict[str, Any]:
    values = payload.model_dump(exclude_none=True)
    if not values:
        raise InvalidInput("No updates provided")

    try:
        if "email" in values and await user_id_by_email(session, values["email"], exclude_user_id=user_id):
            raise Conflict("Email already in use")
        if not await update_user_fields(session, user_id, values):
            raise NotFound("User not found")
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise Conflict("Email already in use")
    except StoreError:
        await session.rollback()
        raise

    user = await user_by_id(session, user_id)
    await session.refresh(user)
    logger.info("user.profile.updated", extra={"user_id": user_id, "fields": sorted(values.keys())})
    return public_user(user)


async def change_password(session, user_id: int, payload: ChangePasswordIn) -> None:
    pwd_hash = await get_password_hash(session, user_id)
    if not pwd_hash:
        raise NotFound("User not found")

    if not verify_password(payload.current_password, pwd_hash):
        logger.warning("user.password.invalid_current", extra={"user_id": user_id})
        raise InvalidInput("Current password is incorrect")

    await update_user_fields(session, user_id, {"password_hash": hash_password(payload.new_password)})
    await session.commit()
    logger.info("user.password.changed", extra={"user_id": user_id})


def serialize_address(address) -> Dict[str, Any]:
    return address.model_dump()


async def get_addresses(session, user_id: int) -> List[Dict[str, Any]]:
    return [serialize_address(a) for a in await list_addresses(session, user_id)]


async def create_address(session, user_id: int, payload: AddressIn) -> Dict[str, Any]:
    """A new default address clears every other default of the user in the same transaction."""
    values = payload.model_dump()
    values["address_type"] = payload.address_type.value
    try:
        if payload.is_default:
            await lock_address_owner(session, user_id)
            await unset_defaults(session, user_id)
        address = await insert_address(session, user_id, values)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("user.address.created", extra={"user_id": user_id, "address_id": address.id, "is_default": payload.is_default})
    return serialize_address(address)


async def update_address(session, user_id: int, address_id: int, payload: AddressIn) -> Dict[str, Any]:
    values = payload.model_dump()
    values["address_type"] = payload.address_type.value
    try:
        if payload.is_default:
            await lock_address_owner(session, user_id)
        address = await get_address(session, user_id, address_id, lock=True)
        if not address:
            raise NotFound("Address not found")
        if payload.is_default:
            await unset_defaults(session, user_id, except_id=address_id)
        await update_address_fields(session, address_id, values)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    await session.refresh(address)
    logger.info("user.address.updated", extra={"user_id": user_id, "address_id": address_id})
    return serialize_address(address)


async def remove_address(session, user_id: int, address_id: int) -> None:
    try:
        removed = await delete_address(session, user_id, address_id)
        if not removed:
            raise NotFound("Address not found")
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("user.address.deleted", extra={"user_id": user_id, "address_id": address_id})
