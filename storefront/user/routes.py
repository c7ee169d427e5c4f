from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import  AsyncSession
from storefront.auth.principal import UserPrincipal, require_user
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.user.models import AddressIn, ChangePasswordIn, ProfileUpdateIn
from storefront.user.services import (change_password, create_address, get_addresses, remove_address, update_address,
                                      update_profile)

user_router=APIRouter()


@user_router.put("/profile")
async def put_profile(payload: ProfileUpdateIn, principal: UserPrincipal = Depends(require_user),
                      session: AsyncSession = Depends(get_session)):
    user = await update_profile(session, principal.user_id, payload)
    return success_response(user, message="Profile updated successfully")


@user_router.put("/password")
async def put_password(payload: ChangePasswordIn, principal: UserPrincipal = Depends(require_user),
                       session: AsyncSession = Depends(get_session)):
    await change_password(session, principal.user_id, payload)
    return success_response(message="Password updated successfully")


@user_router.get("/addresses")
async def get_user_addresses(principal: UserPrincipal = Depends(require_user), session: AsyncSession = Depends(get_session)):
    return success_response(await get_addresses(session, principal.user_id))


@user_router.post("/addresses", status_code=status.HTTP_201_CREATED)
async def post_address(payload: AddressIn, principal: UserPrincipal = Depends(require_user),
                       session: AsyncSession = Depends(get_session)):
    address = await create_address(session, principal.user_id, payload)
    return success_response(address, status_code=status.HTTP_201_CREATED, message="Address added successfully")


@user_router.put("/addresses/{address_id}")
async def put_address(payload: AddressIn, address_id: int = Path(..., ge=1), principal: UserPrincipal = Depends(require_user),
                      session: AsyncSession = Depends(get_session)):
    address = await update_address(session, principal.user_id, address_id, payload)
    return success_response(address, message="Address updated successfully")


@user_router.delete("/addresses/{address_id}")
async def delete_user_address(address_id: int = Path(..., ge=1), principal: UserPrincipal = Depends(require_user),
                              session: AsyncSession = Depends(get_session)):
    await remove_address(session, principal.user_id, address_id)
    return success_response(message="Address deleted successfully")
