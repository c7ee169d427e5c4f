
from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.auth.principal import Principal, get_principal
from storefront.cart.models import CartItemInput, CartQuantityInput
from storefront.cart.services import add_item, clear, list_items, remove_item, set_quantity
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session

carts_router=APIRouter()


@carts_router.get("")
async def get_cart(principal: Principal = Depends(get_principal), session: AsyncSession = Depends(get_session)):
    cart = await list_items(session, principal)
    return success_response(cart)


@carts_router.post("")
async def add_to_cart(payload: CartItemInput, principal: Principal = Depends(get_principal),
                      session: AsyncSession = Depends(get_session)):
    item = await add_item(session, principal, payload.product_id, payload.variant_id, payload.quantity)
    code = status.HTTP_201_CREATED if item["created"] else status.HTTP_200_OK
    return success_response(item, status_code=code, message="Item added to cart")


@carts_router.delete("")
async def clear_cart(principal: Principal = Depends(get_principal), session: AsyncSession = Depends(get_session)):
    await clear(session, principal)
    return success_response(message="Cart cleared")


@carts_router.put("/{cart_line_id}")
async def update_cart_item(payload: CartQuantityInput, cart_line_id: int = Path(..., ge=1),
                           principal: Principal = Depends(get_principal), session: AsyncSession = Depends(get_session)):
    item = await set_quantity(session, principal, cart_line_id, payload.quantity)
    return success_response(item, message="Cart updated")


@carts_router.delete("/{cart_line_id}")
async def remove_cart_item(cart_line_id: int = Path(..., ge=1), principal: Principal = Depends(get_principal),
                           session: AsyncSession = Depends(get_session)):
    await remove_item(session, principal, cart_line_id)
    return success_response(message="Item removed from cart")
