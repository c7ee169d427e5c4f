from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from storefront.auth.principal import Principal, UserPrincipal, get_principal, require_admin
from storefront.common.utils import success_response
from storefront.db.dependencies import get_session
from storefront.orders.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from storefront.orders.models import CheckoutIn, OrderUpdateIn
from storefront.orders.services import get_by_id, get_by_order_number, list_for_principal, place_order, update_order

orders_router=APIRouter()
orders_admin_router=APIRouter()


@orders_router.post("/orders")
async def create_order(payload: CheckoutIn, principal: Principal = Depends(get_principal),
                       session: AsyncSession = Depends(get_session)):
    result = await place_order(session, principal, payload)
    return success_response(result, status_code=status.HTTP_201_CREATED, message="Order placed successfully")


@orders_router.get("/orders")
async def get_orders(page: int = Query(1, ge=1), limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
                     principal: Principal = Depends(get_principal), session: AsyncSession = Depends(get_session)):
    data = await list_for_principal(session, principal, page, limit)
    return success_response(data)


# declared before /orders/{order_id} so "track" never parses as an id
@orders_router.get("/orders/track/{order_number}")
async def track_order(order_number: str = Path(..., min_length=1, max_length=64),
                      session: AsyncSession = Depends(get_session)):
    data = await get_by_order_number(session, order_number)
    return success_response(data)


@orders_router.get("/orders/{order_id}")
async def get_order_detail(order_id: int = Path(..., ge=1), principal: Principal = Depends(get_principal),
                           session: AsyncSession = Depends(get_session)):
    data = await get_by_id(session, order_id, principal)
    return success_response(data)


@orders_admin_router.put("/{order_id}")
async def admin_update_order(payload: OrderUpdateIn, order_id: int = Path(..., ge=1),
                             admin: UserPrincipal = Depends(require_admin),
                             session: AsyncSession = Depends(get_session)):
    order = await update_order(session, order_id, status=payload.status, payment_status=payload.payment_status,
                               admin_notes=payload.admin_notes)
    return success_response(order, message="Order updated successfully")
