from typing import Any, Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from storefront.auth.principal import GuestPrincipal, Principal, UserPrincipal
from storefront.cart.repository import delete_all_lines, lines_with_products
from storefront.common.custom_exceptions import (Conflict, EmptyCart, Forbidden, InvalidInput, NotFound, OutOfStock,
                                                 PersistenceError, StoreError, Unauthorized)
from storefront.common.utils import now
from storefront.config.settings import config_settings
from storefront.notifications.services import send_order_confirmation
from storefront.orders.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, logger
from storefront.orders.models import CheckoutIn, SameAsShipping
from storefront.orders.repository import (count_orders, get_order, get_order_by_number, get_order_items, insert_order,
                                          insert_order_items, list_orders, update_order_fields)
from storefront.orders.utils import can_transition, compute_order_totals, generate_order_number, total_pages
from storefront.products.repository import decrement_product_stock, decrement_variant_stock
from storefront.schema.full_schema import OrderItem, Orders, OrderStatus, PaymentMethod, PaymentStatus

# fields hidden from the public tracking view
_PRIVATE_ORDER_FIELDS = {"user_id", "guest_email", "admin_notes", "billing_name", "billing_phone", "billing_email",
                         "billing_address_line1", "billing_address_line2", "billing_city", "billing_state",
                         "billing_postal_code", "billing_country"}


def serialize_order(order: Orders, public: bool = False, include_admin: bool = False) -> Dict[str, Any]:
    data = order.model_dump()
    if public:
        return {k: v for k, v in data.items() if k not in _PRIVATE_ORDER_FIELDS}
    if not include_admin:
        data.pop("admin_notes", None)
    return data


def serialize_item(item: OrderItem) -> Dict[str, Any]:
    return item.model_dump(exclude={"created_at"})


def _principal_log(principal: Principal) -> Dict[str, Any]:
    if isinstance(principal, UserPrincipal):
        return {"user_id": principal.user_id}
    return {"guest_token": principal.token}


async def place_order(session, principal: Principal, checkout: CheckoutIn) -> Dict[str, Any]:
    """
    Cart -> order in a single transaction: re-price lines, write the order and
    its item snapshots, decrement stock with guarded updates, clear the cart.
    Any failure rolls everything back. The confirmation email goes out only
    after commit and never affects the outcome.
    """
    logger.info("order.place.attempt", extra=_principal_log(principal))

    try:
        lines = await lines_with_products(session, principal, lock=True)
        if not lines:
            raise EmptyCart("Cart is empty")

        for ln in lines:
            if not ln.product_active or (ln.variant_id is not None and not ln.variant_active):
                raise InvalidInput(f"{ln.product_name} is no longer available")

        shipping = checkout.shipping_address()
        totals = compute_order_totals(lines, shipping.city)

        billing = checkout.billing()
        billing_block = shipping if isinstance(billing, SameAsShipping) else billing.address

        values = {
            "order_number": generate_order_number(),
            "user_id": principal.user_id if isinstance(principal, UserPrincipal) else None,
            "guest_email": shipping.email if isinstance(principal, GuestPrincipal) else None,
            "status": OrderStatus.PENDING.value,
            "payment_status": PaymentStatus.PENDING.value,
            "payment_method": PaymentMethod.CASH_ON_DELIVERY.value,
            **shipping.as_columns("shipping"),
            **billing_block.as_columns("billing"),
            "subtotal": totals["subtotal"],
            "shipping_cost": totals["shipping_cost"],
            "tax": totals["tax"],
            "discount": totals["discount"],
            "total": totals["total"],
            "notes": checkout.notes,
        }

        order = await insert_order(session, values)
        await insert_order_items(session, order.id, totals["items"])

        for it in totals["items"]:
            if not await decrement_product_stock(session, it["product_id"], it["quantity"]):
                raise OutOfStock(it["product_name"])
            if it["variant_id"] is not None and not await decrement_variant_stock(session, it["variant_id"], it["quantity"]):
                raise OutOfStock(it["product_name"])

        await delete_all_lines(session, principal)
        await session.commit()

    except StoreError as e:
        await session.rollback()
        logger.warning("order.place.rejected", extra={**_principal_log(principal), "reason": e.detail,
                                                      "status": e.status_code})
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("order.place.persistence_failed", extra=_principal_log(principal))
        raise PersistenceError("Failed to create order. Please try again.") from e

    order_data = serialize_order(order)
    logger.info("order.place.success", extra={**_principal_log(principal), "order_id": order.id,
                                              "order_number": order.order_number, "total": order.total})

    await send_order_confirmation(order_data, totals["items"])

    return {
        "order_id": order.id,
        "order_number": order.order_number,
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax": order.tax,
        "discount": order.discount,
        "total": order.total,
        "status": order.status,
        "payment_status": order.payment_status,
    }


# ---- tracker --------------------------------------------------------------------------------

async def get_by_order_number(session, order_number: str) -> Dict[str, Any]:
    """Public lookup for the track-order page. No private or billing fields."""
    order = await get_order_by_number(session, order_number)
    if not order:
        raise NotFound("Order not found")
    items = await get_order_items(session, order.id)
    return {"order": serialize_order(order, public=True), "items": [serialize_item(i) for i in items]}


async def get_by_id(session, order_id: int, principal: Principal) -> Dict[str, Any]:
    if not isinstance(principal, UserPrincipal):
        raise Unauthorized("Authentication required")

    order = await get_order(session, order_id)
    if not order:
        raise NotFound("Order not found")

    if order.user_id != principal.user_id and not principal.is_admin:
        logger.warning("order.read.forbidden", extra={"order_id": order_id, "user_id": principal.user_id})
        raise Forbidden("Access denied")

    items = await get_order_items(session, order.id)
    return {"order": serialize_order(order, include_admin=principal.is_admin),
            "items": [serialize_item(i) for i in items]}


def clamp_page(page: Optional[int], page_size: Optional[int]):
    page = max(int(page or 1), 1)
    size = int(page_size or DEFAULT_PAGE_SIZE)
    size = min(max(size, 1), MAX_PAGE_SIZE)
    return page, size


async def list_for_principal(session, principal: Principal, page: int = 1, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
    """Admins see every order, users their own, newest first."""
    if not isinstance(principal, UserPrincipal):
        raise Unauthorized("Authentication required")

    page, size = clamp_page(page, page_size)
    owner = None if principal.is_admin else principal.user_id

    total = await count_orders(session, owner)
    orders = await list_orders(session, owner, (page - 1) * size, size)

    return {
        "orders": [serialize_order(o, include_admin=principal.is_admin) for o in orders],
        "pagination": {
            "page": page,
            "limit": size,
            "total": total,
            "total_pages": total_pages(total, size),
        },
    }


async def update_order(session, order_id: int, status: Optional[str] = None, payment_status: Optional[str] = None,
                       admin_notes: Optional[str] = None, strict: Optional[bool] = None) -> Dict[str, Any]:
    """Admin update of status / payment status / notes. Only these fields ever change on an order."""
    if status is None and payment_status is None and admin_notes is None:
        raise InvalidInput("No updates provided")

    if strict is None:
        strict = bool(config_settings.STRICT_ORDER_TRANSITIONS)

    try:
        order = await get_order(session, order_id, lock=True)
        if not order:
            raise NotFound("Order not found")

        values: Dict[str, Any] = {}
        if status is not None:
            target = OrderStatus(status).value
            if strict and not can_transition(order.status, target):
                raise Conflict(f"Cannot change order status from {order.status} to {target}")
            values["status"] = target
        if payment_status is not None:
            values["payment_status"] = PaymentStatus(payment_status).value
        if admin_notes is not None:
            values["admin_notes"] = admin_notes
        values["updated_at"] = now()

        await update_order_fields(session, order.id, values)
        await session.commit()
    except StoreError:
        await session.rollback()
        raise
    except SQLAlchemyError as e:
        await session.rollback()
        logger.exception("order.update.persistence_failed", extra={"order_id": order_id})
        raise PersistenceError("Failed to update order") from e

    await session.refresh(order)
    logger.info("order.updated", extra={"order_id": order_id, "changes": sorted(values.keys())})
    return serialize_order(order, include_admin=True)
