from typing import Any, Dict, Optional
from sqlalchemy.exc import IntegrityError
from storefront.auth.principal import Principal, UserPrincipal
from storefront.cart.constants import MAX_CART_LINE_QTY, logger
from storefront.cart.repository import (delete_all_lines, delete_guest_lines, delete_line,
                                        delete_line_by_id, find_line, get_line, guest_lines_for_update, insert_line,
                                        lines_with_products, owner_clause, reassign_line_to_user, set_line_quantity)
from storefront.common.custom_exceptions import InvalidInput, NotFound
from storefront.products.repository import lookup_product_and_variant, stock_snapshot
from storefront.schema.full_schema import CartLine


def _principal_log(principal: Principal) -> Dict[str, Any]:
    if isinstance(principal, UserPrincipal):
        return {"user_id": principal.user_id}
    return {"guest_token": principal.token}


def _check_quantity(quantity) -> int:
    if quantity is None or int(quantity) < 1:
        raise InvalidInput("Quantity must be at least 1")
    return int(quantity)


async def _upsert_line(session, principal: Principal, product_id: int, variant_id: Optional[int], quantity: int):
    row = await find_line(session, owner_clause(principal), product_id, variant_id, lock=True)
    if row:
        new_qty = row.quantity + quantity
        if new_qty > MAX_CART_LINE_QTY:
            raise InvalidInput(f"Quantity cannot exceed {MAX_CART_LINE_QTY}")
        await set_line_quantity(session, row.id, new_qty)
        return row.id, new_qty, False

    if quantity > MAX_CART_LINE_QTY:
        raise InvalidInput(f"Quantity cannot exceed {MAX_CART_LINE_QTY}")
    line_id = await insert_line(session, principal, product_id, variant_id, quantity)
    return line_id, quantity, True


async def add_item(session, principal: Principal, product_id: int, variant_id: Optional[int] = None, quantity: int = 1):
    """Merge-add: increments the existing (owner, product, variant) line or creates it."""
    quantity = _check_quantity(quantity)
    await lookup_product_and_variant(session, product_id, variant_id)

    try:
        line_id, new_qty, created = await _upsert_line(session, principal, product_id, variant_id, quantity)
        await session.commit()
    except IntegrityError:
        # a concurrent add created the same line first , fold into it
        await session.rollback()
        logger.info("cart.item.add_race", extra={"product_id": product_id, "variant_id": variant_id})
        line_id, new_qty, created = await _upsert_line(session, principal, product_id, variant_id, quantity)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("cart.item.added", extra={**_principal_log(principal), "product_id": product_id,
                                          "variant_id": variant_id, "quantity": new_qty, "new_line": created})
    return {"id": line_id, "product_id": product_id, "variant_id": variant_id, "quantity": new_qty, "created": created}


async def set_quantity(session, principal: Principal, cart_line_id: int, quantity: int):
    quantity = _check_quantity(quantity)
    try:
        line = await get_line(session, principal, cart_line_id, lock=True)
        if not line:
            raise NotFound("Cart item not found")

        available = await stock_snapshot(session, line.product_id, line.variant_id)
        if quantity > available:
            logger.warning("cart.item.quantity_exceeds_stock",
                           extra={"cart_line_id": cart_line_id, "requested": quantity, "available": available})
            raise InvalidInput(f"Only {available} items available")

        await set_line_quantity(session, line.id, quantity)
        await session.commit()
    except Exception:
        await session.rollback()
        raise

    logger.info("cart.item.updated", extra={**_principal_log(principal), "cart_line_id": cart_line_id, "quantity": quantity})
    return {"id": cart_line_id, "quantity": quantity}


async def remove_item(session, principal: Principal, cart_line_id: int) -> bool:
    """Idempotent. Removing a line that is absent (or someone else's) is a no-op."""
    try:
        removed = await delete_line(session, principal, cart_line_id)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("cart.item.removed", extra={**_principal_log(principal), "cart_line_id": cart_line_id, "removed": removed})
    return removed > 0


async def clear(session, principal: Principal) -> int:
    try:
        removed = await delete_all_lines(session, principal)
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    logger.info("cart.cleared", extra={**_principal_log(principal), "removed": removed})
    return removed


def line_unit_price(row) -> int:
    return int(row.price) + int(row.price_modifier or 0)


async def list_items(session, principal: Principal) -> Dict[str, Any]:
    rows = await lines_with_products(session, principal)

    items = []
    subtotal = 0
    item_count = 0
    for r in rows:
        unit_price = line_unit_price(r)
        line_total = unit_price * r.quantity
        subtotal += line_total
        item_count += r.quantity
        items.append({
            "id": r.id,
            "product_id": r.product_id,
            "variant_id": r.variant_id,
            "quantity": r.quantity,
            "product_name": r.product_name,
            "product_sku": r.product_sku,
            "price": r.price,
            "price_modifier": r.price_modifier or 0,
            "unit_price": unit_price,
            "line_total": line_total,
            "variant_name": r.variant_name,
            "variant_value": r.variant_value,
            "stock_quantity": r.variant_stock if r.variant_id is not None else r.product_stock,
        })

    return {"items": items, "subtotal": subtotal, "item_count": item_count}


async def merge_guest_into_user(session, guest_token: Optional[str], user_id: int) -> Dict[str, int]:
    """
    Fold a guest cart into the user's cart in one transaction.
    Matching (product, variant) keys add quantities and the guest line is deleted
    right away, the rest are reassigned to the user. Running it again is a no-op.
    """
    result = {"merged": 0, "moved": 0, "discarded": 0}
    if not guest_token:
        return result

    user_owner = CartLine.user_id == user_id
    try:
        guest_lines = await guest_lines_for_update(session, guest_token)
        for line in guest_lines:
            existing = await find_line(session, user_owner, line.product_id, line.variant_id, lock=True)
            if existing:
                # same per-line cap as add_item
                await set_line_quantity(session, existing.id, min(existing.quantity + line.quantity, MAX_CART_LINE_QTY))
                await delete_line_by_id(session, line.id)
                result["merged"] += 1
            else:
                await reassign_line_to_user(session, line.id, user_id)
                result["moved"] += 1

        result["discarded"] = await delete_guest_lines(session, guest_token)
        await session.commit()
    except Exception:
        await session.rollback()
        logger.exception("cart.merge.failed", extra={"user_id": user_id})
        raise

    if guest_lines:
        logger.info("cart.merge.done", extra={"user_id": user_id, **result})
    return result
