from typing import Any, Dict, List, Optional
from sqlalchemy import and_, delete, select, update
from storefront.auth.principal import Principal, UserPrincipal
from storefront.schema.full_schema import CartLine, Product, ProductVariant


def owner_clause(principal: Principal):
    if isinstance(principal, UserPrincipal):
        return CartLine.user_id == principal.user_id
    return CartLine.guest_session_id == principal.token


def owner_values(principal: Principal) -> Dict[str, Any]:
    if isinstance(principal, UserPrincipal):
        return {"user_id": principal.user_id, "guest_session_id": None}
    return {"user_id": None, "guest_session_id": principal.token}


def variant_key_clause(variant_id: Optional[int]):
    # "no variant" is its own key, distinct from every concrete variant
    if variant_id is None:
        return CartLine.variant_id.is_(None)
    return CartLine.variant_id == variant_id


async def find_line(session, owner, product_id: int, variant_id: Optional[int], lock: bool = False):
    stmt = (
        select(CartLine.id, CartLine.quantity)
        .where(owner, CartLine.product_id == product_id, variant_key_clause(variant_id))
        .limit(1)
    )
    if lock:
        stmt = stmt.with_for_update()
    res = await session.execute(stmt)
    return res.one_or_none()


async def insert_line(session, principal: Principal, product_id: int, variant_id: Optional[int], quantity: int) -> int:
    line = CartLine(product_id=product_id, variant_id=variant_id, quantity=quantity, **owner_values(principal))
    session.add(line)
    await session.flush()
    return line.id


async def set_line_quantity(session, line_id: int, quantity: int) -> None:
    stmt = update(CartLine).where(CartLine.id == line_id).values(quantity=quantity).execution_options(synchronize_session=False)
    await session.execute(stmt)


async def get_line(session, principal: Principal, line_id: int, lock: bool = False):
    stmt = select(CartLine.id, CartLine.product_id, CartLine.variant_id, CartLine.quantity).where(
        CartLine.id == line_id, owner_clause(principal))
    if lock:
        stmt = stmt.with_for_update()
    res = await session.execute(stmt)
    return res.one_or_none()


async def delete_line(session, principal: Principal, line_id: int) -> int:
    stmt = delete(CartLine).where(CartLine.id == line_id, owner_clause(principal)).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount


async def delete_all_lines(session, principal: Principal) -> int:
    stmt = delete(CartLine).where(owner_clause(principal)).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount


async def lines_with_products(session, principal: Principal, lock: bool = False) -> List[Any]:
    """Cart lines joined with live product and variant data, oldest line first."""
    stmt = (
        select(
            CartLine.id,
            CartLine.product_id,
            CartLine.variant_id,
            CartLine.quantity,
            Product.name.label("product_name"),
            Product.sku.label("product_sku"),
            Product.price,
            Product.stock_quantity.label("product_stock"),
            Product.is_active.label("product_active"),
            ProductVariant.variant_name,
            ProductVariant.variant_value,
            ProductVariant.sku.label("variant_sku"),
            ProductVariant.price_modifier,
            ProductVariant.stock_quantity.label("variant_stock"),
            ProductVariant.is_active.label("variant_active"),
        )
        .join(Product, Product.id == CartLine.product_id)
        .outerjoin(ProductVariant, ProductVariant.id == CartLine.variant_id)
        .where(owner_clause(principal))
        .order_by(CartLine.id)
    )
    if lock:
        stmt = stmt.with_for_update(of=CartLine)
    res = await session.execute(stmt)
    return res.all()


# ---- merge helpers ----------------------------------------------------------------------

async def guest_lines_for_update(session, guest_token: str) -> List[Any]:
    stmt = (
        select(CartLine.id, CartLine.product_id, CartLine.variant_id, CartLine.quantity)
        .where(CartLine.guest_session_id == guest_token)
        .order_by(CartLine.id)
        .with_for_update()
    )
    res = await session.execute(stmt)
    return res.all()


async def delete_line_by_id(session, line_id: int) -> None:
    await session.execute(delete(CartLine).where(CartLine.id == line_id).execution_options(synchronize_session=False))


async def reassign_line_to_user(session, line_id: int, user_id: int) -> None:
    stmt = (
        update(CartLine)
        .where(and_(CartLine.id == line_id, CartLine.guest_session_id.is_not(None)))
        .values(user_id=user_id, guest_session_id=None)
        .execution_options(synchronize_session=False)
    )
    await session.execute(stmt)


async def delete_guest_lines(session, guest_token: str) -> int:
    stmt = delete(CartLine).where(CartLine.guest_session_id == guest_token).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount
