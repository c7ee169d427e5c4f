from typing import Any, Dict, List, Optional
from sqlalchemy import func, insert, select, update
from storefront.schema.full_schema import OrderItem, Orders


async def insert_order(session, values: Dict[str, Any]) -> Orders:
    order = Orders(**values)
    session.add(order)
    await session.flush()  # to get order.id
    return order


async def insert_order_items(session, order_id: int, items: List[Dict[str, Any]]) -> None:
    rows = [{**it, "order_id": order_id} for it in items]
    if rows:
        await session.execute(insert(OrderItem), rows)


async def get_order(session, order_id: int, lock: bool = False) -> Optional[Orders]:
    stmt = select(Orders).where(Orders.id == order_id)
    if lock:
        stmt = stmt.with_for_update()
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def get_order_by_number(session, order_number: str) -> Optional[Orders]:
    res = await session.execute(select(Orders).where(Orders.order_number == order_number))
    return res.scalar_one_or_none()


async def get_order_items(session, order_id: int) -> List[OrderItem]:
    stmt = select(OrderItem).where(OrderItem.order_id == order_id).order_by(OrderItem.id)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def count_orders(session, user_id: Optional[int] = None) -> int:
    stmt = select(func.count(Orders.id))
    if user_id is not None:
        stmt = stmt.where(Orders.user_id == user_id)
    res = await session.execute(stmt)
    return int(res.scalar_one())


async def list_orders(session, user_id: Optional[int], offset: int, limit: int) -> List[Orders]:
    """Newest first. user_id None lists every order (admin view)."""
    stmt = select(Orders).order_by(Orders.created_at.desc(), Orders.id.desc()).offset(offset).limit(limit)
    if user_id is not None:
        stmt = stmt.where(Orders.user_id == user_id)
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def update_order_fields(session, order_id: int, values: Dict[str, Any]) -> int:
    stmt = update(Orders).where(Orders.id == order_id).values(**values).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount
