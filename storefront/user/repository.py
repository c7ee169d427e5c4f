from typing import Any, Dict, List, Optional
from sqlalchemy import delete, select, update
from storefront.common.utils import now
from storefront.schema.full_schema import Address, Users


async def update_user_fields(session, user_id: int, values: Dict[str, Any]) -> int:
    stmt = update(Users).where(Users.id == user_id).values(**values, updated_at=now()).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount


async def get_password_hash(session, user_id: int) -> Optional[str]:
    res = await session.execute(select(Users.password_hash).where(Users.id == user_id))
    return res.scalar_one_or_none()


async def list_addresses(session, user_id: int) -> List[Address]:
    stmt = (
        select(Address)
        .where(Address.user_id == user_id)
        .order_by(Address.is_default.desc(), Address.created_at.desc(), Address.id.desc())
    )
    res = await session.execute(stmt)
    return list(res.scalars().all())


async def get_address(session, user_id: int, address_id: int, lock: bool = False) -> Optional[Address]:
    stmt = select(Address).where(Address.id == address_id, Address.user_id == user_id)
    if lock:
        stmt = stmt.with_for_update()
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def lock_address_owner(session, user_id: int) -> None:
    """Locks the owning user row. Works even when the user has no addresses yet."""
    await session.execute(select(Users.id).where(Users.id == user_id).with_for_update())


async def unset_defaults(session, user_id: int, except_id: Optional[int] = None) -> None:
    stmt = update(Address).where(Address.user_id == user_id, Address.is_default.is_(True))
    if except_id is not None:
        stmt = stmt.where(Address.id != except_id)
    await session.execute(stmt.values(is_default=False).execution_options(synchronize_session=False))


async def insert_address(session, user_id: int, values: Dict[str, Any]) -> Address:
    address = Address(user_id=user_id, **values)
    session.add(address)
    await session.flush()
    return address


async def update_address_fields(session, address_id: int, values: Dict[str, Any]) -> None:
    stmt = update(Address).where(Address.id == address_id).values(**values, updated_at=now()).execution_options(synchronize_session=False)
    await session.execute(stmt)


async def delete_address(session, user_id: int, address_id: int) -> int:
    stmt = delete(Address).where(Address.id == address_id, Address.user_id == user_id).execution_options(synchronize_session=False)
    res = await session.execute(stmt)
    return res.rowcount
