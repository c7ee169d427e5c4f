from typing import Any, Dict, Optional
from sqlalchemy import select
from storefront.schema.full_schema import Users


async def user_by_email(session, email: str) -> Optional[Users]:
    stmt = select(Users).where(Users.email == email.strip().lower())
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


async def user_by_id(session, user_id: int) -> Optional[Users]:
    res = await session.execute(select(Users).where(Users.id == user_id))
    return res.scalar_one_or_none()


async def user_id_by_email(session, email: str, exclude_user_id: Optional[int] = None) -> Optional[int]:
    stmt = select(Users.id).where(Users.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(Users.id != exclude_user_id)
    res = await session.execute(stmt.limit(1))
    return res.scalar_one_or_none()


async def insert_user(session, values: Dict[str, Any]) -> Users:
    user = Users(**values)
    session.add(user)
    await session.flush()
    return user
