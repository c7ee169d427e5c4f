from typing import Any, Optional
from sqlalchemy import func, select
from storefront.auth.principal import GuestPrincipal, UserPrincipal
from storefront.auth.utils import create_access_token, hash_password
from storefront.cart.services import add_item
from storefront.db.connection import async_session
from storefront.orders.models import CheckoutIn
from storefront.orders.services import place_order
from storefront.schema.full_schema import CartLine, OrderItem, Orders, Product, ProductVariant, Users

url_prefix = "/api/v1"

CHECKOUT_PAYLOAD = {
    "shipping_name": "Rahim Uddin",
    "shipping_phone": "01711000000",
    "shipping_email": "rahim@example.com",
    "shipping_address_line1": "House 12, Road 5",
    "shipping_city": "Dhaka",
    "shipping_postal_code": "1207",
}

_PASSWORD_HASHES = {}


def _hash(password: str) -> str:
    # bcrypt is slow, hash each test password once per run
    if password not in _PASSWORD_HASHES:
        _PASSWORD_HASHES[password] = hash_password(password)
    return _PASSWORD_HASHES[password]


async def create_product(id: Optional[int] = None, name: str = "Widget", price: int = 500, stock: int = 10,
                         sku: Optional[str] = None, compare_price: Optional[int] = None, is_active: bool = True,
                         low_stock_threshold: int = 5) -> Product:
    async with async_session() as s:
        p = Product(id=id, name=name, price=price, stock_quantity=stock, sku=sku, compare_price=compare_price,
                    is_active=is_active, low_stock_threshold=low_stock_threshold)
        s.add(p)
        await s.commit()
        return p


async def create_variant(product_id: int, name: str = "Size", value: str = "XL", price_modifier: int = 0,
                         stock: int = 10, is_active: bool = True) -> ProductVariant:
    async with async_session() as s:
        v = ProductVariant(product_id=product_id, variant_name=name, variant_value=value,
                           price_modifier=price_modifier, stock_quantity=stock, is_active=is_active)
        s.add(v)
        await s.commit()
        return v


async def create_user(email: str = "user@example.com", password: str = "secret123", id: Optional[int] = None,
                      role: str = "user", first_name: str = "Test", last_name: str = "User") -> Users:
    async with async_session() as s:
        u = Users(id=id, email=email, password_hash=_hash(password), first_name=first_name,
                  last_name=last_name, role=role)
        s.add(u)
        await s.commit()
        return u


def principal_for(user: Users) -> UserPrincipal:
    return UserPrincipal(user_id=user.id, email=user.email, role=user.role)


def guest(token: str = "guest-token-1") -> GuestPrincipal:
    return GuestPrincipal(token=token)


def auth_headers(user: Users) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email, user.role)}"}


async def add_line(principal, product_id: int, quantity: int, variant_id: Optional[int] = None) -> None:
    async with async_session() as s:
        await add_item(s, principal, product_id, variant_id, quantity)


# ---- reads in their own short transactions (sqlite serialises every transaction) ----

async def scalar(stmt) -> Any:
    async with async_session() as s:
        res = await s.execute(stmt)
        value = res.scalar_one_or_none()
        await s.rollback()
        return value


async def rows(stmt) -> list:
    async with async_session() as s:
        res = await s.execute(stmt)
        out = list(res.all())
        await s.rollback()
        return out


async def product_stock(product_id: int) -> int:
    return await scalar(select(Product.stock_quantity).where(Product.id == product_id))


async def variant_stock(variant_id: int) -> int:
    return await scalar(select(ProductVariant.stock_quantity).where(ProductVariant.id == variant_id))


async def count(model) -> int:
    return await scalar(select(func.count()).select_from(model))


async def cart_lines(user_id: Optional[int] = None, guest_token: Optional[str] = None) -> list:
    stmt = select(CartLine.id, CartLine.product_id, CartLine.variant_id, CartLine.quantity).order_by(CartLine.id)
    if user_id is not None:
        stmt = stmt.where(CartLine.user_id == user_id)
    if guest_token is not None:
        stmt = stmt.where(CartLine.guest_session_id == guest_token)
    return await rows(stmt)


async def orders_count() -> int:
    return await count(Orders)


async def order_items_count() -> int:
    return await count(OrderItem)


async def checkout(principal, product_id: int, quantity: int = 1, **overrides) -> dict:
    """Cart the product for the principal and place an order through the service layer."""
    await add_line(principal, product_id, quantity)
    async with async_session() as s:
        return await place_order(s, principal, CheckoutIn(**{**CHECKOUT_PAYLOAD, **overrides}))
