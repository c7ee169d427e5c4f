import enum
from sqlalchemy import BigInteger, Boolean, CheckConstraint, DateTime, ForeignKey, Index, Integer, Text, Uuid, text
from uuid6 import uuid7
from uuid import UUID
from datetime import datetime
from typing import Optional
from sqlmodel import Column, SQLModel, Field, String
from storefront.common.utils import now


class UserRoleName(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


class Users(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: UUID = Field(
        default_factory=uuid7,
        sa_column=Column(Uuid(as_uuid=True), unique=True, index=True, nullable=False)
    )
    email: str = Field(sa_column=Column(String(320), nullable=False, unique=True, index=True))
    password_hash: str = Field(sa_column=Column(Text(), nullable=False))
    first_name: str = Field(sa_column=Column(String(128), nullable=False))
    last_name: str = Field(sa_column=Column(String(128), nullable=False))
    phone: Optional[str] = Field(default=None, sa_column=Column(String(20), nullable=True))
    role: str = Field(default=UserRoleName.USER.value, sa_column=Column(String(32), nullable=False, default=UserRoleName.USER.value))
    is_verified: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


# Catalog side. Only what checkout and the cart read or write lives here.
class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(255), nullable=False))
    sku: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True, unique=True))
    description: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    price: int = Field(sa_column=Column(BigInteger, nullable=False))  # taka
    compare_price: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))
    stock_quantity: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    low_stock_threshold: int = Field(default=5, sa_column=Column(Integer, nullable=False, default=5))
    total_sales: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_products_stock_non_negative"),
    )


class ProductVariant(SQLModel, table=True):
    __tablename__ = "product_variants"

    id: Optional[int] = Field(default=None, primary_key=True)
    product_id: int = Field(sa_column=Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False))
    variant_name: str = Field(sa_column=Column(String(64), nullable=False))   # e.g. "Size"
    variant_value: str = Field(sa_column=Column(String(64), nullable=False))  # e.g. "XL"
    sku: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    price_modifier: int = Field(default=0, sa_column=Column(BigInteger, nullable=False, default=0))
    stock_quantity: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    is_active: bool = Field(default=True, sa_column=Column(Boolean, nullable=False, default=True))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))

    __table_args__ = (
        CheckConstraint("stock_quantity >= 0", name="ck_product_variants_stock_non_negative"),
    )


# One row per (owner, product, variant). Owner is a user id or a guest session token, never both.
class CartLine(SQLModel, table=True):
    __tablename__ = "cart"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True, index=True),
    )
    guest_session_id: Optional[str] = Field(default=None, sa_column=Column(String(64), nullable=True, index=True))
    product_id: int = Field(sa_column=Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False))
    variant_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("product_variants.id", ondelete="CASCADE"), nullable=True),
    )
    quantity: int = Field(default=1, sa_column=Column(Integer, nullable=False, default=1))
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now,sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="ck_cart_quantity_positive"),
        CheckConstraint("(user_id IS NULL) <> (guest_session_id IS NULL)", name="ck_cart_single_owner"),
        # coalesce so that "no variant" collides with itself (NULLs never collide in a unique index)
        Index("uq_cart_user_line", "user_id", "product_id", text("coalesce(variant_id, 0)"), unique=True),
        Index("uq_cart_guest_line", "guest_session_id", "product_id", text("coalesce(variant_id, 0)"), unique=True),
    )

# --------------------------------------------------------------------------------------------
class OrderStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class PaymentMethod(str, enum.Enum):
    CASH_ON_DELIVERY = "cash_on_delivery"


# User --> Orders (1:many). Guests have user_id NULL and guest_email set.
class Orders(SQLModel, table=True):

    id: Optional[int] = Field(default=None, primary_key=True)
    public_id: UUID = Field(default_factory=uuid7, sa_column=Column(Uuid(as_uuid=True), unique=True, index=True, nullable=False))
    order_number: str = Field(sa_column=Column(String(64), nullable=False, unique=True, index=True))
    user_id: Optional[int] = Field(default=None, sa_column=Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), index=True))
    guest_email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    status: str = Field(default=OrderStatus.PENDING.value, sa_column=Column(String(32), nullable=False, index=True))
    payment_status: str = Field(default=PaymentStatus.PENDING.value, sa_column=Column(String(32), nullable=False))
    payment_method: str = Field(default=PaymentMethod.CASH_ON_DELIVERY.value, sa_column=Column(String(32), nullable=False))

    shipping_name: str = Field(sa_column=Column(String(128), nullable=False))
    shipping_phone: str = Field(sa_column=Column(String(32), nullable=False))
    shipping_email: str = Field(sa_column=Column(String(320), nullable=False))
    shipping_address_line1: str = Field(sa_column=Column(String(255), nullable=False))
    shipping_address_line2: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    shipping_city: str = Field(sa_column=Column(String(128), nullable=False))
    shipping_state: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    shipping_postal_code: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    shipping_country: str = Field(default="Bangladesh", sa_column=Column(String(64), nullable=False))

    billing_name: str = Field(sa_column=Column(String(128), nullable=False))
    billing_phone: str = Field(sa_column=Column(String(32), nullable=False))
    billing_email: str = Field(sa_column=Column(String(320), nullable=False))
    billing_address_line1: str = Field(sa_column=Column(String(255), nullable=False))
    billing_address_line2: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    billing_city: str = Field(sa_column=Column(String(128), nullable=False))
    billing_state: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    billing_postal_code: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    billing_country: str = Field(default="Bangladesh", sa_column=Column(String(64), nullable=False))

    subtotal: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))  # taka
    shipping_cost: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))
    tax: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))
    discount: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))
    total: int = Field(default=0, sa_column=Column(BigInteger, nullable=False))

    notes: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    admin_notes: Optional[str] = Field(default=None, sa_column=Column(Text(), nullable=True))
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))
    updated_at: datetime = Field(default_factory=now,sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))


# Order --> OrderItems (1:many). Name, sku and price are copied at purchase time.
class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: int = Field(sa_column=Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False))
    product_id: int = Field(sa_column=Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False))
    variant_id: Optional[int] = Field(default=None, sa_column=Column(Integer, ForeignKey("product_variants.id", ondelete="SET NULL"), nullable=True))
    product_name: str = Field(sa_column=Column(String(255), nullable=False))
    product_sku: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    variant_details: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))  # "Size: XL"
    quantity: int = Field(sa_column=Column(Integer, nullable=False))
    price: int = Field(sa_column=Column(BigInteger, nullable=False))  # unit price snapshot
    total: int = Field(sa_column=Column(BigInteger, nullable=False))
    created_at: datetime = Field(default_factory=now, sa_column=Column(DateTime(timezone=True), nullable=False, default=now))


class AddressType(str, enum.Enum):
    SHIPPING = "shipping"
    BILLING = "billing"
    BOTH = "both"


class Address(SQLModel, table=True):
    __tablename__ = "addresses"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(sa_column=Column(Integer, ForeignKey("users.id", ondelete="CASCADE"),
            index=True,
            nullable=False))
    full_name: str = Field(sa_column=Column(String(128), nullable=False))
    phone: str = Field(sa_column=Column(String(32), nullable=False))
    email: Optional[str] = Field(default=None, sa_column=Column(String(320), nullable=True))
    address_line1: str = Field(sa_column=Column(String(255), nullable=False))
    address_line2: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    city: str = Field(sa_column=Column(String(128), nullable=False))
    state: Optional[str] = Field(default=None, sa_column=Column(String(128), nullable=True))
    postal_code: Optional[str] = Field(default=None, sa_column=Column(String(32), nullable=True))
    country: str = Field(default="Bangladesh", sa_column=Column(String(64), nullable=False, default="Bangladesh"))
    is_default: bool = Field(default=False, sa_column=Column(Boolean, nullable=False, default=False))
    address_type: str = Field(default=AddressType.SHIPPING.value, sa_column=Column(String(16), nullable=False, default=AddressType.SHIPPING.value))
    created_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now))
    updated_at: datetime = Field(default_factory=now,
        sa_column=Column(DateTime(timezone=True), nullable=False,default=now, onupdate=now))

    __table_args__ = (
        # one default per user
        Index("uq_addresses_user_default", "user_id", unique=True,
              postgresql_where=text("is_default"), sqlite_where=text("is_default")),
    )
