"""Inventory ledger. Reads product/variant stock and applies guarded decrements."""
from typing import Any, Dict, List, Optional
from sqlalchemy import and_, select, update
from storefront.common.custom_exceptions import InvalidInput, NotFound
from storefront.schema.full_schema import Product, ProductVariant
from storefront.products.constants import logger


async def get_product(session, product_id: int, active_only: bool = True):
    stmt = select(
        Product.id, Product.name, Product.sku, Product.price, Product.compare_price,
        Product.stock_quantity, Product.low_stock_threshold, Product.is_active,
    ).where(Product.id == product_id)
    if active_only:
        stmt = stmt.where(Product.is_active.is_(True))
    res = await session.execute(stmt)
    return res.one_or_none()


async def get_variant(session, variant_id: int, active_only: bool = True):
    stmt = select(
        ProductVariant.id, ProductVariant.product_id, ProductVariant.variant_name,
        ProductVariant.variant_value, ProductVariant.sku, ProductVariant.price_modifier,
        ProductVariant.stock_quantity, ProductVariant.is_active,
    ).where(ProductVariant.id == variant_id)
    if active_only:
        stmt = stmt.where(ProductVariant.is_active.is_(True))
    res = await session.execute(stmt)
    return res.one_or_none()


async def lookup_product_and_variant(session, product_id: int, variant_id: Optional[int]):
    """
    Returns (product_row, variant_row_or_None).
    Raises InvalidInput when the product is missing/inactive or the variant is
    missing/inactive/belongs to another product.
    """
    product = await get_product(session, product_id)
    if not product:
        logger.warning("inventory.product.unavailable", extra={"product_id": product_id})
        raise InvalidInput("Product not found or inactive")

    if variant_id is None:
        return product, None

    variant = await get_variant(session, variant_id)
    if not variant:
        logger.warning("inventory.variant.unavailable", extra={"product_id": product_id, "variant_id": variant_id})
        raise InvalidInput("Variant not found or inactive")

    if variant.product_id != product.id:
        logger.warning("inventory.variant.product_mismatch",
                       extra={"product_id": product_id, "variant_id": variant_id, "owner_product_id": variant.product_id})
        raise InvalidInput("Variant does not belong to product")

    return product, variant


async def stock_snapshot(session, product_id: int, variant_id: Optional[int]) -> int:
    """Live stock for a line: variant stock when a variant is given, product stock otherwise."""
    if variant_id is not None:
        stmt = select(ProductVariant.stock_quantity).where(ProductVariant.id == variant_id)
    else:
        stmt = select(Product.stock_quantity).where(Product.id == product_id)
    res = await session.execute(stmt)
    qty = res.scalar_one_or_none()
    return int(qty or 0)


async def decrement_product_stock(session, product_id: int, qty: int) -> bool:
    """UPDATE ... WHERE stock_quantity >= q. False means nothing was decremented."""
    q = int(qty)
    stmt = (
        update(Product)
        .where(and_(Product.id == product_id, Product.stock_quantity >= q))
        .values(stock_quantity=Product.stock_quantity - q, total_sales=Product.total_sales + q)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    # rowcount is 1 if stock was sufficient, otherwise 0
    return res.rowcount == 1


async def decrement_variant_stock(session, variant_id: int, qty: int) -> bool:
    q = int(qty)
    stmt = (
        update(ProductVariant)
        .where(and_(ProductVariant.id == variant_id, ProductVariant.stock_quantity >= q))
        .values(stock_quantity=ProductVariant.stock_quantity - q)
        .execution_options(synchronize_session=False)
    )
    res = await session.execute(stmt)
    return res.rowcount == 1


def discount_percent(price: int, compare_price: Optional[int]) -> int:
    if not compare_price or compare_price <= price:
        return 0
    return round((compare_price - price) * 100 / compare_price)


async def product_availability(session, product_id: int) -> Dict[str, Any]:
    product = await get_product(session, product_id)
    if not product:
        raise NotFound("Product not found")

    stmt = (
        select(ProductVariant.id, ProductVariant.variant_name, ProductVariant.variant_value,
               ProductVariant.price_modifier, ProductVariant.stock_quantity)
        .where(ProductVariant.product_id == product_id, ProductVariant.is_active.is_(True))
        .order_by(ProductVariant.id)
    )
    res = await session.execute(stmt)
    variants: List[Dict[str, Any]] = [
        {
            "id": r.id,
            "variant_name": r.variant_name,
            "variant_value": r.variant_value,
            "price": product.price + r.price_modifier,
            "stock_quantity": r.stock_quantity,
            "in_stock": r.stock_quantity > 0,
        }
        for r in res.all()
    ]

    stock = product.stock_quantity
    return {
        "product_id": product.id,
        "name": product.name,
        "price": product.price,
        "compare_price": product.compare_price,
        "discount_percent": discount_percent(product.price, product.compare_price),
        "stock_quantity": stock,
        "in_stock": stock > 0,
        "low_stock": 0 < stock <= product.low_stock_threshold,
        "variants": variants,
    }
