
import secrets
import time
from typing import Any, Dict, Iterable, Optional

from storefront.orders.constants import DHAKA_CITY_MARKERS, SHIPPING_INSIDE_DHAKA, SHIPPING_OUTSIDE_DHAKA
from storefront.schema.full_schema import OrderStatus


def generate_order_number() -> str:
    """ORD-<epoch ms>-<12 hex chars>. The random part keeps numbers unique within one millisecond."""
    timestamp = int(time.time() * 1000)
    return f"ORD-{timestamp}-{secrets.token_hex(6).upper()}"


def calculate_shipping_cost(city: Optional[str]) -> int:
    c = (city or "").lower()
    if any(marker in c for marker in DHAKA_CITY_MARKERS):
        return SHIPPING_INSIDE_DHAKA
    return SHIPPING_OUTSIDE_DHAKA


def variant_details(variant_name: Optional[str], variant_value: Optional[str]) -> Optional[str]:
    if not variant_name:
        return None
    return f"{variant_name}: {variant_value}"


def compute_order_totals(lines: Iterable[Any], city: Optional[str]) -> Dict[str, Any]:
    """Re-price every cart line from live catalog data. Client prices never enter here."""
    items = []
    subtotal = 0
    for ln in lines:
        unit_price = int(ln.price) + int(ln.price_modifier or 0)
        line_total = unit_price * int(ln.quantity)
        subtotal += line_total
        items.append({
            "product_id": ln.product_id,
            "variant_id": ln.variant_id,
            "product_name": ln.product_name,
            "product_sku": ln.variant_sku or ln.product_sku,
            "variant_details": variant_details(ln.variant_name, ln.variant_value),
            "quantity": int(ln.quantity),
            "price": unit_price,
            "total": line_total,
        })

    shipping_cost = calculate_shipping_cost(city)
    tax = 0
    discount = 0
    total = subtotal + shipping_cost + tax - discount

    return {
        "items": items,
        "subtotal": subtotal,
        "shipping_cost": shipping_cost,
        "tax": tax,
        "discount": discount,
        "total": total,
    }


# pending -> confirmed -> processing -> shipped -> delivered ; cancelled from anything before delivered
ORDER_TRANSITIONS = {
    OrderStatus.PENDING.value: {OrderStatus.CONFIRMED.value, OrderStatus.CANCELLED.value},
    OrderStatus.CONFIRMED.value: {OrderStatus.PROCESSING.value, OrderStatus.CANCELLED.value},
    OrderStatus.PROCESSING.value: {OrderStatus.SHIPPED.value, OrderStatus.CANCELLED.value},
    OrderStatus.SHIPPED.value: {OrderStatus.DELIVERED.value, OrderStatus.CANCELLED.value},
    OrderStatus.DELIVERED.value: set(),
    OrderStatus.CANCELLED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return True
    return target in ORDER_TRANSITIONS.get(current, set())


def total_pages(total: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return (total + limit - 1) // limit
