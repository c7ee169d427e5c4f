from html import escape
from typing import Any, Dict, List, Optional


def _money(amount: Any) -> str:
    return f"৳{int(amount or 0):,}"


def render_order_confirmation(order: Dict[str, Any], items: Optional[List[Dict[str, Any]]] = None) -> Dict[str, str]:
    number = order["order_number"]
    lines = []
    for it in items or []:
        label = it["product_name"]
        if it.get("variant_details"):
            label = f"{label} ({it['variant_details']})"
        lines.append(f"  {label} x {it['quantity']} = {_money(it['total'])}")

    address = [order.get("shipping_address_line1") or ""]
    if order.get("shipping_address_line2"):
        address.append(order["shipping_address_line2"])
    address.append(", ".join(p for p in (order.get("shipping_city"), order.get("shipping_postal_code")) if p))

    body = "\n".join([
        f"Dear {order.get('shipping_name')},",
        "",
        "Thank you for your order! Your order has been received and is being processed.",
        "",
        f"Order Number: {number}",
        *lines,
        f"Subtotal: {_money(order.get('subtotal'))}",
        f"Shipping: {_money(order.get('shipping_cost'))}",
        f"Total Amount: {_money(order.get('total'))}",
        "Payment Method: Cash on Delivery",
        "",
        "Shipping Address:",
        *[f"  {a}" for a in address if a],
        "",
        "We'll send you another email when your order ships.",
    ])

    rows = "".join(f"<li>{escape(ln.strip())}</li>" for ln in lines)
    html_body = (
        f"<h1>Order Confirmation</h1>"
        f"<p>Dear {escape(str(order.get('shipping_name')))},</p>"
        f"<p>Thank you for your order! Your order has been received and is being processed.</p>"
        f"<p><strong>Order Number:</strong> {escape(number)}</p>"
        f"<ul>{rows}</ul>"
        f"<p><strong>Total Amount:</strong> {_money(order.get('total'))}</p>"
        f"<p><strong>Payment Method:</strong> Cash on Delivery</p>"
    )

    return {"subject": f"Order Confirmation - {number}", "body": body, "html_body": html_body}


def render_welcome(first_name: str) -> Dict[str, str]:
    body = (
        f"Hi {first_name},\n\n"
        "Welcome to our store! We're excited to have you as a member.\n\n"
        "You can now browse products, track your orders and manage your account and addresses.\n"
    )
    html_body = (
        "<h1>Welcome to Our Store!</h1>"
        f"<p>Hi {escape(first_name)},</p>"
        "<p>Welcome to our store! We're excited to have you as a member.</p>"
    )
    return {"subject": "Welcome to Our Store!", "body": body, "html_body": html_body}
