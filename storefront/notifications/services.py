from typing import Any, Dict, List, Optional
from storefront.notifications.constants import logger
from storefront.notifications.senders import get_email_sender
from storefront.notifications.templates import render_order_confirmation, render_welcome


async def send_order_confirmation(order: Dict[str, Any], items: Optional[List[Dict[str, Any]]] = None) -> bool:
    """Best-effort. Delivery problems are logged and reported as False, never raised."""
    to = order.get("shipping_email") or order.get("guest_email")
    if not to:
        logger.warning("email.order_confirmation.no_recipient", extra={"order_number": order.get("order_number")})
        return False

    msg = render_order_confirmation(order, items)
    try:
        result = await get_email_sender().send(to, msg["subject"], msg["body"], msg["html_body"])
    except Exception:
        logger.exception("email.order_confirmation.failed", extra={"order_number": order.get("order_number")})
        return False

    logger.info("email.order_confirmation.sent", extra={"order_number": order.get("order_number"),
                                                        "status": result.get("status")})
    return result.get("status") == "sent"


async def send_welcome(email: str, first_name: str) -> bool:
    msg = render_welcome(first_name)
    try:
        result = await get_email_sender().send(email, msg["subject"], msg["body"], msg["html_body"])
    except Exception:
        logger.exception("email.welcome.failed")
        return False
    return result.get("status") == "sent"
