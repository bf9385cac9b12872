"""
Order summary sent to the shop over WhatsApp.

The shop takes orders by chat as well as in the database, so every checkout
produces a plain-text summary and a wa.me link that opens a chat with it
pre-filled.
"""

import re
from typing import Optional
from urllib.parse import quote

from schemas import CheckoutRequest

WHATSAPP_BASE_URL = "https://wa.me"


def format_amount(value: float) -> str:
    # 1234.5 -> "1,234.5", 12.0 -> "12"
    return f"{value:,.3f}".rstrip("0").rstrip(".")


def _format_line(item) -> str:
    variant = f" ({item.variant})" if item.variant else ""
    return f"• {item.name}{variant}\n  Quantity: {item.quantity}\n  Price: ${format_amount(item.price)}"


def format_order_message(request: CheckoutRequest, store_name: str, order_number: Optional[str] = None) -> str:
    heading = f"*New Order - {store_name}*"
    if order_number:
        heading += f"\nOrder: {order_number}"

    street = f"Street: {request.street_name}"
    if request.building_name:
        street += f"\nBuilding: {request.building_name}"

    items_text = "\n\n".join(_format_line(item) for item in request.items or [])

    return (
        f"{heading}\n\n"
        f"*Customer Information:*\n"
        f"Name: {request.customer_name}\n"
        f"Phone: {request.customer_phone}\n\n"
        f"*Delivery Address:*\n"
        f"Country/Region: {request.country}\n"
        f"Governorate: {request.governorate}\n"
        f"District: {request.district}\n"
        f"City/Town: {request.city}\n"
        f"{street}\n\n"
        f"*Order Details:*\n"
        f"{items_text}\n\n"
        f"*Order Summary:*\n"
        f"Subtotal: ${format_amount(request.subtotal)}\n"
        f"Shipping: ${request.shipping:.2f}\n"
        f"Total: ${format_amount(request.total)}\n\n"
        f"Payment Method: {request.payment_method or 'Cash on Delivery'}"
    )


def whatsapp_url(number: str, message: str) -> str:
    digits = re.sub(r"\D", "", number)
    return f"{WHATSAPP_BASE_URL}/{digits}?text={quote(message, safe='')}"
