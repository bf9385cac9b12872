"""
Checkout: validating a submitted order and writing it to the datastore.

The submission carries its own subtotal, shipping and total, computed by the
storefront from the cart and the delivery price list. They are stored as
given; nothing here recomputes them from catalog prices.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from cart import Cart
from clock import Clock, utcnow
from database import ORDERS, PersistenceError
from order_numbers import assign_order_number
from schemas import CartLineIn, CheckoutForm, CheckoutRequest, Order, OrderLine, OrderStatus

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "Cash on Delivery"
PHONE_PREFIX = "+961"
PHONE_PATTERN = re.compile(r"^\+961\s?\d{1,2}\s?\d{3}\s?\d{3}$")


class OrderValidationError(ValueError):
    """A checkout submission is missing required data. Nothing was written."""

    def __init__(self, message: str, fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}


@dataclass
class OrderReceipt:
    order_id: str
    order_number: str


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _validate_line(item: CartLineIn) -> None:
    if _blank(item.id) or _blank(item.name) or not item.quantity or item.quantity <= 0 or item.price is None:
        raise OrderValidationError("Each item must have id (productId), name, quantity, and price")


def validate_submission(request: CheckoutRequest) -> None:
    if _blank(request.customer_name) or _blank(request.customer_phone):
        raise OrderValidationError("Customer name and phone are required")

    address = (request.country, request.governorate, request.district, request.city, request.street_name)
    if any(_blank(part) for part in address):
        raise OrderValidationError("All delivery address fields are required")

    if not request.items:
        raise OrderValidationError("Order must contain at least one item")

    if request.subtotal is None or request.shipping is None or request.total is None:
        raise OrderValidationError("Subtotal, shipping, and total are required")

    for item in request.items:
        _validate_line(item)


def to_order_lines(items: Iterable[CartLineIn]) -> List[OrderLine]:
    # The cart calls the product id "id"; orders store it as productId
    return [
        OrderLine(
            product_id=item.id,
            name=item.name,
            variant=item.variant or None,
            quantity=item.quantity,
            price=item.price,
        )
        for item in items
    ]


def submit_order(store, request: CheckoutRequest, clock: Clock = utcnow) -> OrderReceipt:
    """Validate, number and persist one order.

    Raises OrderValidationError before any datastore call, and lets
    PersistenceError from the datastore propagate unchanged.
    """
    validate_submission(request)

    order_number = assign_order_number(store, clock)
    now = clock()
    order = Order(
        order_number=order_number,
        status=OrderStatus.PENDING,
        customer_name=request.customer_name,
        customer_phone=request.customer_phone,
        country=request.country,
        governorate=request.governorate,
        district=request.district,
        city=request.city,
        street_name=request.street_name,
        building_name=request.building_name or None,
        items=to_order_lines(request.items),
        subtotal=request.subtotal,
        shipping=request.shipping,
        total=request.total,
        payment_method=request.payment_method or DEFAULT_PAYMENT_METHOD,
        created_at=now,
        updated_at=now,
        delivered_at=None,
    )

    order_id = store.insert_one(ORDERS, order.model_dump(by_alias=True, mode="python"))
    if not order_id:
        raise PersistenceError("Failed to create order")

    logger.info("Created order %s (%s)", order_number, order_id)
    return OrderReceipt(order_id=order_id, order_number=order_number)


# ---------- Storefront side ----------

def shipping_cost(deliveries: Iterable[dict], governorate: Optional[str]) -> float:
    """Delivery price for a governorate; 0 when none is selected or listed."""
    if not governorate:
        return 0.0
    for delivery in deliveries:
        if delivery.get("governorate") == governorate:
            return float(delivery.get("price", 0))
    return 0.0


def normalize_phone(value: str) -> str:
    value = re.sub(r"[-()a-zA-Z]", "", value)
    if value and not value.startswith(PHONE_PREFIX):
        value = PHONE_PREFIX + re.sub(r"^\+?9?6?1?", "", value)
    return value


def is_valid_phone(value: str) -> bool:
    return bool(PHONE_PATTERN.match(value))


def validate_form(form: CheckoutForm) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    if not form.full_name.strip():
        errors["fullName"] = "Full name is required"
    if not form.phone_number.strip():
        errors["phoneNumber"] = "Phone number is required"
    elif not is_valid_phone(form.phone_number):
        errors["phoneNumber"] = "Please enter a valid Lebanese phone number (+961 …)"
    if not form.governorate:
        errors["governorate"] = "Governorate is required"
    if not form.district:
        errors["district"] = "District is required"
    if not form.city.strip():
        errors["city"] = "City/Town is required"
    if not form.street_name.strip():
        errors["streetName"] = "Street name is required"
    return errors


def build_order_submission(cart: Cart, form: CheckoutForm, deliveries: Iterable[dict]) -> CheckoutRequest:
    """Turn the checkout form and cart into the payload for POST /api/orders."""
    form = form.model_copy(update={"phone_number": normalize_phone(form.phone_number)})
    errors = validate_form(form)
    if errors:
        raise OrderValidationError("Please correct the highlighted fields", fields=errors)
    if not cart.items:
        raise OrderValidationError("Your cart is empty")

    shipping = shipping_cost(deliveries, form.governorate)
    subtotal = cart.subtotal
    return CheckoutRequest(
        customer_name=form.full_name,
        customer_phone=form.phone_number,
        country=form.country,
        governorate=form.governorate,
        district=form.district,
        city=form.city,
        street_name=form.street_name,
        building_name=form.building_name,
        items=[CartLineIn(**line) for line in cart.checkout_items()],
        subtotal=subtotal,
        shipping=shipping,
        total=round(subtotal + shipping, 2),
        payment_method=DEFAULT_PAYMENT_METHOD,
    )
