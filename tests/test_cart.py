"""Tests for the cart rules."""

from __future__ import annotations

import json

import pytest

from cart import Cart, CartItem, clamp_quantity

SOAP = CartItem("p1", "Lavender Soap", 12.5, "/img/soap.jpg")
OIL = CartItem("p2", "Rose Oil", 30.0, "/img/oil.jpg", variant="50ml")


def test_add_merges_lines_with_the_same_id() -> None:
    cart = Cart()
    cart.add(SOAP)
    cart.add(SOAP, 2)
    cart.add(OIL)
    assert [(it.id, it.quantity) for it in cart.items] == [("p1", 3), ("p2", 1)]
    assert cart.count == 4
    assert cart.subtotal == 67.5


def test_add_does_not_share_state_with_the_given_item() -> None:
    cart = Cart()
    cart.add(SOAP, 2)
    assert SOAP.quantity == 1


def test_add_caps_quantity_at_stock() -> None:
    cart = Cart()
    cart.add(SOAP, 10, stock=3)
    assert cart.items[0].quantity == 3


def test_add_rejects_out_of_stock() -> None:
    with pytest.raises(ValueError, match="out of stock"):
        Cart().add(SOAP, 1, stock=0)


@pytest.mark.parametrize("quantity", [0, -1])
def test_add_rejects_non_positive_quantity(quantity: int) -> None:
    with pytest.raises(ValueError):
        Cart().add(SOAP, quantity)


def test_update_quantity_to_zero_removes_line() -> None:
    cart = Cart()
    cart.add(SOAP)
    cart.add(OIL)
    cart.update_quantity("p1", 0)
    assert [it.id for it in cart.items] == ["p2"]
    cart.update_quantity("p2", 4)
    assert cart.items[0].quantity == 4


def test_remove_and_clear() -> None:
    cart = Cart([CartItem("p1", "Soap", 1.0), CartItem("p2", "Oil", 2.0)])
    cart.remove("p1")
    assert [it.id for it in cart.items] == ["p2"]
    cart.clear()
    assert cart.count == 0


@pytest.mark.parametrize(
    ("requested", "stock", "expected"),
    [(0, None, 1), (5, None, 5), (5, 3, 3), (2, 3, 2), (3, 0, 0), (3, -2, 0)],
)
def test_clamp_quantity(requested: int, stock, expected: int) -> None:
    assert clamp_quantity(requested, stock) == expected


def test_checkout_items_shape() -> None:
    cart = Cart()
    cart.add(OIL, 2)
    assert cart.checkout_items() == [{"id": "p2", "name": "Rose Oil", "variant": "50ml", "quantity": 2, "price": 30.0}]


def test_saved_cart_is_restored() -> None:
    cart = Cart()
    cart.add(SOAP, 2)
    cart.add(OIL)
    restored = Cart.from_json(cart.to_json())
    assert restored.items == cart.items


@pytest.mark.parametrize(
    "stored",
    [
        None,
        "",
        "{not json",
        json.dumps({"id": "p1"}),
        json.dumps([{"id": 1, "name": "Soap", "price": 1, "quantity": 1}]),
        json.dumps([{"id": "p1", "name": "Soap", "price": 1, "unexpected": True}]),
    ],
)
def test_unusable_saved_cart_gives_empty_cart(stored) -> None:
    assert Cart.from_json(stored).items == []
