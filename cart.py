# Cart model mirroring the storefront's client-side cart.
import json
from dataclasses import asdict, dataclass
from typing import List, Optional

STORAGE_KEY = "cartItems"


@dataclass
class CartItem:
    id: str
    name: str
    price: float
    image: str = ""
    variant: Optional[str] = None
    quantity: int = 1


def clamp_quantity(requested: int, stock: Optional[int] = None) -> int:
    # at least one, capped at stock; nothing in stock gives 0
    quantity = max(requested, 1)
    if stock is not None:
        quantity = min(quantity, max(stock, 0))
    return quantity


class Cart:
    def __init__(self, items: Optional[List[CartItem]] = None):
        self.items: List[CartItem] = list(items or [])

    def _find(self, item_id: str) -> Optional[CartItem]:
        for it in self.items:
            if it.id == item_id:
                return it
        return None

    def add(self, item: CartItem, quantity: int = 1, stock: Optional[int] = None) -> None:
        """Add quantity units of item, merging with an existing line of the same id.

        When stock is known the added quantity is capped at it; an item with
        nothing in stock cannot be added at all.
        """
        if quantity <= 0:
            raise ValueError("The quantity must be a positive number.")
        if stock is not None:
            if stock <= 0:
                raise ValueError(f"{item.name} is out of stock")
            quantity = clamp_quantity(quantity, stock)

        existing = self._find(item.id)
        if existing:
            existing.quantity += quantity
        else:
            self.items.append(CartItem(item.id, item.name, item.price, item.image, item.variant, quantity))

    def remove(self, item_id: str) -> None:
        self.items = [it for it in self.items if it.id != item_id]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove(item_id)
            return
        existing = self._find(item_id)
        if existing:
            existing.quantity = quantity

    def clear(self) -> None:
        self.items.clear()

    @property
    def count(self) -> int:
        return sum(it.quantity for it in self.items)

    @property
    def subtotal(self) -> float:
        return round(sum(it.price * it.quantity for it in self.items), 2)

    def checkout_items(self) -> List[dict]:
        # Shape expected by POST /api/orders
        return [
            {"id": it.id, "name": it.name, "variant": it.variant, "quantity": it.quantity, "price": it.price}
            for it in self.items
        ]

    def to_json(self) -> str:
        return json.dumps([asdict(it) for it in self.items])

    @classmethod
    def from_json(cls, text: Optional[str]) -> "Cart":
        """Restore a cart saved under STORAGE_KEY.

        Unreadable data gives an empty cart. Carts saved before product ids
        became strings are dropped rather than migrated.
        """
        if not text:
            return cls()
        try:
            data = json.loads(text)
        except ValueError:
            return cls()
        if not isinstance(data, list):
            return cls()
        if any(not isinstance(entry, dict) or not isinstance(entry.get("id"), str) for entry in data):
            return cls()
        try:
            return cls([CartItem(**entry) for entry in data])
        except TypeError:
            return cls()
