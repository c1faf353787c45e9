"""
In-memory shopping carts.

A Cart holds at most one line item per product id. Carts are never persisted;
a CartStore keeps one per client session for the lifetime of the process.
"""

import logging
from typing import Dict, List, Optional

from schemas import CartLineItem, CartView, CatalogProduct

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE_URL = "https://placehold.co/600x600/EEE/31343C?text=Image+Not+Available"


class Cart:
    def __init__(self) -> None:
        self._items: Dict[str, CartLineItem] = {}

    @property
    def items(self) -> List[CartLineItem]:
        return [item.model_copy() for item in self._items.values()]

    @property
    def cart_count(self) -> int:
        return sum(item.quantity for item in self._items.values())

    @property
    def cart_total(self) -> float:
        """Subtotal of the items whose price is shown to the buyer."""
        return sum(item.price * item.quantity for item in self._items.values() if item.showPrice)

    def add_to_cart(self, product: CatalogProduct) -> CartLineItem:
        item = self._items.get(product.id)
        if item:
            item.quantity += 1
        else:
            item = CartLineItem(
                id=product.id,
                name=product.name,
                price=product.price,
                category=product.category,
                imageUrl=product.imageUrls[0] if product.imageUrls else PLACEHOLDER_IMAGE_URL,
                showPrice=product.showPrice,
                quantity=1,
            )
            self._items[product.id] = item
        logger.debug("Cart add %s -> qty %d", product.id, item.quantity)
        return item

    def remove_from_cart(self, product_id: str) -> None:
        if self._items.pop(product_id, None) is not None:
            logger.debug("Cart remove %s", product_id)

    def update_quantity(self, product_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_from_cart(product_id)
            return
        item = self._items.get(product_id)
        if item:
            item.quantity = quantity
            logger.debug("Cart set %s -> qty %d", product_id, quantity)

    def clear_cart(self) -> None:
        self._items.clear()

    def view(self) -> CartView:
        return CartView(items=self.items, count=self.cart_count, total=self.cart_total)


class CartStore:
    """Carts keyed by the session id sent by the frontend."""

    def __init__(self) -> None:
        self._carts: Dict[str, Cart] = {}

    def get(self, session_id: str) -> Cart:
        cart = self._carts.get(session_id)
        if cart is None:
            cart = self._carts[session_id] = Cart()
        return cart

    def peek(self, session_id: str) -> Optional[Cart]:
        return self._carts.get(session_id)

    def discard(self, session_id: str) -> None:
        self._carts.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._carts)
