from typing import Optional

import attrs

from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.enum import OrderFrom


@attrs.define
class ConnectionSession:
    """One connected client shopping for one event. The cart is created on first use."""

    connection_id: str
    event_id: str
    order_from: OrderFrom = OrderFrom.EXTERNAL
    user_id: Optional[str] = None
    cart: Optional[Cart] = None

    def get_or_create_cart(self) -> Cart:
        if self.cart is None:
            self.cart = self._new_cart()
        return self.cart

    def current_cart(self) -> Cart:
        """Cart for reads; an empty one if the connection never reserved anything."""
        return self.cart if self.cart is not None else self._new_cart()

    def _new_cart(self) -> Cart:
        return Cart(
            connection_id=self.connection_id,
            order_from=self.order_from,
            user_id=self.user_id if self.order_from == OrderFrom.INTERNAL else None,
        )
