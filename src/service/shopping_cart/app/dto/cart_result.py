from typing import Any, TypeGuard, Union

import attrs

from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.enum import SeatState


@attrs.frozen
class Rejection:
    """
    Structured refusal returned (not raised) by the cart use cases.

    reference_type: what the id refers to ('seat', 'ticket', 'event', 'line_item')
    state: sold / reserved / blocked for seat conflicts, not-found otherwise
    """

    reference_id: str
    state: SeatState
    reference_type: str = 'seat'

    def to_dict(self) -> dict[str, Any]:
        return {
            'reference_id': self.reference_id,
            'reference_type': self.reference_type,
            'state': self.state.value,
        }


CartResult = Union[Cart, Rejection]


def is_rejection(result: CartResult) -> TypeGuard[Rejection]:
    return isinstance(result, Rejection)
