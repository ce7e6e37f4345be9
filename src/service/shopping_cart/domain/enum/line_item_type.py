"""Line Item Enums"""

from enum import StrEnum


class LineItemType(StrEnum):
    TICKET = 'ticket'
    SEAT = 'seat'


class LineItemState(StrEnum):
    """Items in a cart are held, never committed; checkout lives elsewhere."""

    HELD = 'held'
