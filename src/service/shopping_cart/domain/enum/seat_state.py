"""Seat / Rejection State Enum"""

from enum import StrEnum


class SeatState(StrEnum):
    FREE = 'free'
    SOLD = 'sold'
    RESERVED = 'reserved'
    BLOCKED = 'blocked'
    NOT_FOUND = 'not-found'
