"""Ticket Kind Enum"""

from enum import StrEnum


class TicketKind(StrEnum):
    # Admission ticket, counts against the event's maximum visitors
    TICKET = 'ticket'
    SEAT_BOUND = 'seat-bound'
    OTHER = 'other'

    @classmethod
    def counts_as_visitor(cls, kind: str) -> bool:
        return kind == cls.TICKET
