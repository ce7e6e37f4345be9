from typing import List

import attrs


@attrs.frozen
class TicketAvailability:
    ticket_type_id: str
    ticket_kind: str
    remaining_contingent: int


@attrs.frozen
class EventAvailability:
    event_id: str
    remaining_visitor_capacity: int
    tickets: List[TicketAvailability] = attrs.field(factory=list)
