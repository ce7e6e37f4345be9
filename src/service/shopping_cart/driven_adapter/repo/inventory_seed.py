"""
Inventory seed files

Format::

    {
      "events": [
        {
          "id": "event-1", "name": "...", "maximum_visitors": 100,
          "rooms":  [{"id": "R1", "name": "main", "label": "Hall"}],
          "tables": [{"id": "TB1", "name": "t1", "label": "Table", "number": "1"}],
          "ticket_types": [{"id": "T1", "kind": "ticket", "name": "...", "label": "...",
                            "contingent": 10, "online_maximum": 4,
                            "gross_price": "20.00", "tax_percent": "10", "sold": 0}],
          "seats": [{"id": "S1", "gross_price": "30.00", "tax_percent": "10",
                     "row": "A", "number": "1", "room_id": "R1"}]
        }
      ]
    }

Seats in the file reference rooms / tables by id; the in-memory repo needs the
labels resolved onto each seat.
"""

from pathlib import Path
from typing import Any, Dict

import orjson
from sqlalchemy.ext.asyncio import AsyncSession
from uuid_utils import uuid7

from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.domain.value_object.money import to_decimal
from src.service.shopping_cart.driven_adapter.model import (
    EventModel,
    OrderDetailModel,
    RoomModel,
    SeatModel,
    TicketTypeModel,
    VenueTableModel,
)


SEAT_LOCATION_KEYS = ('rooms', 'tables')
PRICE_KEYS = ('gross_price', 'tax_percent')


def read_seed_file(path: str | Path) -> Dict[str, Any]:
    data = orjson.loads(Path(path).read_bytes())
    Logger.base.info(f'🌱 [SEED] Read seed file {path}')
    return data


def resolve_seat_locations(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy room / table names and labels onto each seat entry."""
    events = []
    for raw_event in data.get('events', []):
        rooms = {r['id']: r for r in raw_event.get('rooms', [])}
        tables = {t['id']: t for t in raw_event.get('tables', [])}
        seats = []
        for raw_seat in raw_event.get('seats', []):
            seat = dict(raw_seat)
            room = rooms.get(seat.get('room_id'))
            if room:
                seat.setdefault('room_name', room.get('name'))
                seat.setdefault('room_label', room.get('label'))
            table = tables.get(seat.get('table_id'))
            if table:
                seat.setdefault('table_name', table.get('name'))
                seat.setdefault('table_label', table.get('label'))
                seat.setdefault('table_number', table.get('number'))
            seats.append(seat)
        event = {k: v for k, v in raw_event.items() if k not in SEAT_LOCATION_KEYS}
        event['seats'] = seats
        events.append(event)
    return {'events': events}


async def seed_sql_inventory(session: AsyncSession, data: Dict[str, Any]) -> None:
    """Insert a seed into the relational store; ``sold`` becomes committed order details."""
    for raw_event in data.get('events', []):
        event_id = str(raw_event['id'])
        session.add(
            EventModel(
                id=event_id,
                name=raw_event.get('name', ''),
                maximum_visitors=int(raw_event['maximum_visitors']),
            )
        )
        for room in raw_event.get('rooms', []):
            session.add(RoomModel(event_id=event_id, **room))
        for table in raw_event.get('tables', []):
            session.add(VenueTableModel(event_id=event_id, **table))

        for raw in raw_event.get('ticket_types', []):
            fields = dict(raw)
            sold = int(fields.pop('sold', 0))
            session.add(TicketTypeModel(event_id=event_id, **_with_decimal_prices(fields)))
            if sold:
                order_id = str(uuid7())
                for _ in range(sold):
                    session.add(
                        OrderDetailModel(
                            id=str(uuid7()),
                            order_id=order_id,
                            event_id=event_id,
                            type='ticket',
                            ticket_type_id=fields['id'],
                            state='sold',
                        )
                    )

        for raw in raw_event.get('seats', []):
            session.add(SeatModel(event_id=event_id, **_with_decimal_prices(raw)))

    await session.commit()
    Logger.base.info(f'🌱 [SEED] Inserted {len(data.get("events", []))} events')


def _with_decimal_prices(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {k: to_decimal(v) if k in PRICE_KEYS else v for k, v in raw.items()}
