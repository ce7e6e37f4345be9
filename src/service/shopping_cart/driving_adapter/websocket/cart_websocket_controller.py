import secrets
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Header, WebSocket

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.event.i_in_memory_broadcaster import IInMemoryEventBroadcaster
from src.platform.logging.loguru_io import Logger
from src.service.shopping_cart.app.command.add_or_release_seat_use_case import (
    AddOrReleaseSeatUseCase,
)
from src.service.shopping_cart.app.command.delete_line_item_use_case import DeleteLineItemUseCase
from src.service.shopping_cart.app.command.empty_cart_use_case import EmptyCartUseCase
from src.service.shopping_cart.app.command.open_connection_use_case import OpenConnectionUseCase
from src.service.shopping_cart.app.command.release_connection_use_case import (
    ReleaseConnectionUseCase,
)
from src.service.shopping_cart.app.command.set_discount_use_case import SetDiscountUseCase
from src.service.shopping_cart.app.command.set_ticket_use_case import SetTicketUseCase
from src.service.shopping_cart.app.query.get_cart_use_case import GetCartUseCase
from src.service.shopping_cart.domain.enum import OrderFrom
from src.service.shopping_cart.driving_adapter.websocket.cart_websocket_handler import (
    CartWebSocketHandler,
)


router = APIRouter()


def resolve_order_from(*, intern: bool, internal_token: Optional[str]) -> OrderFrom:
    """Internal only when the caller presents the configured token."""
    if not intern:
        return OrderFrom.EXTERNAL
    expected = settings.INTERNAL_CONNECTION_TOKEN.get_secret_value()
    if expected and internal_token and secrets.compare_digest(internal_token, expected):
        return OrderFrom.INTERNAL
    Logger.base.warning('🚫 [WS] intern=true without a valid token, connecting as external')
    return OrderFrom.EXTERNAL


@router.websocket('/ws/event/{event_id}')
@inject
async def cart_websocket(
    websocket: WebSocket,
    event_id: str,
    intern: bool = False,
    user_id: Optional[str] = None,
    x_internal_token: Optional[str] = Header(default=None),
    broadcaster: IInMemoryEventBroadcaster = Depends(Provide[Container.broadcast_notifier]),
    open_connection: OpenConnectionUseCase = Depends(OpenConnectionUseCase.depends),
    release_connection: ReleaseConnectionUseCase = Depends(ReleaseConnectionUseCase.depends),
    set_ticket: SetTicketUseCase = Depends(SetTicketUseCase.depends),
    add_or_release_seat: AddOrReleaseSeatUseCase = Depends(AddOrReleaseSeatUseCase.depends),
    delete_line_item: DeleteLineItemUseCase = Depends(DeleteLineItemUseCase.depends),
    empty_cart: EmptyCartUseCase = Depends(EmptyCartUseCase.depends),
    set_discount: SetDiscountUseCase = Depends(SetDiscountUseCase.depends),
    get_cart: GetCartUseCase = Depends(GetCartUseCase.depends),
) -> None:
    """
    Shopping cart session for one event.

    Query params:
    - intern: box office / admin connection (no online maximum, may set discounts);
      honoured only with a matching X-Internal-Token header
    - user_id: acting user recorded on internal carts
    """
    handler = CartWebSocketHandler(
        websocket=websocket,
        broadcaster=broadcaster,
        open_connection=open_connection,
        release_connection=release_connection,
        set_ticket=set_ticket,
        add_or_release_seat=add_or_release_seat,
        delete_line_item=delete_line_item,
        empty_cart=empty_cart,
        set_discount=set_discount,
        get_cart=get_cart,
        ping_interval=settings.WEBSOCKET_PING_INTERVAL,
    )
    await handler.run(
        event_id=event_id,
        order_from=resolve_order_from(intern=intern, internal_token=x_internal_token),
        user_id=user_id,
    )
