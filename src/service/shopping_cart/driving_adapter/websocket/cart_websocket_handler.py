"""
Cart WebSocket Handler

One instance per websocket connection. Runs three concurrent loops in an
anyio task group:

- receive loop: decode client messages, dispatch cart actions, reply
- broadcast forwarder: relay update-ticket / update-event / update-seat
- ping loop: application-level keepalive

Replies use the action name on success and ``<action>-err`` on rejection or
failure. Frames are answered in the format the client last used (text JSON or
binary MessagePack). On exit the connection's holds are always released.
"""

import time
from typing import Any, Awaitable, Callable, Dict, Optional

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from src.platform.event.i_in_memory_broadcaster import IInMemoryEventBroadcaster
from src.platform.exception.exceptions import CustomBaseError, DomainError
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
from src.service.shopping_cart.app.dto import CartResult, Rejection
from src.service.shopping_cart.app.query.get_cart_use_case import GetCartUseCase
from src.service.shopping_cart.domain.entity.cart_entity import Cart
from src.service.shopping_cart.domain.enum import OrderFrom
from src.service.shopping_cart.driving_adapter.schema.cart_schema import (
    CartMessage,
    CartResponse,
    SetDiscountData,
    SetTicketData,
)
from src.service.shopping_cart.driving_adapter.websocket.message_codec import MessageCodec
from src.service.shopping_cart.driving_adapter.websocket.websocket_config import (
    WebSocketConfig,
    WebSocketErrorMessages,
)


Action = WebSocketConfig.ActionType
_Reply = Dict[str, Any]


class ActionRejected(Exception):
    """A use case returned a rejection; carries the reply payload."""

    def __init__(self, payload: _Reply) -> None:
        super().__init__(payload)
        self.payload = payload


def _reference_id(data: Any) -> str:
    # Accept a bare id or {"ID": id}
    if isinstance(data, dict):
        data = data.get('ID')
    if not isinstance(data, (str, int)) or isinstance(data, bool) or data == '':
        raise DomainError('ID is required')
    return str(data)


class CartWebSocketHandler:
    def __init__(
        self,
        *,
        websocket: WebSocket,
        broadcaster: IInMemoryEventBroadcaster,
        open_connection: OpenConnectionUseCase,
        release_connection: ReleaseConnectionUseCase,
        set_ticket: SetTicketUseCase,
        add_or_release_seat: AddOrReleaseSeatUseCase,
        delete_line_item: DeleteLineItemUseCase,
        empty_cart: EmptyCartUseCase,
        set_discount: SetDiscountUseCase,
        get_cart: GetCartUseCase,
        ping_interval: float,
    ) -> None:
        self.websocket = websocket
        self.broadcaster = broadcaster
        self.open_connection = open_connection
        self.release_connection = release_connection
        self.set_ticket = set_ticket
        self.add_or_release_seat = add_or_release_seat
        self.delete_line_item = delete_line_item
        self.empty_cart = empty_cart
        self.set_discount = set_discount
        self.get_cart = get_cart
        self.ping_interval = ping_interval

        self.codec = MessageCodec()
        self.connection_id: Optional[str] = None
        self._use_binary = False
        self._send_lock = anyio.Lock()
        self._actions: Dict[str, Callable[[Any], Awaitable[_Reply]]] = {
            Action.SET_TICKET: self._handle_set_ticket,
            Action.ADD_SEAT: self._handle_add_seat,
            Action.DELETE: self._handle_delete,
            Action.EMPTY: self._handle_empty,
            Action.SET_DISCOUNT: self._handle_set_discount,
            Action.FETCH: self._handle_fetch,
        }

    # ---- lifecycle ----

    async def run(self, *, event_id: str, order_from: OrderFrom, user_id: Optional[str]) -> None:
        await self.websocket.accept()

        try:
            session = await self.open_connection.open_connection(
                event_id=event_id, order_from=order_from, user_id=user_id
            )
        except CustomBaseError as e:
            await self.send_message(
                {'action': WebSocketConfig.MessageType.ERROR, 'data': {'message': e.message}}
            )
            await self.websocket.close(code=WebSocketConfig.CLOSE_EVENT_NOT_FOUND)
            return

        self.connection_id = session.connection_id
        stream = await self.broadcaster.subscribe(event_id=event_id)
        try:
            await self.send_message(
                {
                    'action': WebSocketConfig.MessageType.CONNECTED,
                    'data': {
                        'connection_id': session.connection_id,
                        'event_id': event_id,
                        'order_from': order_from.value,
                    },
                }
            )
            async with anyio.create_task_group() as tg:
                tg.start_soon(self._forward_broadcasts, stream)
                tg.start_soon(self._ping_loop)
                await self._receive_loop()
                tg.cancel_scope.cancel()
        finally:
            # Cleanup must finish even when the surrounding scope is cancelled
            with anyio.CancelScope(shield=True):
                await self.broadcaster.unsubscribe(event_id=event_id, stream=stream)
                await self.release_connection.release_connection(
                    connection_id=session.connection_id
                )

    async def _receive_loop(self) -> None:
        while True:
            try:
                raw_message = await self.websocket.receive()
            except (WebSocketDisconnect, RuntimeError):
                return

            if raw_message['type'] == 'websocket.disconnect':
                return
            if raw_message['type'] != 'websocket.receive':
                continue

            try:
                if raw_message.get('bytes') is not None:
                    self._use_binary = True
                    message = self.codec.decode_message(raw_data=raw_message['bytes'])
                elif raw_message.get('text') is not None:
                    self._use_binary = False
                    message = self.codec.decode_message(raw_data=raw_message['text'])
                else:
                    continue
                cart_message = CartMessage.model_validate(message)
            except (ValueError, ValidationError) as e:
                sent = await self.send_message(
                    {
                        'action': WebSocketConfig.MessageType.ERROR,
                        'data': {'message': f'{WebSocketErrorMessages.INVALID_MESSAGE_FORMAT}: {e}'},
                    }
                )
                if not sent:
                    return
                continue

            if not await self.send_message(await self.dispatch(cart_message)):
                return

    async def _forward_broadcasts(self, stream: MemoryObjectReceiveStream[dict[str, Any]]) -> None:
        async for message in stream:
            await self.send_message({'action': message['topic'], 'data': message['payload']})

    async def _ping_loop(self) -> None:
        while True:
            await anyio.sleep(self.ping_interval)
            sent = await self.send_message(
                {'action': WebSocketConfig.MessageType.PING, 'data': {'timestamp': time.time()}}
            )
            if not sent:
                return

    # ---- dispatch ----

    async def dispatch(self, message: CartMessage) -> _Reply:
        action = message.action
        if action == Action.PING:
            return {'action': WebSocketConfig.MessageType.PONG, 'data': None}

        handler = self._actions.get(action)
        if handler is None:
            return self._error(action, {'message': WebSocketErrorMessages.UNKNOWN_ACTION})

        try:
            return {'action': action, 'data': await handler(message.data)}
        except ActionRejected as e:
            return self._error(action, e.payload)
        except ValidationError as e:
            return self._error(
                action, {'message': f'{WebSocketErrorMessages.INVALID_MESSAGE_FORMAT}: {e}'}
            )
        except CustomBaseError as e:
            Logger.base.warning(f'⚠️ [WS] {action} failed for {self.connection_id}: {e.message}')
            return self._error(action, {'message': e.message, 'status_code': e.status_code})
        except Exception as e:
            Logger.base.exception(f'💥 [WS] {action} crashed for {self.connection_id}: {e}')
            return self._error(action, {'message': WebSocketErrorMessages.INTERNAL_ERROR})

    @staticmethod
    def _error(action: str, data: _Reply) -> _Reply:
        return {'action': f'{action}{WebSocketConfig.ERROR_SUFFIX}', 'data': data}

    @staticmethod
    def _require_cart(result: CartResult) -> Cart:
        if isinstance(result, Rejection):
            raise ActionRejected(result.to_dict())
        return result

    @staticmethod
    def _cart_data(cart: Cart) -> _Reply:
        return {'cart': CartResponse.from_entity(cart).model_dump(mode='json')}

    async def _handle_set_ticket(self, data: Any) -> _Reply:
        request = SetTicketData.model_validate(data)
        result = await self.set_ticket.set_ticket(
            connection_id=self._require_connection(),
            ticket_type_id=request.ticket_type_id,
            amount=request.amount,
        )
        cart = self._require_cart(result)
        reply = self._cart_data(cart)
        granted = cart.held_quantity(request.ticket_type_id)
        reply.update(
            {
                'ticket_type_id': request.ticket_type_id,
                'requested': request.amount,
                'granted': granted,
                'clamped': granted < request.amount,
            }
        )
        return reply

    async def _handle_add_seat(self, data: Any) -> _Reply:
        seat_id = _reference_id(data)
        result = await self.add_or_release_seat.add_or_release_seat(
            connection_id=self._require_connection(), seat_id=seat_id
        )
        cart = self._require_cart(result)
        reply = self._cart_data(cart)
        reply.update({'seat_id': seat_id, 'held': cart.holds_seat(seat_id)})
        return reply

    async def _handle_delete(self, data: Any) -> _Reply:
        result = await self.delete_line_item.delete_line_item(
            connection_id=self._require_connection(), line_item_id=_reference_id(data)
        )
        return self._cart_data(self._require_cart(result))

    async def _handle_empty(self, data: Any) -> _Reply:
        return self._cart_data(
            await self.empty_cart.empty_cart(connection_id=self._require_connection())
        )

    async def _handle_set_discount(self, data: Any) -> _Reply:
        request = SetDiscountData.model_validate(data)
        result = await self.set_discount.set_discount(
            connection_id=self._require_connection(),
            line_item_id=request.line_item_id,
            discount=request.discount,
        )
        return self._cart_data(self._require_cart(result))

    async def _handle_fetch(self, data: Any) -> _Reply:
        return self._cart_data(
            await self.get_cart.get_cart(connection_id=self._require_connection())
        )

    def _require_connection(self) -> str:
        if self.connection_id is None:
            raise DomainError('Connection is not open')
        return self.connection_id

    # ---- transport ----

    async def send_message(self, message: _Reply) -> bool:
        """Send in the client's format. Returns False once the socket is gone."""
        encoded = self.codec.encode_message(data=message, use_binary=self._use_binary)
        try:
            async with self._send_lock:
                if isinstance(encoded, bytes):
                    await self.websocket.send_bytes(encoded)
                else:
                    await self.websocket.send_text(encoded)
            return True
        except (WebSocketDisconnect, ConnectionError, RuntimeError):
            # RuntimeError: starlette refuses to send after close
            return False
