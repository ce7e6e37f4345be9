"""WebSocket configuration constants."""

from typing import Final


class WebSocketConfig:
    # Close codes (application range 4000-4999)
    CLOSE_EVENT_NOT_FOUND: Final[int] = 4404

    ERROR_SUFFIX: Final[str] = '-err'

    class MessageType:
        CONNECTED: Final[str] = 'connected'
        PING: Final[str] = 'ping'
        PONG: Final[str] = 'pong'
        ERROR: Final[str] = 'error'

    class ActionType:
        SET_TICKET: Final[str] = 'shopping-cart-set-ticket'
        ADD_SEAT: Final[str] = 'shopping-cart-add-seat'
        DELETE: Final[str] = 'shopping-cart-del'
        EMPTY: Final[str] = 'shopping-cart-empty'
        SET_DISCOUNT: Final[str] = 'shopping-cart-set-discount'
        FETCH: Final[str] = 'shopping-cart-fetch'
        PING: Final[str] = 'ping'


class WebSocketErrorMessages:
    INVALID_MESSAGE_FORMAT: Final[str] = 'Invalid message format'
    UNKNOWN_ACTION: Final[str] = 'Unknown action'
    INTERNAL_ERROR: Final[str] = 'Internal server error'
