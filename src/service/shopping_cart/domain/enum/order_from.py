"""Order Origin Enum"""

from enum import StrEnum


class OrderFrom(StrEnum):
    """Where the connection shops from: box office/admin (internal) or the public site."""

    INTERNAL = 'internal'
    EXTERNAL = 'external'
