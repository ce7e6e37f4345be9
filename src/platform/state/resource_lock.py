"""
Keyed Resource Lock

In-process mutual exclusion per resource key, e.g.
``('event-1', 'ticket', 'T1')`` or ``('event-1', 'seat', 'S1')``.

Read-scan-mutate sequences on the same key are serialized; different keys
proceed concurrently. Locks are created on first use and dropped when no task
holds or waits for them.
"""

from collections.abc import AsyncIterator, Hashable, Iterable
from contextlib import AsyncExitStack, asynccontextmanager

import anyio

from src.platform.logging.loguru_io import Logger


class _LockEntry:
    __slots__ = ('lock', 'users')

    def __init__(self) -> None:
        self.lock = anyio.Lock()
        self.users = 0


class ResourceLock:
    def __init__(self) -> None:
        self._entries: dict[Hashable, _LockEntry] = {}

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                Logger.base.debug(f'🔒 [LOCK] Acquired {key}')
                yield
        finally:
            entry.users -= 1
            if not entry.users:
                self._entries.pop(key, None)
            Logger.base.debug(f'🔓 [LOCK] Released {key}')

    @asynccontextmanager
    async def hold_all(self, keys: Iterable[Hashable]) -> AsyncIterator[None]:
        """Acquire several keys in a fixed (sorted) order to avoid deadlocks."""
        ordered = sorted(set(keys), key=repr)
        async with AsyncExitStack() as stack:
            for key in ordered:
                await stack.enter_async_context(self.hold(key))
            yield

    def is_locked(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.lock.locked()
