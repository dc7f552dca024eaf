import asyncio
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator, Hashable


class KeyedLocks:
    """One asyncio.Lock per key, created lazily.

    Locks are kept per running event loop, an asyncio.Lock must not be shared
    between loops. Only weak references are stored: a lock disappears once no
    holder or waiter references it.
    """

    def __init__(self):
        self._locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, weakref.WeakValueDictionary]" = (
            weakref.WeakKeyDictionary()
        )

    def _loop_locks(self) -> "weakref.WeakValueDictionary":
        loop = asyncio.get_running_loop()
        locks = self._locks.get(loop)
        if locks is None:
            locks = self._locks[loop] = weakref.WeakValueDictionary()
        return locks

    def get(self, key: Hashable) -> asyncio.Lock:
        locks = self._loop_locks()
        lock = locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            locks[key] = lock
        return lock

    @asynccontextmanager
    async def hold(self, key: Hashable) -> AsyncIterator[None]:
        async with self.get(key):
            yield

    def locked(self, key: Hashable) -> bool:
        lock = self._loop_locks().get(key)
        return lock is not None and lock.locked()

    def __len__(self) -> int:
        return len(self._loop_locks())


# Сериализация всех изменений порядка в пределах одной доски
board_locks = KeyedLocks()

# Порядок досок одного владельца
owner_locks = KeyedLocks()
