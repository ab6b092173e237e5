"""ModelBuffer — FIFO store for generated but not yet evaluated candidates.

When a strategy returns more candidates than the remaining budget, the
surplus is parked here and consumed before the strategy is asked again,
possibly in a later (resumed) search.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Deque, Iterable, List


class ModelBuffer:
    """Unbounded first-in first-out queue of candidates.

    Only the orchestrating thread touches a buffer; it is not safe for
    concurrent use.
    """

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._items: Deque[Any] = deque(items)

    def put(self, item: Any) -> None:
        """Append *item* at the back of the queue."""
        self._items.append(item)

    def put_many(self, items: Iterable[Any]) -> None:
        for item in items:
            self._items.append(item)

    def take(self) -> Any:
        """Remove and return the oldest item.

        Raises:
            IndexError: If the buffer is empty.
        """
        if not self._items:
            raise IndexError("take from an empty ModelBuffer")
        return self._items.popleft()

    def take_many(self, k: int) -> List[Any]:
        """Remove and return up to *k* of the oldest items, oldest first."""
        taken = []
        while self._items and len(taken) < k:
            taken.append(self._items.popleft())
        return taken

    def is_ready(self) -> bool:
        """Whether at least one item is waiting."""
        return bool(self._items)

    def peek_all(self) -> List[Any]:
        """Snapshot of the queued items without consuming them."""
        return list(self._items)

    def copy(self) -> "ModelBuffer":
        """Independent buffer holding the same items in the same order."""
        return ModelBuffer(self._items)

    def replace(self, other: "ModelBuffer") -> None:
        """Make this buffer hold exactly the items of *other*."""
        self._items = deque(other.peek_all())

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"ModelBuffer(size={len(self)})"
