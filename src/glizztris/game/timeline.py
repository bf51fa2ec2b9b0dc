from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import List, Optional, Tuple, Union

from .grid import BoardLayers


@dataclass(frozen=True)
class PendingClear:
    """Second phase of a line clear, carrying the board as it was when marked."""

    due: int
    rows: Tuple[int, ...]
    snapshot: BoardLayers = field(compare=False, repr=False)


@dataclass(frozen=True)
class PendingSettle:
    """Deferred placement of a hard-dropped piece."""

    due: int
    piece_id: int


Event = Union[PendingClear, PendingSettle]


class Timeline:
    """Deferred events, fired in due order (ties in scheduling order)."""

    def __init__(self) -> None:
        self._events: List[Tuple[int, int, Event]] = []
        self._seq = count()

    def __len__(self) -> int:
        return len(self._events)

    def clear(self) -> None:
        self._events.clear()

    def schedule(self, event: Event) -> None:
        self._events.append((event.due, next(self._seq), event))
        self._events.sort(key=lambda item: (item[0], item[1]))

    def pop_due(self, now: int) -> Optional[Event]:
        if self._events and self._events[0][0] <= now:
            return self._events.pop(0)[2]
        return None

    def pending_clear(self) -> Optional[PendingClear]:
        for _, _, event in self._events:
            if isinstance(event, PendingClear):
                return event
        return None

    def pending_settle(self) -> Optional[PendingSettle]:
        for _, _, event in self._events:
            if isinstance(event, PendingSettle):
                return event
        return None
