from __future__ import annotations

import asyncio
from typing import Any, Dict, List

from .utils import now_ts


class EventStore:
    """Keep room events in memory so clients can poll via HTTP."""

    def __init__(self):
        self._events: Dict[str, List[dict[str, Any]]] = {}
        self._counters: Dict[str, int] = {}
        self._lock = asyncio.Lock()

    async def append(self, room_id: str, payload: dict[str, Any]) -> int:
        """Store a new event for a room and return its sequence number."""

        async with self._lock:
            seq = self._counters.get(room_id, 0) + 1
            self._counters[room_id] = seq
            self._events.setdefault(room_id, []).append(
                {
                    "seq": seq,
                    "timestamp": now_ts(),
                    "payload": payload,
                }
            )
        return seq

    async def list(self, room_id: str, after: int | None = None, limit: int = 200) -> List[dict[str, Any]]:
        """Return events for a room that occur after the given sequence."""

        async with self._lock:
            events = [
                dict(event)
                for event in self._events.get(room_id, [])
                if after is None or event["seq"] > after
            ]
        return events[:limit]

    async def reset(self, room_id: str) -> None:

        """Clear stored events for a room and emit a reset marker."""

        async with self._lock:
            self._events.pop(room_id, None)
            # sequence numbers keep increasing across resets
            self._counters.setdefault(room_id, 0)

        # Emit a synthetic reset event so polling clients know to
        # discard any derived state from a previous game.
        await self.append(room_id, {"type": "room_reset"})

    async def drop(self, room_id: str) -> None:
        async with self._lock:
            self._events.pop(room_id, None)
            self._counters.pop(room_id, None)


event_store = EventStore()
