"""Event store — append-only audit trail.

Learn: Every state change (registration, course create/update/delete,
enrollment, account deletion) is also recorded as an immutable event,
e.g. {type: "enrollment.created", data: {student_id: ...}}.

Events go through the same Store (and therefore the same transaction)
as the change they describe, so a rolled-back cascade leaves no event
behind either.
"""

from coursehub.db.models import Event
from coursehub.db.store import Store


class EventStore:
    """Append-only event log sharing the caller's unit of work."""

    def __init__(self, store: Store):
        self.store = store

    async def append(
        self,
        stream_id: str,
        event_type: str,
        data: dict,
        metadata: dict | None = None,
    ) -> Event:
        """Append an event to a stream. Flushed, not committed."""
        event = Event(
            stream_id=stream_id,
            type=event_type,
            data=data,
            meta=metadata or {},
        )
        return await self.store.put(event)

    async def read_stream(self, stream_id: str, after_id: int = 0) -> list[Event]:
        """Read events for one stream in append order."""
        return await self.store.scan(
            Event,
            Event.stream_id == stream_id,
            Event.id > after_id,
            order_by=Event.id,
        )
