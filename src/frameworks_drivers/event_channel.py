from collections import OrderedDict, deque
from typing import Any, Optional

from src.shared.logger import Logger

logger = Logger.get(__name__)


class EventChannel:
    """
    In-memory event channel towards remote callers.

    Events are queued per caller until the caller drains them. A caller is
    known once it has drained or received an event; events emitted without a
    caller are queued for every known caller. At most max_callers callers are
    tracked, the one that was active least recently is forgotten first.
    """

    def __init__(self, max_queued: int = 100, max_callers: int = 256):
        self._max_queued = max_queued
        self._max_callers = max_callers
        self._queues: "OrderedDict[str, deque]" = OrderedDict()

    def emit_remote_event(self, event_id: str, payload: Any, caller: Optional[str] = None) -> None:
        event = {"id": event_id, "payload": payload}
        targets = [caller] if caller is not None else list(self._queues)
        for target in targets:
            self._queue_for(target).append(event)
        logger.debug(f"Queued event {event_id} for {caller or f'{len(targets)} caller(s)'}")

    def drain(self, caller: str) -> list[dict[str, Any]]:
        """Return and forget the events pending for a caller."""
        queue = self._queue_for(caller)
        events = list(queue)
        queue.clear()
        return events

    def _queue_for(self, caller: str) -> deque:
        queue = self._queues.get(caller)
        if queue is None:
            queue = self._queues[caller] = deque(maxlen=self._max_queued)
            if len(self._queues) > self._max_callers:
                forgotten, _ = self._queues.popitem(last=False)
                logger.debug(f"Forgot event queue of inactive caller {forgotten}")
        else:
            self._queues.move_to_end(caller)
        return queue
