"""Event hub for change notifications.

Registries publish one event per mutating operation on a topic ("hunks" or
"groups"). Presentation layers either consume a subscription queue or
register a synchronous listener.

Architecture:
    - Each topic can have multiple queue subscribers and listeners
    - Bounded queues; the oldest event is dropped for slow subscribers
    - Per-topic sequence numbers for ordering and gap detection

Example:
    hub = EventHub()
    queue = hub.subscribe(HUNKS_TOPIC)

    await hub.publish(HUNKS_TOPIC, {"type": "assign", "hunk_id": "abc"})
    event = await queue.get()   # {"type": "assign", "hunk_id": "abc", "seq": 1}

    hub.unsubscribe(HUNKS_TOPIC, queue)
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Callable
from typing import Any

logger = logging.getLogger(__name__)

HUNKS_TOPIC = "hunks"
GROUPS_TOPIC = "groups"

Listener = Callable[[dict[str, Any]], None]


class EventHub:
    """Per-topic pub/sub for change notifications.

    Attributes:
        _subscribers: Map from topic to subscribed queues.
        _listeners: Map from topic to synchronous callbacks.
        _seq: Per-topic sequence counter.
        _max_queue_size: Maximum events per subscriber queue.
    """

    def __init__(self, max_queue_size: int = 100) -> None:
        self._subscribers: dict[str, list[asyncio.Queue[dict[str, Any]]]] = defaultdict(list)
        self._listeners: dict[str, list[Listener]] = defaultdict(list)
        self._seq: dict[str, int] = defaultdict(int)
        self._max_queue_size = max_queue_size

    def subscribe(self, topic: str) -> asyncio.Queue[dict[str, Any]]:
        """Create a bounded subscription queue for a topic."""
        queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=self._max_queue_size)
        self._subscribers[topic].append(queue)
        return queue

    def unsubscribe(self, topic: str, queue: asyncio.Queue[dict[str, Any]]) -> None:
        """Remove a subscription. Safe to call for unknown queues."""
        subs = self._subscribers.get(topic)
        if subs is None:
            return
        if queue in subs:
            subs.remove(queue)
        if not subs:
            del self._subscribers[topic]

    def add_listener(self, topic: str, callback: Listener) -> None:
        """Register a synchronous callback invoked on every publish."""
        self._listeners[topic].append(callback)

    def remove_listener(self, topic: str, callback: Listener) -> None:
        listeners = self._listeners.get(topic)
        if listeners and callback in listeners:
            listeners.remove(callback)

    async def publish(self, topic: str, event: dict[str, Any]) -> None:
        """Publish an event to every subscriber and listener of a topic.

        The event is copied and stamped with the topic's next sequence
        number. A full queue loses its oldest event to make room.
        """
        self._seq[topic] += 1
        event = dict(event)
        event["seq"] = self._seq[topic]

        for queue in list(self._subscribers.get(topic, ())):
            if queue.full():
                queue.get_nowait()
            queue.put_nowait(event)

        for callback in list(self._listeners.get(topic, ())):
            try:
                callback(event)
            except Exception as e:
                # A broken listener must not break the mutating workflow
                logger.warning("Listener for %s failed: %s", topic, e)

    def subscriber_count(self, topic: str) -> int:
        subs = self._subscribers.get(topic)
        return len(subs) if subs else 0

    def latest_seq(self, topic: str) -> int:
        """Latest sequence number for a topic, 0 if nothing was published."""
        return self._seq.get(topic, 0)
