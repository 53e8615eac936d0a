"""
In-process change feed for the record store.

Writers publish one ChangeEvent per committed row change; readers open a
Channel scoped to a table and a set of event kinds. Delivery is synchronous
on the publishing thread, in subscription order, once per publish.
"""
import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
ALL_KINDS = frozenset({INSERT, UPDATE, DELETE})


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    kind: str
    new: dict = field(default_factory=dict)
    old: Optional[dict] = None


class Channel:
    def __init__(self, feed: "ChangeFeed", table: str, kinds: frozenset,
                 callback: Callable[[ChangeEvent], None], name: str):
        self._feed = feed
        self.table = table
        self.kinds = kinds
        self.callback = callback
        self.name = name
        self.active = True

    def matches(self, event: ChangeEvent) -> bool:
        return self.active and event.table == self.table and event.kind in self.kinds

    def unsubscribe(self):
        if not self.active:
            return
        self.active = False
        self._feed._remove(self)
        logger.debug(f"Channel {self.name} closed")


class ChangeFeed:
    def __init__(self):
        self._channels = []
        self._lock = threading.Lock()

    def subscribe(
        self,
        table: str,
        kinds: Iterable[str] | str = "*",
        callback: Callable[[ChangeEvent], None] = None,
        name: Optional[str] = None,
    ) -> Channel:
        if callback is None:
            raise ValueError("callback is required")

        if kinds == "*":
            kinds = ALL_KINDS
        else:
            kinds = frozenset(kinds)
            unknown = kinds - ALL_KINDS
            if unknown:
                raise ValueError(f"Unknown event kinds: {sorted(unknown)}")

        channel = Channel(self, table, kinds, callback, name or f"{table}-changes")
        with self._lock:
            self._channels.append(channel)
        logger.debug(f"Channel {channel.name} subscribed to {table} {sorted(kinds)}")
        return channel

    def _remove(self, channel: Channel):
        with self._lock:
            if channel in self._channels:
                self._channels.remove(channel)

    def publish(self, event: ChangeEvent):
        with self._lock:
            targets = [c for c in self._channels if c.matches(event)]

        for channel in targets:
            # may have been closed by an earlier callback in this loop
            if not channel.active:
                continue
            try:
                channel.callback(event)
            except Exception:
                logger.exception(f"Channel {channel.name} failed handling {event.kind} on {event.table}")

    def channel_count(self, table: Optional[str] = None) -> int:
        with self._lock:
            if table is None:
                return len(self._channels)
            return sum(1 for c in self._channels if c.table == table)
