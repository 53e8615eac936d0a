"""
Subscription from an order view to the store's change feed.

Each incoming insert/update is treated as the authoritative replacement for
that order id, never as a delta, so redelivery of the same change is
harmless. A lost channel is not re-established; the view keeps its last
known state until it subscribes again.
"""
import logging
from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from deliveryapp.realtime.order_board import OrderView
from deliveryapp.store.change_feed import INSERT, UPDATE, ChangeEvent, ChangeFeed, Channel
from deliveryapp.store.errors import StoreError

logger = logging.getLogger(__name__)

Handler = Callable[[OrderView], None]


class OrderRealtimeSync:
    def __init__(
        self,
        feed: ChangeFeed,
        fetch_items: Callable[[str], Iterable],
        on_insert: Optional[Handler] = None,
        on_update: Optional[Handler] = None,
        name: str = "orders-changes",
        accept: Optional[Callable[[dict], bool]] = None,
    ):
        self.feed = feed
        self.fetch_items = fetch_items
        self.on_insert = on_insert
        self.on_update = on_update
        self.name = name
        self.accept = accept
        self._channel: Optional[Channel] = None

    @property
    def subscribed(self) -> bool:
        return self._channel is not None and self._channel.active

    def subscribe(self, on_insert: Optional[Handler] = None,
                  on_update: Optional[Handler] = None) -> "OrderRealtimeSync":
        if on_insert is not None:
            self.on_insert = on_insert
        if on_update is not None:
            self.on_update = on_update

        if self.subscribed:
            return self

        kinds = []
        if self.on_insert is not None:
            kinds.append(INSERT)
        if self.on_update is not None:
            kinds.append(UPDATE)
        if not kinds:
            raise ValueError("At least one of on_insert/on_update is required")

        self._channel = self.feed.subscribe("orders", kinds, self._handle, name=self.name)
        logger.info(f"{self.name} subscribed")
        return self

    def unsubscribe(self):
        if self._channel is None:
            return
        self._channel.unsubscribe()
        self._channel = None
        logger.info(f"{self.name} unsubscribed")

    def __enter__(self):
        return self.subscribe()

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()
        return False

    def _handle(self, event: ChangeEvent):
        row = event.new
        if self.accept is not None and not self.accept(row):
            return

        try:
            items = list(self.fetch_items(row["id"]))
        except StoreError as e:
            logger.warning(f"Could not load items for order {row.get('id')}: {e}")
            items = []

        try:
            view = OrderView.from_row(row, items)
        except ValidationError as e:
            logger.error(f"Ignoring malformed order change {row.get('id')}: {e}")
            return

        handler = self.on_insert if event.kind == INSERT else self.on_update
        if handler is not None:
            handler(view)
