import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class OrderChange:
    kind: str  # "upsert" or "delete"
    order_id: str
    order_code: str | None = None

Listener = Callable[[OrderChange], None]

class OrderEvents:
    """Fire-and-forget broadcast of order mutations to any number of listeners."""

    def __init__(self):
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, change: OrderChange) -> None:
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Order change listener %r failed", listener)
