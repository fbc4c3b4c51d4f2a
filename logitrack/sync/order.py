import logging
import time
import uuid
from collections.abc import Mapping
from typing import Callable

from pydantic import ValidationError

from logitrack.agents.mirror import MirrorAgent
from logitrack.agents.supabase import SupabaseAgent
from logitrack.credentials import Role
from logitrack.schemas.order import AppNotification, Order
from logitrack.sync.events import OrderChange, OrderEvents
from logitrack.sync.mapping import map_from_db, map_to_db, normalize_order, notification_from_db

logger = logging.getLogger(__name__)

def now_ms() -> int:
    return time.time_ns() // 1_000_000

TEMP_PREFIX = "temp-"

def temporary_id(stamp: int) -> str:
    return f"{TEMP_PREFIX}{stamp}-{uuid.uuid4().hex[:6]}"

def is_server_id(order_id: str) -> bool:
    return bool(order_id) and not order_id.startswith(TEMP_PREFIX)

class OrderRepository:
    """Orders backed by the remote REST service with the local mirror as fallback.

    Writes go to the mirror first and then to the remote. A failed remote call
    never rolls the mirror back; the next successful fetch_orders replaces the
    whole snapshot with the remote's view.
    """

    def __init__(self, remote: SupabaseAgent, mirror: MirrorAgent, events: OrderEvents | None = None, clock: Callable[[], int] | None = None):
        self.remote = remote
        self.mirror = mirror
        self.events = events or OrderEvents()
        self.clock = clock or now_ms

    async def _load_mirror(self) -> list[Order]:
        orders = []
        for record in await self.mirror.load():
            try:
                orders.append(Order.model_validate(record))
            except ValidationError as e:
                logger.warning("Dropping unreadable mirror record: %s", e)
        return orders

    async def local_orders(self) -> list[Order]:
        return await self._load_mirror()

    async def _save_mirror(self, orders: list[Order]) -> None:
        await self.mirror.save([order.to_record() for order in orders])

    async def fetch_orders(self, role: Role = Role.USER, newest_first: bool = False) -> list[Order]:
        data = await self.remote.select_orders(role, newest_first=newest_first)
        if not isinstance(data, list):
            if self.remote.is_ready(role):
                logger.warning("Remote orders unavailable, serving the local mirror")
            return await self._load_mirror()

        orders = [map_from_db(record) for record in data if isinstance(record, Mapping)]
        await self._save_mirror(orders)
        return orders

    async def sync_order(self, order: Order | Mapping) -> Order | None:
        stamp = self.clock()
        order = normalize_order(order, stamp)
        if not order.order_code:
            logger.warning("Refusing to sync an order without an order code")
            return None

        # local write first
        current = await self._load_mirror()
        index = next((i for i, o in enumerate(current) if (order.id and o.id == order.id) or o.order_code == order.order_code), None)
        if index is not None:
            order = order.model_copy(update={"id": current[index].id})
            current[index] = order
        else:
            if not order.id:
                order = order.model_copy(update={"id": temporary_id(stamp)})
            current.insert(0, order)
        await self._save_mirror(current)
        self.events.publish(OrderChange("upsert", order.id, order.order_code))

        if not self.remote.is_ready(Role.ADMIN):
            return None

        payload = map_to_db(order, stamp)
        payload.pop("id")

        # a known server row is updated by identity, so a changed code does not fork it
        result = []
        check = None
        if is_server_id(order.id):
            result = await self.remote.update_order_by_id(order.id, payload)
        if result == []:
            check = await self.remote.find_orders_by_code(order.order_code)
            if check is None:
                return None
            if len(check) > 0:
                result = await self.remote.update_order(order.order_code, payload)
            else:
                result = await self.remote.insert_order(payload)
        if result is None:
            logger.warning("Order %s kept locally, remote write failed", order.order_code)
            return None

        synced = order
        if isinstance(result, list) and result and isinstance(result[0], Mapping):
            synced = map_from_db(result[0])
        elif isinstance(check, list) and check and isinstance(check[0], Mapping) and check[0].get("id"):
            synced = order.model_copy(update={"id": str(check[0]["id"])})

        if synced != order:
            # converge on the server's copy, including its identity
            current = await self._load_mirror()
            await self._save_mirror([synced if o.id == order.id else o for o in current])
            if synced.id != order.id:
                self.events.publish(OrderChange("upsert", synced.id, synced.order_code))
        return synced

    async def delete_order(self, order_id: str) -> bool:
        current = await self._load_mirror()
        removed = [o for o in current if o.id == order_id]
        await self._save_mirror([o for o in current if o.id != order_id])
        self.events.publish(OrderChange("delete", order_id, removed[0].order_code if removed else None))

        if not self.remote.is_ready(Role.ADMIN):
            return False
        result = await self.remote.delete_order(order_id)
        return result is not None

    async def find_by_code(self, code: str, role: Role = Role.USER) -> Order | None:
        code = code.strip().upper()
        if not code:
            return None
        orders = await self.fetch_orders(role)
        return next((o for o in orders if o.order_code.strip().upper() == code), None)

    async def fetch_notifications(self, role: Role = Role.USER) -> list[AppNotification]:
        data = await self.remote.select_notifications(role)
        if not isinstance(data, list):
            return []
        return [notification_from_db(record) for record in data if isinstance(record, Mapping)]
