import logging
import math
import uuid
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone

from logitrack.schemas.order import AppNotification, Location, Order, OrderStatus

logger = logging.getLogger(__name__)

NO_NAME = "No Name"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

def generated_id(prefix: str = "gen") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"

def coerce_quantity(value) -> int:
    try:
        quantity = int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 1
    return quantity if quantity >= 1 else 1

def coerce_price(value) -> float:
    try:
        price = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(price) or price < 0:
        return 0.0
    return price

def coerce_status(value) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return OrderStatus.CHINA_STORE

def coerce_float(value) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None

def ms_to_iso(ms: int) -> str:
    return (EPOCH + timedelta(milliseconds=ms)).isoformat()

def parse_timestamp(value) -> int:
    """Accepts epoch milliseconds or an ISO 8601 string, 0 when unreadable."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value) if math.isfinite(value) else 0
    if str(value).isdigit():
        return int(value)
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return (parsed - EPOCH) // timedelta(milliseconds=1)

def _text(value) -> str:
    return "" if value is None else str(value)

def _location(lat, lng) -> Location | None:
    lat = coerce_float(lat)
    if lat is None:
        return None
    return Location(lat=lat, lng=coerce_float(lng) or 0.0)

def map_to_db(order: Order, now_ms: int) -> dict:
    customer = order.customer_location
    driver = order.driver_location
    return {
        "id": order.id,
        "order_code": order.order_code,
        "customer_name": order.customer_name,
        "customer_phone": order.customer_phone or "",
        "customer_address": order.customer_address or "",
        "product_name": order.product_name or "",
        "quantity": coerce_quantity(order.quantity),
        "total_price": coerce_price(order.total_price),
        "status": order.status.value,
        "current_location": order.current_physical_location or "",
        "updated_at": ms_to_iso(now_ms),
        "customer_lat": customer.lat if customer else None,
        "customer_lng": customer.lng if customer else None,
        "driver_lat": driver.lat if driver else None,
        "driver_lng": driver.lng if driver else None,
    }

def map_from_db(record: Mapping) -> Order:
    substituted = []

    order_id = record.get("id")
    if order_id in (None, ""):
        order_id = generated_id()
        substituted.append("id")

    customer_name = record.get("customer_name")
    if not customer_name:
        customer_name = NO_NAME
        substituted.append("customer_name")

    status = coerce_status(record.get("status"))
    if record.get("status") != status.value:
        substituted.append("status")

    order = Order(
        id=str(order_id),
        order_code=_text(record.get("order_code")),
        customer_name=str(customer_name),
        customer_phone=_text(record.get("customer_phone")),
        customer_address=_text(record.get("customer_address")),
        product_name=_text(record.get("product_name")),
        quantity=coerce_quantity(record.get("quantity")),
        total_price=coerce_price(record.get("total_price")),
        status=status,
        current_physical_location=_text(record.get("current_location")),
        updated_at=parse_timestamp(record.get("updated_at")),
        customer_location=_location(record.get("customer_lat"), record.get("customer_lng")),
        driver_location=_location(record.get("driver_lat"), record.get("driver_lng")),
    )

    if substituted:
        logger.warning("Order %s from remote had defaults substituted for %s", order.order_code or order.id, ", ".join(substituted))
    return order

def notification_from_db(record: Mapping) -> AppNotification:
    notification_id = record.get("id")
    return AppNotification(
        id=str(notification_id) if notification_id not in (None, "") else generated_id(),
        order_code=_text(record.get("order_code")),
        title=_text(record.get("title")),
        body=_text(record.get("body")),
        is_read=bool(record.get("is_read")),
        timestamp=parse_timestamp(record.get("created_at")),
    )

def normalize_order(data: Order | Mapping, now_ms: int) -> Order:
    """Build a complete Order from a full or partial one and stamp it with now_ms."""
    if isinstance(data, Order):
        data = data.model_dump()
    else:
        data = {_snake(key): value for key, value in data.items()}

    return Order(
        id=_text(data.get("id")),
        order_code=_text(data.get("order_code")).strip(),
        customer_name=_text(data.get("customer_name")),
        customer_phone=_text(data.get("customer_phone")),
        customer_address=_text(data.get("customer_address")),
        product_name=_text(data.get("product_name")),
        quantity=coerce_quantity(data.get("quantity")),
        total_price=coerce_price(data.get("total_price")),
        status=coerce_status(data.get("status")),
        current_physical_location=_text(data.get("current_physical_location")),
        updated_at=now_ms,
        customer_location=data.get("customer_location"),
        driver_location=data.get("driver_location"),
    )

_CAMEL_FIELDS = {field.alias: name for name, field in Order.model_fields.items() if field.alias}

def _snake(key: str) -> str:
    return _CAMEL_FIELDS.get(key, key)
