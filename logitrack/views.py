import asyncio
import csv
import io
import json
from dataclasses import asdict

from logitrack.schemas.order import STATUS_LABELS, Order, OrderIn, OrderStatus
from logitrack.sync.events import OrderEvents

CSV_HEADERS = ["Order Code", "Customer", "Product", "Status", "Price", "Location"]

def status_label(status: OrderStatus) -> str:
    return STATUS_LABELS.get(status, status.value)

def filter_orders(orders: list[Order], search: str | None) -> list[Order]:
    term = (search or "").strip().lower()
    if not term:
        return list(orders)
    return [o for o in orders if term in o.order_code.lower() or term in o.customer_name.lower()]

def prepare_admin_order(form: OrderIn) -> dict:
    # defaults the admin form applies before saving
    status = form.status or OrderStatus.CHINA_STORE
    data = form.model_dump(exclude_none=True)
    data["status"] = status
    data["current_physical_location"] = form.current_physical_location or status_label(status)
    return data

def orders_to_csv(orders: list[Order]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for o in orders:
        writer.writerow([
            o.order_code,
            o.customer_name,
            o.product_name,
            o.status.value,
            o.total_price,
            o.current_physical_location,
        ])
    return buffer.getvalue()

STREAM_BUFFER = 100

async def change_stream(events: OrderEvents, maxsize: int = STREAM_BUFFER):
    """Server-sent events for every order change, until the client goes away.

    A client that falls behind loses the oldest pending changes; the newest
    ones are always delivered.
    """
    queue: asyncio.Queue = asyncio.Queue(maxsize)

    def push(change):
        if queue.full():
            queue.get_nowait()
        queue.put_nowait(change)

    unsubscribe = events.subscribe(push)
    try:
        while True:
            change = await queue.get()
            yield f"data: {json.dumps(asdict(change))}\n\n"
    finally:
        unsubscribe()
