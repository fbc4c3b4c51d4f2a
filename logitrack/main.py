from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import Response, StreamingResponse

from logitrack.agents.mirror import MirrorAgent
from logitrack.agents.supabase import SupabaseAgent
from logitrack.config import settings
from logitrack.credentials import Role
from logitrack.schemas.order import OrderIn
from logitrack.sync.order import OrderRepository
from logitrack.utils.logger import setup_logger
from logitrack.views import change_stream, filter_orders, orders_to_csv, prepare_admin_order, status_label

def build_repository() -> OrderRepository:
    return OrderRepository(SupabaseAgent(settings), MirrorAgent(settings.MIRROR_DATABASE_URL))

def create_app(repository: OrderRepository | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logger()
        repo = repository or build_repository()
        await repo.mirror.init()
        app.state.repository = repo
        yield
        await repo.mirror.dispose()

    app = FastAPI(title="LogiTrack", lifespan=lifespan)

    def get_repository(request: Request) -> OrderRepository:
        return request.app.state.repository

    def require_admin(x_admin_password: str | None = Header(default=None)):
        if x_admin_password != settings.ADMIN_PASSWORD:
            raise HTTPException(status_code=401, detail="Invalid admin password")

    @app.get("/admin/orders", dependencies=[Depends(require_admin)])
    async def list_orders(search: str | None = None, repo: OrderRepository = Depends(get_repository)):
        orders = await repo.fetch_orders(Role.ADMIN)
        return [o.to_record() for o in filter_orders(orders, search)]

    @app.post("/admin/orders", dependencies=[Depends(require_admin)])
    async def save_order(body: OrderIn, repo: OrderRepository = Depends(get_repository)):
        data = prepare_admin_order(body)
        synced = await repo.sync_order(data)
        if synced is not None:
            return {"order": synced.to_record(), "synced": True}

        # remote unavailable, answer with what the mirror now holds
        local = next((o for o in await repo.local_orders() if o.order_code == body.order_code), None)
        return {"order": local.to_record() if local else None, "synced": False}

    @app.delete("/admin/orders/{order_id}", dependencies=[Depends(require_admin)])
    async def remove_order(order_id: str, repo: OrderRepository = Depends(get_repository)):
        remote = await repo.delete_order(order_id)
        return {"deleted": True, "remote": remote}

    @app.get("/admin/orders/export.csv", dependencies=[Depends(require_admin)])
    async def export_orders(repo: OrderRepository = Depends(get_repository)):
        orders = await repo.fetch_orders(Role.ADMIN)
        return Response(
            content=orders_to_csv(orders),
            media_type="text/csv; charset=utf-8",
            headers={"Content-Disposition": 'attachment; filename="orders.csv"'},
        )

    @app.get("/track/{code}")
    async def track(code: str, repo: OrderRepository = Depends(get_repository)):
        order = await repo.find_by_code(code, Role.USER)
        if order is None:
            raise HTTPException(status_code=404, detail="Shipment code not found")
        return {
            "order": order.to_record(),
            "statusLabel": status_label(order.status),
            "secureLink": repo.remote.is_ready(Role.USER),
        }

    @app.get("/notifications")
    async def notifications(repo: OrderRepository = Depends(get_repository)):
        result = await repo.fetch_notifications(Role.USER)
        return [n.model_dump(mode="json", by_alias=True) for n in result]

    @app.get("/events")
    async def events(repo: OrderRepository = Depends(get_repository)):
        return StreamingResponse(change_stream(repo.events), media_type="text/event-stream")

    return app

app = create_app()
