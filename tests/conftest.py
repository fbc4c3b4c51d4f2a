import json
import httpx
import pytest

from logitrack.agents.mirror import MirrorAgent
from logitrack.agents.supabase import SupabaseAgent
from logitrack.config import Settings
from logitrack.sync.events import OrderEvents
from logitrack.sync.order import OrderRepository

PUBLISHABLE_KEY = "sb_publishable_" + "p" * 24
SECRET_KEY = "sb_secret_" + "s" * 24
NOW = 1_760_000_000_000


class FakeSupabase:
    """In-memory PostgREST look-alike served through httpx.MockTransport."""

    def __init__(self):
        self.tables = {"orders": [], "notifications": []}
        self.requests: list[httpx.Request] = []
        self.offline = False
        self.fail_status = None
        self.counter = 0

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.offline:
            raise httpx.ConnectError("connection refused", request=request)
        if self.fail_status:
            return httpx.Response(self.fail_status, json={"message": "boom"})

        table = request.url.path.rsplit("/", 1)[-1]
        rows = self.tables.setdefault(table, [])
        filters = {k: v[3:] for k, v in request.url.params.multi_items() if v.startswith("eq.")}
        matched = [r for r in rows if all(str(r.get(k)) == v for k, v in filters.items())]

        if request.method == "GET":
            order = request.url.params.get("order")
            if order:
                column, direction = order.split(".")
                matched = sorted(matched, key=lambda r: r.get(column) or "", reverse=direction == "desc")
            return httpx.Response(200, json=matched)

        if request.method == "POST":
            self.counter += 1
            record = {**json.loads(request.content), "id": f"srv-{self.counter}"}
            rows.append(record)
            return httpx.Response(201, json=[record])

        if request.method == "PATCH":
            body = json.loads(request.content)
            for r in matched:
                r.update(body)
            return httpx.Response(200, json=matched)

        if request.method == "DELETE":
            self.tables[table] = [r for r in rows if r not in matched]
            return httpx.Response(204)

        return httpx.Response(405)


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        SUPABASE_ENABLED=True,
        SUPABASE_URL="https://logitrack-test.supabase.co",
        SUPABASE_PUBLISHABLE_KEY=PUBLISHABLE_KEY,
        SUPABASE_SECRET_KEY=SECRET_KEY,
        MIRROR_DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'mirror.db'}",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def fake_remote():
    return FakeSupabase()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def agent(settings, fake_remote):
    return SupabaseAgent(settings, transport=httpx.MockTransport(fake_remote))


@pytest.fixture
async def mirror(settings):
    mirror = MirrorAgent(settings.MIRROR_DATABASE_URL)
    await mirror.init()
    yield mirror
    await mirror.dispose()


@pytest.fixture
def clock():
    class Clock:
        def __init__(self):
            self.now = NOW

        def __call__(self):
            return self.now

        def advance(self, ms=1000):
            self.now += ms

    return Clock()


@pytest.fixture
def repository(agent, mirror, clock):
    return OrderRepository(agent, mirror, OrderEvents(), clock=clock)
