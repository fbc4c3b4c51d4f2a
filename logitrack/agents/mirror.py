import json
import logging
from datetime import datetime, timezone

from sqlmodel import SQLModel, select
from sqlmodel.ext.asyncio.session import AsyncSession
from sqlalchemy.ext.asyncio import create_async_engine

from logitrack.models.mirror import MirrorSlot

logger = logging.getLogger(__name__)

ORDERS_KEY = "logitrack_remote_db"

class MirrorAgent:
    """Single-slot key-value store holding the last known snapshot of orders."""

    def __init__(self, database_url: str):
        self.engine = create_async_engine(database_url)

    async def init(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self):
        await self.engine.dispose()

    def get_session(self) -> AsyncSession:
        return AsyncSession(self.engine)

    async def load(self, key: str = ORDERS_KEY) -> list[dict]:
        async with self.get_session() as db:
            statement = select(MirrorSlot).where(MirrorSlot.key == key)
            slot = (await db.exec(statement)).first()
            value = slot.value if slot is not None else None

        if value is None:
            return []
        try:
            data = json.loads(value)
        except json.JSONDecodeError:
            logger.warning("Mirror slot %s holds invalid JSON, treating as empty", key)
            return []
        if not isinstance(data, list):
            logger.warning("Mirror slot %s is not a list, treating as empty", key)
            return []
        return data

    async def save(self, records: list[dict], key: str = ORDERS_KEY) -> None:
        # whole snapshot replace, concurrent writers are not merged
        payload = json.dumps(records, ensure_ascii=False)
        async with self.get_session() as db:
            slot = await db.get(MirrorSlot, key)
            if slot is None:
                db.add(MirrorSlot(key=key, value=payload))
            else:
                slot.value = payload
                slot.updated_at = datetime.now(timezone.utc)
            await db.commit()
