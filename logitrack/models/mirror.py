from datetime import datetime, timezone
from sqlalchemy import DateTime, Text
from sqlmodel import SQLModel, Field

class MirrorSlotBase(SQLModel):
    value: str = Field(default="[]", sa_type=Text)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_type=DateTime(timezone=True))

class MirrorSlot(MirrorSlotBase, table=True):
    __tablename__ = "mirror_slots"
    key: str = Field(primary_key=True)
