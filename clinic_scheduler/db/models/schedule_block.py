from sqlmodel import SQLModel, Field
from sqlalchemy import DateTime, Index
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4

from clinic_scheduler.core.utils import utcnow

class ScheduleBlock(SQLModel, table=True):
    """One-off unavailability (leave, maintenance, ...) for a single day."""
    __tablename__ = "schedule_blocks"
    __table_args__ = (
        Index("ix_schedule_blocks_lookup", "branch_id", "doctor_id", "date", "from_time"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str = Field(index=True)
    doctor_id: str = Field(index=True)
    date: str = Field(index=True) # YYYY-MM-DD
    from_time: str # HH:MM
    to_time: str
    reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
