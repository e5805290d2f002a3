from sqlmodel import SQLModel, Field
from sqlalchemy import JSON, Column, DateTime, UniqueConstraint
from typing import List, Optional
from datetime import datetime
from uuid import UUID, uuid4

from clinic_scheduler.core.utils import utcnow

class ScheduleTemplate(SQLModel, table=True):
    """Weekly template for one doctor in one branch.

    windows: working intervals, each split into slots by ``step_minutes``
    breaks: recurring breaks inside the windows
    exceptions: date-specific blocks, ``{"date": "YYYY-MM-DD", "blocks": [...]}``
    """
    __tablename__ = "schedule_templates"
    __table_args__ = (
        UniqueConstraint("branch_id", "doctor_id", "day_of_week", name="uq_schedule_templates_key"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str = Field(index=True)
    doctor_id: str = Field(index=True)
    day_of_week: int # 0=Sunday..6=Saturday
    windows: List[dict] = Field(default=[], sa_column=Column(JSON))
    breaks: List[dict] = Field(default=[], sa_column=Column(JSON))
    exceptions: List[dict] = Field(default=[], sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    def exception_for(self, iso_date: str) -> Optional[dict]:
        for exception in self.exceptions or []:
            if exception.get("date") == iso_date:
                return exception
        return None
