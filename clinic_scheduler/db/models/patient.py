from sqlmodel import SQLModel, Field
from typing import Optional
from sqlalchemy import DateTime
from datetime import datetime
from uuid import UUID, uuid4

from clinic_scheduler.core.utils import utcnow

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str = Field(index=True)
    mrn: Optional[str] = Field(default=None, index=True)
    first_name: str
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.middle_name, self.last_name) if part)
