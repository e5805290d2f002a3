import enum
from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime
from uuid import UUID, uuid4
from sqlalchemy import JSON, Column, DateTime, Index, text

from clinic_scheduler.core.utils import utcnow

class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"

class Priority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"
    EMERGENCY = "emergency"

# Statuses that occupy the calendar
ACTIVE_STATUSES = (
    AppointmentStatus.SCHEDULED.value,
    AppointmentStatus.CONFIRMED.value,
    AppointmentStatus.IN_PROGRESS.value,
)

_active_clause = "status IN ('scheduled', 'confirmed', 'in-progress')"

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_calendar", "branch_id", "doctor_id", "date", "time"),
        Index(
            "uq_appointments_active_start",
            "branch_id", "doctor_id", "date", "time",
            unique=True,
            postgresql_where=text(_active_clause),
            sqlite_where=text(_active_clause),
        ),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str = Field(index=True)
    date: str = Field(index=True) # YYYY-MM-DD
    time: str # HH:MM
    duration_minutes: int = Field(default=30)
    status: str = Field(default=AppointmentStatus.SCHEDULED.value, index=True)
    type: str = Field(default="consultation")
    priority: str = Field(default=Priority.NORMAL.value)

    doctor_id: str = Field(index=True)
    doctor: dict = Field(default={}, sa_column=Column(JSON))
    patient_id: Optional[UUID] = Field(default=None, index=True)
    patient: dict = Field(default={}, sa_column=Column(JSON))

    token_number: Optional[str] = None
    symptoms: Optional[str] = None
    referred_by: Optional[str] = None
    insurance_provider: Optional[str] = None
    copay_amount: Optional[float] = None
    notes: Optional[str] = None

    created_by: Optional[str] = None
    meta: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    started_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    completed_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    cancelled_at: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    cancelled_by: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
