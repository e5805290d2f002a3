from pydantic import BaseModel, Field, field_validator
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from clinic_scheduler.core.exceptions import ValidationError
from clinic_scheduler.core.utils import parse_date, parse_time
from clinic_scheduler.db.models.appointment import AppointmentStatus, Priority
from clinic_scheduler.schemas.patient import DoctorSnapshot, PatientSnapshot

class AppointmentFields(BaseModel):
    @field_validator("date", check_fields=False)
    @classmethod
    def check_date(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            parse_date(value)
        except ValidationError as e:
            raise ValueError(e.message)
        return value

    @field_validator("time", check_fields=False)
    @classmethod
    def check_time(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        try:
            return parse_time(value)
        except ValidationError as e:
            raise ValueError(e.message)

class AppointmentCreate(AppointmentFields):
    date: str
    time: str
    duration_minutes: int = Field(default=30, ge=5, le=240)
    doctor_id: str = Field(min_length=1)
    doctor: DoctorSnapshot = DoctorSnapshot()
    patient_id: Optional[UUID] = None
    patient: PatientSnapshot = PatientSnapshot()
    type: str = "consultation"
    priority: Priority = Priority.NORMAL
    notes: Optional[str] = None
    symptoms: Optional[str] = None
    referred_by: Optional[str] = None
    insurance_provider: Optional[str] = None
    copay_amount: Optional[float] = Field(default=None, ge=0)

class AppointmentUpdate(AppointmentFields):
    date: Optional[str] = None
    time: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=5, le=240)
    doctor_id: Optional[str] = Field(default=None, min_length=1)
    doctor: Optional[DoctorSnapshot] = None
    patient_id: Optional[UUID] = None
    patient: Optional[PatientSnapshot] = None
    type: Optional[str] = None
    priority: Optional[Priority] = None
    notes: Optional[str] = None
    symptoms: Optional[str] = None
    referred_by: Optional[str] = None
    insurance_provider: Optional[str] = None
    copay_amount: Optional[float] = Field(default=None, ge=0)

class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus

class AppointmentFilter(BaseModel):
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    doctor_id: Optional[str] = None
    department: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    q: Optional[str] = None

class AppointmentResponse(BaseModel):
    id: UUID
    branch_id: str
    date: str
    time: str
    duration_minutes: int
    status: str
    type: str
    priority: str
    doctor_id: str
    doctor: dict
    patient_id: Optional[UUID] = None
    patient: dict
    token_number: Optional[str] = None
    symptoms: Optional[str] = None
    referred_by: Optional[str] = None
    insurance_provider: Optional[str] = None
    copay_amount: Optional[float] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None

    class Config:
        from_attributes = True

class AppointmentPage(BaseModel):
    items: List[AppointmentResponse]
    total: int
    page: int
    limit: int
