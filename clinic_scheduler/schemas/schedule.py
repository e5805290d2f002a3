from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from clinic_scheduler.core.exceptions import ValidationError
from clinic_scheduler.core.utils import parse_date, parse_time, to_minutes

class TimeRange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    start: str = Field(alias="from")
    end: str = Field(alias="to")

    @field_validator("start", "end")
    @classmethod
    def check_time(cls, value: str) -> str:
        try:
            return parse_time(value)
        except ValidationError as e:
            raise ValueError(e.message)

    @model_validator(mode="after")
    def check_order(self):
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError("'from' must be earlier than 'to'")
        return self

class Window(TimeRange):
    step_minutes: int = Field(default=30, ge=5, le=120)

class ScheduleException(BaseModel):
    date: str
    blocks: List[TimeRange] = []

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        try:
            parse_date(value)
        except ValidationError as e:
            raise ValueError(e.message)
        return value

class TemplateUpsert(BaseModel):
    doctor_id: str = Field(min_length=1)
    day_of_week: int = Field(ge=0, le=6)
    windows: List[Window] = []
    breaks: List[TimeRange] = []
    exceptions: List[ScheduleException] = []

class TemplateResponse(BaseModel):
    id: UUID
    branch_id: str
    doctor_id: str
    day_of_week: int
    windows: List[dict]
    breaks: List[dict]
    exceptions: List[dict]
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class BlockCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: str = Field(min_length=1)
    date: str
    start: str = Field(alias="from")
    end: str = Field(alias="to")
    reason: Optional[str] = None

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        try:
            parse_date(value)
        except ValidationError as e:
            raise ValueError(e.message)
        return value

    @field_validator("start", "end")
    @classmethod
    def check_time(cls, value: str) -> str:
        try:
            return parse_time(value)
        except ValidationError as e:
            raise ValueError(e.message)

    @model_validator(mode="after")
    def check_order(self):
        if to_minutes(self.start) >= to_minutes(self.end):
            raise ValueError("'from' must be earlier than 'to'")
        return self

class BlockResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    branch_id: str
    doctor_id: str
    date: str
    from_time: str = Field(serialization_alias="from")
    to_time: str = Field(serialization_alias="to")
    reason: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime

class Slot(BaseModel):
    time: str
    status: Literal["available", "blocked", "booked"] = "available"

class DayAvailability(BaseModel):
    date: str
    slots: List[Slot]

class AvailabilityResponse(BaseModel):
    days: List[DayAvailability]
