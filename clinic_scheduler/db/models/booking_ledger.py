from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from uuid import UUID, uuid4

class BookingLedger(SQLModel, table=True):
    """Version row per doctor-day. Every booking write bumps it with a compare-and-swap."""
    __tablename__ = "booking_ledgers"
    __table_args__ = (
        UniqueConstraint("branch_id", "doctor_id", "date", name="uq_booking_ledgers_day"),
    )
    id: UUID = Field(default_factory=uuid4, primary_key=True)
    branch_id: str
    doctor_id: str
    date: str # YYYY-MM-DD
    version: int = Field(default=0)
