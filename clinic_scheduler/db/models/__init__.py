from sqlmodel import SQLModel
from .schedule import ScheduleTemplate
from .schedule_block import ScheduleBlock
from .appointment import Appointment, AppointmentStatus, Priority, ACTIVE_STATUSES
from .counter import TokenCounter
from .booking_ledger import BookingLedger
from .patient import Patient
from .audit_log import AuditLog

__all__ = [
    "SQLModel",
    "ScheduleTemplate",
    "ScheduleBlock",
    "Appointment",
    "AppointmentStatus",
    "Priority",
    "ACTIVE_STATUSES",
    "TokenCounter",
    "BookingLedger",
    "Patient",
    "AuditLog",
]
