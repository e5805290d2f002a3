from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.utils import overlap
from clinic_scheduler.db.models import ACTIVE_STATUSES, Appointment


def first_overlapping(
    appointments: Iterable[Appointment], time: str, duration: int
) -> Optional[Appointment]:
    for existing in appointments:
        if not existing.is_active:
            continue
        existing_duration = existing.duration_minutes or settings.DEFAULT_DURATION_MINUTES
        if overlap(time, duration, existing.time, existing_duration):
            return existing
    return None


class ConflictDetector:
    """Read-time overlap check against a doctor's active bookings for one day.

    Necessary but not sufficient under concurrency; writers pair it with
    ``BookingGuard``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def active_appointments(
        self,
        branch_id: str,
        doctor_id: str,
        date: str,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> List[Appointment]:
        stmt = select(Appointment).where(
            Appointment.branch_id == branch_id,
            Appointment.doctor_id == doctor_id,
            Appointment.date == date,
            Appointment.status.in_(ACTIVE_STATUSES),
        )
        if exclude_appointment_id is not None:
            stmt = stmt.where(Appointment.id != exclude_appointment_id)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def find_conflict(
        self,
        branch_id: str,
        doctor_id: str,
        date: str,
        time: str,
        duration: int,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> Optional[Appointment]:
        same_day = await self.active_appointments(branch_id, doctor_id, date, exclude_appointment_id)
        return first_overlapping(same_day, time, duration)

    async def has_conflict(
        self,
        branch_id: str,
        doctor_id: str,
        date: str,
        time: str,
        duration: int,
        exclude_appointment_id: Optional[UUID] = None,
    ) -> bool:
        clash = await self.find_conflict(branch_id, doctor_id, date, time, duration, exclude_appointment_id)
        return clash is not None
