from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import ValidationError
from clinic_scheduler.core.utils import between, date_range, overlap, parse_date, template_weekday
from clinic_scheduler.db.models import ACTIVE_STATUSES, Appointment, ScheduleBlock, ScheduleTemplate
from clinic_scheduler.schemas.schedule import DayAvailability, Slot
from clinic_scheduler.services.slot_generator import SlotSequence

AVAILABLE = "available"
BLOCKED = "blocked"
BOOKED = "booked"


def _block_range(slots: List[Slot], start: str, end: str):
    for slot in slots:
        if between(slot.time, start, end):
            slot.status = BLOCKED


def compose_day(
    iso_date: str,
    template: Optional[ScheduleTemplate],
    blocks: Iterable[ScheduleBlock] = (),
    appointments: Iterable[Appointment] = (),
    reference_minutes: int = 30,
) -> DayAvailability:
    """Build the slot grid of a single day.

    Blocking sources (template breaks, the date's exception, ad-hoc blocks)
    are applied before bookings, and bookings only claim slots that are
    still available.
    """
    slots: List[Slot] = []
    if template is not None:
        for window in template.windows or []:
            slots.extend(Slot(time=t) for t in SlotSequence.from_window(window))

        for br in template.breaks or []:
            _block_range(slots, br.get("from"), br.get("to"))

        exception = template.exception_for(iso_date)
        if exception:
            for block in exception.get("blocks") or []:
                _block_range(slots, block.get("from"), block.get("to"))

    for block in blocks:
        _block_range(slots, block.from_time, block.to_time)

    for appointment in appointments:
        if not appointment.is_active:
            continue
        duration = appointment.duration_minutes or settings.DEFAULT_DURATION_MINUTES
        for slot in slots:
            if slot.status == AVAILABLE and overlap(slot.time, reference_minutes, appointment.time, duration):
                slot.status = BOOKED

    return DayAvailability(date=iso_date, slots=slots)


class AvailabilityService:
    def __init__(self, session: AsyncSession, reference_minutes: Optional[int] = None):
        self.session = session
        self.reference_minutes = reference_minutes or settings.SLOT_REFERENCE_MINUTES

    async def compute_availability(
        self, branch_id: str, doctor_id: str, date_from: str, date_to: str
    ) -> List[DayAvailability]:
        if not doctor_id:
            raise ValidationError("doctor_id is required")
        start = parse_date(date_from, "date_from")
        end = parse_date(date_to, "date_to")
        if start > end:
            raise ValidationError("date_from must not be after date_to")
        if (end - start).days + 1 > settings.MAX_AVAILABILITY_DAYS:
            raise ValidationError(f"Date range cannot exceed {settings.MAX_AVAILABILITY_DAYS} days")

        templates = await self._load_templates(branch_id, doctor_id)
        blocks = await self._load_blocks(branch_id, doctor_id, date_from, date_to)
        appointments = await self._load_appointments(branch_id, doctor_id, date_from, date_to)

        days = []
        for day in date_range(start, end):
            iso = day.isoformat()
            days.append(compose_day(
                iso,
                templates.get(template_weekday(day)),
                blocks.get(iso, []),
                appointments.get(iso, []),
                self.reference_minutes,
            ))
        return days

    async def _load_templates(self, branch_id: str, doctor_id: str) -> Dict[int, ScheduleTemplate]:
        stmt = select(ScheduleTemplate).where(
            ScheduleTemplate.branch_id == branch_id,
            ScheduleTemplate.doctor_id == doctor_id,
        )
        result = await self.session.execute(stmt)
        return {t.day_of_week: t for t in result.scalars().all()}

    async def _load_blocks(self, branch_id: str, doctor_id: str, date_from: str, date_to: str) -> Dict[str, List[ScheduleBlock]]:
        stmt = select(ScheduleBlock).where(
            ScheduleBlock.branch_id == branch_id,
            ScheduleBlock.doctor_id == doctor_id,
            ScheduleBlock.date >= date_from,
            ScheduleBlock.date <= date_to,
        )
        result = await self.session.execute(stmt)
        return _group_by_date(result.scalars().all())

    async def _load_appointments(self, branch_id: str, doctor_id: str, date_from: str, date_to: str) -> Dict[str, List[Appointment]]:
        stmt = select(Appointment).where(
            Appointment.branch_id == branch_id,
            Appointment.doctor_id == doctor_id,
            Appointment.date >= date_from,
            Appointment.date <= date_to,
            Appointment.status.in_(ACTIVE_STATUSES),
        )
        result = await self.session.execute(stmt)
        return _group_by_date(result.scalars().all())


def _group_by_date(rows: Sequence) -> Dict[str, list]:
    grouped = defaultdict(list)
    for row in rows:
        grouped[row.date].append(row)
    return grouped
