from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import func, or_, select

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import ConflictError, NotFoundError, ValidationError
from clinic_scheduler.core.logger import logger
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.core.utils import parse_date, utcnow
from clinic_scheduler.db.models import Appointment, AppointmentStatus
from clinic_scheduler.schemas.appointment import AppointmentCreate, AppointmentFilter, AppointmentUpdate
from clinic_scheduler.services.appointment_state import apply_transition
from clinic_scheduler.services.audit_service import AuditSink
from clinic_scheduler.services.booking_guard import BookingGuard
from clinic_scheduler.services.conflict_detector import ConflictDetector
from clinic_scheduler.services.patient_directory import PatientDirectory, SqlPatientDirectory
from clinic_scheduler.services.token_allocator import CounterTokenSequence, TokenAllocator

SLOT_TAKEN = "Time slot already booked"
TIME_FIELDS = ("date", "time", "doctor_id", "duration_minutes")
NON_NULLABLE_FIELDS = ("date", "time", "doctor_id", "duration_minutes", "type", "priority", "doctor", "patient")


class AppointmentService:
    def __init__(
        self,
        session: AsyncSession,
        audit: Optional[AuditSink] = None,
        patients: Optional[PatientDirectory] = None,
        tokens: Optional[TokenAllocator] = None,
    ):
        self.session = session
        self.audit = audit
        self.patients = patients or SqlPatientDirectory(session)
        self.tokens = tokens or TokenAllocator(CounterTokenSequence(session))
        self.detector = ConflictDetector(session)
        self.guard = BookingGuard(session)

    async def get_appointment(self, context: AuthorizationContext, appointment_id: UUID) -> Appointment:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.branch_id == context.branch_id,
        )
        result = await self.session.execute(stmt)
        appointment = result.scalars().first()
        if not appointment:
            raise NotFoundError("Appointment")
        return appointment

    async def _commit_booking(self, branch_id: str, doctor_id: str, date: str, seen_version: Optional[int]):
        try:
            await self.guard.claim(branch_id, doctor_id, date, seen_version)
            await self.session.commit()
        except ConflictError:
            await self.session.rollback()
            raise
        except IntegrityError:
            await self.session.rollback()
            logger.warning(f"Booking rejected by storage: {branch_id}/{doctor_id}/{date}")
            raise ConflictError(SLOT_TAKEN)

    async def _patient_snapshot(self, branch_id: str, data: AppointmentCreate) -> dict:
        snapshot = data.patient.model_dump(exclude_none=True)
        if not snapshot.get("name") and data.patient_id:
            found = await self.patients.snapshot(branch_id, data.patient_id)
            if found:
                snapshot = found.model_dump(exclude_none=True)
        return snapshot

    async def create_appointment(self, context: AuthorizationContext, data: AppointmentCreate) -> Appointment:
        branch_id = context.branch_id
        if not data.doctor_id:
            raise ValidationError("date, time, doctor_id are required")

        patient_snapshot = await self._patient_snapshot(branch_id, data)

        seen_version = await self.guard.observe(branch_id, data.doctor_id, data.date)
        clash = await self.detector.find_conflict(
            branch_id, data.doctor_id, data.date, data.time, data.duration_minutes
        )
        if clash:
            logger.info(f"Booking conflict: doctor={data.doctor_id} {data.date} {data.time} clashes with {clash.id}")
            raise ConflictError(SLOT_TAKEN)

        token_number = await self.tokens.allocate(branch_id, data.doctor.department, data.date)

        appointment = Appointment(
            branch_id=branch_id,
            date=data.date,
            time=data.time,
            duration_minutes=data.duration_minutes,
            status=AppointmentStatus.SCHEDULED.value,
            type=data.type,
            priority=data.priority.value,
            doctor_id=data.doctor_id,
            doctor=data.doctor.model_dump(exclude_none=True),
            patient_id=data.patient_id,
            patient=patient_snapshot,
            token_number=token_number,
            notes=data.notes,
            symptoms=data.symptoms,
            referred_by=data.referred_by,
            insurance_provider=data.insurance_provider,
            copay_amount=data.copay_amount,
            created_by=context.actor_id,
            meta={"source": "api"},
        )
        self.session.add(appointment)
        await self._commit_booking(branch_id, data.doctor_id, data.date, seen_version)
        await self.session.refresh(appointment)

        logger.info(f"Appointment booked: id={appointment.id} token={token_number} doctor={data.doctor_id} {data.date} {data.time}")
        if self.audit:
            await self.audit.record(
                context, "appointment.create",
                target={"id": str(appointment.id), "token_number": token_number},
            )
        return appointment

    async def update_appointment(
        self, context: AuthorizationContext, appointment_id: UUID, data: AppointmentUpdate
    ) -> Appointment:
        appointment = await self.get_appointment(context, appointment_id)

        changes = data.model_dump(exclude_unset=True)
        for key in NON_NULLABLE_FIELDS:
            if key in changes and changes[key] is None:
                del changes[key]

        reschedule = any(key in changes for key in TIME_FIELDS)
        seen_version = None
        if reschedule:
            date = changes.get("date", appointment.date)
            time = changes.get("time", appointment.time)
            doctor_id = changes.get("doctor_id", appointment.doctor_id)
            duration = changes.get("duration_minutes", appointment.duration_minutes or settings.DEFAULT_DURATION_MINUTES)

            seen_version = await self.guard.observe(context.branch_id, doctor_id, date)
            clash = await self.detector.find_conflict(
                context.branch_id, doctor_id, date, time, duration, exclude_appointment_id=appointment.id
            )
            if clash:
                logger.info(f"Reschedule conflict: appointment={appointment.id} clashes with {clash.id}")
                raise ConflictError(SLOT_TAKEN)

        if "priority" in changes:
            changes["priority"] = changes["priority"].value if hasattr(changes["priority"], "value") else changes["priority"]
        for key, value in changes.items():
            setattr(appointment, key, value)
        appointment.updated_at = utcnow()
        self.session.add(appointment)

        if reschedule:
            await self._commit_booking(context.branch_id, appointment.doctor_id, appointment.date, seen_version)
        else:
            await self.session.commit()
        await self.session.refresh(appointment)

        if self.audit:
            await self.audit.record(
                context, "appointment.update",
                target={"id": str(appointment.id)},
                extra={"fields": sorted(changes)},
            )
        return appointment

    async def set_status(
        self, context: AuthorizationContext, appointment_id: UUID, status: AppointmentStatus
    ) -> Appointment:
        appointment = await self.get_appointment(context, appointment_id)
        previous = appointment.status

        if not apply_transition(appointment, status, actor_id=context.actor_id):
            return appointment

        self.session.add(appointment)
        await self.session.commit()
        await self.session.refresh(appointment)

        logger.info(f"Appointment {appointment.id}: {previous} -> {appointment.status}")
        if self.audit:
            await self.audit.record(
                context, "appointment.status",
                target={"id": str(appointment.id)},
                extra={"from": previous, "to": appointment.status},
            )
        return appointment

    async def list_appointments(
        self, context: AuthorizationContext, filters: AppointmentFilter, page: int = 1, limit: int = 20
    ) -> Tuple[List[Appointment], int]:
        page = max(1, page)
        limit = min(settings.MAX_PAGE_SIZE, max(1, limit))

        if filters.date_from:
            parse_date(filters.date_from, "date_from")
        if filters.date_to:
            parse_date(filters.date_to, "date_to")

        stmt = select(Appointment).where(Appointment.branch_id == context.branch_id)
        if filters.date_from:
            stmt = stmt.where(Appointment.date >= filters.date_from)
        if filters.date_to:
            stmt = stmt.where(Appointment.date <= filters.date_to)
        if filters.doctor_id:
            stmt = stmt.where(Appointment.doctor_id == filters.doctor_id)
        if filters.status:
            stmt = stmt.where(Appointment.status == filters.status.value)
        if filters.department:
            stmt = stmt.where(Appointment.doctor["department"].as_string() == filters.department)
        if filters.q:
            pattern = f"%{filters.q}%"
            stmt = stmt.where(or_(
                Appointment.patient["name"].as_string().ilike(pattern),
                Appointment.patient["phone"].as_string().ilike(pattern),
                Appointment.token_number.ilike(pattern),
            ))

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = (await self.session.execute(count_stmt)).scalar() or 0

        stmt = stmt.order_by(Appointment.date, Appointment.time).offset((page - 1) * limit).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all(), total
