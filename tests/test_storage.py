import pytest
from sqlmodel import select

from clinic_scheduler.core.exceptions import ConflictError
from clinic_scheduler.db.models import Appointment, BookingLedger, ScheduleBlock
from clinic_scheduler.services.appointment_service import SLOT_TAKEN, AppointmentService

from conftest import BRANCH, DOCTOR, MONDAY


def booking(time="09:00", status="scheduled"):
    return Appointment(
        branch_id=BRANCH, doctor_id=DOCTOR, date=MONDAY, time=time,
        duration_minutes=30, status=status,
    )


async def seed(session, *appointments):
    for appointment in appointments:
        session.add(appointment)
    session.add(BookingLedger(branch_id=BRANCH, doctor_id=DOCTOR, date=MONDAY, version=1))
    await session.commit()


@pytest.mark.asyncio
async def test_timestamps_round_trip(session, session_factory):
    appointment = booking()
    block = ScheduleBlock(branch_id=BRANCH, doctor_id=DOCTOR, date=MONDAY, from_time="14:00", to_time="15:00")
    session.add(appointment)
    session.add(block)
    await session.commit()
    assert appointment.created_at.tzinfo is not None

    async with session_factory() as other:
        loaded = await other.get(Appointment, appointment.id)
        loaded_block = await other.get(ScheduleBlock, block.id)

    assert loaded.created_at.replace(tzinfo=None) == appointment.created_at.replace(tzinfo=None)
    assert loaded_block.created_at.replace(tzinfo=None) == block.created_at.replace(tzinfo=None)
    assert loaded.updated_at is None


@pytest.mark.asyncio
async def test_second_active_start_is_rejected_by_storage(session):
    await seed(session, booking("09:00"))
    service = AppointmentService(session)

    seen = await service.guard.observe(BRANCH, DOCTOR, MONDAY)
    # skips the read check, leaving only the unique index
    session.add(booking("09:00", status="confirmed"))
    with pytest.raises(ConflictError) as excinfo:
        await service._commit_booking(BRANCH, DOCTOR, MONDAY, seen)
    assert excinfo.value.message == SLOT_TAKEN

    rows = (await session.execute(select(Appointment))).scalars().all()
    assert len(rows) == 1
    version = (await session.execute(select(BookingLedger.version))).scalar_one()
    assert version == 1


@pytest.mark.asyncio
async def test_cancelled_start_does_not_block_storage(session):
    await seed(session, booking("09:00", status="cancelled"), booking("09:00", status="no-show"))
    service = AppointmentService(session)

    seen = await service.guard.observe(BRANCH, DOCTOR, MONDAY)
    session.add(booking("09:00"))
    await service._commit_booking(BRANCH, DOCTOR, MONDAY, seen)

    rows = (await session.execute(select(Appointment).where(Appointment.time == "09:00"))).scalars().all()
    assert sorted(r.status for r in rows) == ["cancelled", "no-show", "scheduled"]
    version = (await session.execute(select(BookingLedger.version))).scalar_one()
    assert version == 2
