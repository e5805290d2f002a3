import pytest

from clinic_scheduler.core.exceptions import ValidationError
from clinic_scheduler.db.models import Appointment, ScheduleBlock, ScheduleTemplate
from clinic_scheduler.services.availability_service import AvailabilityService, compose_day

from conftest import BRANCH, DOCTOR, MONDAY, TUESDAY


def make_template(**kwargs):
    fields = dict(
        branch_id=BRANCH,
        doctor_id=DOCTOR,
        day_of_week=1,
        windows=[{"from": "09:00", "to": "13:00", "step_minutes": 30}],
        breaks=[],
        exceptions=[],
    )
    fields.update(kwargs)
    return ScheduleTemplate(**fields)


def make_appointment(time, duration=30, status="scheduled", date=MONDAY):
    return Appointment(
        branch_id=BRANCH, doctor_id=DOCTOR, date=date, time=time,
        duration_minutes=duration, status=status,
    )


def statuses(day):
    return {slot.time: slot.status for slot in day.slots}


def test_no_template_means_no_slots():
    day = compose_day(MONDAY, None, [], [make_appointment("09:00")])
    assert day.date == MONDAY
    assert day.slots == []


def test_break_blocks_slot_regardless_of_booking():
    template = make_template(
        windows=[{"from": "09:00", "to": "14:00", "step_minutes": 30}],
        breaks=[{"from": "12:00", "to": "13:00"}],
    )
    day = compose_day(MONDAY, template, [], [make_appointment("12:00", 60)])
    grid = statuses(day)
    assert grid["12:00"] == "blocked"
    assert grid["12:30"] == "blocked"
    assert grid["13:00"] == "available"


def test_adhoc_block_covers_its_interval():
    template = make_template(windows=[{"from": "13:00", "to": "17:00", "step_minutes": 15}])
    block = ScheduleBlock(branch_id=BRANCH, doctor_id=DOCTOR, date=MONDAY, from_time="14:00", to_time="15:00")
    grid = statuses(compose_day(MONDAY, template, [block]))
    assert [t for t, s in grid.items() if s == "blocked"] == ["14:00", "14:15", "14:30", "14:45"]
    assert grid["13:45"] == "available"
    assert grid["15:00"] == "available"


def test_exception_applies_only_to_its_date():
    template = make_template(exceptions=[{"date": MONDAY, "blocks": [{"from": "10:00", "to": "11:00"}]}])
    monday = statuses(compose_day(MONDAY, template))
    other_monday = statuses(compose_day("2026-10-26", template))
    assert monday["10:00"] == monday["10:30"] == "blocked"
    assert other_monday["10:00"] == other_monday["10:30"] == "available"


def test_booking_marks_overlapping_slots():
    grid = statuses(compose_day(MONDAY, make_template(), [], [make_appointment("09:15", 30)]))
    assert grid["09:00"] == "booked"
    assert grid["09:30"] == "booked"
    assert grid["10:00"] == "available"


def test_blocked_beats_booked():
    template = make_template(breaks=[{"from": "09:00", "to": "09:30"}])
    block = ScheduleBlock(branch_id=BRANCH, doctor_id=DOCTOR, date=MONDAY, from_time="10:00", to_time="10:30")
    appointments = [make_appointment("09:00", 120)]
    grid = statuses(compose_day(MONDAY, template, [block], appointments))
    assert grid["09:00"] == "blocked"
    assert grid["10:00"] == "blocked"
    assert grid["09:30"] == "booked"
    assert grid["10:30"] == "booked"


def test_inactive_appointments_do_not_book():
    appointments = [make_appointment("09:00", status="cancelled"), make_appointment("09:30", status="completed")]
    grid = statuses(compose_day(MONDAY, make_template(), [], appointments))
    assert grid["09:00"] == grid["09:30"] == "available"


def test_reference_duration_is_independent_of_step():
    template = make_template(windows=[{"from": "09:00", "to": "10:00", "step_minutes": 10}])
    grid = statuses(compose_day(MONDAY, template, [], [make_appointment("09:40", 10)], reference_minutes=30))
    # 09:20 + 30 reaches past 09:40
    assert grid["09:10"] == "available"
    assert grid["09:20"] == "booked"
    assert grid["09:40"] == "booked"
    assert grid["09:50"] == "available"


def test_windows_are_concatenated_in_order():
    template = make_template(windows=[
        {"from": "09:00", "to": "10:00", "step_minutes": 30},
        {"from": "16:00", "to": "17:00", "step_minutes": 20},
    ])
    times = [slot.time for slot in compose_day(MONDAY, template).slots]
    assert times == ["09:00", "09:30", "16:00", "16:20", "16:40"]


@pytest.mark.asyncio
async def test_compute_availability_reads_each_day(session):
    session.add(make_template())
    session.add(make_template(day_of_week=2, windows=[{"from": "15:00", "to": "16:00", "step_minutes": 30}]))
    session.add(ScheduleBlock(branch_id=BRANCH, doctor_id=DOCTOR, date=TUESDAY, from_time="15:30", to_time="16:00"))
    session.add(make_appointment("09:00", date=MONDAY))
    session.add(make_appointment("09:00", date=MONDAY, status="cancelled"))
    # Another branch must not leak in
    session.add(make_template(branch_id="branch-other", day_of_week=0))
    await session.commit()

    service = AvailabilityService(session)
    days = await service.compute_availability(BRANCH, DOCTOR, "2026-10-18", TUESDAY)

    assert [d.date for d in days] == ["2026-10-18", MONDAY, TUESDAY]
    assert days[0].slots == []
    assert statuses(days[1])["09:00"] == "booked"
    assert statuses(days[1])["09:30"] == "available"
    assert statuses(days[2]) == {"15:00": "available", "15:30": "blocked"}


@pytest.mark.asyncio
async def test_compute_availability_validates_input(session):
    service = AvailabilityService(session)
    with pytest.raises(ValidationError):
        await service.compute_availability(BRANCH, DOCTOR, "2026-10-20", "2026-10-19")
    with pytest.raises(ValidationError):
        await service.compute_availability(BRANCH, DOCTOR, "20-10-2026", "2026-10-21")
    with pytest.raises(ValidationError):
        await service.compute_availability(BRANCH, "", MONDAY, MONDAY)
    with pytest.raises(ValidationError):
        await service.compute_availability(BRANCH, DOCTOR, "2026-01-01", "2026-12-31")
