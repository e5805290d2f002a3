from datetime import datetime, timezone

import pytest

from clinic_scheduler.core.exceptions import InvalidTransitionError, ValidationError
from clinic_scheduler.db.models import Appointment, AppointmentStatus
from clinic_scheduler.services.appointment_state import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    apply_transition,
    can_transition,
)

NOW = datetime(2026, 10, 19, 9, 5, tzinfo=timezone.utc)


def appointment(status="scheduled"):
    return Appointment(branch_id="b", doctor_id="d", date="2026-10-19", time="09:00", status=status)


@pytest.mark.parametrize(
    "current, target",
    [
        ("scheduled", "confirmed"),
        ("scheduled", "in-progress"),
        ("scheduled", "cancelled"),
        ("scheduled", "no-show"),
        ("confirmed", "in-progress"),
        ("confirmed", "cancelled"),
        ("confirmed", "no-show"),
        ("in-progress", "completed"),
    ],
)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        ("scheduled", "completed"),
        ("confirmed", "scheduled"),
        ("in-progress", "cancelled"),
        ("completed", "cancelled"),
        ("cancelled", "scheduled"),
        ("no-show", "confirmed"),
    ],
)
def test_forbidden_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransitionError) as excinfo:
        apply_transition(appointment(current), target)
    assert excinfo.value.from_status == current
    assert excinfo.value.to_status == target


def test_completed_cannot_be_cancelled():
    with pytest.raises(InvalidTransitionError) as excinfo:
        apply_transition(appointment("completed"), AppointmentStatus.CANCELLED)
    assert str(excinfo.value) == "Cannot transition completed → cancelled"


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {"completed", "cancelled", "no-show"}
    assert set(ALLOWED_TRANSITIONS) == {s.value for s in AppointmentStatus}


def test_start_and_complete_stamp_times():
    appt = appointment()
    assert apply_transition(appt, "in-progress", now=NOW)
    assert appt.status == "in-progress"
    assert appt.started_at == NOW
    assert appt.completed_at is None

    later = datetime(2026, 10, 19, 9, 40, tzinfo=timezone.utc)
    assert apply_transition(appt, "completed", now=later)
    assert appt.completed_at == later
    assert appt.started_at == NOW


def test_cancel_records_actor():
    appt = appointment("confirmed")
    apply_transition(appt, "cancelled", actor_id="user-7", now=NOW)
    assert appt.cancelled_at == NOW
    assert appt.cancelled_by == "user-7"


@pytest.mark.parametrize("status", [s.value for s in AppointmentStatus])
def test_same_status_is_a_no_op(status):
    appt = appointment(status)
    appt.started_at = NOW
    assert apply_transition(appt, status, actor_id="user-9", now=datetime(2030, 1, 1, tzinfo=timezone.utc)) is False
    assert appt.status == status
    assert appt.started_at == NOW
    assert appt.cancelled_by is None
    assert appt.updated_at is None


def test_unknown_status_is_rejected():
    with pytest.raises(ValidationError):
        apply_transition(appointment(), "archived")
