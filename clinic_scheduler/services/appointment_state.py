from datetime import datetime
from typing import Dict, FrozenSet, Optional

from clinic_scheduler.core.exceptions import InvalidTransitionError, ValidationError
from clinic_scheduler.core.utils import utcnow
from clinic_scheduler.db.models import Appointment, AppointmentStatus

S = AppointmentStatus

ALLOWED_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    S.SCHEDULED.value: frozenset({S.CONFIRMED.value, S.IN_PROGRESS.value, S.CANCELLED.value, S.NO_SHOW.value}),
    S.CONFIRMED.value: frozenset({S.IN_PROGRESS.value, S.CANCELLED.value, S.NO_SHOW.value}),
    S.IN_PROGRESS.value: frozenset({S.COMPLETED.value}),
    S.COMPLETED.value: frozenset(),
    S.CANCELLED.value: frozenset(),
    S.NO_SHOW.value: frozenset(),
}

TERMINAL_STATUSES = frozenset(status for status, targets in ALLOWED_TRANSITIONS.items() if not targets)


def _value(status) -> str:
    return status.value if isinstance(status, AppointmentStatus) else str(status)


def can_transition(from_status, to_status) -> bool:
    current, target = _value(from_status), _value(to_status)
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def apply_transition(
    appointment: Appointment,
    to_status,
    actor_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Move ``appointment`` to ``to_status`` and stamp entry side effects.

    Returns False when the appointment already has that status; nothing is
    touched in that case.
    """
    target = _value(to_status)
    if target not in ALLOWED_TRANSITIONS:
        raise ValidationError(f"Invalid status '{target}'")

    current = appointment.status
    if current == target:
        return False
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)

    now = now or utcnow()
    appointment.status = target
    if target == S.IN_PROGRESS.value:
        appointment.started_at = now
    elif target == S.COMPLETED.value:
        appointment.completed_at = now
    elif target == S.CANCELLED.value:
        appointment.cancelled_at = now
        appointment.cancelled_by = actor_id
    appointment.updated_at = now
    return True
