from typing import Iterator

from clinic_scheduler.core.utils import from_minutes, to_minutes

MIN_STEP_MINUTES = 5


class SlotSequence:
    """Candidate start times of a working window.

    Iterating yields ``"HH:MM"`` strings starting at ``start`` and stepping by
    ``step_minutes`` until ``end`` (exclusive). Each ``iter()`` starts over.
    """

    def __init__(self, start: str, end: str, step_minutes: int = 30):
        self.start = start
        self.end = end
        self.step_minutes = max(MIN_STEP_MINUTES, int(step_minutes or 30))

    @classmethod
    def from_window(cls, window: dict) -> "SlotSequence":
        return cls(window.get("from"), window.get("to"), window.get("step_minutes", 30))

    def __iter__(self) -> Iterator[str]:
        current = to_minutes(self.start)
        end = to_minutes(self.end)
        while current < end:
            yield from_minutes(current)
            current += self.step_minutes

    def __len__(self) -> int:
        span = to_minutes(self.end) - to_minutes(self.start)
        if span <= 0:
            return 0
        return -(-span // self.step_minutes)

    def __repr__(self) -> str:
        return f"SlotSequence({self.start!r}, {self.end!r}, step_minutes={self.step_minutes})"
