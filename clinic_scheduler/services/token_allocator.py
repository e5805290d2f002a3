from typing import Protocol
from uuid import uuid4

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from clinic_scheduler.core.config import settings
from clinic_scheduler.db.models import TokenCounter


class TokenSequence(Protocol):
    async def next_value(self, branch_id: str, department: str, on_date: str) -> int:
        ...


class CounterTokenSequence:
    """Monotonic counter per (branch, department, date), kept in ``token_counters``.

    Runs inside the caller's transaction, so a rolled back booking does not
    consume a number.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    def _insert(self):
        dialect = self.session.get_bind().dialect.name
        return sqlite_insert if dialect == "sqlite" else pg_insert

    async def next_value(self, branch_id: str, department: str, on_date: str) -> int:
        insert = self._insert()
        stmt = (
            insert(TokenCounter)
            .values(id=uuid4(), branch_id=branch_id, department=department, date=on_date, last_token=1)
            .on_conflict_do_update(
                index_elements=["branch_id", "department", "date"],
                set_={"last_token": TokenCounter.last_token + 1},
            )
            .returning(TokenCounter.last_token)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()


def department_prefix(department_code: str) -> str:
    code = (department_code or "").strip() or settings.DEFAULT_DEPARTMENT
    return code[:3].upper()


class TokenAllocator:
    def __init__(self, sequence: TokenSequence):
        self.sequence = sequence

    async def allocate(self, branch_id: str, department_code: str, on_date: str) -> str:
        prefix = department_prefix(department_code)
        number = await self.sequence.next_value(branch_id, prefix, on_date)
        return f"{prefix}{number:03d}"
