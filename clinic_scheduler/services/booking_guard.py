from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinic_scheduler.core.exceptions import ConflictError
from clinic_scheduler.core.logger import logger
from clinic_scheduler.db.models import BookingLedger

CONCURRENT_CHANGE = "Schedule changed while booking, please pick the slot again"


class BookingGuard:
    """Compare-and-swap on the doctor-day ledger.

    ``observe`` is called before the conflict read, ``claim`` after the
    appointment write and before commit. If another booking committed for
    the same doctor-day in between, ``claim`` raises ``ConflictError``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def observe(self, branch_id: str, doctor_id: str, date: str) -> Optional[int]:
        stmt = select(BookingLedger.version).where(
            BookingLedger.branch_id == branch_id,
            BookingLedger.doctor_id == doctor_id,
            BookingLedger.date == date,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def claim(self, branch_id: str, doctor_id: str, date: str, seen_version: Optional[int]):
        if seen_version is None:
            ledger = BookingLedger(branch_id=branch_id, doctor_id=doctor_id, date=date, version=1)
            self.session.add(ledger)
            try:
                await self.session.flush()
            except IntegrityError:
                logger.warning(f"Ledger race on {branch_id}/{doctor_id}/{date}")
                raise ConflictError(CONCURRENT_CHANGE)
            return

        stmt = (
            update(BookingLedger)
            .where(
                BookingLedger.branch_id == branch_id,
                BookingLedger.doctor_id == doctor_id,
                BookingLedger.date == date,
                BookingLedger.version == seen_version,
            )
            .values(version=BookingLedger.version + 1)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            logger.warning(f"Ledger version moved past {seen_version} on {branch_id}/{doctor_id}/{date}")
            raise ConflictError(CONCURRENT_CHANGE)
