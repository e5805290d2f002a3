from typing import Optional, Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinic_scheduler.db.models import Patient
from clinic_scheduler.schemas.patient import PatientSnapshot


class PatientDirectory(Protocol):
    async def snapshot(self, branch_id: str, patient_id: UUID) -> Optional[PatientSnapshot]:
        ...


class SqlPatientDirectory:
    """Looks up the snapshot embedded in an appointment at booking time."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def snapshot(self, branch_id: str, patient_id: UUID) -> Optional[PatientSnapshot]:
        stmt = select(Patient).where(
            Patient.id == patient_id,
            Patient.branch_id == branch_id,
        )
        result = await self.session.execute(stmt)
        patient = result.scalars().first()
        if not patient:
            return None
        return PatientSnapshot(
            id=str(patient.id),
            mrn=patient.mrn,
            name=patient.full_name,
            phone=patient.phone,
            email=patient.email,
        )
