from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from clinic_scheduler.core.exceptions import ConflictError, NotFoundError, ValidationError
from clinic_scheduler.core.logger import logger
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.core.utils import parse_date, utcnow
from clinic_scheduler.db.models import ScheduleBlock, ScheduleTemplate
from clinic_scheduler.schemas.schedule import BlockCreate, TemplateUpsert
from clinic_scheduler.services.audit_service import AuditSink


class ScheduleService:
    def __init__(self, session: AsyncSession, audit: Optional[AuditSink] = None):
        self.session = session
        self.audit = audit

    async def _find_template(self, branch_id: str, doctor_id: str, day_of_week: int) -> Optional[ScheduleTemplate]:
        stmt = select(ScheduleTemplate).where(
            ScheduleTemplate.branch_id == branch_id,
            ScheduleTemplate.doctor_id == doctor_id,
            ScheduleTemplate.day_of_week == day_of_week,
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def upsert_template(self, context: AuthorizationContext, data: TemplateUpsert) -> ScheduleTemplate:
        windows = [w.model_dump(by_alias=True) for w in data.windows]
        breaks = [b.model_dump(by_alias=True) for b in data.breaks]
        exceptions = [e.model_dump(by_alias=True) for e in data.exceptions]

        template = await self._find_template(context.branch_id, data.doctor_id, data.day_of_week)
        if template:
            template.windows = windows
            template.breaks = breaks
            template.exceptions = exceptions
            template.updated_at = utcnow()
        else:
            template = ScheduleTemplate(
                branch_id=context.branch_id,
                doctor_id=data.doctor_id,
                day_of_week=data.day_of_week,
                windows=windows,
                breaks=breaks,
                exceptions=exceptions,
            )
        self.session.add(template)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(
                f"A template for doctor {data.doctor_id} on day {data.day_of_week} already exists"
            )
        await self.session.refresh(template)

        logger.info(f"Template upserted: branch={context.branch_id} doctor={data.doctor_id} day={data.day_of_week}")
        if self.audit:
            await self.audit.record(
                context, "schedule.template.upsert", resource="schedules",
                target={"doctor_id": data.doctor_id, "day_of_week": data.day_of_week},
            )
        return template

    async def get_template(self, context: AuthorizationContext, doctor_id: str, day_of_week: int) -> ScheduleTemplate:
        if not 0 <= day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 and 6")
        template = await self._find_template(context.branch_id, doctor_id, day_of_week)
        if not template:
            raise NotFoundError("Schedule template")
        return template

    async def list_templates(self, context: AuthorizationContext, doctor_id: str) -> List[ScheduleTemplate]:
        if not doctor_id:
            raise ValidationError("doctor_id is required")
        stmt = select(ScheduleTemplate).where(
            ScheduleTemplate.branch_id == context.branch_id,
            ScheduleTemplate.doctor_id == doctor_id,
        ).order_by(ScheduleTemplate.day_of_week)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def create_block(self, context: AuthorizationContext, data: BlockCreate) -> ScheduleBlock:
        block = ScheduleBlock(
            branch_id=context.branch_id,
            doctor_id=data.doctor_id,
            date=data.date,
            from_time=data.start,
            to_time=data.end,
            reason=data.reason.strip() if data.reason else None,
            created_by=context.actor_id,
        )
        self.session.add(block)
        await self.session.commit()
        await self.session.refresh(block)

        logger.info(f"Block created: branch={context.branch_id} doctor={data.doctor_id} {data.date} {data.start}-{data.end}")
        if self.audit:
            await self.audit.record(
                context, "schedule.block.create", resource="schedules",
                target={"id": str(block.id), "doctor_id": data.doctor_id, "date": data.date},
            )
        return block

    async def list_blocks(
        self, context: AuthorizationContext, doctor_id: str, date_from: str, date_to: str
    ) -> List[ScheduleBlock]:
        if not doctor_id:
            raise ValidationError("doctor_id is required")
        parse_date(date_from, "date_from")
        parse_date(date_to, "date_to")
        stmt = select(ScheduleBlock).where(
            ScheduleBlock.branch_id == context.branch_id,
            ScheduleBlock.doctor_id == doctor_id,
            ScheduleBlock.date >= date_from,
            ScheduleBlock.date <= date_to,
        ).order_by(ScheduleBlock.date, ScheduleBlock.from_time)
        result = await self.session.execute(stmt)
        return result.scalars().all()
