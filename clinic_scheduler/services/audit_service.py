from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import async_sessionmaker

from clinic_scheduler.core.logger import logger
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.db.models import AuditLog


class AuditSink(Protocol):
    async def record(
        self,
        context: AuthorizationContext,
        action: str,
        resource: str = "appointments",
        outcome: str = "success",
        target: Optional[dict] = None,
        extra: Optional[dict] = None,
    ) -> None:
        ...


class AuditService:
    """Writes audit records on a session of its own.

    Called after the primary commit. Failures are logged and never reach
    the caller.
    """

    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory

    async def record(
        self,
        context: AuthorizationContext,
        action: str,
        resource: str = "appointments",
        outcome: str = "success",
        target: Optional[dict] = None,
        extra: Optional[dict] = None,
    ) -> None:
        try:
            async with self.session_factory() as session:
                session.add(AuditLog(
                    actor_id=context.actor_id,
                    branch_id=context.branch_id,
                    action=action,
                    resource=resource,
                    outcome=outcome,
                    target=target,
                    payload=extra,
                ))
                await session.commit()
        except Exception as e:
            logger.warning(f"[audit] failed to write audit record for {action}: {e}")
