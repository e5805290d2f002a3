from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import BranchContextMissing
from clinic_scheduler.core.redis import PermissionCache
from clinic_scheduler.core.security import AuthorizationContext, decode_access_token
from clinic_scheduler.db.session import get_session, get_session_factory
from clinic_scheduler.services.appointment_service import AppointmentService
from clinic_scheduler.services.audit_service import AuditService
from clinic_scheduler.services.availability_service import AvailabilityService
from clinic_scheduler.services.schedule_service import ScheduleService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_permission_cache(request: Request) -> PermissionCache:
    return request.app.state.permission_cache


async def get_auth_context(
    token: str = Depends(oauth2_scheme),
    x_branch_id: Optional[str] = Header(default=None),
    cache: PermissionCache = Depends(get_permission_cache),
) -> AuthorizationContext:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception
    actor_id = payload.get("sub")
    if actor_id is None:
        raise credentials_exception

    branch_id = x_branch_id or payload.get("branch_id")
    if not branch_id:
        raise BranchContextMissing()

    roles = tuple(payload.get("roles") or ())
    permissions = await cache.resolve(roles)
    return AuthorizationContext(
        actor_id=str(actor_id),
        branch_id=str(branch_id),
        roles=roles,
        permissions=permissions,
    )


def get_audit_service(
    session_factory: async_sessionmaker = Depends(get_session_factory),
) -> AuditService:
    return AuditService(session_factory)


async def get_schedule_service(
    session: AsyncSession = Depends(get_session),
    audit: AuditService = Depends(get_audit_service),
) -> ScheduleService:
    return ScheduleService(session, audit)


async def get_availability_service(session: AsyncSession = Depends(get_session)) -> AvailabilityService:
    return AvailabilityService(session)


async def get_appointment_service(
    session: AsyncSession = Depends(get_session),
    audit: AuditService = Depends(get_audit_service),
) -> AppointmentService:
    return AppointmentService(session, audit)
