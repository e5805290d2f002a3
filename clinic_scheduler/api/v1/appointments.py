from fastapi import APIRouter, Depends, Query
from typing import Optional
from uuid import UUID

from clinic_scheduler.api.deps import get_appointment_service, get_auth_context
from clinic_scheduler.core.config import settings
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.db.models import AppointmentStatus
from clinic_scheduler.schemas.appointment import (
    AppointmentCreate,
    AppointmentFilter,
    AppointmentPage,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
)
from clinic_scheduler.services.appointment_service import AppointmentService

router = APIRouter()

@router.get("/", response_model=AppointmentPage)
async def list_appointments(
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    doctor_id: Optional[str] = None,
    department: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    q: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    context: AuthorizationContext = Depends(get_auth_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    limit = min(limit, settings.MAX_PAGE_SIZE)
    filters = AppointmentFilter(
        date_from=date_from,
        date_to=date_to,
        doctor_id=doctor_id,
        department=department,
        status=status,
        q=q,
    )
    items, total = await service.list_appointments(context, filters, page, limit)
    return AppointmentPage(
        items=[AppointmentResponse.model_validate(a) for a in items],
        total=total,
        page=page,
        limit=limit,
    )

@router.post("/", response_model=AppointmentResponse, status_code=201)
async def create_appointment(
    request: AppointmentCreate,
    context: AuthorizationContext = Depends(get_auth_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.create_appointment(context, request)

@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def read_appointment(
    appointment_id: UUID,
    context: AuthorizationContext = Depends(get_auth_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.get_appointment(context, appointment_id)

@router.patch("/{appointment_id}", response_model=AppointmentResponse)
async def update_appointment(
    appointment_id: UUID,
    request: AppointmentUpdate,
    context: AuthorizationContext = Depends(get_auth_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.update_appointment(context, appointment_id, request)

@router.post("/{appointment_id}/status", response_model=AppointmentResponse)
async def set_appointment_status(
    appointment_id: UUID,
    request: AppointmentStatusUpdate,
    context: AuthorizationContext = Depends(get_auth_context),
    service: AppointmentService = Depends(get_appointment_service)
):
    return await service.set_status(context, appointment_id, request.status)
