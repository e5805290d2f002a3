from fastapi import APIRouter, Depends
from typing import List

from clinic_scheduler.api.deps import get_auth_context, get_availability_service, get_schedule_service
from clinic_scheduler.core.security import AuthorizationContext
from clinic_scheduler.schemas.schedule import (
    AvailabilityResponse,
    BlockCreate,
    BlockResponse,
    TemplateResponse,
    TemplateUpsert,
)
from clinic_scheduler.services.availability_service import AvailabilityService
from clinic_scheduler.services.schedule_service import ScheduleService

router = APIRouter()

@router.get("/", response_model=AvailabilityResponse)
async def get_availability(
    doctor_id: str,
    date_from: str, # YYYY-MM-DD
    date_to: str,
    context: AuthorizationContext = Depends(get_auth_context),
    service: AvailabilityService = Depends(get_availability_service)
):
    days = await service.compute_availability(context.branch_id, doctor_id, date_from, date_to)
    return AvailabilityResponse(days=days)

@router.post("/templates", response_model=TemplateResponse, status_code=201)
async def upsert_template(
    request: TemplateUpsert,
    context: AuthorizationContext = Depends(get_auth_context),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.upsert_template(context, request)

@router.get("/templates", response_model=List[TemplateResponse])
async def list_templates(
    doctor_id: str,
    context: AuthorizationContext = Depends(get_auth_context),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.list_templates(context, doctor_id)

@router.get("/templates/{doctor_id}/{day_of_week}", response_model=TemplateResponse)
async def read_template(
    doctor_id: str,
    day_of_week: int,
    context: AuthorizationContext = Depends(get_auth_context),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.get_template(context, doctor_id, day_of_week)

@router.post("/blocks", response_model=BlockResponse, status_code=201)
async def create_block(
    request: BlockCreate,
    context: AuthorizationContext = Depends(get_auth_context),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.create_block(context, request)

@router.get("/blocks", response_model=List[BlockResponse])
async def list_blocks(
    doctor_id: str,
    date_from: str,
    date_to: str,
    context: AuthorizationContext = Depends(get_auth_context),
    service: ScheduleService = Depends(get_schedule_service)
):
    return await service.list_blocks(context, doctor_id, date_from, date_to)
