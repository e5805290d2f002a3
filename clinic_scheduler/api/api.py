from fastapi import APIRouter
from clinic_scheduler.api.v1 import appointments, schedules

api_router = APIRouter()

api_router.include_router(schedules.router, prefix="/schedules", tags=["schedules"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["appointments"])
