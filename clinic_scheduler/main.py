from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from clinic_scheduler.core.config import settings
from clinic_scheduler.core.exceptions import SchedulingError
from clinic_scheduler.core.logger import logger
from clinic_scheduler.core.redis import PermissionCache
from clinic_scheduler.middleware.log_middleware import LogMiddleware

@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.CREATE_TABLES_ON_STARTUP:
        from clinic_scheduler.db.session import init_db
        await init_db()
    if not hasattr(app.state, "permission_cache"):
        app.state.permission_cache = PermissionCache.from_url(settings.REDIS_URL)
    yield
    await app.state.permission_cache.close()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

from fastapi.middleware.cors import CORSMiddleware

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LogMiddleware)

@app.exception_handler(SchedulingError)
async def scheduling_error_handler(request: Request, exc: SchedulingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.get("/")
async def root():
    return {"message": "Welcome to Clinic Scheduler API"}

from clinic_scheduler.api.api import api_router
app.include_router(api_router, prefix=settings.API_V1_STR)
