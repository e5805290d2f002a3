import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from clinic_scheduler.core.logger import logger

class LogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} in {process_time:.4f}s",
            extra={"branch": request.headers.get("x-branch-id", "-")},
        )

        return response
