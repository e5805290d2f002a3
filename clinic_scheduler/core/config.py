from pydantic_settings import BaseSettings
from typing import Dict, List, Optional

class Settings(BaseSettings):
    PROJECT_NAME: str = "Clinic Scheduler"
    API_V1_STR: str = "/api/v1"
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "password"
    POSTGRES_DB: str = "clinic_scheduler"
    DATABASE_URL: Optional[str] = None
    DB_ECHO: bool = False
    LOG_LEVEL: str = "INFO"
    CREATE_TABLES_ON_STARTUP: bool = False

    REDIS_URL: str = "redis://localhost:6379/0"
    SECRET_KEY: str = "change-this-secret-key-in-production-please"
    ALGORITHM: str = "HS256"
    PERMISSION_CACHE_TTL_SECONDS: int = 300
    ROLE_PERMISSIONS: Dict[str, List[str]] = {
        "ADMIN": ["appointment:read", "appointment:write", "schedule:read", "schedule:write"],
        "RECEPTIONIST": ["appointment:read", "appointment:write", "schedule:read"],
        "DOCTOR": ["appointment:read", "schedule:read"],
    }

    # Width of a slot when testing it against a booking. Independent of window step.
    SLOT_REFERENCE_MINUTES: int = 30
    DEFAULT_DURATION_MINUTES: int = 30
    DEFAULT_DEPARTMENT: str = "GEN"
    MAX_AVAILABILITY_DAYS: int = 62
    MAX_PAGE_SIZE: int = 100

    class Config:
        case_sensitive = True
        env_file = ".env"

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        if not self.DATABASE_URL:
            self.DATABASE_URL = f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}/{self.POSTGRES_DB}"

settings = Settings()
