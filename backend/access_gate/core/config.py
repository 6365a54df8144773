from pydantic_settings import BaseSettings
from typing import Optional

class Settings(BaseSettings):
    # Application
    PROJECT_NAME: str = "Access Gate"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "production"

    # Database
    DATABASE_URL: str = "sqlite:///./access_gate.db"

    # Event scope (empty means no active event is selected)
    ACTIVE_EVENT_ID: str = ""

    # Roles that are told how to enroll a missing participant
    ADMIN_ROLES: list = ["super_admin", "admin_responsable", "admin"]

    # Scan processing
    COLLABORATOR_TIMEOUT_SECONDS: float = 10.0  # 0 disables the bound
    STRICT_TRANSITIONS: bool = False  # conditional write on the expected prior state

    # Security
    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 720

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: Optional[str] = "access_gate.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

settings = Settings()
