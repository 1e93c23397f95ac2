import json
from typing import Optional, List, Dict

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "Remedial Attendance Service"
    VERSION: str = "1.0.0"
    DEBUG: bool = Field(default=False)

    # Database Settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./remedial.db")
    DB_ECHO: bool = Field(default=False)

    # Authentication Settings
    SECRET_KEY: str = Field(default="change-me-remedial-attendance-secret-key")
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=30)

    # CORS Settings
    ALLOWED_ORIGINS: List[str] = Field(
        default=[
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO")
    LOG_DIR: Optional[str] = Field(default=None)

    # Remedial Schedule Settings
    SCHOOL_YEAR_START_MONTH: int = Field(default=6, ge=1, le=12)
    SCHOOL_YEAR: Optional[str] = Field(default=None, pattern=r"^\d{4}-\d{4}$")
    REMEDIAL_SUBJECTS: List[str] = Field(default=["Math", "English", "Filipino"])

    @field_validator("ALLOWED_ORIGINS", "REMEDIAL_SUBJECTS", mode="before")
    @classmethod
    def parse_list(cls, v):
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )


# Initialize settings
settings = Settings()


# Helper Functions
def get_database_url() -> str:
    return settings.DATABASE_URL


def get_logging_config() -> Dict[str, Optional[str]]:
    return {
        "log_level": settings.LOG_LEVEL,
        "log_dir": settings.LOG_DIR
    }
