from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings  # type: ignore


class Settings(BaseSettings):
    # Core
    MODE: str = "dev"  # dev, prod
    LOG_LEVEL: str = "INFO"

    # Master Key (single active key, version 1)
    MASTER_KEY: Optional[str] = None  # 64 hex chars; takes precedence over the file
    MASTER_KEY_FILE: str = "data/.master.key"

    # Storage
    STORAGE_BACKEND: str = "sql"  # sql, memory
    DATABASE_URL: str = "sqlite:///data/transactions.db"
    RUN_MIGRATIONS: bool = False

    # Listing
    LIST_DEFAULT_LIMIT: int = 100
    LIST_MAX_LIMIT: int = 1000

    # Observability
    TRACING_ENABLED: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: Optional[str] = None

    @field_validator("MODE", "STORAGE_BACKEND")
    @classmethod
    def lower(cls, v: str) -> str:
        return v.lower()

    @property
    def is_prod(self) -> bool:
        return self.MODE == "prod"

    def check_startup(self) -> None:
        """Normative startup checks. Raises RuntimeError on misconfiguration."""
        if self.STORAGE_BACKEND not in ("sql", "memory"):
            raise RuntimeError(f"STORAGE_BACKEND must be 'sql' or 'memory', got '{self.STORAGE_BACKEND}'")
        if self.is_prod:
            if self.STORAGE_BACKEND == "memory":
                raise RuntimeError("In PROD, STORAGE_BACKEND must be 'sql'")
            if self.TRACING_ENABLED and not self.OTEL_EXPORTER_OTLP_ENDPOINT:
                raise RuntimeError("In PROD, OTEL_EXPORTER_OTLP_ENDPOINT must be present when tracing is enabled")

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"


def get_settings() -> Settings:
    """Build settings from the current environment."""
    return Settings()
