# talleres_api/core/config.py
import os
from typing import ClassVar, List
from pydantic import BaseModel, Field

from dotenv import load_dotenv

load_dotenv()


def _default_database_url() -> str:
    data_dir = os.path.abspath(os.getenv("DATA_DIR", "./data"))
    os.makedirs(data_dir, exist_ok=True)
    return os.getenv("DATABASE_URL") or f"sqlite:///{os.path.join(data_dir, 'talleres.db')}"


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    # Constante (no es campo de Pydantic)
    DATA_DIR: ClassVar[str] = os.path.abspath(os.getenv("DATA_DIR", "./data"))

    ENVIRONMENT: str = Field(default_factory=lambda: os.getenv("ENVIRONMENT", "development"))
    DATABASE_URL: str = Field(default_factory=_default_database_url)
    SECRET_KEY: str = Field(default_factory=lambda: os.getenv("SECRET_KEY", "CHANGE_ME_SUPER_SECRET"))
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default_factory=lambda: int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440")))

    # pool / timeouts
    DB_POOL_SIZE: int = Field(default_factory=lambda: int(os.getenv("DB_POOL_SIZE", "20")))
    DB_MAX_OVERFLOW: int = Field(default_factory=lambda: int(os.getenv("DB_MAX_OVERFLOW", "0")))
    DB_POOL_TIMEOUT: int = Field(default_factory=lambda: int(os.getenv("DB_POOL_TIMEOUT", "60")))
    DB_STATEMENT_TIMEOUT_MS: int = Field(default_factory=lambda: int(os.getenv("DB_STATEMENT_TIMEOUT_MS", "30000")))
    SLOW_QUERY_MS: int = Field(default_factory=lambda: int(os.getenv("SLOW_QUERY_MS", "1000")))

    LOG_LEVEL: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    RUN_MIGRATIONS: bool = Field(default_factory=lambda: _as_bool(os.getenv("RUN_MIGRATIONS", "false")))
    CORS_ORIGINS: str = Field(default_factory=lambda: os.getenv("CORS_ORIGINS", "*"))

    # administrador inicial (opcional)
    ADMIN_EMAIL: str | None = Field(default_factory=lambda: os.getenv("ADMIN_EMAIL"))
    ADMIN_PASSWORD: str | None = Field(default_factory=lambda: os.getenv("ADMIN_PASSWORD"))

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
