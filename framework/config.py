from typing import List, Optional
from urllib.parse import quote_plus
from pydantic import EmailStr
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "Tenant Workspace"
    APP_DESCRIPTION: str = "Multi-tenant project and task management API"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True
    SECRET_KEY: str = "your-super-secret-key-change-it-in-production"

    # --- Token ---
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # --- Database (SQLModel) ---
    DB_DRIVER: str = "mysql+aiomysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "saas_db"
    DATABASE_URL_OVERRIDE: Optional[str] = None  # e.g. sqlite+aiosqlite:///./local.db
    DB_CONNECT_TIMEOUT: int = 5  # seconds
    DB_POOL_TIMEOUT: int = 10  # seconds waiting for a pooled connection
    DB_CREATE_TABLES: bool = False  # create missing tables at startup (dev only)

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"{self.DB_DRIVER}://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Audit side channel ---
    AUDIT_QUEUE_SIZE: int = 1000
    AUDIT_DRAIN_TIMEOUT: float = 5.0  # seconds to flush pending entries on shutdown

    # --- Bootstrap seed (global super admin) ---
    SEED_SUPER_ADMIN_EMAIL: Optional[EmailStr] = None  # normalized like login emails
    SEED_SUPER_ADMIN_PASSWORD: Optional[str] = None
    SEED_SUPER_ADMIN_FULL_NAME: str = "Platform Administrator"

    # --- Logging ---
    LOG_DIR: str = "logs"

    # --- HTTP ---
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]
    API_PREFIX: str = "/api"

    # --- Gunicorn process name (optional) ---
    GUNICORN_PROC_NAME: Optional[str] = None  # Fallback to APP_NAME when empty

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
