
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Formation Admin API"
    app_env: str = "development"
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 10

    # Database (any async SQLAlchemy URL; SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./formation_dev.db",
        alias="DATABASE_URL",
    )

    # Document storage (local filesystem backend)
    storage_local_path: str = Field(default="./storage", alias="STORAGE_LOCAL_PATH")

    # Request audit trail (AuditMiddleware)
    audit_enabled: bool = Field(default=True, alias="AUDIT_ENABLED")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

settings = Settings()
