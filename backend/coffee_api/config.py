"""
Coffee API - Application Configuration
=======================================

What:  Two configuration layers.
       - Settings: static process configuration read from the environment
         (or a .env file) with pydantic-settings.
       - ServiceConfig: the resolved, immutable configuration the application
         is wired with. Built once at startup by combining Settings with the
         database credentials fetched from the parameter store.
How:   The entrypoint constructs Settings, the startup orchestrator resolves a
       ServiceConfig from it, and create_app() receives only the ServiceConfig.
       No module-level settings singleton exists.
"""

from typing import Optional

from pydantic import BaseModel, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Settings(BaseSettings):
    """
    Process settings loaded from environment variables.

    All settings have defaults suitable for local development. Field names map
    to upper-case environment variables (DB_PORT, DB_NAME, PORT, ...).
    """

    # ── Database (local) ──────────────────────────────────────────────────
    db_name: str = Field(default="coffee_db", description="MySQL schema name")
    db_port: int = Field(default=3306, ge=1, le=65535)

    # Driver for SQLAlchemy's asyncio extension
    db_driver: str = Field(default="mysql+aiomysql")

    # Connection pool sizing; the pool is the only shared runtime resource
    db_pool_size: int = Field(default=10, ge=1, le=100)
    db_max_overflow: int = Field(default=5, ge=0, le=50)
    db_pool_pre_ping: bool = Field(default=True)
    db_pool_recycle: int = Field(default=3600, ge=60)

    # ── Parameter Store (remote database credentials) ─────────────────────
    use_parameter_store: bool = Field(
        default=True,
        description="Fetch DB host/user/password from AWS SSM Parameter Store",
    )
    aws_region: str = Field(default="us-east-1")

    db_host_parameter: str = Field(default="/prod/rds/coffee/host")
    db_user_parameter: str = Field(default="/prod/rds/coffee/user")
    db_password_parameter: str = Field(default="/prod/rds/coffee/password")

    # Local fallbacks used when a parameter cannot be resolved
    db_host_default: str = Field(default="localhost")
    db_user_default: str = Field(default="root")
    db_password_default: str = Field(default="")

    # ── Server ────────────────────────────────────────────────────────────
    bind_host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000, ge=1, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


class ServiceConfig(BaseModel):
    """
    Fully resolved configuration for one running service instance.

    Immutable once built. Passed explicitly to create_app() and Database;
    nothing else in the application reads the environment.
    """

    db_host: str
    db_port: int = 3306
    db_name: str = "coffee_db"
    db_user: str
    db_password: SecretStr = SecretStr("")
    db_driver: str = "mysql+aiomysql"

    db_pool_size: int = 10
    db_max_overflow: int = 5
    db_pool_pre_ping: bool = True
    db_pool_recycle: int = 3600

    bind_host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    model_config = {"frozen": True}

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        db_host: str,
        db_user: str,
        db_password: Optional[str],
    ) -> "ServiceConfig":
        """Combine static settings with the credentials resolved at startup."""
        return cls(
            db_host=db_host,
            db_port=settings.db_port,
            db_name=settings.db_name,
            db_user=db_user,
            db_password=SecretStr(db_password or ""),
            db_driver=settings.db_driver,
            db_pool_size=settings.db_pool_size,
            db_max_overflow=settings.db_max_overflow,
            db_pool_pre_ping=settings.db_pool_pre_ping,
            db_pool_recycle=settings.db_pool_recycle,
            bind_host=settings.bind_host,
            port=settings.port,
            log_level=settings.log_level,
        )

    @property
    def database_url(self) -> URL:
        """
        SQLAlchemy URL for the configured database.

        Built with URL.create() so credentials containing '@', '/' or ':' are
        escaped correctly.
        """
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password.get_secret_value() or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )
