import enum
from pathlib import Path
from tempfile import gettempdir
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from yarl import URL

TEMP_DIR = Path(gettempdir())


class LogLevel(str, enum.Enum):
    """Possible log levels."""

    NOTSET = "NOTSET"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    FATAL = "FATAL"


class Settings(BaseSettings):
    """
    Application settings.

    These parameters can be configured
    with environment variables.
    """

    host: str = "127.0.0.1"
    port: int = 8000
    # quantity of workers for uvicorn
    workers_count: int = 1
    # Enable uvicorn reloading
    reload: bool = False

    # Current environment
    environment: str = "dev"

    log_level: LogLevel = LogLevel.INFO

    # Variables for the database
    db_driver: str = "sqlite+aiosqlite"
    db_file: Path = TEMP_DIR / "taskflow.sqlite3"
    db_host: str = "localhost"
    db_port: int = 5432
    db_user: str = "taskflow"
    db_pass: str = "taskflow"
    db_base: str = "taskflow"
    db_echo: bool = False

    # Auth
    secret_key: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # Grpc endpoint for opentelemetry.
    # E.G. http://localhost:4317
    opentelemetry_endpoint: Optional[str] = None

    # Apps whose models.py registers tables on the shared metadata
    app_names: List[str] = ["tasks", "time_tracking"]

    @property
    def db_url(self) -> URL:
        """
        Assemble database URL from settings.

        :return: database URL.
        """
        if self.db_driver.startswith("sqlite"):
            return URL.build(scheme=self.db_driver, path=f"///{self.db_file}")
        return URL.build(
            scheme=self.db_driver,
            host=self.db_host,
            port=self.db_port,
            user=self.db_user,
            password=self.db_pass,
            path=f"/{self.db_base}",
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="TASKFLOW_",
        env_file_encoding="utf-8",
    )


settings = Settings()
