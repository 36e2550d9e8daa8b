from typing import ClassVar, Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path


def _split_comma_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    app_name: ClassVar[str] = "Marquee"
    version: ClassVar[str] = "0.3.0"

    database_url: str = "sqlite:///./storage/database/media.db"

    # --- DATABASE SERVER (optional) ---
    # When DB_HOST is set these win over DATABASE_URL
    db_host: Optional[str] = None
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "media_center"
    db_port: int = 3306
    db_driver: str = "mysql+pymysql"

    # How many times to retry opening a session on a dropped connection
    db_connect_retries: int = 3

    # --- ALLOWED ORIGINS ---
    # Comma-separated list of domains (e.g., "http://localhost:3000,http://localhost:8080")
    allowed_origins_raw: str = Field(default="*", alias="ALLOWED_ORIGINS")

    @property
    def allowed_origins(self) -> list[str]:
        return _split_comma_list(self.allowed_origins_raw)

    # --- CATALOG (TMDB) ---
    tmdb_api_key: Optional[str] = None
    tmdb_base_url: str = "https://api.themoviedb.org/3"
    tmdb_image_base_url: str = "https://image.tmdb.org/t/p"
    catalog_timeout: float = 30.0
    catalog_max_concurrency: int = 4

    # --- LIBRARY ROOTS ---
    # MEDIA_LIBRARY_PATH is the shared fallback for both types
    media_library_path: Optional[Path] = None
    movies_library_path: Optional[Path] = None
    tv_library_path: Optional[Path] = None

    # --- SCHEDULED AUDIT ---
    audit_interval: str = "daily"  # daily | weekly | disabled
    audit_hour: int = 5
    audit_window_hours: int = 24

    # Storage paths
    log_dir: Path = Path("storage/logs")
    cache_dir: Path = Path("storage/cache")
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env",
                                      extra="ignore",
                                      env_ignore_empty=True,
                                      case_sensitive=False,
                                      env_nested_delimiter=None
                                      )

    @property
    def sqlalchemy_url(self) -> str:
        """DATABASE_URL, or a server URL composed from the DB_* fields"""
        if not self.db_host:
            return self.database_url
        return (
            f"{self.db_driver}://{self.db_user}:{self.db_password}"
            f"@{self.db_host}:{self.db_port}/{self.db_name}"
        )

    def library_root(self, media_type: str) -> Optional[Path]:
        """
        Resolve the library root for a media type.
        Type specific roots fall back to the shared MEDIA_LIBRARY_PATH.
        """
        if media_type == "movie":
            return self.movies_library_path or self.media_library_path
        if media_type == "tv":
            return self.tv_library_path or self.media_library_path
        return self.media_library_path


settings = Settings()
