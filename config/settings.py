"""
Application settings and configuration management.
DNS limits, storage paths and logging are all configured here.
"""
import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Info
    app_name: str = "Mail Authentication Engine"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server Configuration
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS Settings
    cors_origins: list = ["*"]  # Configure appropriately for production

    # Database Configuration
    database_path: str = "./data/mailauth.db"
    data_dir: str = "./data"
    seed_known_senders: bool = True

    # DNS Client Configuration
    dns_timeout: float = 5.0  # seconds, per query (resolver lifetime)
    dns_nameservers: Optional[List[str]] = None  # None = system resolv.conf

    # SPF Include Resolution
    spf_max_depth: int = 10
    spf_max_lookups: int = 10  # RFC 7208 section 4.6.4
    spf_max_ranges: int = 100

    # DKIM Selector Probing
    dkim_probe_limit: int = 8

    # Logging
    log_level: str = "info"
    log_file: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"

    def __init__(self, **kwargs):
        """Initialize settings and create necessary directories."""
        super().__init__(**kwargs)
        self._ensure_directories()

    def _ensure_directories(self):
        """Ensure the data directory and the database's parent exist."""
        directories = [
            self.data_dir,
            os.path.dirname(os.path.abspath(self.database_path)),
        ]

        for directory in directories:
            os.makedirs(directory, exist_ok=True)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures settings are loaded only once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
