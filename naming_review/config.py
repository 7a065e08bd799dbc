from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )
    
    # Database
    database_url: str = "sqlite+aiosqlite:///./naming_review.db"
    auto_create_tables: bool = False  # dev only, production runs alembic
    storage_timeout_seconds: float = 10.0
    
    # Review queue
    default_page_size: int = 10
    max_page_size: int = 100
    
    # Approved-name directory
    directory_search_limit: int = 100
    
    # AI suggestion collaborator (disabled when unset)
    suggestion_service_url: Optional[str] = None
    suggestion_timeout_seconds: float = 5.0
    
    # Auth
    dev_auth_bypass: bool = False
    
    # App
    debug: bool = False
    log_level: str = "INFO"
    allowed_origins: str = ""  # comma-separated


settings = Settings()
