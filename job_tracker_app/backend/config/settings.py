"""
Centralized configuration management for the Job Application Tracker.
All environment variables, secrets, and configuration settings are managed here.
"""
import secrets
from typing import Optional, List
from pydantic import validator
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings with validation and type hints."""

    # =============================================================================
    # APPLICATION SETTINGS
    # =============================================================================
    app_name: str = "Job Application Tracker"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # =============================================================================
    # SECURITY SETTINGS
    # =============================================================================
    secret_key: str = secrets.token_urlsafe(32)
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30 * 24 * 60  # 30 days

    @validator('algorithm')
    def validate_algorithm(cls, v):
        if v not in ("HS256", "HS384", "HS512"):
            raise ValueError('Only HMAC signing algorithms are supported')
        return v

    # =============================================================================
    # DATABASE SETTINGS
    # =============================================================================
    database_url: str = "sqlite:///./job_tracker.db"
    database_echo: bool = False

    # =============================================================================
    # LOGGING SETTINGS
    # =============================================================================
    log_level: str = "INFO"
    log_file: Optional[str] = None
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"

    # =============================================================================
    # FILE UPLOAD SETTINGS
    # =============================================================================
    max_file_size: int = 10 * 1024 * 1024  # 10 MB
    allowed_file_extensions: List[str] = [".pdf", ".doc", ".docx", ".txt"]
    upload_directory: str = "uploads"

    # =============================================================================
    # REMINDER AND RELATIONSHIP SETTINGS
    # =============================================================================
    auto_reminders_enabled: bool = True
    follow_up_reminder_days: int = 7
    status_check_reminder_days: int = 14

    # Attaching the same resume twice creates a second link when enabled
    allow_duplicate_resume_links: bool = False

    @validator('follow_up_reminder_days', 'status_check_reminder_days')
    def validate_reminder_days(cls, v):
        if v < 0:
            raise ValueError('Reminder offsets must be zero or positive')
        return v

    # =============================================================================
    # DEVELOPMENT SETTINGS
    # =============================================================================
    reload_on_change: bool = False
    api_docs_enabled: bool = True
    cors_enabled: bool = True
    cors_origins: List[str] = ["http://localhost:8081", "http://localhost:19006"]

    # =============================================================================
    # CONFIGURATION LOADING
    # =============================================================================
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"

    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.testing or self.environment.lower() == "testing"

    def get_database_url(self) -> str:
        """Get database URL with appropriate settings for environment."""
        if self.is_testing():
            return "sqlite:///:memory:"
        return self.database_url

    def validate_required_settings(self) -> List[str]:
        """Validate that all required settings are properly configured."""
        missing = []

        if self.is_production():
            if not self.secret_key or len(self.secret_key) < 32:
                missing.append("SECRET_KEY must be at least 32 characters in production")

            if self.debug:
                missing.append("DEBUG must be False in production")

            if self.database_url.startswith("sqlite"):
                missing.append("DATABASE_URL should not point to SQLite in production")

        if self.log_level not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            missing.append(f"Invalid LOG_LEVEL: {self.log_level}")

        if self.status_check_reminder_days < self.follow_up_reminder_days:
            missing.append("STATUS_CHECK_REMINDER_DAYS must not be earlier than FOLLOW_UP_REMINDER_DAYS")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).
    This function is cached to avoid recreating the settings object multiple times.
    """
    return Settings()
