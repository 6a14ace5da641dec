"""
Health check and configuration status API endpoints.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..config.settings import get_settings
from ..models.db.database import engine

logger = logging.getLogger(__name__)
router = APIRouter()


def _database_reachable() -> bool:
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except SQLAlchemyError as e:
        logger.error("Database health check failed: %s", e)
        return False


@router.get("/health", summary="Health Check")
def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    """
    settings = get_settings()
    return {
        "status": "healthy",
        "message": f"Welcome to {settings.app_name} v{settings.app_version}",
        "environment": settings.environment,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/health/detailed", summary="Detailed Health Check")
def detailed_health_check() -> Dict[str, Any]:
    """
    Detailed health check with configuration and storage status.
    """
    settings = get_settings()
    database_ok = _database_reachable()
    health_status = {
        "status": "healthy" if database_ok else "unhealthy",
        "app_info": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug,
            "testing": settings.testing,
        },
        "configuration": {
            "log_level": settings.log_level,
            "database_reachable": database_ok,
            "cors_enabled": settings.cors_enabled,
            "api_docs_enabled": settings.api_docs_enabled,
        },
        "storage": {
            "upload_directory": settings.upload_directory,
            "upload_directory_exists": os.path.isdir(settings.upload_directory),
            "max_file_size": settings.max_file_size,
        },
        "reminders": {
            "auto_reminders_enabled": settings.auto_reminders_enabled,
            "follow_up_reminder_days": settings.follow_up_reminder_days,
            "status_check_reminder_days": settings.status_check_reminder_days,
        },
    }

    config_issues = settings.validate_required_settings()
    if config_issues:
        if database_ok:
            health_status["status"] = "degraded"
        health_status["configuration_issues"] = config_issues
        logger.warning("Configuration issues found: %s", config_issues)

    return health_status


@router.get("/config/validate", summary="Validate Configuration")
def validate_configuration() -> Dict[str, Any]:
    """
    Validate the current configuration and return any issues.
    """
    settings = get_settings()
    config_issues = settings.validate_required_settings()

    validation_result = {
        "valid": len(config_issues) == 0,
        "environment": settings.environment,
        "issues_count": len(config_issues),
        "issues": config_issues,
    }

    if not validation_result["valid"]:
        logger.error("Configuration validation failed: %s", config_issues)

    return validation_result
