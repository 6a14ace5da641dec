from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api import analytics, application, auth, health, interviews, notifications, reminders, resumes
from .models.db.database import engine, Base
from .models.db import user as user_model  # noqa: F401
from .models.db import application as application_model  # noqa: F401
from .models.db import resume as resume_model  # noqa: F401
from .models.db import notification as notification_model  # noqa: F401
from .services.auth_events import AuthEventBus, log_auth_event
from .utils.logging_config import setup_logging, get_logger
from .config.settings import get_settings

settings = get_settings()

setup_logging(
    level=settings.log_level,
    log_file=settings.log_file,
    fmt=settings.log_format,
    datefmt=settings.log_date_format,
)
logger = get_logger(__name__)

# Validate configuration on startup
missing_settings = settings.validate_required_settings()
if missing_settings:
    for setting in missing_settings:
        logger.error("Configuration error: %s", setting)
    if settings.is_production():
        raise RuntimeError("Invalid configuration for production environment")

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    docs_url="/docs" if settings.api_docs_enabled else None,
    redoc_url="/redoc" if settings.api_docs_enabled else None,
)
app.state.auth_events = AuthEventBus()

if settings.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Routers
app.include_router(health.router, prefix="/api", tags=["Health Check"])
app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
app.include_router(application.router, prefix="/api/applications", tags=["Application Tracker"])
app.include_router(resumes.router, prefix="/api/resumes", tags=["Resumes"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])
app.include_router(interviews.router, prefix="/api/interviews", tags=["Interviews"])
app.include_router(reminders.router, prefix="/api/reminders", tags=["Follow-up Reminders"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])


@app.on_event("startup")
def on_startup():
    """Initialize database tables and attach the auth audit listener."""
    logger.info("Starting %s...", settings.app_name)
    Base.metadata.create_all(bind=engine)
    app.state.auth_audit = app.state.auth_events.subscribe(log_auth_event)
    logger.info("Database tables initialized successfully")


@app.on_event("shutdown")
def on_shutdown():
    subscription = getattr(app.state, "auth_audit", None)
    if subscription is not None:
        subscription.unsubscribe()
    logger.info("Stopped %s", settings.app_name)


@app.get("/")
def read_root():
    return {"message": f"Welcome to the {settings.app_name} API"}
