from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import schemas
from ..exceptions import TrackerError
from ..models.db.database import get_db
from ..services import analytics_service
from ..services import application_tracker as application_service
from ..utils.api_helpers import handle_service_error
from .auth import get_current_active_user

router = APIRouter()


@router.get("/", response_model=schemas.AnalyticsSummary)
def read_analytics(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    """
    Status distribution, six-month trend, top companies and success rate.
    """
    try:
        applications = application_service.get_applications_for_user(
            db, user_id=current_user.id, limit=None
        )
    except TrackerError as e:
        raise handle_service_error(e, "load applications")

    summary = analytics_service.compute_analytics(applications)
    summary.recent_applications = [
        schemas.Application.model_validate(app) for app in summary.recent_applications
    ]
    return summary


@router.get("/dashboard", response_model=schemas.DashboardStats)
def read_dashboard_stats(
    db: Session = Depends(get_db),
    current_user: schemas.User = Depends(get_current_active_user)
):
    try:
        return application_service.get_dashboard_stats(db, user_id=current_user.id)
    except TrackerError as e:
        raise handle_service_error(e, "load dashboard")
