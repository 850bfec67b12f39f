import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from barberpro.core.config import Settings, get_settings
from barberpro.core.database import get_db
from barberpro.core.security import AuthSession, get_auth_session, require_roles, require_session
from barberpro.models.profile import UserRole
from barberpro.schemas.dashboard import DashboardLayout
from barberpro.services.dashboards import build_layout

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/")
def root(auth: AuthSession = Depends(get_auth_session)):
    require_session(auth)
    return RedirectResponse(auth.redirect_path, status_code=status.HTTP_303_SEE_OTHER)


@router.get("/test")
def component_test(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)):
    """Connection and configuration diagnostics."""
    try:
        db.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.error("Database check failed: %s", e)
        database = "error"

    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "auth_url": settings.auth_url,
        "anon_key_configured": bool(settings.supabase_anon_key),
        "jwt_secret_configured": bool(settings.supabase_jwt_secret),
        "roles": [r.value for r in UserRole],
    }


@router.get("/admin", response_model=DashboardLayout)
def admin_dashboard(
    auth: AuthSession = Depends(require_roles(UserRole.admin)),
    db: Session = Depends(get_db),
):
    return build_layout(db, auth.user, "/admin")


@router.get("/barber", response_model=DashboardLayout)
def barber_dashboard(
    auth: AuthSession = Depends(require_roles(UserRole.barber)),
    db: Session = Depends(get_db),
):
    return build_layout(db, auth.user, "/barber")


@router.get("/customer", response_model=DashboardLayout)
def customer_dashboard(
    auth: AuthSession = Depends(require_roles(UserRole.customer)),
    db: Session = Depends(get_db),
):
    return build_layout(db, auth.user, "/customer")
