"""Per-request session and role gate for the dashboards.

Access tokens are issued by the hosted auth service; the API only verifies
them and resolves the caller's Profile.
"""

import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from barberpro.core.config import Settings, get_settings
from barberpro.core.database import get_db
from barberpro.core.errors import ConfigurationError
from barberpro.models.profile import Profile, UserRole

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
AUDIENCE = "authenticated"
LOGIN_PATH = "/auth/login"

DASHBOARD_PATHS = {
    UserRole.admin: "/admin",
    UserRole.barber: "/barber",
    UserRole.customer: "/customer",
}

security = HTTPBearer(auto_error=False)


@dataclass
class SessionUser:
    id: UUID
    email: str
    role: UserRole
    full_name: Optional[str] = None
    barbershop_id: Optional[UUID] = None


@dataclass
class AuthSession:
    user: Optional[SessionUser] = None
    error: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def redirect_path(self) -> str:
        return dashboard_path_for(self.user.role) if self.user else LOGIN_PATH


class RoleRedirect(Exception):
    def __init__(self, path: str):
        super().__init__(path)
        self.path = path


def dashboard_path_for(role) -> str:
    """The single dashboard a role may land on."""
    try:
        return DASHBOARD_PATHS[UserRole(role)]
    except ValueError:
        return LOGIN_PATH


def decode_access_token(token: str, settings: Settings) -> dict:
    if not settings.supabase_jwt_secret:
        raise ConfigurationError("SUPABASE_JWT_SECRET is not set; sessions cannot be verified.")
    return jwt.decode(token, settings.supabase_jwt_secret, algorithms=[ALGORITHM], audience=AUDIENCE)


def get_auth_session(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthSession:
    token = credentials.credentials if credentials else request.cookies.get(settings.session_cookie_name)
    if not token:
        return AuthSession()

    try:
        payload = decode_access_token(token, settings)
        user_id = UUID(payload.get("sub") or "")
    except ConfigurationError as e:
        logger.error("%s", e)
        return AuthSession(error=str(e))
    except (JWTError, ValueError):
        # Expired or forged tokens count as signed out
        return AuthSession()

    profile = db.get(Profile, user_id)
    if profile is None:
        return AuthSession(error="Your account has no profile yet. Ask an administrator to run the seed.")
    if not profile.is_active:
        return AuthSession(error="This account is inactive.")

    return AuthSession(
        user=SessionUser(
            id=profile.id,
            email=profile.email,
            role=profile.role,
            full_name=profile.full_name,
            barbershop_id=profile.barbershop_id,
        )
    )


def require_session(auth: AuthSession) -> AuthSession:
    if auth.error:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=auth.error)
    return auth


def require_roles(*roles: UserRole):
    """Dependency factory: signed-out callers go to the login page, other roles to their own dashboard."""
    allowed = {UserRole(r) for r in roles}

    def dependency(auth: AuthSession = Depends(get_auth_session)) -> AuthSession:
        require_session(auth)
        if not auth.is_authenticated:
            raise RoleRedirect(LOGIN_PATH)
        if auth.user.role not in allowed:
            raise RoleRedirect(dashboard_path_for(auth.user.role))
        return auth

    return dependency


def role_redirect_handler(request: Request, exc: RoleRedirect) -> RedirectResponse:
    return RedirectResponse(exc.path, status_code=status.HTTP_303_SEE_OTHER)
