import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from sqlalchemy.orm import Session

from barberpro.core.config import Settings, get_settings
from barberpro.core.database import get_db
from barberpro.core.errors import AuthAdminError, BackendUnavailableError
from barberpro.core.security import LOGIN_PATH, AuthSession, dashboard_path_for, get_auth_session, require_session
from barberpro.models.profile import Profile
from barberpro.schemas.auth import LoginPage, LoginRequest, LoginResponse
from barberpro.services.auth_admin import AuthAdminClient

logger = logging.getLogger(__name__)

router = APIRouter()


def get_auth_client(settings: Settings = Depends(get_settings)) -> AuthAdminClient:
    return AuthAdminClient.from_settings(settings)


@router.get("/login", response_model=LoginPage)
def login_page(auth: AuthSession = Depends(get_auth_session)):
    """Login form descriptor; signed-in users are sent to their dashboard."""
    if auth.is_authenticated:
        return RedirectResponse(auth.redirect_path, status_code=status.HTTP_303_SEE_OTHER)
    return LoginPage()


@router.post("/login", response_model=LoginResponse)
def login(
    req: LoginRequest,
    response: Response,
    db: Session = Depends(get_db),
    client: AuthAdminClient = Depends(get_auth_client),
    settings: Settings = Depends(get_settings),
):
    try:
        tokens = client.sign_in_with_password(req.email.lower(), req.password)
    except AuthAdminError as e:
        logger.info("Login rejected for %s: %s", req.email, e.message)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    except BackendUnavailableError as e:
        logger.error("Auth service unavailable: %s", e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication service unavailable, try again later",
        )

    profile = db.get(Profile, UUID(tokens.user.id))
    if profile is None or not profile.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Profile not found or inactive",
        )

    response.set_cookie(
        settings.session_cookie_name,
        tokens.access_token,
        max_age=tokens.expires_in,
        httponly=True,
        samesite="lax",
    )
    return LoginResponse(
        access_token=tokens.access_token,
        expires_in=tokens.expires_in,
        user_id=str(profile.id),
        email=profile.email,
        role=profile.role.value,
        redirect_to=dashboard_path_for(profile.role),
    )


@router.post("/logout")
def logout(response: Response, settings: Settings = Depends(get_settings)):
    response.delete_cookie(settings.session_cookie_name)
    return {"redirect_to": LOGIN_PATH}


@router.get("/me")
def me(auth: AuthSession = Depends(get_auth_session)):
    require_session(auth)
    if not auth.is_authenticated:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return {
        "id": str(auth.user.id),
        "email": auth.user.email,
        "full_name": auth.user.full_name,
        "role": auth.user.role.value,
        "dashboard": auth.redirect_path,
    }
