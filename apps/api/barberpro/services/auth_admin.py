from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional

import requests

from barberpro.core.config import Settings, get_settings
from barberpro.core.errors import AuthAdminError, BackendUnavailableError, MissingDependencyError

logger = logging.getLogger(__name__)

TRANSIENT_CREATE_MARKER = "database error creating new user"
ALREADY_REGISTERED_MARKERS = ("already registered", "already been registered", "already exists")


@dataclass
class AuthUser:
    id: str
    email: str
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "AuthUser":
        return cls(
            id=payload["id"],
            email=(payload.get("email") or "").lower(),
            user_metadata=payload.get("user_metadata") or {},
        )


@dataclass
class AuthTokens:
    access_token: str
    refresh_token: Optional[str]
    expires_in: Optional[int]
    user: AuthUser


def is_transient_create_error(exc: BaseException) -> bool:
    return isinstance(exc, AuthAdminError) and TRANSIENT_CREATE_MARKER in exc.message.lower()


def is_already_registered(exc: BaseException) -> bool:
    if not isinstance(exc, AuthAdminError):
        return False
    message = exc.message.lower()
    return any(marker in message for marker in ALREADY_REGISTERED_MARKERS)


def _error_message(r: requests.Response) -> str:
    try:
        body = r.json()
    except ValueError:
        return r.text or r.reason
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return str(body)


class AuthAdminClient:
    """Admin side of the hosted auth service (GoTrue REST API).

    Uses the service-role key; never expose it to browsers.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        anon_key: str = "",
        page_size: int = 50,
        timeout: float = 15.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.anon_key = anon_key
        self.page_size = page_size
        self.timeout = timeout
        self.http = session or requests.Session()

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "AuthAdminClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.auth_url,
            service_key=settings.supabase_service_role_key,
            anon_key=settings.supabase_anon_key,
            page_size=settings.auth_page_size,
            timeout=settings.http_timeout_seconds,
        )

    def _headers(self, key: str) -> Dict[str, str]:
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, use_anon_key: bool = False, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        key = self.anon_key if use_anon_key else self.service_key
        try:
            r = self.http.request(
                method,
                url,
                headers=self._headers(key),
                timeout=self.timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise BackendUnavailableError(f"Auth service unreachable at {url}: {e}") from e

        if r.status_code in (401, 403) and not use_anon_key:
            raise MissingDependencyError(
                f"Auth admin API rejected the service role key ({r.status_code}: {_error_message(r)}). "
                "Set SUPABASE_SERVICE_ROLE_KEY to the project's service_role key."
            )
        if r.status_code >= 400:
            raise AuthAdminError(r.status_code, _error_message(r))
        if r.status_code == 204 or not r.content:
            return None
        return r.json()

    # ======================
    # Users
    # ======================

    def list_users(self, page: int = 1, per_page: Optional[int] = None, email_filter: Optional[str] = None) -> List[AuthUser]:
        params: Dict[str, Any] = {"page": page, "per_page": per_page or self.page_size}
        if email_filter:
            params["filter"] = email_filter
        body = self._request("GET", "/admin/users", params=params) or {}
        users = body.get("users", []) if isinstance(body, dict) else body
        logger.debug("Fetched %d auth users (page %d)", len(users), page)
        return [AuthUser.from_payload(u) for u in users]

    def iter_users(self, email_filter: Optional[str] = None) -> Iterator[AuthUser]:
        page = 1
        while True:
            users = self.list_users(page=page, email_filter=email_filter)
            yield from users
            if len(users) < self.page_size:
                return
            page += 1

    def find_user_by_email(self, email: str) -> Optional[AuthUser]:
        # The filter is a substring search on newer servers and ignored on older
        # ones, so the exact match still happens here.
        wanted = email.lower()
        for user in self.iter_users(email_filter=wanted):
            if user.email == wanted:
                return user
        return None

    def create_user(self, email: str, password: str, user_metadata: Optional[Dict[str, Any]] = None) -> AuthUser:
        body = self._request(
            "POST",
            "/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": True,
                "user_metadata": user_metadata or {},
            },
        )
        # Older servers wrap the user, newer ones return it directly
        payload = body.get("user", body) if isinstance(body, dict) else body
        return AuthUser.from_payload(payload)

    def delete_user(self, user_id: str) -> None:
        self._request("DELETE", f"/admin/users/{user_id}")

    # ======================
    # Sessions (anon key)
    # ======================

    def sign_in_with_password(self, email: str, password: str) -> AuthTokens:
        body = self._request(
            "POST",
            "/token",
            use_anon_key=True,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return AuthTokens(
            access_token=body["access_token"],
            refresh_token=body.get("refresh_token"),
            expires_in=body.get("expires_in"),
            user=AuthUser.from_payload(body["user"]),
        )
