from fastapi import FastAPI, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from barberpro.core.config import get_settings
from barberpro.core.logging_config import configure_logging
from barberpro.core.security import LOGIN_PATH, RoleRedirect, role_redirect_handler
from barberpro.routers.auth import router as auth_router
from barberpro.routers.dashboards import router as dashboards_router


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, console=False)

    app = FastAPI(title="BarberPro API")

    # Comma-separated list, e.g.:
    # CORS_ORIGINS="http://localhost:5173,https://barberpro.example.com"
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RoleRedirect, role_redirect_handler)

    app.include_router(auth_router, prefix="/auth", tags=["auth"])
    app.include_router(dashboards_router, tags=["dashboards"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # Must stay last: anything unknown goes to the login page
    @app.get("/{path:path}", include_in_schema=False)
    def fallback(path: str):
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)

    return app


app = create_app()
