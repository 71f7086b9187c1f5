import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.config.settings import Settings, get_settings
from app.core.exceptions import SkillSwapError
from app.database.supabase_client import SupabaseClients, SupabaseStore
from app.modules.auth import routes as auth_routes
from app.modules.auth.provider import AuthProvider, build_auth_provider
from app.modules.frontend import routes as frontend_routes
from app.modules.users import routes as users_routes

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def _validation_message(exc: RequestValidationError) -> str:
    fields = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        fields.append(f"{'.'.join(loc) or 'body'}: {error.get('msg')}")
    return "; ".join(fields) or "invalid request"


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"X-XSS-Protection", b"1; mode=block"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


def create_app(
    settings: Optional[Settings] = None,
    store=None,
    auth_provider: Optional[AuthProvider] = None,
) -> FastAPI:
    """
    Build the application.

    Store clients and the auth provider are constructed here, once, and
    shared through ``app.state``. Tests pass their own ``store`` and
    ``auth_provider`` to stay off the network.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    clients = None
    if store is None or (auth_provider is None and settings.auth_backend == "supabase"):
        clients = SupabaseClients.from_settings(settings)
    if store is None:
        store = SupabaseStore(clients.service, settings.store_timeout_seconds)
    if auth_provider is None:
        auth_provider = build_auth_provider(settings, store, clients)

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        redirect_slashes=False,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.auth_provider = auth_provider
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.exception_handler(SkillSwapError)
    async def skillswap_exception_handler(request: Request, exc: SkillSwapError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled exception: %s", exc)
        if settings.is_production:
            return JSONResponse(status_code=500, content={"error": "internal server error"})
        return JSONResponse(status_code=500, content={"error": "internal server error", "detail": str(exc)})

    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include module routes
    app.include_router(auth_routes.router)
    app.include_router(users_routes.router)
    app.include_router(frontend_routes.router)

    @app.on_event("startup")
    async def startup_event():
        logger.info(f"Application startup ({settings.auth_backend} auth backend)")

    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info("Application shutdown")

    @app.get("/health")
    @limiter.exempt
    async def health():
        return {"status": "healthy"}

    @app.get("/ready")
    @limiter.exempt
    async def ready():
        """Readiness check: extend here with store checks if needed."""
        return {"status": "ready"}

    return app


def run() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
