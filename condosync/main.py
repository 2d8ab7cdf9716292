"""
Condo Sync - Main Application
Gestão de condomínio com sincronização em tempo real
"""
import logging
import inspect
import os
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Optional, Union

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from condosync.core import (
    settings,
    CondoError,
    ValidationError,
    ConflictError,
    PolicyError,
    NotFoundError,
    RemoteError,
)
from condosync.database import init_db
from condosync.sync import SyncContext, build_default_context
from condosync.api import (
    auth_router,
    users_router,
    requests_router,
    reservations_router,
    occurrences_router,
    votings_router,
    notices_router,
    notifications_router,
    documents_router,
    push_router,
    sync_router
)

# Rate limiting
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from condosync.api.auth import limiter

logger = logging.getLogger(__name__)

ERROR_STATUS = (
    (ValidationError, 422),
    (ConflictError, 409),
    (PolicyError, 403),
    (NotFoundError, 404),
    (RemoteError, 502),
)


async def condo_error_handler(request: Request, exc: CondoError):
    """Erros de negócio -> HTTP com a mensagem amigável"""
    status_code = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 400)
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "reason": exc.reason.value}
    )


# Middleware de headers de seguranca
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adiciona headers de seguranca em todas as respostas"""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        # Sem cache para autenticacao e dados pessoais
        if "/auth" in request.url.path or "/notifications" in request.url.path:
            response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
            response.headers["Pragma"] = "no-cache"
        return response


def create_app(sync_factory: Optional[Callable[[], Union[SyncContext, Awaitable[SyncContext]]]] = None) -> FastAPI:
    """
    Cria a aplicação. `sync_factory` permite injetar um contexto
    (testes); por padrão usa o banco configurado.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifecycle do aplicativo"""
        print(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
        print(f"Environment: {settings.ENVIRONMENT}")

        if sync_factory is None:
            await init_db()
            print("Database initialized")
            sync = build_default_context()
        else:
            sync = sync_factory()
            if inspect.isawaitable(sync):
                sync = await sync

        await sync.start()
        app.state.sync = sync

        admin = await sync.gateway().ensure_admin()
        if admin:
            print(f"Admin inicial criado: {admin.username}")

        yield

        print("Shutting down...")
        await sync.stop()

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Condominium management with real-time synchronization",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None
    )

    # Configura rate limiter na aplicacao
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_exception_handler(CondoError, condo_error_handler)

    # Headers de seguranca (adicionar ANTES do CORS)
    app.add_middleware(SecurityHeadersMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(users_router, prefix="/api")
    app.include_router(requests_router, prefix="/api")
    app.include_router(reservations_router, prefix="/api")
    app.include_router(occurrences_router, prefix="/api")
    app.include_router(votings_router, prefix="/api")
    app.include_router(notices_router, prefix="/api")
    app.include_router(notifications_router, prefix="/api")
    app.include_router(documents_router, prefix="/api")
    app.include_router(push_router, prefix="/api")
    app.include_router(sync_router, prefix="/api")

    # Static files para uploads
    uploads_dir = os.path.abspath(settings.UPLOAD_DIR)
    os.makedirs(uploads_dir, exist_ok=True)
    app.mount("/uploads", StaticFiles(directory=uploads_dir), name="uploads")

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running"
        }

    @app.get("/health")
    async def health():
        """Health check"""
        sync = getattr(app.state, "sync", None)
        return {
            "status": "healthy",
            "sync": "running" if sync and sync.running else "stopped"
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.LOG_LEVEL)
    uvicorn.run(
        "condosync.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
