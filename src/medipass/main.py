"""MediPass FastAPI application factory.

create_app() is the single entry point for building the ASGI app. It
wires middleware (request ID, auth guard, CORS) and routes, and injects
the document store and audit sink.

The document store is acquired once here and handed by reference to the
record repository, the sharing ledger and the grant resolver.

Usage:
    # Local development (in-memory store, HS256 tokens)
    from medipass import create_app, MediPassSettings
    app = create_app(MediPassSettings(supabase_jwt_secret="dev-secret"))

    # Deployed (Supabase store built from settings)
    app = create_app(MediPassSettings.from_env())

    # Testing (full DI control)
    app = create_app(settings, document_store=store, token_verifier=verifier)
"""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .settings import MediPassSettings
from .db import SupabaseClient, SupabaseDocumentStore
from .observability import configure_logging, get_logger, request_id_ctx
from .observability.metrics import metrics_text
from .protocols import DocumentStore
from .records.repository import MedicalRecordRepository
from .records.routes import create_medical_info_router
from .security.auth_guard import AuthGuardMiddleware
from .security.token_verify import TokenVerifier, create_token_verifier
from .sharing.access import create_share_access_router
from .sharing.audit import LoggingShareAuditEmitter, ShareAuditEmitter
from .sharing.ledger import SharingLedger
from .sharing.resolver import GrantResolver
from .sharing.routes import create_share_router

logger = get_logger(__name__)


@dataclass(frozen=True)
class AppDependencies:
    """Collaborators stored on ``app.state.deps``."""

    document_store: DocumentStore
    audit_emitter: ShareAuditEmitter
    records: MedicalRecordRepository
    ledger: SharingLedger
    resolver: GrantResolver


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Generate or propagate X-Request-ID and bind it for logging."""

    async def dispatch(self, request: Request, call_next):  # type: ignore[override]
        request_id = request.headers.get("x-request-id") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_ctx.set(request_id)
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = request_id
        return response


def _build_document_store(settings: MediPassSettings) -> DocumentStore:
    if settings.is_local:
        from .inmemory import InMemoryDocumentStore

        return InMemoryDocumentStore()

    client = SupabaseClient(
        supabase_url=settings.supabase_url,
        service_role_key=settings.supabase_service_role_key,
    )
    return SupabaseDocumentStore(client)


def create_app(
    settings: MediPassSettings | None = None,
    *,
    document_store: DocumentStore | None = None,
    audit_emitter: ShareAuditEmitter | None = None,
    token_verifier: TokenVerifier | None = None,
) -> FastAPI:
    """Create a configured MediPass FastAPI application.

    Raises:
        ValueError: If settings validation fails, or no token verifier can
            be built from settings.
    """
    if settings is None:
        settings = MediPassSettings()

    errors = settings.validate()
    if errors:
        raise ValueError(
            "MediPass settings validation failed:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    configure_logging(level=settings.log_level, log_format=settings.log_format)

    store = document_store or _build_document_store(settings)
    audit = audit_emitter or LoggingShareAuditEmitter()
    verifier = token_verifier or create_token_verifier(
        supabase_url=settings.supabase_url or None,
        jwt_secret=settings.supabase_jwt_secret or None,
    )

    deps = AppDependencies(
        document_store=store,
        audit_emitter=audit,
        records=MedicalRecordRepository(store),
        ledger=SharingLedger(store, audit=audit),
        resolver=GrantResolver(store, audit=audit),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("medipass_startup", environment=settings.environment)
        yield
        if isinstance(store, SupabaseDocumentStore):
            await store.aclose()
        logger.info("medipass_shutdown")

    app = FastAPI(
        title="MediPass",
        description="Medical record storage and time-limited sharing",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.deps = deps
    app.state.settings = settings

    # Execution order: RequestID -> AuthGuard -> CORS -> route handler
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AuthGuardMiddleware, token_verifier=verifier)
    app.add_middleware(RequestIDMiddleware)

    @app.get("/health")
    async def health():
        return {"status": "ok", "environment": settings.environment}

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        body, content_type = metrics_text()
        return Response(content=body, media_type=content_type)

    app.include_router(create_medical_info_router(deps.records))
    app.include_router(create_share_router(deps.ledger, deps.records, settings))
    app.include_router(create_share_access_router(deps.resolver))

    return app


# For uvicorn, use --factory:
#   uvicorn medipass.main:create_app --factory
