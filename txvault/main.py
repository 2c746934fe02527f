"""txvault - Envelope-Encrypted Transaction Vault API."""
import sys
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from txvault.api.transactions import router as tx_router
from txvault.core.config import Settings, get_settings
from txvault.dependencies import build_vault
from txvault.domain.envelope.errors import MasterKeyError
from txvault.logging_hardening import setup_logging
from txvault.observability.tracing import instrument_engine, setup_opentelemetry
from txvault.routers import health

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: the master key is resolved exactly once, before serving
        try:
            vault = build_vault(settings)
        except (MasterKeyError, RuntimeError) as e:
            logger.critical(f"CRITICAL STARTUP ERROR: {e}")
            sys.exit(1)

        instrument_engine(vault.engine, app.state.tracer_provider)
        app.state.vault = vault
        logger.info(f"txvault ready (storage={settings.STORAGE_BACKEND}, mode={settings.MODE})")

        yield

        # Shutdown
        logger.info("Initiating graceful shutdown...")
        vault.close()
        logger.info("Shutdown complete.")

    app = FastAPI(
        title="txvault",
        description="Envelope-encrypted transaction storage (AES-256-GCM)",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.tracer_provider = setup_opentelemetry(app, settings)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content={"detail": {"error": {
                "code": "INVALID_REQUEST",
                "message": "Request body failed validation",
                "details": {"errors": errors},
            }}},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(
            status_code=500,
            content={"detail": {"error": {"code": "INTERNAL_ERROR", "message": "Internal server error"}}},
        )

    # Mount routers
    app.include_router(health.router, tags=["Health"])
    app.include_router(tx_router.router, prefix="/tx", tags=["Transactions"])

    return app


app = create_app()
