"""
Module 10 - FastAPI Application

Main application setup and configuration.

Usage:
    uvicorn api.app:app --reload

    # Or run directly
    python -m api.app
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.deps import load_runtime_config
from api.errors import APIError, api_error_handler, generic_error_handler, registry_error_handler
from api.routes import health, history, proofs, requests, state
from core.config.runtime import RuntimeConfig
from core.schemas.errors import RegistryException
from orchestrator.ledger import Ledger


def _resolve_log_level() -> int:
    """Resolve log level from IDSTATE_LOG_LEVEL, defaulting to INFO."""
    raw = os.getenv("IDSTATE_LOG_LEVEL")
    return getattr(logging, (raw or "INFO").upper(), logging.INFO)


logging.basicConfig(
    level=_resolve_log_level(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)


def create_app(ledger: Optional[Ledger] = None, config: Optional[RuntimeConfig] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        ledger: Ledger to serve; built from config when omitted
        config: Runtime config; loaded from file + env when omitted
    """
    if ledger is None:
        ledger = Ledger(config or load_runtime_config())

    app = FastAPI(
        title="Identity State Registry API",
        description="""
HTTP API over an identity state registry.

## Endpoints

- **POST /state/transit** - Publish an identity state transition
- **GET /state/{id}** - Latest state of an identity
- **GET /gist/...** - GIST root, root history and GIST proofs
- **PUT /requests/{request_id}** - Register or update a proof request
- **POST /requests/{request_id}/responses** - Submit a proof response
- **POST /proofs/linked** - Check that proofs share a link id
- **GET /health** - Health check

Validators are whitelisted programmatically on the ledger.
        """,
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.ledger = ledger

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register exception handlers
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RegistryException, registry_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    # Include routers
    app.include_router(health.router)
    app.include_router(state.router)
    app.include_router(history.router)
    app.include_router(requests.router)
    app.include_router(proofs.router)

    return app


# Create the application instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    config = app.state.ledger.config
    uvicorn.run(app, host=config.api.host, port=config.api.port)
