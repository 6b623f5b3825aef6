"""Main entry point for the Causal Graph Simulator FastAPI application.

This module creates and configures the FastAPI app instance that exposes
simulation sessions over HTTP and WebSocket.

To run the development server:
    uv run uvicorn main:app --reload

To run in production:
    uv run uvicorn main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from pydantic import ValidationError

from api.dependencies import initialize_session_registry, shutdown_session_registry
from api.exceptions import (
    SessionNotFoundError,
    generic_exception_handler,
    runtime_error_handler,
    session_not_found_handler,
    validation_exception_handler,
    value_error_handler,
)
from api.routes import models as models_routes
from api.routes import sessions as sessions_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the session registry at startup and stop all workers at shutdown.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to FastAPI to handle requests.
    """
    logger.info("Starting simulator - initializing session registry")
    initialize_session_registry()

    yield

    logger.info("Shutting down simulator - stopping session workers")
    shutdown_session_registry()


app = FastAPI(
    title="Causal Graph Simulator",
    description="Step-based simulation of numeric causal graphs with breakpoints and run control",
    version="0.1.0",
    lifespan=lifespan,
)

# Specific exceptions before general ones
app.add_exception_handler(SessionNotFoundError, session_not_found_handler)
app.add_exception_handler(ValidationError, validation_exception_handler)
app.add_exception_handler(ValueError, value_error_handler)
app.add_exception_handler(RuntimeError, runtime_error_handler)
app.add_exception_handler(Exception, generic_exception_handler)

app.include_router(sessions_routes.router)
app.include_router(models_routes.router)


@app.get("/")
async def root():
    """Root endpoint - returns a welcome message."""
    return {
        "message": "Welcome to the Causal Graph Simulator API",
        "version": "0.1.0",
        "docs_url": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy"}
