"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for tracing of the
web application:
- FastAPI request tracing
- SQLAlchemy statement tracing
- Sign-in and startup events

Everything here is a no-op unless ``LOGFIRE_ENABLED`` is set and a
``LOGFIRE_TOKEN`` is available.
"""

import logging
import os
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "bestregi")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.1.0")

# Feature flags
LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")


def initialize_logfire(
    app: FastAPI | None = None, environment: str = "Production", engine: AsyncEngine | None = None
) -> bool:
    """
    Initialize Logfire for monitoring and tracing.

    Args:
        app: FastAPI application to instrument (optional).
        environment: Hosting environment name reported with every span.
        engine: Already-created database engine whose statements are traced.

    Returns:
        True when Logfire was configured, False when monitoring stays disabled.
    """
    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    try:
        import logfire

        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=environment,
        )

        if LOGFIRE_TRACE_SQLALCHEMY:
            logfire.instrument_sqlalchemy(engine=engine.sync_engine if engine is not None else None)
            logger.info("Logfire: SQLAlchemy instrumentation enabled")

        if LOGFIRE_TRACE_FASTAPI and app is not None:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")

        logger.info(f"Logfire monitoring initialized: environment={environment}, service={LOGFIRE_SERVICE_NAME}")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return False


def log_sign_in(user_name: str, outcome: str, context: Optional[dict] = None) -> None:
    """
    Record a sign-in attempt.

    Args:
        user_name: Name the caller tried to sign in with
        outcome: Result name (succeeded, failed, not_allowed, locked_out)
        context: Additional attributes
    """
    logger.info(f"Sign-in attempt for {user_name!r}: {outcome}")
    if not LOGFIRE_ENABLED:
        return
    try:
        import logfire

        logfire.info("Sign-in attempt", user_name=user_name, outcome=outcome, **(context or {}))
    except Exception:
        logger.debug(f"Could not log sign-in to Logfire: user_name={user_name}")
