"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version)
used for monitoring and deployment verification.
"""

from fastapi import APIRouter, Request

from bestregi.server.core import constant

router = APIRouter()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the web server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the web server.",
    response_description="Version object.",
)
async def version(request: Request):
    """
    Get application version.

    Returns the application version and the hosting environment it runs in.
    """
    settings = request.app.state.settings
    return {"name": constant.PROJECT_NAME, "version": constant.VERSION, "environment": settings.environment}
