"""
Per-request context handed to controllers and page models.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
from typing import Dict

from sqlmodel.ext.asyncio.session import AsyncSession
from starlette.requests import Request

from bestregi.core.database.context import BestRegiContext
from bestregi.server.core.config import Settings
from bestregi.server.hosting import DB_CONTEXT, ENDPOINTS, IDENTITY, VIEWS, ServiceRegistry
from bestregi.server.identity.services import IdentityServices
from bestregi.server.identity.sign_in_manager import SignInManager
from bestregi.server.identity.user_manager import UserManager
from bestregi.server.routing.endpoints import Endpoint, EndpointTable

from .views import ViewEngine


class RequestServices:
    """Application services plus the request's database session."""

    def __init__(self, request: Request, session: AsyncSession, services: ServiceRegistry) -> None:
        self.request = request
        self.session = session
        self.services = services

    @property
    def settings(self) -> Settings:
        return self.request.app.state.settings

    @property
    def db_context(self) -> BestRegiContext:
        return self.services.get(DB_CONTEXT)

    @property
    def identity(self) -> IdentityServices:
        return self.services.get(IDENTITY)

    @property
    def views(self) -> ViewEngine:
        return self.services.get(VIEWS)

    @property
    def endpoints(self) -> EndpointTable:
        return self.services.get(ENDPOINTS)

    @cached_property
    def user_manager(self) -> UserManager:
        return self.identity.user_manager(self.session)

    @cached_property
    def sign_in_manager(self) -> SignInManager:
        return self.identity.sign_in_manager(self.user_manager, self.request)


@dataclass
class ActionContext:
    """Everything a handler needs to serve one request."""

    request: Request
    endpoint: Endpoint
    route_values: Dict[str, str]
    services: RequestServices
