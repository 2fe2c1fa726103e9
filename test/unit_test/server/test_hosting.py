"""Unit tests for the service registry."""

import pytest

from bestregi.server.hosting import ServiceNotRegisteredError, ServiceRegistry


class TestServiceRegistry:
    def test_preserves_registration_order(self):
        registry = ServiceRegistry()
        registry.add("b", object())
        registry.add("a", object())

        assert registry.names() == ["b", "a"]
        assert list(registry) == ["b", "a"]
        assert len(registry) == 2

    def test_get_returns_instance(self):
        registry = ServiceRegistry()
        service = object()
        registry.add("db_context", service)

        assert registry.get("db_context") is service
        assert "db_context" in registry

    def test_duplicate_rejected(self):
        registry = ServiceRegistry()
        registry.add("views", object())

        with pytest.raises(ValueError):
            registry.add("views", object())

    def test_missing_service(self):
        with pytest.raises(ServiceNotRegisteredError):
            ServiceRegistry().get("identity")
