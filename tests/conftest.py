"""Global fixtures for pytest."""

from typing import Any, Dict, List

import httpx
import pytest

from registry.client import RegistryClient

REGISTRY_URL = "http://registry.test:8081"
STRING_SCHEMA = '{"type":"string"}'


def schema_record(subject: str, schema: str = STRING_SCHEMA, version: int = 1):
    """Build a registry response body for GET /subjects/{subject}/versions/x."""
    return {
        "subject": subject,
        "version": version,
        "id": 100 + version,
        "schema": schema,
    }


def _build_transport(routes: Dict[str, Any], requests: List[httpx.Request]):
    """Serve `routes` (path -> body, httpx.Response or exception) over HTTP."""

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        route = routes.get(request.url.raw_path.decode())
        if route is None:
            return httpx.Response(
                404, json={"error_code": 40401, "message": "Subject not found."}
            )
        if isinstance(route, Exception):
            raise route
        if isinstance(route, httpx.Response):
            return route
        return httpx.Response(200, json=route)

    return httpx.MockTransport(handler)


@pytest.fixture
def registry_requests() -> List[httpx.Request]:
    """Requests received by clients from `make_client`, in order."""
    return []


@pytest.fixture
def make_client(registry_requests):
    """Factory for RegistryClients backed by an in-memory registry."""

    def _make(routes: Dict[str, Any], **kwargs) -> RegistryClient:
        return RegistryClient(
            REGISTRY_URL,
            transport=_build_transport(routes, registry_requests),
            **kwargs,
        )

    return _make


@pytest.fixture
def happy_routes() -> Dict[str, Any]:
    """Registry with subjects foo and bar, both holding a string schema."""
    return {
        "/subjects": ["foo", "bar"],
        "/subjects/foo/versions/latest": schema_record("foo"),
        "/subjects/bar/versions/latest": schema_record("bar"),
    }


@pytest.fixture(autouse=True)
def clean_registry_env(monkeypatch):
    """Keep the developer's registry settings out of the tests."""
    for name in (
        "SCHEMA_REGISTRY_URL",
        "SCHEMA_REGISTRY_USERNAME",
        "SCHEMA_REGISTRY_PASSWORD",
        "SCHEMA_REGISTRY_TIMEOUT",
        "LOGFIRE_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(name="schema_record")
def schema_record_fixture():
    """Expose `schema_record` to tests."""
    return schema_record
