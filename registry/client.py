"""HTTP client for the Confluent Schema Registry REST API."""

import logging
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from core.config import RegistrySettings
from schemas.registry_schemas import RawSchemaRecord, RegistryError

logger = logging.getLogger(__name__)

REGISTRY_ACCEPT = "application/vnd.schemaregistry.v1+json, application/json"

# Code reported for failures that have no HTTP status (network, bad payload)
NON_HTTP_ERROR_CODE = 1


def _error_reason(response: httpx.Response) -> Any:
    """Pick the registry's error message, falling back to the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return body["message"]
    return response.reason_phrase


class RegistryClient:
    """Thin async wrapper over the two registry endpoints the aggregator needs.

    Methods return either the decoded payload or a `RegistryError`, never
    raise for HTTP or network failures.
    """

    def __init__(
        self,
        base_url: str,
        auth: Optional[Tuple[str, str]] = None,
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        request_headers = {"Accept": REGISTRY_ACCEPT}
        request_headers.update(headers or {})
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            auth=auth,
            timeout=timeout,
            headers=request_headers,
            transport=transport,
        )

    async def __aenter__(self) -> "RegistryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get_json(self, path: str) -> Any:
        """GET `path` and return the JSON body or a RegistryError."""
        logger.debug(f"GET {self.base_url}{path}")
        try:
            response = await self._http.get(path)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            reason = _error_reason(e.response)
            logger.warning(
                f"Registry returned {e.response.status_code} for {path}: {reason}"
            )
            return RegistryError(code=e.response.status_code, reason=reason)
        except httpx.RequestError as e:
            logger.error(f"Network error requesting {self.base_url}{path}: {e}")
            return RegistryError(code=NON_HTTP_ERROR_CODE, reason=str(e))

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Registry sent a non-JSON body for {path}: {e}")
            return RegistryError(
                code=NON_HTTP_ERROR_CODE, reason=f"Invalid JSON response: {e}"
            )

    async def list_subjects(self) -> List[str] | RegistryError:
        """List every subject registered in the registry."""
        body = await self._get_json("/subjects")
        if isinstance(body, RegistryError):
            return body
        if not isinstance(body, list) or not all(isinstance(s, str) for s in body):
            return RegistryError(
                code=NON_HTTP_ERROR_CODE,
                reason=f"Unexpected subjects payload: {body!r}",
            )
        return body

    async def get_schema(
        self, subject: str, version: str | int = "latest"
    ) -> RawSchemaRecord | RegistryError:
        """Fetch one version (the latest by default) of a subject's schema.

        `version` must be "latest" or a positive integer; anything else is
        rejected before a request is sent.
        """
        version_str = str(version).strip()
        if version_str != "latest" and not (
            version_str.isascii()
            and version_str.isdigit()
            and int(version_str) > 0
        ):
            logger.warning(f"Rejected schema version {version!r} for {subject}")
            return RegistryError(
                code=NON_HTTP_ERROR_CODE,
                reason=(
                    f"Invalid version {version!r}, "
                    "expected 'latest' or a positive integer"
                ),
            )
        path = f"/subjects/{quote(subject, safe='')}/versions/{version_str}"
        body = await self._get_json(path)
        if isinstance(body, RegistryError):
            return body
        if not isinstance(body, dict):
            return RegistryError(
                code=NON_HTTP_ERROR_CODE,
                reason=f"Unexpected schema payload: {body!r}",
            )
        try:
            record = RawSchemaRecord.model_validate(body)
        except ValidationError as e:
            return RegistryError(
                code=NON_HTTP_ERROR_CODE, reason=f"Malformed schema record: {e}"
            )
        # Older registries omit the subject from the response
        if record.subject is None:
            record.subject = subject
        return record


def create_client(
    settings: Optional[RegistrySettings] = None, **overrides: Any
) -> RegistryClient:
    """Create a RegistryClient from settings.

    Args:
        settings: Connection settings. Read from the environment when omitted.
        **overrides: `url`, `username`, `password`, `timeout` replace the
            matching settings; `headers` and `transport` go to the client.

    Raises:
        pydantic.ValidationError: If the resulting settings are invalid.
    """
    headers = overrides.pop("headers", None)
    transport = overrides.pop("transport", None)
    overrides = {k: v for k, v in overrides.items() if v is not None}
    settings = settings or RegistrySettings.from_env()
    if overrides:
        settings = RegistrySettings(**{**settings.model_dump(), **overrides})

    auth = None
    if settings.username is not None:
        auth = (settings.username, settings.password)

    logger.debug(f"Creating registry client for {settings.url}")
    return RegistryClient(
        settings.url,
        auth=auth,
        timeout=settings.timeout,
        headers=headers,
        transport=transport,
    )
