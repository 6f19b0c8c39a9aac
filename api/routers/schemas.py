"""API routes exposing registry subjects and decoded schemas."""

import logging
from typing import Any, AsyncIterator, Dict, List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError

from core.aggregator import get_subject_schemas
from registry.client import RegistryClient, create_client
from schemas.registry_schemas import RegistryError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/registry", tags=["Registry"])


async def get_registry_client() -> AsyncIterator[RegistryClient]:
    """Provide a registry client for the duration of one request."""
    try:
        client = create_client()
    except ValidationError as e:
        logger.error(f"Invalid registry settings: {e}")
        raise HTTPException(
            status_code=500, detail="Schema registry is not configured correctly."
        ) from e
    async with client:
        yield client


def _upstream_error(error: RegistryError, passthrough_404: bool = False):
    """Map a failed registry call onto an HTTPException."""
    status = 404 if passthrough_404 and error.code == 404 else 502
    return HTTPException(status_code=status, detail=error.model_dump())


@router.get("/subjects")
async def list_subjects(
    client: RegistryClient = Depends(get_registry_client),  # noqa: B008
) -> List[str]:
    """List the subjects known to the registry."""
    result = await client.list_subjects()
    if isinstance(result, RegistryError):
        raise _upstream_error(result)
    return result


@router.get("/subjects/{subject:path}/schema")
async def get_schema(
    subject: str,
    version: str = "latest",
    client: RegistryClient = Depends(get_registry_client),  # noqa: B008
) -> Dict[str, Any]:
    """Return one raw schema record using the registry's field names."""
    result = await client.get_schema(subject, version)
    if isinstance(result, RegistryError):
        raise _upstream_error(result, passthrough_404=True)
    return result.model_dump(by_alias=True)


@router.get("/schemas")
async def get_schemas(
    client: RegistryClient = Depends(get_registry_client),  # noqa: B008
) -> Dict[str, Dict[str, Any]]:
    """Decode the latest schema of every subject, or fail as a whole."""
    result = await get_subject_schemas(client)
    if not result.ok:
        logger.warning(
            f"Schema aggregation failed at {result.error.stage.value}: "
            f"{result.error.code} {result.error.reason}",
            extra={"stage": result.error.stage.value, "subject": result.error.subject},
        )
        raise HTTPException(
            status_code=502, detail=result.error.model_dump(mode="json")
        )
    return {"schemas": result.schemas}
