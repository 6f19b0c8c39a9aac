"""Fetch and decode the latest schema of every registry subject.

The pipeline runs three stages in order: list subjects, fetch each subject's
latest schema, decode each schema body. Each stage stops at its first
failure and the result then carries only an `AggregationError` naming the
stage, never a partial map.
"""

import json
from typing import Any, Callable, Dict, List

from registry.client import NON_HTTP_ERROR_CODE, RegistryClient
from schemas.registry_schemas import (
    AggregationError,
    RawSchemaRecord,
    RegistryError,
    Stage,
    SubjectSchemas,
)

Decoder = Callable[[str], Any]


async def _get_subjects(client: RegistryClient) -> List[str] | AggregationError:
    subjects = await client.list_subjects()
    if isinstance(subjects, RegistryError):
        return AggregationError(
            stage=Stage.GET_SUBJECTS, code=subjects.code, reason=subjects.reason
        )
    return subjects


async def _get_schemas(
    client: RegistryClient, subjects: List[str]
) -> Dict[str, RawSchemaRecord] | AggregationError:
    records: Dict[str, RawSchemaRecord] = {}
    # One request in flight at a time
    for subject in subjects:
        record = await client.get_schema(subject)
        if isinstance(record, RegistryError):
            return AggregationError(
                stage=Stage.GET_SCHEMA,
                code=record.code,
                reason=record.reason,
                subject=subject,
            )
        records[subject] = record
    return records


def _decode(
    records: Dict[str, RawSchemaRecord], decoder: Decoder
) -> Dict[str, Any] | AggregationError:
    decoded: Dict[str, Any] = {}
    for subject, record in records.items():
        try:
            decoded[subject] = decoder(record.schema_str)
        except (ValueError, RecursionError) as e:
            return AggregationError(
                stage=Stage.DECODE_SCHEMA,
                code=NON_HTTP_ERROR_CODE,
                reason=str(e),
                subject=subject,
            )
    return decoded


async def get_subject_schemas(
    client: RegistryClient, decoder: Decoder = json.loads
) -> SubjectSchemas:
    """Get the latest schema of every subject, decoded into Python values.

    Args:
        client: A configured registry client. It is not closed here.
        decoder: Turns a schema string into a structured value, raising
            ValueError on malformed input. Defaults to `json.loads`, whose
            RecursionError on deeply nested input also counts as a decode
            failure.

    Returns:
        SubjectSchemas with `schemas` mapping every listed subject to its
        decoded schema, or with `error` set to the first failure.
    """
    subjects = await _get_subjects(client)
    if isinstance(subjects, AggregationError):
        return SubjectSchemas(error=subjects)

    records = await _get_schemas(client, subjects)
    if isinstance(records, AggregationError):
        return SubjectSchemas(error=records)

    decoded = _decode(records, decoder)
    if isinstance(decoded, AggregationError):
        return SubjectSchemas(error=decoded)

    return SubjectSchemas(schemas=decoded)

