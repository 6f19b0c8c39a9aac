"""Expose registry record and aggregation result schemas."""

from .registry_schemas import (
    AggregationError,
    RawSchemaRecord,
    RegistryError,
    SchemaReference,
    Stage,
    SubjectSchemas,
)

__all__ = [
    "AggregationError",
    "RawSchemaRecord",
    "RegistryError",
    "SchemaReference",
    "Stage",
    "SubjectSchemas",
]
