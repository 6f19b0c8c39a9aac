"""Pydantic schemas for schema registry records and aggregation results."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Stage(str, Enum):
    """Pipeline stage an aggregation failure originated from."""

    GET_SUBJECTS = "get_subjects"
    GET_SCHEMA = "get_schema"
    DECODE_SCHEMA = "decode_schema"


class SchemaReference(BaseModel):
    """Reference from one registered schema to another."""

    name: str
    subject: str
    version: int


class RawSchemaRecord(BaseModel):
    """A subject's schema as returned by the registry, before decoding.

    Wire names are used as aliases (`schema`, `schemaType`) so records
    round-trip with the registry's JSON.
    """

    model_config = ConfigDict(populate_by_name=True)

    subject: Optional[str] = Field(None, description="Subject the schema is under.")
    version: Optional[int] = Field(None, description="Version within the subject.")
    id: Optional[int] = Field(None, description="Globally unique schema id.")
    schema_str: str = Field(
        ..., alias="schema", description="Serialized schema definition."
    )
    schema_type: str = Field(
        "AVRO", alias="schemaType", description="AVRO, JSON or PROTOBUF."
    )
    references: List[SchemaReference] = Field(default_factory=list)


class RegistryError(BaseModel):
    """Failed registry request: HTTP status (or 1) and the reason."""

    code: int = Field(..., description="HTTP status code, 1 for non-HTTP failures.")
    reason: Any = Field(None, description="Error message reported for the failure.")


class AggregationError(BaseModel):
    """Failure of `get_subject_schemas`, tagged with the stage that failed."""

    stage: Stage
    code: int
    reason: Any = None
    subject: Optional[str] = Field(
        None, description="Subject being processed, None when listing failed."
    )


class SubjectSchemas(BaseModel):
    """Either the decoded schema of every subject or a single error."""

    schemas: Optional[Dict[str, Any]] = None
    error: Optional[AggregationError] = None

    @model_validator(mode="after")
    def check_exclusive(self) -> "SubjectSchemas":
        """Exactly one of `schemas` and `error` must be set."""
        if (self.schemas is None) == (self.error is None):
            raise ValueError("Exactly one of 'schemas' or 'error' must be set.")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None
