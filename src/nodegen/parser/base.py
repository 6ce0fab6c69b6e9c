"""Unified data models for nodegen parameters.

Both stagers (OpenAPI and custom YAML) convert their input into these
models. Serialized with camelCase aliases, so the JSON dump keeps the
keys the node templates expect (``operationId``, ``requestMethod``, ``in``).
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

AuthType = Literal["OAuth2", "ApiKey", "None"]
BodyName = Literal["Standard", "Additional Fields", "Update Fields", "Filters"]


class SpecError(ValueError):
    """Raised when an input document is structurally invalid."""


class MissingValueError(LookupError):
    """Raised when an element expected in a collection is absent."""

    def __init__(self, message: str = "Expected value is missing"):
        super().__init__(message)


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class OperationParameter(_Model):
    """A single path or query parameter."""

    location: Literal["path", "query"] = Field(alias="in")
    name: str
    required: bool = False
    schema_: dict = Field(default_factory=dict, alias="schema")
    description: str | None = None
    example: str | int | float | None = None


class RequestBody(_Model):
    """One request-body descriptor: required fields or extra fields."""

    name: BodyName
    required: bool
    description: str | None = None
    content: dict[str, dict] = Field(default_factory=dict)  # {content_type: {"schema": {...}}}

    def properties(self, content_type: str) -> dict:
        schema = self.content.get(content_type, {}).get("schema", {})
        return schema.get("properties", {})


class FieldCollection(_Model):
    """Optional query-string fields grouped under one collection control."""

    name: BodyName
    type: Literal["collection"] = "collection"
    description: str = ""
    default: dict = Field(default_factory=dict)
    options: list[OperationParameter] = Field(default_factory=list)


class Operation(_Model):
    """A single normalized API operation."""

    endpoint: str  # /widgets/{id}
    request_method: str  # GET / POST / PUT / DELETE / PATCH
    operation_id: str
    description: str | None = None
    summary: str | None = None
    operation_url: str | None = None
    parameters: list[OperationParameter] = Field(default_factory=list)
    request_body: list[RequestBody] = Field(default_factory=list)
    additional_fields: FieldCollection | None = None
    update_fields: FieldCollection | None = None

    def path_parameters(self) -> list[OperationParameter]:
        return [p for p in self.parameters if p.location == "path"]

    def query_parameters(self) -> list[OperationParameter]:
        return [p for p in self.parameters if p.location == "query"]


class MetaParams(_Model):
    """Service-level metadata of the generated node."""

    service_name: str
    auth_type: AuthType = "None"
    node_color: str = "#ffffff"
    api_url: str = ""


class NodegenParams(_Model):
    """Staged parameters: metadata plus resource -> operations."""

    meta_params: MetaParams
    main_params: dict[str, list[Operation]] = Field(default_factory=dict)

    def find_operation(self, resource: str, operation_id: str) -> Operation:
        """Look up an operation, failing loudly if it does not exist."""
        for operation in self.main_params.get(resource, []):
            if operation.operation_id == operation_id:
                return operation
        raise MissingValueError(f"Expected value is missing: {resource}.{operation_id}")
