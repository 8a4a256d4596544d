"""Typed descriptors produced by the annotation parser.

The builder only ever sees these models, never the raw annotation text.
"""

from pydantic import BaseModel, ConfigDict


class EndpointDescriptor(BaseModel):
    """HTTP method and path declared by a type's `endpoint` annotation."""

    model_config = ConfigDict(frozen=True)

    method: str  # GET / POST / PUT / DELETE / PATCH, not validated
    path: str  # /users/:id


class FieldDescriptor(BaseModel):
    """Description and example declared by a `field` annotation."""

    model_config = ConfigDict(frozen=True)

    name: str  # declared field name, never taken from the annotation
    description: str = ""
    example: str  # may itself be JSON text
