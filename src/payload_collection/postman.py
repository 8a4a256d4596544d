"""Postman Collection v2.1 document models.

Only the subset of the schema this package emits is modelled.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticSerializationError

from payload_collection.errors import SerializationFailure

SCHEMA_URL = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"


class Info(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str
    name: str
    schema_url: str = Field(default=SCHEMA_URL, alias="schema")


class Url(BaseModel):
    host: list[str]
    path: list[str]
    protocol: str = "https"


class Header(BaseModel):
    key: str
    value: str
    description: str = ""
    type: str | None = None
    enabled: bool = True


class RawOptions(BaseModel):
    language: str = "json"


class BodyOptions(BaseModel):
    raw: RawOptions = RawOptions()


class Body(BaseModel):
    mode: str = "raw"
    raw: str
    options: BodyOptions = BodyOptions()


class Request(BaseModel):
    method: str
    description: str = ""
    url: Url
    header: list[Header]
    body: Body


class Item(BaseModel):
    name: str
    request: Request


class Collection(BaseModel):
    """A complete collection: one info block and its items."""

    info: Info
    item: list[Item]


def to_json(collection: Collection, pretty: bool = True) -> str:
    """Serialize a collection, pretty-printed or compact. `None` values are omitted."""
    try:
        return collection.model_dump_json(
            indent=2 if pretty else None, by_alias=True, exclude_none=True
        )
    except (PydanticSerializationError, ValueError, TypeError) as e:
        raise SerializationFailure(f"cannot serialize collection: {e}") from e
