"""Collection builder — turns descriptors into a Postman collection."""

import json
import math
from enum import Enum

from pydantic import BaseModel

from payload_collection.errors import SerializationFailure
from payload_collection.parser.base import EndpointDescriptor, FieldDescriptor
from payload_collection.parser.collector import collect_fields, resolve_endpoint
from payload_collection.parser.grammar import FieldGrammar
from payload_collection.postman import Body, Collection, Header, Info, Item, Request, Url
from payload_collection.supply import AnnotatedType

DEFAULT_HOST = ["api", "example", "com"]


class BodyLayout(str, Enum):
    """How field descriptors are laid out in the raw request body."""

    MAPPING = "mapping"  # {name: parsed example}
    DESCRIPTORS = "descriptors"  # [{name, description, example}]


class BuildOptions(BaseModel):
    collection_name: str = "Example API created from postman"
    collection_description: str = "API postman Collection"
    host: list[str] = DEFAULT_HOST
    protocol: str = "https"
    field_grammar: FieldGrammar = FieldGrammar.DESCRIBED
    body_layout: BodyLayout = BodyLayout.MAPPING
    header_type: str | None = None


def split_path(path: str) -> list[str]:
    """Split on `/` keeping empty segments: "/a/b" -> ["", "a", "b"]."""
    return path.split("/")


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ValueError(f"{text} is out of range")
    return value


def parse_example(example: str):
    """Parse an example as strict JSON, falling back to the literal string.

    NaN, Infinity and numbers overflowing a float are not JSON and stay literal.
    """
    try:
        return json.loads(example, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError:
        return example


def render_raw_body(fields: list[FieldDescriptor], layout: BodyLayout) -> str:
    if layout == BodyLayout.DESCRIPTORS:
        data = [f.model_dump() for f in fields]
    else:
        data = {f.name: parse_example(f.example) for f in fields}
    try:
        return json.dumps(data, allow_nan=False)
    except (ValueError, TypeError) as e:
        raise SerializationFailure(f"cannot serialize request body: {e}") from e


def build_collection(
    endpoint: EndpointDescriptor,
    fields: list[FieldDescriptor],
    *,
    item_name: str = "Example Endpoint",
    description: str = "",
    options: BuildOptions | None = None,
) -> Collection:
    """Assemble the collection for one endpoint and its field descriptors."""
    options = options or BuildOptions()

    request = Request(
        method=endpoint.method,
        description=description,
        url=Url(
            host=list(options.host),
            path=split_path(endpoint.path),
            protocol=options.protocol,
        ),
        header=[
            Header(
                key="Content-Type",
                value="application/json",
                description="Content type",
                type=options.header_type,
                enabled=True,
            )
        ],
        body=Body(raw=render_raw_body(fields, options.body_layout)),
    )

    return Collection(
        info=Info(
            description=options.collection_description,
            name=options.collection_name,
        ),
        item=[Item(name=item_name, request=request)],
    )


def generate_collection(annotated: AnnotatedType, options: BuildOptions | None = None) -> Collection:
    """Parse a type's annotations and build its collection.

    The endpoint is resolved first; a type without one never gets a
    placeholder endpoint.
    """
    options = options or BuildOptions()
    endpoint = resolve_endpoint(annotated)
    fields = collect_fields(annotated, options.field_grammar)
    return build_collection(
        endpoint,
        fields,
        item_name=annotated.name,
        description=annotated.description,
        options=options,
    )
