"""Collects typed descriptors from one annotated type."""

from payload_collection.errors import MalformedAttribute, MissingEndpoint, MissingFieldName
from payload_collection.parser.base import EndpointDescriptor, FieldDescriptor
from payload_collection.parser.grammar import FieldGrammar, parse_endpoint, parse_field
from payload_collection.supply import AnnotatedType


def resolve_endpoint(annotated: AnnotatedType) -> EndpointDescriptor:
    """Parse the single endpoint annotation of a type."""
    if not annotated.endpoint_attrs:
        raise MissingEndpoint(annotated.name)
    if len(annotated.endpoint_attrs) > 1:
        raise MalformedAttribute(
            f"{annotated.name}: expected one `endpoint` attribute, "
            f"found {len(annotated.endpoint_attrs)}"
        )

    try:
        return parse_endpoint(annotated.endpoint_attrs[0])
    except MalformedAttribute as e:
        raise MalformedAttribute(f"{annotated.name}: failed to parse `endpoint`: {e}") from e


def collect_fields(
    annotated: AnnotatedType, grammar: FieldGrammar = FieldGrammar.DESCRIBED
) -> list[FieldDescriptor]:
    """Return descriptors for annotated fields, in declaration order.

    Fields without a `field` annotation are skipped. Any malformed
    annotation aborts collection for the whole type.
    """
    descriptors: list[FieldDescriptor] = []
    for position, f in enumerate(annotated.fields):
        if not f.attrs:
            continue
        if not f.name:
            raise MissingFieldName(annotated.name, position)
        if len(f.attrs) > 1:
            raise MalformedAttribute(
                f"{annotated.name}.{f.name}: expected one `field` attribute, found {len(f.attrs)}"
            )

        try:
            descriptors.append(parse_field(f.name, f.attrs[0], grammar))
        except MalformedAttribute as e:
            raise MalformedAttribute(f"{annotated.name}.{f.name}: failed to parse `field`: {e}") from e
    return descriptors
