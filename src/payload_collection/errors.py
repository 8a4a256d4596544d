"""Errors raised while turning annotations into a Postman collection.

Grammar and structural errors abort generation for the annotated type.
PublishFailure is the only one recovered locally (see generator.sink.emit).
"""


class PayloadCollectionError(Exception):
    """Base class for every error this package raises."""


class MalformedAttribute(PayloadCollectionError):
    """An annotation payload does not follow the expected grammar."""

    def __init__(self, message: str, token: str | None = None, column: int | None = None):
        self.token = token
        self.column = column
        if token is not None and column is not None:
            message = f"{message} (found `{token}` at column {column})"
        super().__init__(message)


class MissingEndpoint(PayloadCollectionError):
    """The annotated type carries no endpoint annotation."""

    def __init__(self, type_name: str):
        self.type_name = type_name
        super().__init__(f"{type_name}: missing required `endpoint` attribute")


class MissingFieldName(PayloadCollectionError):
    """A field annotation sits on a field that has no declared name."""

    def __init__(self, type_name: str, position: int):
        self.type_name = type_name
        self.position = position
        super().__init__(
            f"{type_name}: field #{position} carries a `field` attribute but has no name"
        )


class SerializationFailure(PayloadCollectionError):
    """The collection document could not be turned into JSON."""


class PublishFailure(PayloadCollectionError):
    """The publish request could not be issued or its response was not understood."""


class ManifestError(PayloadCollectionError):
    """An annotation manifest file is missing or has the wrong shape."""
