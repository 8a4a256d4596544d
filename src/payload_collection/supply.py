"""Annotation supply — hands raw annotation payloads to the parser.

Annotations come either from Python classes:

    @endpoint('method = "POST", path = "/users"')
    class CreateUser(BaseModel):
        name: Annotated[str, field('description = "Full name", example = "\\"Jane\\""')]

or from a YAML/JSON manifest describing one type:

    name: CreateUser
    endpoint: 'method = "POST", path = "/users"'
    fields:
      - name: name
        field: 'description = "Full name", example = "\\"Jane\\""'
"""

import dataclasses
import importlib
import importlib.util
import sys
import typing
from dataclasses import dataclass, field as dc_field
from pathlib import Path

import yaml
from pydantic import BaseModel

from payload_collection.errors import ManifestError

MANIFEST_SUFFIXES = (".yaml", ".yml", ".json")


@dataclass(frozen=True)
class FieldAttr:
    """Raw `field` annotation payload, placed in `Annotated[...]` metadata."""

    payload: str


@dataclass
class AnnotatedField:
    name: str | None
    attrs: list[str] = dc_field(default_factory=list)


@dataclass
class AnnotatedType:
    """Everything the parser needs to know about one annotated type."""

    name: str
    description: str = ""
    endpoint_attrs: list[str] = dc_field(default_factory=list)
    fields: list[AnnotatedField] = dc_field(default_factory=list)


def endpoint(payload: str):
    """Class decorator attaching a raw `endpoint` payload."""

    def decorator(cls):
        # own list per class, so subclasses do not inherit the base's endpoint
        cls.__endpoint_attrs__ = [*cls.__dict__.get("__endpoint_attrs__", []), payload]
        return cls

    return decorator


def field(payload: str) -> FieldAttr:
    return FieldAttr(payload)


def supply_from_type(cls: type) -> AnnotatedType:
    """Read endpoint and field annotations from a class."""
    return AnnotatedType(
        name=cls.__name__,
        description=_description(cls),
        endpoint_attrs=list(cls.__dict__.get("__endpoint_attrs__", [])),
        fields=[
            AnnotatedField(name=name, attrs=[m.payload for m in metadata if isinstance(m, FieldAttr)])
            for name, metadata in _field_metadata(cls)
        ],
    )


def _field_metadata(cls: type) -> list[tuple[str, list]]:
    if issubclass(cls, BaseModel):
        return [(name, list(info.metadata)) for name, info in cls.model_fields.items()]

    result = []
    for name, hint in typing.get_type_hints(cls, include_extras=True).items():
        if typing.get_origin(hint) is typing.Annotated:
            result.append((name, list(hint.__metadata__)))
        else:
            result.append((name, []))
    return result


def _description(cls: type) -> str:
    doc = cls.__dict__.get("__doc__")
    if dataclasses.is_dataclass(cls) and doc and doc.startswith(cls.__name__ + "("):
        return ""  # signature generated by @dataclass
    return _first_paragraph(doc)


def _first_paragraph(doc: str | None) -> str:
    if not doc:
        return ""
    return doc.strip().split("\n\n")[0].strip()


def supply_from_manifest(file_path: Path) -> AnnotatedType:
    """Read one annotated type from a YAML or JSON manifest."""
    try:
        data = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"{file_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ManifestError(f"{file_path}: not valid YAML/JSON: {e}") from e

    if not isinstance(data, dict) or not isinstance(data.get("name"), str):
        raise ManifestError(f"{file_path}: expected a mapping with a `name` key")

    fields = []
    seen: set[str] = set()
    for i, entry in enumerate(data.get("fields") or []):
        if not isinstance(entry, dict):
            raise ManifestError(f"{file_path}: field #{i} must be a mapping")
        name = entry.get("name")
        if name is not None:
            if str(name) in seen:
                raise ManifestError(f"{file_path}: duplicate field name {str(name)!r}")
            seen.add(str(name))
        fields.append(AnnotatedField(
            name=str(name) if name is not None else None,
            attrs=_payload_list(entry.get("field"), file_path),
        ))

    return AnnotatedType(
        name=data["name"],
        description=str(data.get("description") or ""),
        endpoint_attrs=_payload_list(data.get("endpoint"), file_path),
        fields=fields,
    )


def _payload_list(value, file_path: Path) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list) and all(isinstance(v, str) for v in value):
        return list(value)
    raise ManifestError(f"{file_path}: annotation payloads must be strings, got {value!r}")


def load_target(target: str) -> AnnotatedType:
    """Resolve a CLI target: a manifest path, `pkg.module:Class` or `file.py:Class`."""
    if target.lower().endswith(MANIFEST_SUFFIXES):
        return supply_from_manifest(Path(target))

    module_ref, sep, class_name = target.rpartition(":")
    if not sep or not module_ref or not class_name:
        raise ManifestError(
            f"cannot resolve {target!r}: expected a manifest file or MODULE:CLASS"
        )

    module = _import_module(module_ref)
    cls = getattr(module, class_name, None)
    if not isinstance(cls, type):
        raise ManifestError(f"{module_ref} has no class named {class_name!r}")
    return supply_from_type(cls)


def _import_module(module_ref: str):
    if not module_ref.endswith(".py"):
        try:
            return importlib.import_module(module_ref)
        except ImportError as e:
            raise ManifestError(f"cannot import {module_ref}: {e}") from e

    path = Path(module_ref)
    if not path.exists():
        raise ManifestError(f"{module_ref}: no such file")

    # private name, so a user file such as json.py never shadows a real module
    name = f"_payload_target_{path.stem}"
    spec = importlib.util.spec_from_file_location(name, path)
    if spec is None or spec.loader is None:
        raise ManifestError(f"{module_ref}: cannot be loaded as a module")
    module = importlib.util.module_from_spec(spec)
    sys.modules[name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(name, None)
        raise ManifestError(f"cannot import {module_ref}: {type(e).__name__}: {e}") from e
    return module
