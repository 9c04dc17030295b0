"""Job input schema model and helpers.

A job describes its input either with an explicit JSON schema or only
with an example input object. `schema_from_detail` turns either form into
a JobSchema; the remaining helpers derive form defaults, validate required
fields and coerce prompted text into typed values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class FieldKind(str, Enum):
    """Kind of an input field, as rendered by a form."""

    STRING = "string"
    NUMBER = "number"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    ENUM = "enum"

    @classmethod
    def parse(cls, value: Any) -> FieldKind:
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.STRING


@dataclass(frozen=True)
class FieldSpec:
    """
    One property of a job input schema.

    Attributes:
        kind: Field kind used to pick a widget and coerce values.
        title: Display title.
        description: Help text.
        default: Default value, if the schema defines one.
        example: Example value (prefill or placeholder).
        enum_values: Allowed values for enum fields.
        items: Item spec for array fields, when declared.
        raw: The field's schema mapping as received.
    """

    kind: FieldKind
    title: str | None = None
    description: str | None = None
    default: Any = None
    example: Any = None
    enum_values: tuple[Any, ...] | None = None
    items: FieldSpec | None = None
    raw: Mapping[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_mapping(cls, spec: Mapping[str, Any]) -> FieldSpec:
        enum_values = spec.get("enum")
        if enum_values:
            kind = FieldKind.ENUM
        else:
            kind = FieldKind.parse(spec.get("type"))
        items = spec.get("items")
        return cls(
            kind=kind,
            title=spec.get("title"),
            description=spec.get("description"),
            default=spec.get("default"),
            example=spec.get("example", spec.get("prefill")),
            enum_values=tuple(enum_values) if enum_values else None,
            items=cls.from_mapping(items) if isinstance(items, Mapping) else None,
            raw=dict(spec),
        )

    def label(self, key: str) -> str:
        return self.title or key


@dataclass(frozen=True)
class JobSchema:
    """
    Input schema of a job.

    Attributes:
        properties: Ordered mapping of field name to FieldSpec.
        required: Names of the fields that must be filled in.
        raw: The explicit schema as received, or None when synthesized.
    """

    properties: dict[str, FieldSpec] = field(default_factory=dict)
    required: frozenset[str] = frozenset()
    raw: Mapping[str, Any] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_mapping(cls, schema: Mapping[str, Any]) -> JobSchema:
        properties = schema.get("properties") or {}
        return cls(
            properties={
                str(name): FieldSpec.from_mapping(spec)
                for name, spec in properties.items()
                if isinstance(spec, Mapping)
            },
            required=frozenset(schema.get("required") or ()),
            raw=schema,
        )

    @property
    def is_empty(self) -> bool:
        return not self.properties


def infer_kind(value: Any) -> FieldKind:
    """Infer a field kind from a sample value."""
    # bool first: it is a subclass of int
    if isinstance(value, bool):
        return FieldKind.BOOLEAN
    if isinstance(value, (int, float)):
        return FieldKind.NUMBER
    if isinstance(value, str):
        return FieldKind.STRING
    if isinstance(value, list):
        return FieldKind.ARRAY
    if isinstance(value, dict):
        return FieldKind.OBJECT
    return FieldKind.STRING


def _title_case(key: str) -> str:
    return key[:1].upper() + key[1:]


def synthesize_schema(sample_input: Mapping[str, Any]) -> JobSchema:
    """
    Build a schema from an example input object.

    Each key becomes a field whose kind is inferred from the sample value.
    Only scalar values (string, number, boolean) are used as defaults and
    no field is marked as required.
    """
    properties: dict[str, FieldSpec] = {}
    for key, value in sample_input.items():
        kind = infer_kind(value)
        scalar = kind in (FieldKind.STRING, FieldKind.NUMBER, FieldKind.BOOLEAN)
        properties[str(key)] = FieldSpec(
            kind=kind,
            title=_title_case(str(key)),
            default=value if scalar and value is not None else None,
        )
    return JobSchema(properties=properties, required=frozenset())


def _explicit_schema(detail: Mapping[str, Any]) -> Mapping[str, Any] | None:
    """Return the explicit input schema of a job detail, if it carries one."""
    schema = detail.get("inputSchema")
    # some jobs store the schema as a JSON document string
    if isinstance(schema, str):
        try:
            schema = json.loads(schema)
        except ValueError:
            return None
    if isinstance(schema, Mapping) and schema:
        return schema
    return None


def schema_from_detail(detail: Mapping[str, Any]) -> JobSchema:
    """
    Resolve the input schema of a job from its detail payload.

    Resolution order:
      1) the explicit `inputSchema`, as received
      2) a schema synthesized from `defaultRunOptions.input`
      3) an empty schema
    """
    explicit = _explicit_schema(detail)
    if explicit is not None:
        return JobSchema.from_mapping(explicit)

    run_options = detail.get("defaultRunOptions") or {}
    sample = run_options.get("input") if isinstance(run_options, Mapping) else None
    if isinstance(sample, Mapping) and sample:
        return synthesize_schema(sample)

    return JobSchema()


def default_inputs(schema: JobSchema) -> dict[str, Any]:
    """
    Return the initial input values for a form.

    Per field: the default, else the example, else an empty list/object
    for array/object fields. Other fields are left out.
    """
    values: dict[str, Any] = {}
    for key, spec in schema.properties.items():
        if spec.default is not None:
            values[key] = spec.default
        elif spec.example is not None:
            values[key] = spec.example
        elif spec.kind == FieldKind.ARRAY:
            values[key] = []
        elif spec.kind == FieldKind.OBJECT:
            values[key] = {}
    return values


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def missing_required(schema: JobSchema, inputs: Mapping[str, Any]) -> list[str]:
    """Return required field names whose value is missing or empty, in schema order."""
    ordered = [k for k in schema.properties if k in schema.required]
    ordered += sorted(k for k in schema.required if k not in schema.properties)
    return [k for k in ordered if _is_blank(inputs.get(k))]


_TRUE = {"true", "yes", "y", "1", "on"}
_FALSE = {"false", "no", "n", "0", "off"}


def coerce_value(spec: FieldSpec, text: str) -> Any:
    """
    Convert prompted text into a value of the field's kind.

    Empty text yields None (field left unset).

    Raises:
        ValueError: If the text cannot be converted.
    """
    text = text.strip()
    if not text:
        return None

    if spec.kind == FieldKind.INTEGER:
        return int(text)
    if spec.kind == FieldKind.NUMBER:
        try:
            return int(text)
        except ValueError:
            return float(text)
    if spec.kind == FieldKind.BOOLEAN:
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(f"Not a boolean: {text!r}")
    if spec.kind == FieldKind.ARRAY:
        if text.startswith("["):
            parsed = json.loads(text)
            if not isinstance(parsed, list):
                raise ValueError("Expected a JSON array")
            return parsed
        return [part.strip() for part in text.split(",") if part.strip()]
    if spec.kind == FieldKind.OBJECT:
        parsed = json.loads(text)
        if not isinstance(parsed, dict):
            raise ValueError("Expected a JSON object")
        return parsed
    if spec.kind == FieldKind.ENUM and spec.enum_values:
        if text not in {str(v) for v in spec.enum_values}:
            raise ValueError(f"Expected one of: {', '.join(map(str, spec.enum_values))}")
        for option in spec.enum_values:
            if str(option) == text:
                return option
    return text
