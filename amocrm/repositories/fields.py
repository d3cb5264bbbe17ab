"""Custom field values attached to leads and contacts."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldValueKind(Enum):
    """Shape of a custom field value as sent by the API."""
    TEXT = "text"
    NUMBER = "number"
    FLAG = "flag"
    OBJECT = "object"
    LIST = "list"
    EMPTY = "empty"


def detect_kind(value: Any) -> FieldValueKind:
    """Classify a raw JSON value."""
    if value is None:
        return FieldValueKind.EMPTY
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return FieldValueKind.FLAG
    if isinstance(value, (int, float)):
        return FieldValueKind.NUMBER
    if isinstance(value, str):
        return FieldValueKind.TEXT
    if isinstance(value, dict):
        return FieldValueKind.OBJECT
    if isinstance(value, list):
        return FieldValueKind.LIST
    raise TypeError(f"unsupported custom field value: {value!r}")


@dataclass
class FieldValue:
    """
    One entry of a custom field's "values" list.

    The payload is kept as-is and tagged with its kind; use the as_*
    helpers to extract the shape you expect. They return None when the
    value has a different shape.
    """
    value: Any = None
    enum_id: int | None = None
    enum_code: str | None = None
    kind: FieldValueKind = field(init=False)

    def __post_init__(self):
        self.kind = detect_kind(self.value)

    def as_text(self) -> str | None:
        """Text form of a scalar value (numbers and flags are stringified)."""
        if self.kind == FieldValueKind.TEXT:
            return self.value
        if self.kind == FieldValueKind.FLAG:
            return "true" if self.value else "false"
        if self.kind == FieldValueKind.NUMBER:
            return str(self.value)
        return None

    def as_object(self) -> dict[str, Any] | None:
        if self.kind == FieldValueKind.OBJECT:
            return self.value
        return None

    def as_list(self) -> list[Any] | None:
        if self.kind == FieldValueKind.LIST:
            return self.value
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.value is not None:
            data["value"] = self.value
        if self.enum_id is not None:
            data["enum_id"] = self.enum_id
        if self.enum_code is not None:
            data["enum_code"] = self.enum_code
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "FieldValue":
        if not isinstance(data, dict):
            return cls(value=data)
        return cls(
            value=data.get("value"),
            enum_id=data.get("enum_id"),
            enum_code=data.get("enum_code"),
        )


@dataclass
class CustomField:
    """A custom field with its values."""
    field_id: int | None = None
    field_name: str | None = None
    field_code: str | None = None
    field_type: str | None = None
    values: list[FieldValue] = field(default_factory=list)

    def first_value(self) -> FieldValue | None:
        """
        Return the first value of the field.

        Multi-value fields (e.g., several phone numbers) only expose their
        first entry here; read `values` for the rest.
        """
        if not self.values:
            return None
        return self.values[0]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for key in ("field_id", "field_name", "field_code", "field_type"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        data["values"] = [v.to_dict() for v in self.values]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomField":
        return cls(
            field_id=data.get("field_id"),
            field_name=data.get("field_name"),
            field_code=data.get("field_code"),
            field_type=data.get("field_type"),
            values=[FieldValue.from_dict(v) for v in data.get("values") or []],
        )


def find_custom_field(custom_fields: list[CustomField] | None, field_name: str) -> str | None:
    """
    Look up a custom field by name and return its first value as text.

    Args:
        custom_fields: Custom fields of a record (may be None)
        field_name: Value of the field's "field_name"

    Returns:
        Text of the first value, or None if the field is missing, has no
        values, or its first value is not a scalar
    """
    for custom_field in custom_fields or []:
        if custom_field.field_name == field_name:
            first = custom_field.first_value()
            return first.as_text() if first else None
    return None
