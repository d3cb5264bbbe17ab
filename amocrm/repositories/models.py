"""
Entity records exchanged with the amoCRM API.

Every field defaults to None, meaning "absent": to_dict() leaves it out
of the payload, while zero values (0, False, "") are sent as-is.
"""

from dataclasses import dataclass, field, fields
from typing import Any

from .fields import CustomField, find_custom_field


def json_field(key: str | None = None, record: type | None = None, many: bool = False):
    """
    Declare a record field.

    Args:
        key: JSON key when it differs from the attribute name
        record: Record class for nested objects
        many: Whether the nested value is a list of records
    """
    metadata = {}
    if key:
        metadata["json"] = key
    if record:
        metadata["record"] = record
        metadata["many"] = many
    return field(default=None, metadata=metadata)


def _encode(value: Any) -> Any:
    if isinstance(value, list):
        return [_encode(item) for item in value]
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class Record:
    """Mixin providing omitempty serialization for dataclass records."""

    def to_dict(self) -> dict[str, Any]:
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[f.metadata.get("json", f.name)] = _encode(value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        """Build a record, ignoring keys it does not know about."""
        kwargs = {}
        for f in fields(cls):
            key = f.metadata.get("json", f.name)
            if key not in data:
                continue
            value = data[key]
            nested = f.metadata.get("record")
            if nested is not None and value is not None:
                if f.metadata.get("many"):
                    value = [nested.from_dict(item) for item in value]
                else:
                    value = nested.from_dict(value)
            kwargs[f.name] = value
        return cls(**kwargs)


class HasCustomFields:
    """Mixin for records carrying custom_fields_values."""

    custom_fields_values: list[CustomField] | None

    def get_custom_field(self, field_name: str) -> str | None:
        """First value of the named custom field as text, or None if absent."""
        return find_custom_field(self.custom_fields_values, field_name)


@dataclass
class Tag(Record):
    id: int | None = None
    name: str | None = None


@dataclass
class LinkedEntity(Record):
    """Reference to a related contact, company or lead."""
    id: int | None = None
    is_main: bool | None = None


@dataclass
class LeadEmbedded(Record):
    tags: list[Tag] | None = json_field(record=Tag, many=True)
    contacts: list[LinkedEntity] | None = json_field(record=LinkedEntity, many=True)
    companies: list[LinkedEntity] | None = json_field(record=LinkedEntity, many=True)


@dataclass
class Lead(HasCustomFields, Record):
    id: int | None = None
    name: str | None = None
    price: int | None = None
    status_id: int | None = None
    pipeline_id: int | None = None
    created_by: int | None = None
    updated_by: int | None = None
    closed_at: int | None = None
    created_at: int | None = None
    updated_at: int | None = None
    loss_reason_id: int | None = None
    responsible_user_id: int | None = None
    account_id: int | None = None
    custom_fields_values: list[CustomField] | None = json_field(record=CustomField, many=True)
    embedded: LeadEmbedded | None = json_field(key="_embedded", record=LeadEmbedded)


@dataclass
class PipelineStatus(Record):
    id: int | None = None
    name: str | None = None
    sort: int | None = None
    is_editable: bool | None = None
    pipeline_id: int | None = None
    color: str | None = None
    type: int | None = None
    account_id: int | None = None


@dataclass
class PipelineEmbedded(Record):
    statuses: list[PipelineStatus] | None = json_field(record=PipelineStatus, many=True)


@dataclass
class Pipeline(Record):
    id: int | None = None
    name: str | None = None
    sort: int | None = None
    is_main: bool | None = None
    is_unsorted_on: bool | None = None
    is_archive: bool | None = None
    account_id: int | None = None
    embedded: PipelineEmbedded | None = json_field(key="_embedded", record=PipelineEmbedded)


@dataclass
class ContactEmbedded(Record):
    tags: list[Tag] | None = json_field(record=Tag, many=True)
    companies: list[LinkedEntity] | None = json_field(record=LinkedEntity, many=True)
    leads: list[LinkedEntity] | None = json_field(record=LinkedEntity, many=True)


@dataclass
class Contact(HasCustomFields, Record):
    id: int | None = None
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    responsible_user_id: int | None = None
    group_id: int | None = None
    created_by: int | None = None
    updated_by: int | None = None
    created_at: int | None = None
    updated_at: int | None = None
    closest_task_at: int | None = None
    account_id: int | None = None
    custom_fields_values: list[CustomField] | None = json_field(record=CustomField, many=True)
    embedded: ContactEmbedded | None = json_field(key="_embedded", record=ContactEmbedded)


@dataclass
class Call(Record):
    """A call log entry. direction is "inbound" or "outbound"."""
    id: int | None = None
    direction: str | None = None
    uniq: str | None = None
    duration: int | None = None
    source: str | None = None
    link: str | None = None
    phone: str | None = None
    call_result: str | None = None
    call_status: int | None = None
    responsible_user_id: int | None = None
    created_by: int | None = None
    updated_by: int | None = None
    created_at: int | None = None
    updated_at: int | None = None
    request_id: str | None = None
    entity_id: int | None = None
    entity_type: str | None = None


@dataclass
class Event(Record):
    """Incoming call notification for the legacy v2 events resource."""
    type: str | None = None
    phone_number: str | None = None
    users: list[int] | None = None
    element_id: int | None = None
    element_type: int | None = None
    uid: str | None = None


@dataclass
class Account(Record):
    id: int | None = None
    name: str | None = None
    subdomain: str | None = None
    current_user_id: int | None = None
    country: str | None = None
    currency: str | None = None
    currency_symbol: str | None = None
    customers_mode: str | None = None
    is_unsorted_on: bool | None = None
    is_loss_reason_enabled: bool | None = None
    is_technical_account: bool | None = None
    created_at: int | None = None
    updated_at: int | None = None
