"""Resource repositories built on the shared request executor."""

from .base import Repository
from .accounts import Accounts
from .calls import Calls
from .contacts import Contacts
from .events import EventsV2
from .leads import Leads
from .pipelines import Pipelines
from .fields import CustomField, FieldValue, FieldValueKind
from .models import (
    Account,
    Call,
    Contact,
    ContactEmbedded,
    Event,
    Lead,
    LeadEmbedded,
    LinkedEntity,
    Pipeline,
    PipelineEmbedded,
    PipelineStatus,
    Tag,
)

__all__ = [
    "Repository",
    "Accounts",
    "Calls",
    "Contacts",
    "EventsV2",
    "Leads",
    "Pipelines",
    "CustomField",
    "FieldValue",
    "FieldValueKind",
    "Account",
    "Call",
    "Contact",
    "ContactEmbedded",
    "Event",
    "Lead",
    "LeadEmbedded",
    "LinkedEntity",
    "Pipeline",
    "PipelineEmbedded",
    "PipelineStatus",
    "Tag",
]
