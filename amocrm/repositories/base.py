"""Base class for resource repositories."""

from typing import Any

from amocrm.api.executor import RequestExecutor
from amocrm.core.models import NotFoundError


class Repository:
    """
    Shared plumbing for resource repositories.

    Each repository (Leads, Contacts, ...) holds a reference to the
    client's RequestExecutor and turns typed calls into endpoint +
    executor invocations.
    """

    def __init__(self, api: RequestExecutor):
        """
        Initialize the repository.

        Args:
            api: Executor shared with the owning client
        """
        self.api = api

    @staticmethod
    def embedded(data: Any, key: str) -> list[dict[str, Any]]:
        """
        Extract a list from the {"_embedded": {key: [...]}} envelope.

        An empty response (None) or a missing key yields an empty list.
        """
        if not data:
            return []
        return (data.get("_embedded") or {}).get(key) or []

    @staticmethod
    def require_id(record, description: str):
        """
        Raise NotFoundError when a decoded record has no primary key.

        Returns:
            The record unchanged
        """
        if not record.id:
            raise NotFoundError(f"{description} not found")
        return record

    @staticmethod
    def sorted_by_id(records: list) -> list:
        """Sort records ascending by id; stable for equal ids."""
        return sorted(records, key=lambda r: r.id or 0)
