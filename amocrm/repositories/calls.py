"""Calls repository."""

from amocrm.core.endpoints import CALLS
from .base import Repository
from .models import Call


class Calls(Repository):

    def create(self, calls: list[Call]) -> list[Call]:
        """
        Log calls.

        The API attaches each call to the contact, company or lead matching
        its phone number.

        Returns:
            Logged calls with id, entity_id and entity_type populated
        """
        data = self.api.request(CALLS, "POST", body=calls)
        return [Call.from_dict(item) for item in self.embedded(data, "calls")]
