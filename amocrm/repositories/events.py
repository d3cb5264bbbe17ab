"""Events repository for the legacy v2 API."""

from amocrm.core.endpoints import EVENTS_V2
from .base import Repository
from .models import Event


class EventsV2(Repository):

    def create(self, events: list[Event]) -> list[Event]:
        """
        Send incoming call notifications to users.

        The v2 API wraps additions in {"add": [...]} instead of a bare array.

        Returns:
            One item per event with element_id, element_type and uid
        """
        data = self.api.request(EVENTS_V2, "POST", body={"add": [e.to_dict() for e in events]})
        return [Event.from_dict(item) for item in self.embedded(data, "items")]
