"""Leads repository."""

from amocrm.core.endpoints import LEADS, lead_endpoint
from .base import Repository
from .models import Lead


class Leads(Repository):
    """Create, update, list and fetch leads."""

    def create(self, leads: list[Lead]) -> list[Lead]:
        """
        Create leads in one request.

        Args:
            leads: Leads to create (sent as a bare JSON array)

        Returns:
            Created leads as returned by the API (ids populated)
        """
        data = self.api.request(LEADS, "POST", body=leads)
        return [Lead.from_dict(item) for item in self.embedded(data, "leads")]

    def update(self, leads: list[Lead]) -> list[Lead]:
        """
        Update leads in one request. Each lead must carry its id.

        Returns:
            Updated leads as returned by the API
        """
        data = self.api.request(LEADS, "PATCH", body=leads)
        return [Lead.from_dict(item) for item in self.embedded(data, "leads")]

    def list(self, page: int = 1) -> list[Lead]:
        """
        List one page of leads.

        Args:
            page: Page number, starting at 1

        Returns:
            Leads sorted ascending by id (empty list when the page is empty)
        """
        data = self.api.request(LEADS, "GET", query={"page": str(page)})
        leads = [Lead.from_dict(item) for item in self.embedded(data, "leads")]
        return self.sorted_by_id(leads)

    def get_one(self, lead_id: int, with_: str = "") -> Lead:
        """
        Fetch a single lead.

        Args:
            lead_id: Lead identifier
            with_: Comma-separated related data to include (e.g., "contacts")

        Returns:
            The lead

        Raises:
            NotFoundError: If the response carries no lead id
        """
        data = self.api.request(lead_endpoint(lead_id), "GET", query={"with": with_})
        return self.require_id(Lead.from_dict(data or {}), f"lead {lead_id}")
