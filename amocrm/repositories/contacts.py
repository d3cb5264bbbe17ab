"""Contacts repository."""

from amocrm.core.endpoints import CONTACTS, contact_endpoint
from .base import Repository
from .models import Contact


class Contacts(Repository):
    """Create, update, list and fetch contacts."""

    def create(self, contacts: list[Contact]) -> list[Contact]:
        data = self.api.request(CONTACTS, "POST", body=contacts)
        return [Contact.from_dict(item) for item in self.embedded(data, "contacts")]

    def update(self, contacts: list[Contact]) -> list[Contact]:
        data = self.api.request(CONTACTS, "PATCH", body=contacts)
        return [Contact.from_dict(item) for item in self.embedded(data, "contacts")]

    def list(self, page: int = 1) -> list[Contact]:
        """List one page of contacts, sorted ascending by id."""
        data = self.api.request(CONTACTS, "GET", query={"page": str(page)})
        contacts = [Contact.from_dict(item) for item in self.embedded(data, "contacts")]
        return self.sorted_by_id(contacts)

    def get_one(self, contact_id: int, with_: str = "") -> Contact:
        """
        Fetch a single contact.

        Raises:
            NotFoundError: If the response carries no contact id
        """
        data = self.api.request(contact_endpoint(contact_id), "GET", query={"with": with_})
        return self.require_id(Contact.from_dict(data or {}), f"contact {contact_id}")
