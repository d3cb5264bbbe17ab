"""Accounts repository."""

from amocrm.core.endpoints import ACCOUNTS
from .base import Repository
from .models import Account


class Accounts(Repository):

    def current(self, with_: str = "") -> Account:
        """
        Fetch the account the current token belongs to.

        Args:
            with_: Comma-separated extra data (e.g., "amojo_id,version")

        Raises:
            NotFoundError: If the response carries no account id
        """
        query = {"with": with_} if with_ else None
        data = self.api.request(ACCOUNTS, "GET", query=query)
        return self.require_id(Account.from_dict(data or {}), "account")
