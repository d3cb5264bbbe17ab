"""Endpoint registry: logical resource names to versioned URL paths."""

API_VERSION = 4
EVENTS_V2_VERSION = 2


class Endpoint(str):
    """
    A resource path template such as "leads" or "leads/{id}".

    The value is the resource part only; `path` adds the API prefix.
    """

    @property
    def path(self) -> str:
        """
        Resolve the endpoint to a URL path.

        Returns:
            "/api/v{API_VERSION}/{resource}", except for the v2 events
            resource which is always "/api/v2/{resource}/".
        """
        if self == EVENTS_V2:
            return f"/api/v{EVENTS_V2_VERSION}/{self}/"
        if self == OAUTH_TOKEN:
            return f"/{self}"
        return f"/api/v{API_VERSION}/{self}"

    def with_id(self, record_id: int) -> "Endpoint":
        """Substitute the first {id} placeholder with the decimal id."""
        return Endpoint(self.replace("{id}", f"{record_id:d}", 1))


OAUTH_TOKEN = Endpoint("oauth2/access_token")

ACCOUNTS = Endpoint("accounts")

LEADS = Endpoint("leads")
LEAD = Endpoint("leads/{id}")
PIPELINES = Endpoint("leads/pipelines")

CONTACTS = Endpoint("contacts")
CONTACT = Endpoint("contacts/{id}")

CALLS = Endpoint("calls")

EVENTS_V2 = Endpoint("events")


def lead_endpoint(lead_id: int) -> Endpoint:
    return LEAD.with_id(lead_id)


def contact_endpoint(contact_id: int) -> Endpoint:
    return CONTACT.with_id(contact_id)
