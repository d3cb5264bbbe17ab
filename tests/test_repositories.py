"""Tests for resource repositories."""

import pytest

from amocrm.api.executor import RequestExecutor
from amocrm.api.oauth import TokenManager
from amocrm.core.models import NotFoundError, TransportError
from amocrm.repositories import (
    Accounts,
    Call,
    Calls,
    Contact,
    Contacts,
    Event,
    EventsV2,
    Lead,
    Leads,
    Pipelines,
)


@pytest.fixture
def api(config, mock_http_client, token):
    manager = TokenManager(config, mock_http_client)
    manager.set_token(token)
    return RequestExecutor(config, mock_http_client, manager)


def envelope(key, items):
    return {"_embedded": {key: items}}


# ===== Leads =====

def test_leads_create(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json=envelope("leads", [{"id": 1, "request_id": "0"}, {"id": 2, "request_id": "1"}])
    )

    created = Leads(api).create([Lead(name="A"), Lead(name="B", price=0)])

    assert [lead.id for lead in created] == [1, 2]
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["method"] == "POST"
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/leads"
    assert call_kwargs["json"] == [{"name": "A"}, {"name": "B", "price": 0}]


def test_leads_update(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json=envelope("leads", [{"id": 1, "updated_at": 1600000000}])
    )

    updated = Leads(api).update([Lead(id=1, price=100)])

    assert updated[0].updated_at == 1600000000
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["method"] == "PATCH"
    assert call_kwargs["json"] == [{"id": 1, "price": 100}]


def test_leads_create_empty_response(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, content=b"")
    assert Leads(api).create([Lead(name="A")]) == []


def test_leads_list_sorted_by_id(api, mock_http_client, make_response):
    """Test list results are sorted ascending by id."""
    mock_http_client.request.return_value = make_response(
        200, json=envelope("leads", [{"id": 30}, {"id": 10}, {"id": 20}])
    )

    leads = Leads(api).list(page=2)

    assert [lead.id for lead in leads] == [10, 20, 30]
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["params"] == {"page": "2"}


def test_leads_list_is_stable_across_calls(api, mock_http_client, make_response):
    data = envelope("leads", [{"id": 3, "name": "c"}, {"id": 1, "name": "a"}, {"id": 2, "name": "b"}])
    mock_http_client.request.side_effect = [
        make_response(200, json=data),
        make_response(200, json=data),
    ]

    first = Leads(api).list(page=1)
    second = Leads(api).list(page=1)

    assert first == second
    assert [lead.id for lead in first] == [1, 2, 3]


def test_leads_list_empty_page(api, mock_http_client, make_response):
    """Test an empty body past the last page is an empty list."""
    mock_http_client.request.return_value = make_response(204, content=b"")
    assert Leads(api).list(page=99) == []


def test_leads_get_one(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"id": 42, "name": "Deal"})

    lead = Leads(api).get_one(42, with_="contacts")

    assert lead == Lead(id=42, name="Deal")
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/leads/42"
    assert call_kwargs["params"] == {"with": "contacts"}


def test_leads_get_one_zero_id(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"id": 0})

    with pytest.raises(NotFoundError):
        Leads(api).get_one(42)


def test_leads_get_one_empty_body(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(204, content=b"")

    with pytest.raises(NotFoundError):
        Leads(api).get_one(42)


def test_leads_get_one_transport_error(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(404, content=b"")

    with pytest.raises(TransportError) as exc_info:
        Leads(api).get_one(42)

    assert exc_info.value.status_code == 404


# ===== Pipelines =====

def test_pipelines_list(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200,
        json=envelope("pipelines", [{
            "id": 3177727,
            "name": "Sales",
            "sort": 1,
            "is_main": True,
            "_embedded": {"statuses": [{"id": 142, "name": "Won", "type": 0}]},
        }]),
    )

    pipelines = Pipelines(api).list()

    assert pipelines[0].name == "Sales"
    assert pipelines[0].embedded.statuses[0].id == 142
    assert pipelines[0].embedded.statuses[0].type == 0
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/leads/pipelines"


# ===== Contacts =====

def test_contacts_create(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json=envelope("contacts", [{"id": 5}]))

    created = Contacts(api).create([Contact(first_name="Ann")])

    assert created == [Contact(id=5)]
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/contacts"
    assert call_kwargs["json"] == [{"first_name": "Ann"}]


def test_contacts_update(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json=envelope("contacts", [{"id": 5}]))

    Contacts(api).update([Contact(id=5, name="Ann")])

    assert mock_http_client.request.call_args[1]["method"] == "PATCH"


def test_contacts_list(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json=envelope("contacts", [{"id": 2}, {"id": 1}])
    )

    assert [c.id for c in Contacts(api).list()] == [1, 2]


def test_contacts_get_one(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"id": 7, "name": "Ann"})

    contact = Contacts(api).get_one(7)

    assert contact.name == "Ann"
    assert mock_http_client.request.call_args[1]["url"].endswith("/api/v4/contacts/7")


def test_contacts_get_one_missing_id(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"name": "ghost"})

    with pytest.raises(NotFoundError):
        Contacts(api).get_one(7)


# ===== Calls =====

def test_calls_create(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json=envelope("calls", [{"id": 9, "entity_id": 5, "entity_type": "contacts"}])
    )

    calls = Calls(api).create([Call(direction="inbound", phone="+79001112233", duration=0, source="pbx")])

    assert calls[0].entity_type == "contacts"
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/calls"
    assert call_kwargs["json"] == [
        {"direction": "inbound", "phone": "+79001112233", "duration": 0, "source": "pbx"}
    ]


# ===== Events v2 =====

def test_events_v2_create(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json=envelope("items", [{"element_id": 5, "element_type": 1, "uid": "abc"}])
    )

    events = EventsV2(api).create([Event(type="phone_call", phone_number="+79001112233", users=[1])])

    assert events[0].uid == "abc"
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v2/events/"
    assert call_kwargs["json"] == {
        "add": [{"type": "phone_call", "phone_number": "+79001112233", "users": [1]}]
    }


# ===== Accounts =====

def test_accounts_current(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(
        200, json={"id": 1, "name": "Example", "subdomain": "example", "amojo_id": "x"}
    )

    account = Accounts(api).current(with_="amojo_id")

    assert account.subdomain == "example"
    call_kwargs = mock_http_client.request.call_args[1]
    assert call_kwargs["url"] == "https://example.amocrm.ru/api/v4/accounts"
    assert call_kwargs["params"] == {"with": "amojo_id"}


def test_accounts_current_without_with(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={"id": 1})

    Accounts(api).current()

    assert mock_http_client.request.call_args[1]["params"] is None


def test_accounts_current_not_found(api, mock_http_client, make_response):
    mock_http_client.request.return_value = make_response(200, json={})

    with pytest.raises(NotFoundError):
        Accounts(api).current()
