import pytest
from azure.core.utils import CaseInsensitiveDict
from azure.cosmos.exceptions import CosmosHttpResponseError

from session_relay.infra import cosmos_client as cosmos_module
from session_relay.infra.cosmos_client import (
    Failed,
    Found,
    NotFound,
    create_cosmos_client,
    ensure_container,
    get_container,
    read_person,
    upsert_person,
)
from session_relay.models.person import Person


@pytest.mark.asyncio
async def test_ensure_container_creates_database_and_partitioned_container(cosmos_client, container, capsys):
    result = await ensure_container(cosmos_client)

    assert result is container
    database = cosmos_client.databases["ToDoList"]
    request = database.container_requests[0]
    assert request["id"] == "Items"
    assert request["partition_key"]["paths"] == ["/partitionKey"]

    out = capsys.readouterr().out
    assert "Created Database: ToDoList" in out
    assert "Created Container: Items" in out


@pytest.mark.asyncio
async def test_ensure_container_is_idempotent(cosmos_client, container):
    first = await ensure_container(cosmos_client)
    second = await ensure_container(cosmos_client)
    assert first is second is container
    assert list(cosmos_client.databases) == ["ToDoList"]


def test_get_container_does_not_create(cosmos_client, container):
    assert get_container(cosmos_client) is container
    assert cosmos_client.databases["ToDoList"].container_requests == [{"id": "Items"}]


@pytest.mark.asyncio
async def test_upsert_returns_session_token_of_the_write(container):
    first = await upsert_person(container, Person(id="1", Name="Romik 1", Age=31))
    second = await upsert_person(container, Person(id="2", Name="Romik 2", Age=32))

    assert first == "0:-1#1"
    assert second == "0:-1#2"
    assert container.items["1"]["partitionKey"] == "1"


@pytest.mark.asyncio
async def test_upsert_overwrites_by_id(container):
    await upsert_person(container, Person(id="1", Name="Romik 1", Age=31))
    await upsert_person(container, Person(id="1", Name="Romik 1b", Age=99))

    result = await read_person(container, "1")
    assert result == Found(Person(id="1", Name="Romik 1b", Age=99))


@pytest.mark.asyncio
async def test_read_with_session_token_uses_id_as_partition_key(container):
    token = await upsert_person(container, Person(id="5", Name="Romik 5", Age=35))

    result = await read_person(container, "5", token)

    assert isinstance(result, Found)
    assert (result.person.Name, result.person.Age) == ("Romik 5", 35)
    assert container.reads == [{"item": "5", "partition_key": "5", "session_token": token}]


@pytest.mark.asyncio
async def test_read_without_session_token_uses_default_consistency(container):
    await upsert_person(container, Person(id="5", Name="Romik 5", Age=35))

    result = await read_person(container, "5")

    assert isinstance(result, Found)
    assert "session_token" not in container.reads[0]


@pytest.mark.asyncio
async def test_missing_item_is_not_found(container):
    assert await read_person(container, "nope", "0:-1#1") == NotFound("nope")


@pytest.mark.asyncio
async def test_other_errors_are_failed(container):
    error = CosmosHttpResponseError(status_code=503, message="Service unavailable")
    container.read_error = error

    result = await read_person(container, "5")

    assert isinstance(result, Failed)
    assert result.person_id == "5"
    assert result.cause is error


@pytest.mark.asyncio
async def test_session_token_header_is_matched_case_insensitively():
    class MixedCaseHeaders:
        async def upsert_item(self, body, response_hook=None, **kwargs):
            response_hook(CaseInsensitiveDict({"X-Ms-Session-Token": "0:-1#77"}), body)
            return body

    assert await upsert_person(MixedCaseHeaders(), Person(id="1", Name="Romik 1", Age=31)) == "0:-1#77"


def test_client_identifies_the_application_in_the_user_agent(settings, monkeypatch):
    calls = []

    class RecordingClient:
        @classmethod
        def from_connection_string(cls, conn_str, **kwargs):
            calls.append((conn_str, kwargs))
            return cls()

    monkeypatch.setattr(cosmos_module, "CosmosClient", RecordingClient)

    create_cosmos_client(settings)

    assert calls == [(settings.cosmos_connection_string, {"user_agent_suffix": "CosmosDBDotnetQuickstart"})]
