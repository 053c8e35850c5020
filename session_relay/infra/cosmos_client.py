# session_relay/infra/cosmos_client.py
from dataclasses import dataclass
from typing import Optional, Union

from azure.cosmos import PartitionKey
from azure.cosmos.aio import ContainerProxy, CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError

from session_relay.config import (
    APPLICATION_NAME,
    CONTAINER_ID,
    DATABASE_ID,
    PARTITION_KEY_PATH,
    Settings,
)
from session_relay.models.person import Person

SESSION_TOKEN_HEADER = "x-ms-session-token"


@dataclass(frozen=True)
class Found:
    person: Person


@dataclass(frozen=True)
class NotFound:
    person_id: str


@dataclass(frozen=True)
class Failed:
    person_id: str
    cause: Exception


LookupResult = Union[Found, NotFound, Failed]


def create_cosmos_client(settings: Settings) -> CosmosClient:
    return CosmosClient.from_connection_string(
        settings.cosmos_connection_string,
        user_agent_suffix=APPLICATION_NAME,
    )


async def ensure_container(client: CosmosClient) -> ContainerProxy:
    """
    Creates the database and the container if they do not exist yet.
    The container is partitioned on /partitionKey, which Person mirrors from id.
    """
    database = await client.create_database_if_not_exists(id=DATABASE_ID)
    print(f"Created Database: {database.id}\n")

    container = await database.create_container_if_not_exists(
        id=CONTAINER_ID,
        partition_key=PartitionKey(path=PARTITION_KEY_PATH),
    )
    print(f"Created Container: {container.id}\n")
    return container


def get_container(client: CosmosClient) -> ContainerProxy:
    return client.get_database_client(DATABASE_ID).get_container_client(CONTAINER_ID)


async def upsert_person(container: ContainerProxy, person: Person) -> Optional[str]:
    """Upserts the person and returns the session token of the write."""
    captured = {}

    def _hook(headers, _result):
        captured["session"] = headers.get(SESSION_TOKEN_HEADER) if headers else None

    await container.upsert_item(body=person.to_document(), response_hook=_hook)
    return captured.get("session")


async def read_person(
    container: ContainerProxy,
    person_id: str,
    session_token: Optional[str] = None,
) -> LookupResult:
    # no token -> default consistency of the account
    options = {} if session_token is None else {"session_token": session_token}

    try:
        item = await container.read_item(item=person_id, partition_key=person_id, **options)
        return Found(Person.model_validate(item))
    except CosmosResourceNotFoundError:
        return NotFound(person_id)
    except Exception as e:
        return Failed(person_id, e)
