# session_relay/services/producer.py
import random
from typing import Callable, List

from azure.cosmos.aio import ContainerProxy
from azure.servicebus.aio import ServiceBusSender

from session_relay.config import PERSON_COUNT, TOPIC_NAME, Settings
from session_relay.infra.cosmos_client import create_cosmos_client, ensure_container, upsert_person
from session_relay.infra.servicebus import create_servicebus_client, publish_message
from session_relay.models.message import Message
from session_relay.models.person import Person

_MAX_ID = 2**31 - 1


def random_person_id() -> str:
    return str(random.randrange(_MAX_ID))


def generate_person(index: int, person_id: str) -> Person:
    return Person(id=person_id, Name=f"Romik {index}", Age=index + 30)


async def generate_data(
    container: ContainerProxy,
    sender: ServiceBusSender,
    count: int = PERSON_COUNT,
    id_factory: Callable[[], str] = random_person_id,
) -> List[Message]:
    """
    For i = 1..count: upsert a Person, then publish a Message carrying
    its id and the session token of that write.

    The write always completes before the publish starts. There is no
    atomicity between the two: if the process dies in between, the record
    exists without a notification. Any error stops the loop.
    """
    published = []

    for i in range(1, count + 1):
        person = generate_person(i, id_factory())

        # 1) write
        session = await upsert_person(container, person)

        # 2) announce
        msg = Message(IdPerson=person.id, SessionId=session)
        await publish_message(sender, msg)
        published.append(msg)

        print(f"Run: {i} Session Id: {session}")

    return published


async def run_producer(settings: Settings, count: int = PERSON_COUNT) -> List[Message]:
    async with create_cosmos_client(settings) as cosmos_client:
        container = await ensure_container(cosmos_client)

        async with create_servicebus_client(settings) as sb_client:
            async with sb_client.get_topic_sender(topic_name=TOPIC_NAME) as sender:
                return await generate_data(container, sender, count=count)
