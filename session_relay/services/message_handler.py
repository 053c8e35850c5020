# session_relay/services/message_handler.py
import sys

from azure.cosmos.aio import ContainerProxy

from session_relay.infra.cosmos_client import Failed, Found, NotFound, read_person
from session_relay.infra.servicebus_processor import ProcessErrorArgs, ProcessMessageArgs
from session_relay.models.message import Message


class PersonMessageHandler:
    """
    Resolves the Person referenced by each notification.
    Holds only the container handle, so concurrent calls share no state.
    """

    def __init__(self, container: ContainerProxy):
        self.container = container

    async def handle_message(self, args: ProcessMessageArgs) -> None:
        body = args.body_text()
        print(f"[consumer] 📥 Received: {body}")

        msg = Message.from_body(body)

        result = await read_person(self.container, msg.IdPerson, msg.SessionId)

        if isinstance(result, Found):
            print(f"[consumer] ✅ Found {result.person.id}: {result.person.Name}, {result.person.Age}")
        elif isinstance(result, NotFound):
            print(f"The item with id {result.person_id} does not exist", file=sys.stderr)
        elif isinstance(result, Failed):
            print(f"[consumer] ❗ Reading item {result.person_id} failed: {result.cause}")
            raise result.cause

        # message is deleted from the queue
        await args.complete_message(args.message)


async def handle_error(args: ProcessErrorArgs) -> None:
    print(f"[consumer] ❗ {args.error_source} error on {args.entity_path}: {args.exception!r}")
