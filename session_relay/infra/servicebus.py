# session_relay/infra/servicebus.py
from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient, ServiceBusSender

from session_relay.config import Settings
from session_relay.models.message import Message


def create_servicebus_client(settings: Settings) -> ServiceBusClient:
    # amqp -> ports 5671/5672, websocket -> 443
    return ServiceBusClient.from_connection_string(
        settings.servicebus_connection_string,
        transport_type=settings.transport_type,
    )


async def publish_message(sender: ServiceBusSender, message: Message) -> None:
    await sender.send_messages(ServiceBusMessage(message.to_json()))
