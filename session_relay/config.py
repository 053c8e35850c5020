# session_relay/config.py
import os
from typing import Literal, Optional

from azure.servicebus import TransportType
from dotenv import load_dotenv
from pydantic import BaseModel

# ====== fixed names ======
DATABASE_ID = "ToDoList"
CONTAINER_ID = "Items"
PARTITION_KEY_PATH = "/partitionKey"
TOPIC_NAME = "job.person.created"
SUBSCRIPTION_NAME = "SessionMessageReceiver"
APPLICATION_NAME = "CosmosDBDotnetQuickstart"
PERSON_COUNT = 50

_TRANSPORTS = {
    "amqp": TransportType.Amqp,
    "websocket": TransportType.AmqpOverWebsocket,
}


class Settings(BaseModel):
    cosmos_connection_string: str
    servicebus_connection_string: str
    servicebus_transport: Literal["amqp", "websocket"] = "amqp"

    @property
    def transport_type(self) -> TransportType:
        return _TRANSPORTS[self.servicebus_transport]


def _require(name: str) -> str:
    value = os.getenv(name)
    if not value:
        raise RuntimeError(f"{name} is not set (environment or .env)")
    return value


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Builds the Settings once at process start.
    Both entry points receive the result; nothing else reads os.environ.
    """
    load_dotenv(env_file)

    transport = os.getenv("AZURE_SERVICE_BUS_TRANSPORT", "amqp").lower()
    if transport not in _TRANSPORTS:
        raise RuntimeError(
            f"AZURE_SERVICE_BUS_TRANSPORT must be one of {sorted(_TRANSPORTS)}, got '{transport}'"
        )

    return Settings(
        cosmos_connection_string=_require("COSMOS_CONNECTION_STRING"),
        servicebus_connection_string=_require("AZURE_SERVICE_BUS_CONNECTION_STRING"),
        servicebus_transport=transport,
    )
