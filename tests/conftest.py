"""
Shared fixtures: fake Cosmos container / Service Bus handles and settings.
No Azure account is needed to run the suite.
"""
import pytest

from fakes import FakeContainer, FakeCosmosClient, FakeReceiver, FakeSender, FakeServiceBusClient
from session_relay.config import Settings


@pytest.fixture
def settings():
    return Settings(
        cosmos_connection_string="AccountEndpoint=https://test.documents.azure.com:443/;AccountKey=dGVzdA==;",
        servicebus_connection_string="Endpoint=sb://test.servicebus.windows.net/;SharedAccessKeyName=k;SharedAccessKey=dGVzdA==",
    )


@pytest.fixture
def container():
    return FakeContainer()


@pytest.fixture
def sender(container):
    return FakeSender(container)


@pytest.fixture
def cosmos_client(container):
    return FakeCosmosClient(container)


@pytest.fixture
def receiver():
    return FakeReceiver()


@pytest.fixture
def sb_client(receiver, sender):
    return FakeServiceBusClient(receiver=receiver, sender=sender)
