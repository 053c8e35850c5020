# session_relay/infra/servicebus_processor.py
import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from azure.servicebus import ServiceBusReceivedMessage
from azure.servicebus.aio import AutoLockRenewer, ServiceBusClient, ServiceBusReceiver


class ProcessMessageArgs:
    """What the message callback receives: the message plus a way to settle it."""

    def __init__(self, message: ServiceBusReceivedMessage, receiver: ServiceBusReceiver, entity_path: str):
        self.message = message
        self.entity_path = entity_path
        self.settled = False
        self._receiver = receiver

    def body_text(self) -> str:
        # the body arrives as a generator of byte sections
        return b"".join(part for part in self.message.body).decode("utf-8")

    async def complete_message(self, message: ServiceBusReceivedMessage) -> None:
        await self._receiver.complete_message(message)
        self.settled = True


@dataclass
class ProcessErrorArgs:
    exception: Exception
    error_source: str
    entity_path: str


MessageCallback = Callable[[ProcessMessageArgs], Awaitable[None]]
ErrorCallback = Callable[[ProcessErrorArgs], Awaitable[None]]


class MessageProcessor:
    """
    Delivers messages from a topic subscription to a callback.

    - Register process_message and process_error before start_processing().
    - Nothing is completed automatically: the callback must call
      args.complete_message(). If the callback raises, the error goes to
      process_error and the message is abandoned (the broker decides
      redelivery or dead-lettering).
    - Receive errors go to process_error and the receiver is reopened
      after reconnect_delay seconds. Errors never stop the processor;
      only stop_processing() does.
    - Message locks are renewed for up to max_lock_renewal_duration seconds
      while a batch is being handled (0 disables renewal).
    """

    def __init__(
        self,
        client: ServiceBusClient,
        topic_name: str,
        subscription_name: str,
        max_message_count: int = 10,
        max_wait_time: float = 5,
        reconnect_delay: float = 5,
        max_lock_renewal_duration: float = 300,
    ):
        self.process_message: Optional[MessageCallback] = None
        self.process_error: Optional[ErrorCallback] = None

        self._client = client
        self._topic_name = topic_name
        self._subscription_name = subscription_name
        self._max_message_count = max_message_count
        self._max_wait_time = max_wait_time
        self._reconnect_delay = reconnect_delay
        self._max_lock_renewal_duration = max_lock_renewal_duration

        self._stop_requested = asyncio.Event()
        self._task: Optional[asyncio.Task] = None

    @property
    def entity_path(self) -> str:
        return f"{self._topic_name}/Subscriptions/{self._subscription_name}"

    @property
    def is_processing(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start_processing(self) -> None:
        if self.process_message is None or self.process_error is None:
            raise RuntimeError("process_message and process_error must be registered before start_processing()")
        if self.is_processing:
            raise RuntimeError("the processor is already running")

        self._stop_requested.clear()
        self._task = asyncio.create_task(self._run())

    async def stop_processing(self) -> None:
        if self._task is None:
            return
        self._stop_requested.set()
        try:
            await self._task
        finally:
            self._task = None

    async def close(self) -> None:
        """Stops processing. The ServiceBusClient is not closed: it belongs to the caller."""
        await self.stop_processing()

    async def __aenter__(self) -> "MessageProcessor":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _run(self) -> None:
        renewer = None
        if self._max_lock_renewal_duration:
            renewer = AutoLockRenewer(max_lock_renewal_duration=self._max_lock_renewal_duration)

        try:
            await self._receive_until_stopped(renewer)
        finally:
            if renewer is not None:
                await renewer.close()

    async def _receive_until_stopped(self, renewer: Optional[AutoLockRenewer]) -> None:
        while not self._stop_requested.is_set():
            try:
                receiver = self._client.get_subscription_receiver(
                    topic_name=self._topic_name,
                    subscription_name=self._subscription_name,
                    auto_lock_renewer=renewer,
                )
                async with receiver:
                    while not self._stop_requested.is_set():
                        messages = await receiver.receive_messages(
                            max_message_count=self._max_message_count,
                            max_wait_time=self._max_wait_time,
                        )
                        if not messages:
                            # give stop_processing() and other tasks a turn
                            await asyncio.sleep(0)
                            continue

                        for msg in messages:
                            await self._dispatch(receiver, msg)
            except Exception as e:
                await self._report_error(e, "receive")
                await self._wait_for_stop(self._reconnect_delay)

    async def _dispatch(self, receiver: ServiceBusReceiver, msg: ServiceBusReceivedMessage) -> None:
        args = ProcessMessageArgs(msg, receiver, self.entity_path)
        try:
            await self.process_message(args)
        except Exception as e:
            await self._report_error(e, "user_callback")
            if not args.settled:
                try:
                    await receiver.abandon_message(msg)
                except Exception as abandon_error:
                    await self._report_error(abandon_error, "abandon")

    async def _report_error(self, exception: Exception, source: str) -> None:
        try:
            await self.process_error(ProcessErrorArgs(exception, source, self.entity_path))
        except Exception as e:
            print(f"[processor] ❗ process_error raised while handling {source}: {e}")

    async def _wait_for_stop(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self._stop_requested.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass


def create_processor(client: ServiceBusClient, topic_name: str, subscription_name: str, **options) -> MessageProcessor:
    return MessageProcessor(client, topic_name, subscription_name, **options)
