# session_relay/consumer_main.py
import asyncio
import signal
import sys

from session_relay.config import SUBSCRIPTION_NAME, TOPIC_NAME, Settings, load_settings
from session_relay.infra.cosmos_client import create_cosmos_client, get_container
from session_relay.infra.servicebus import create_servicebus_client
from session_relay.infra.servicebus_processor import create_processor
from session_relay.services.message_handler import PersonMessageHandler, handle_error


async def run_consumer(settings: Settings, stop_requested: asyncio.Event, **processor_options) -> None:
    """
    Processes notifications until stop_requested is set.
    Processor, Service Bus client and Cosmos client are released on every exit path.
    """
    async with create_cosmos_client(settings) as cosmos_client:
        container = get_container(cosmos_client)

        async with create_servicebus_client(settings) as sb_client:
            processor = create_processor(sb_client, TOPIC_NAME, SUBSCRIPTION_NAME, **processor_options)

            async with processor:
                # 1) register handlers
                processor.process_message = PersonMessageHandler(container).handle_message
                processor.process_error = handle_error

                # 2) start and wait for the stop signal
                await processor.start_processing()
                print(f"[consumer] ✅ Listening on {processor.entity_path}")
                print("Wait for a minute and then press Enter (or Ctrl+C) to end the processing")
                await stop_requested.wait()

                # 3) stop
                print("\nStopping the receiver...")
                await processor.stop_processing()
                print("Stopped receiving messages")


def _on_key_press(loop: asyncio.AbstractEventLoop, stop_requested: asyncio.Event) -> None:
    sys.stdin.readline()
    loop.remove_reader(sys.stdin.fileno())
    stop_requested.set()


def _install_stop_triggers(loop: asyncio.AbstractEventLoop, stop_requested: asyncio.Event) -> None:
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_requested.set)
        except NotImplementedError:
            # no signal handlers on this platform's loop (Windows)
            pass

    if sys.stdin is not None and sys.stdin.isatty():
        try:
            loop.add_reader(sys.stdin.fileno(), _on_key_press, loop, stop_requested)
        except (NotImplementedError, OSError):
            pass


async def _serve(settings: Settings) -> None:
    stop_requested = asyncio.Event()
    _install_stop_triggers(asyncio.get_running_loop(), stop_requested)
    await run_consumer(settings, stop_requested)


def main() -> None:
    settings = load_settings()
    asyncio.run(_serve(settings))


if __name__ == "__main__":
    main()
