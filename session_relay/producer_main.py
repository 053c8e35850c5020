# session_relay/producer_main.py
import asyncio

from azure.cosmos.exceptions import CosmosHttpResponseError

from session_relay.config import load_settings
from session_relay.services.producer import run_producer


def main() -> None:
    try:
        print("Beginning operations...\n")
        settings = load_settings()
        asyncio.run(run_producer(settings))
    except CosmosHttpResponseError as de:
        print(f"{de.status_code} error occurred: {de}")
    except Exception as e:
        print(f"Error: {e}")
    finally:
        print("End of demo")


if __name__ == "__main__":
    main()
