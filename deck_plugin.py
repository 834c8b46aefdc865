import argparse
import asyncio
import json
import logging

import websockets

from event_dispatcher import EventDispatcher
from osc_sender import OscSender
from settings_store import SettingsStore

logger = logging.getLogger(__name__)

# =========================================================
# Configuration
# =========================================================

HOST_URL_TEMPLATE = "ws://{host}:{port}/"
HOST = "localhost"

LOG_FILE = "plugin_debug.log"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(path=LOG_FILE, level=logging.INFO):
    # The Stream Deck host does not show plugin stdout, so everything goes
    # to a log file that starts fresh on every launch.
    logging.basicConfig(
        filename=path,
        filemode="w",
        level=level,
        format=LOG_FORMAT,
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="deckosc",
        description="Stream Deck plugin that turns key presses into OSC messages.",
    )
    parser.add_argument("-port", required=True, help="WebSocket port provided by Stream Deck")
    parser.add_argument("-pluginUUID", required=True, help="Unique plugin UUID")
    parser.add_argument("-registerEvent", required=True, help="Event type to register the plugin")
    parser.add_argument("-info", default="", help="Additional Stream Deck information")

    args = parser.parse_args(argv)

    if not args.port or not args.pluginUUID or not args.registerEvent:
        parser.error("Required parameters not provided")

    return args


def registration_message(register_event: str, plugin_uuid: str) -> str:
    return json.dumps({"event": register_event, "uuid": plugin_uuid})


# =========================================================
# Host connection
# =========================================================

async def run_plugin(port, plugin_uuid, register_event, host=HOST):
    url = HOST_URL_TEMPLATE.format(host=host, port=port)

    sender = OscSender()
    await sender.open()

    store = SettingsStore()
    dispatcher = EventDispatcher(store, sender)

    try:
        print(f"Connecting to WebSocket on port: {port}")
        logger.info("Connecting to Stream Deck at %s", url)

        async with websockets.connect(url) as ws:
            await ws.send(registration_message(register_event, plugin_uuid))
            print("Plugin registered successfully")
            logger.info("Registered plugin %s with event %s", plugin_uuid, register_event)

            async for message in ws:
                dispatcher.handle_message(message)

        logger.info("Stream Deck connection closed")

    except (websockets.exceptions.WebSocketException, OSError, asyncio.TimeoutError) as e:
        logger.error("Stream Deck connection lost: %s", e)

    finally:
        logger.info("Shutting down with %d instance(s): %s", len(store), ", ".join(store.contexts()))
        sender.close()


# =========================================================
# Main
# =========================================================

def main(argv=None):
    args = parse_args(argv)
    configure_logging()

    asyncio.run(run_plugin(args.port, args.pluginUUID, args.registerEvent))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
