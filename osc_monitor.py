import asyncio
import logging

from pythonosc.dispatcher import Dispatcher
from pythonosc.osc_server import AsyncIOOSCUDPServer

from settings_store import DEFAULT_IP, DEFAULT_PORT

logger = logging.getLogger(__name__)

# Listens where a freshly placed button sends by default
MONITOR_IP = DEFAULT_IP
MONITOR_PORT = DEFAULT_PORT


def format_message(address, *args) -> str:
    rendered = " ".join(repr(a) for a in args)
    return f"{address} {rendered}".rstrip()


def osc_handler(address, *args):
    line = format_message(address, *args)
    print(f"OSC ← {line}")
    logger.info("Received %s", line)


def build_dispatcher():
    dispatcher = Dispatcher()
    dispatcher.set_default_handler(osc_handler)
    return dispatcher


async def start_monitor(ip=MONITOR_IP, port=MONITOR_PORT):
    server = AsyncIOOSCUDPServer(
        (ip, port),
        build_dispatcher(),
        asyncio.get_running_loop()
    )

    transport, _ = await server.create_serve_endpoint()
    print(f"OSC monitor listening on {ip}:{port}")
    return transport


async def run_monitor():
    transport = await start_monitor()

    try:
        await asyncio.Future()  # run forever
    finally:
        transport.close()


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    asyncio.run(run_monitor())


if __name__ == "__main__":
    main()
