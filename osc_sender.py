import asyncio
import ipaddress
import logging
import socket

from settings_store import MAX_PORT

logger = logging.getLogger(__name__)


class _SendProtocol(asyncio.DatagramProtocol):
    def error_received(self, exc):
        logger.warning("OSC send failed: %s", exc)


class OscSender:
    """One long-lived UDP endpoint per address family, shared by all sends.

    UDP is fire-and-forget: a send is a single datagram write with no retry
    and no delivery check. Nothing here raises on a bad destination; the
    failure is logged and the bridge keeps running.
    """

    def __init__(self):
        self._transports = {}

    async def open(self):
        loop = asyncio.get_running_loop()

        for family in (socket.AF_INET, socket.AF_INET6):
            try:
                transport, _ = await loop.create_datagram_endpoint(
                    _SendProtocol,
                    family=family,
                )
            except OSError as e:
                logger.warning("Could not open UDP endpoint (family %s): %s", family.name, e)
                continue

            self._transports[family] = transport

        logger.info("OSC sender ready (%d endpoint(s))", len(self._transports))

    def send(self, destination_ip: str, destination_port: int, packet: bytes) -> bool:
        try:
            address = ipaddress.ip_address(destination_ip)
        except ValueError:
            logger.warning("Invalid destination address %r, packet dropped", destination_ip)
            return False

        if not isinstance(destination_port, int) or not 0 <= destination_port <= MAX_PORT:
            logger.warning("Invalid destination port %r, packet dropped", destination_port)
            return False

        family = socket.AF_INET6 if address.version == 6 else socket.AF_INET
        transport = self._transports.get(family)

        if transport is None or transport.is_closing():
            logger.warning("No IPv%d endpoint open, packet to %s dropped", address.version, address)
            return False

        transport.sendto(packet, (str(address), destination_port))
        return True

    def close(self):
        for transport in self._transports.values():
            transport.close()

        self._transports.clear()
        logger.info("OSC sender closed")
