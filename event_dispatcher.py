import json
import logging

from pythonosc.parsing.osc_types import BuildError

from osc_packet import OSC_ADDRESS, build_packet
from settings_store import DEFAULT_SETTINGS, InstanceSettings, settings_from_payload

logger = logging.getLogger(__name__)

KEY_DOWN = "keyDown"
WILL_APPEAR = "willAppear"
DID_RECEIVE_SETTINGS = "didReceiveSettings"


class EventDispatcher:
    """Routes Stream Deck host events to the settings store and OSC sender."""

    def __init__(self, store, sender):
        self.store = store
        self.sender = sender

        self._handlers = {
            KEY_DOWN: self.handle_key_down,
            WILL_APPEAR: self.handle_will_appear,
            DID_RECEIVE_SETTINGS: self.handle_did_receive_settings,
        }

    # =========================================================
    # Host message entry point
    # =========================================================

    def handle_message(self, message):
        try:
            data = json.loads(message)
        except (ValueError, RecursionError) as e:
            logger.warning("Failed to decode host message: %s", e)
            return

        if not isinstance(data, dict):
            logger.warning("Ignoring non-object host message: %r", data)
            return

        self.dispatch(data)

    def dispatch(self, event: dict):
        kind = event.get("event")
        context = event.get("context")

        if not isinstance(kind, str):
            logger.warning("Ignoring host message with event %r", kind)
            return

        handler = self._handlers.get(kind)

        if handler is None:
            logger.debug("Unhandled event %r for context %s", kind, context)
            return

        if not isinstance(context, str):
            logger.warning("Ignoring %s with context %r", kind, context)
            return

        handler(event)

    # =========================================================
    # Event handlers
    # =========================================================

    def handle_will_appear(self, event: dict):
        context = event.get("context")
        settings = settings_from_payload(event.get("payload"))

        if settings is not None and not settings.is_empty():
            self.store.put(context, settings)
            logger.info("Initialized settings for context %s: %s", context, settings)
        else:
            self.store.put(context, DEFAULT_SETTINGS)
            logger.info("No settings found for context %s, using defaults", context)

    def handle_did_receive_settings(self, event: dict):
        context = event.get("context")
        settings = settings_from_payload(event.get("payload"))

        if settings is None:
            settings = InstanceSettings()

        self.store.put(context, settings)
        logger.info("Settings updated for context %s: %s", context, settings)

    def handle_key_down(self, event: dict):
        context = event.get("context")
        settings = self.store.get(context)

        if settings is None:
            logger.warning("No settings found for context %s, keyDown ignored", context)
            return

        logger.info(
            "keyDown for context %s: %s %s -> %s:%s",
            context, OSC_ADDRESS, settings.command_argument(), settings.ip, settings.port,
        )

        try:
            packet = build_packet(OSC_ADDRESS, settings.command_argument())
        except BuildError as e:
            logger.warning("Could not encode command for context %s: %s", context, e)
            return

        self.sender.send(settings.ip, settings.port, packet)
