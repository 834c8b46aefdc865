import logging
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Union

logger = logging.getLogger(__name__)

# =========================================================
# Defaults for instances that appear without settings
# =========================================================

DEFAULT_IP = "127.0.0.1"
DEFAULT_PORT = 8000
DEFAULT_COMMAND = "defaultCommand"

MAX_PORT = 65535

IP_KEYS = ("ip", "ipAddress")
PORT_KEYS = ("port",)
COMMAND_KEYS = ("command_id", "commandID")


# =========================================================
# Settings tuple
# =========================================================

@dataclass(frozen=True)
class InstanceSettings:
    """Destination and command for one Stream Deck button instance.

    The command is a string in most profiles, but some property inspectors
    store numeric action ids (REAPER command ids, for instance).
    """

    ip: str = ""
    port: int = 0
    command: Union[str, int] = ""

    def is_empty(self) -> bool:
        return not self.ip and not self.port and self.command in ("", 0)

    def command_argument(self) -> str:
        return str(self.command)


DEFAULT_SETTINGS = InstanceSettings(DEFAULT_IP, DEFAULT_PORT, DEFAULT_COMMAND)


def _first(raw: dict, keys: Iterable[str]):
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def _coerce_port(value) -> int:
    if value is None or isinstance(value, bool):
        return 0

    try:
        port = int(value)
    except (TypeError, ValueError, OverflowError):
        logger.warning("Ignoring non-numeric port %r", value)
        return 0

    if not 0 <= port <= MAX_PORT:
        logger.warning("Ignoring out-of-range port %d", port)
        return 0

    return port


def _coerce_command(value) -> Union[str, int]:
    if value is None:
        return ""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return str(value)


def settings_from_payload(payload: Optional[dict]) -> Optional[InstanceSettings]:
    """Decode the `settings` object of a host event payload.

    Returns None when the payload carries no settings at all. Settings that
    are present but blank come back as an all-zero InstanceSettings, so the
    caller can tell "not provided" from "provided empty".
    """
    if not isinstance(payload, dict):
        return None

    raw = payload.get("settings")
    if not isinstance(raw, dict):
        return None

    ip = _first(raw, IP_KEYS)
    port = _first(raw, PORT_KEYS)
    command = _first(raw, COMMAND_KEYS)

    if ip is None and port is None and command is None:
        return None

    return InstanceSettings(
        ip="" if ip is None else str(ip),
        port=_coerce_port(port),
        command=_coerce_command(command),
    )


# =========================================================
# Per-instance store
# =========================================================

class SettingsStore:
    """Settings per instance context, kept for the life of the process."""

    def __init__(self):
        self._lock = threading.Lock()
        self._settings: Dict[str, InstanceSettings] = {}

    def get(self, context: str) -> Optional[InstanceSettings]:
        with self._lock:
            return self._settings.get(context)

    def put(self, context: str, settings: InstanceSettings):
        with self._lock:
            self._settings[context] = settings

    def contexts(self):
        with self._lock:
            return sorted(self._settings)

    def __len__(self) -> int:
        with self._lock:
            return len(self._settings)
