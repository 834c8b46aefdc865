from pythonosc.osc_message import OscMessage
from pythonosc.parsing import osc_types

# =========================================================
# OSC wire format (single string argument)
# =========================================================

OSC_ADDRESS = "/action"
TYPE_TAG = ",s"


def pad_string(value: str) -> bytes:
    """NUL-terminate `value` and pad it to a 4-byte boundary.

    python-osc's string encoding is the OSC 1.0 rule: the UTF-8 bytes, one
    terminator, then up to three more NULs.
    """
    return osc_types.write_string(value)


def build_packet(address: str, argument: str) -> bytes:
    # Address is passed through as-is, even without a leading "/"
    return pad_string(address) + pad_string(TYPE_TAG) + pad_string(argument)


def parse_packet(packet: bytes):
    message = OscMessage(packet)
    params = message.params

    argument = params[0] if params else ""
    return message.address, str(argument)
