"""
Byte/Text Codec

Encoding rules for Supermicro OEM raw commands and parsers for the
line-oriented text that racadm and ``ipmitool lan print`` emit.

Supermicro OEM commands live under netfn 0x30. A payload is built as::

    0x30 <command bytes> <action byte> <sub-command bytes>

with a few commands that order or omit parts differently (see the
resources in ``oobsetup.resources.smc``).
"""

import hashlib
import hmac
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Union

from ..errors import InvalidValueError

logger = logging.getLogger(__name__)

NETFN_OEM = 0x30

COMMANDS = {
    "hostname": [0x47],
    "ntp": [0x68, 0x01],
    "ddns": [0x68, 0x04],
    "networkmode": [0x70, 0x0C],
    "isactivated": [0x6A],
    "setlicense": [0x69],
}

ACTIONS = {
    "get": [0x00],
    "set": [0x01],
}

LICENSE_LENGTH = 12


def bytes_to_str(values: Iterable[int]) -> str:
    """Decode a controller reply into text.

    NUL padding at the end is dropped; bytes that are not valid UTF-8 are
    replaced instead of raising.
    """
    return bytes(values).decode("utf-8", errors="replace").rstrip("\x00")


def build_command(command: str, action: Optional[str] = None,
                  sub_command: Optional[Sequence[int]] = None,
                  action_first: bool = True) -> List[int]:
    """Build the byte payload for a Supermicro OEM command

    Args:
        command: Symbolic command name (see COMMANDS)
        action: "get", "set" or None to omit the action byte
        sub_command: Optional sub-command bytes
        action_first: Place the action before the sub-command (the usual
            order). DDNS wants the sub-command first.

    Returns:
        List of byte values starting with the netfn

    Raises:
        InvalidValueError: If the command or action is unknown

    Examples:
        >>> build_command("ntp", "get", [0x00])
        [48, 104, 1, 0, 0]
    """
    try:
        data = [NETFN_OEM] + COMMANDS[command]
    except KeyError:
        raise InvalidValueError(f"Unknown command: {command}")

    action_bytes: List[int] = []
    if action is not None:
        try:
            action_bytes = ACTIONS[action]
        except KeyError:
            raise InvalidValueError(f"Unknown action: {action}")
    sub_bytes = list(sub_command or [])

    if action_first:
        return data + action_bytes + sub_bytes
    return data + sub_bytes + action_bytes


def format_raw(values: Iterable[int]) -> List[str]:
    """Format byte values as ipmitool raw arguments"""
    return [f"0x{v:02x}" for v in values]


def parse_raw(output: str) -> List[int]:
    """Parse the hex tokens printed by ``ipmitool raw``"""
    return [int(token, 16) for token in output.split()]


def _split_pair(line: str):
    positions = [p for p in (line.find("="), line.find(":")) if p >= 0]
    if not positions:
        return None
    pos = min(positions)
    return line[:pos].strip(), line[pos + 1:].strip()


def parse_key_value_text(text: Union[str, Iterable[str]]) -> Dict[str, str]:
    """Parse ``key=value`` / ``key : value`` lines into a mapping.

    Each line is split on the first ``=`` or ``:``. Blank lines, lines
    without a separator and ``[section]`` headers are skipped. If a key
    repeats, the last value wins.

    Examples:
        >>> parse_key_value_text("[Key=idrac.Embedded.1#NTPConfigGroup.1]\\nNTP1=0.pool.ntp.org\\n")
        {'NTP1': '0.pool.ntp.org'}
        >>> parse_key_value_text(["IP Address Source       : DHCP Address"])
        {'IP Address Source': 'DHCP Address'}
    """
    lines = text.splitlines() if isinstance(text, str) else text
    data: Dict[str, str] = {}
    for line in lines:
        line = line.strip()
        if not line or line.startswith("["):
            continue
        pair = _split_pair(line)
        if pair is None:
            continue
        key, value = pair
        data[key] = value
    return data


def mac_to_bytes(mac: str) -> bytes:
    """Convert ``aa:bb:cc:dd:ee:ff`` into its six raw bytes"""
    try:
        raw = bytes(int(part, 16) for part in mac.split(":"))
    except ValueError:
        raise InvalidValueError(f"Invalid MAC address: {mac}")
    if len(raw) != 6:
        raise InvalidValueError(f"Invalid MAC address: {mac}")
    return raw


def generate_license(mac: str, key: Union[bytes, str]) -> List[int]:
    """Derive a Supermicro license from the BMC MAC address

    The license is the first 12 bytes of HMAC-SHA1 over the raw MAC bytes,
    keyed by the vendor private key. A str key is UTF-8 encoded.

    Args:
        mac: BMC MAC address, colon separated hex
        key: Private key

    Returns:
        The 12 license bytes
    """
    if isinstance(key, str):
        key = key.encode("utf-8")
    digest = hmac.new(key, mac_to_bytes(mac), hashlib.sha1).digest()
    return list(digest[:LICENSE_LENGTH])


def format_license(values: Sequence[int]) -> str:
    """Human readable form of a license, e.g. ``0A1B-2C3D-...``"""
    hexed = [f"{v:02X}" for v in values]
    return "-".join("".join(hexed[i:i + 2]) for i in range(0, len(hexed), 2))
