"""Command payloads published to Sengled Wi-Fi bulbs over MQTT."""

from __future__ import annotations

import enum
import json
import time
from collections.abc import Callable
from dataclasses import dataclass

from sengled_cloud.errors import SerializationError
from sengled_cloud.mac import Mac

MAX_LEVEL = 255


class CommandType(str, enum.Enum):
    """The ``type`` tag of a command payload."""

    SWITCH = "switch"
    BRIGHTNESS = "brightness"
    COLOR = "color"


@dataclass(frozen=True)
class Command:
    """A single state change addressed to one device.

    The ``time`` field of the payload is not stored here; it is stamped
    by :func:`serialize` when the command is encoded.
    """

    type: CommandType
    """Which attribute the command changes."""

    mac: Mac
    """Target device, sent as ``dn``."""

    value: str
    """Type-specific value: ``"0"``/``"1"``, ``"0"``-``"100"`` or ``"R:G:B"``."""

    @property
    def topic(self) -> str:
        """The MQTT topic this command is published to."""
        return topic_for(self.mac)


def build_command(command_type: CommandType, mac: Mac, value: str) -> Command:
    """Build a command with an already-encoded *value*.

    No validation is done on *value* so that other encodings (for example a
    colour temperature under ``COLOR``) can be sent as-is.
    """
    return Command(CommandType(command_type), mac, value)


def switch_command(mac: Mac, on: bool) -> Command:
    return Command(CommandType.SWITCH, mac, "1" if on else "0")


def brightness_command(mac: Mac, level: int) -> Command:
    """Build a brightness command from an 8-bit *level* (0-255)."""
    return Command(CommandType.BRIGHTNESS, mac, str(brightness_percent(level)))


def color_command(mac: Mac, rgb: tuple[int, int, int]) -> Command:
    """Build a colour command from an ``(r, g, b)`` tuple of 8-bit channels."""
    return Command(CommandType.COLOR, mac, color_value(rgb))


def brightness_percent(level: int) -> int:
    """Scale an 8-bit brightness to the 0-100 range the cloud expects.

    Truncates, so 128 maps to 50 and only 255 maps to 100.
    """
    _check_level(level, "brightness")
    return level * 100 // MAX_LEVEL


def color_value(rgb: tuple[int, int, int]) -> str:
    """Encode an RGB triple as ``"R:G:B"`` decimal text."""
    if len(rgb) != 3:
        raise ValueError(f"Expected 3 colour channels, got {len(rgb)}.")
    for channel, name in zip(rgb, ("red", "green", "blue")):
        _check_level(channel, name)
    return ":".join(str(channel) for channel in rgb)


def topic_for(mac: Mac) -> str:
    """Return the update topic for a device: ``wifielement/<MAC>/update``."""
    return f"wifielement/{mac}/update"


def serialize(command: Command, now: Callable[[], float] = time.time) -> bytes:
    """Encode *command* as a JSON payload, stamped with the current time.

    *now* returns seconds since the epoch; the payload carries milliseconds.
    """
    try:
        return json.dumps(
            {
                "type": command.type.value,
                "dn": str(command.mac),
                "value": command.value,
                "time": int(now() * 1000),
            },
            separators=(",", ":"),
        ).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise SerializationError(f"Cannot encode {command.type.value} command: {e}") from e


def _check_level(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Invalid {name} {value!r}. Expected an integer 0-{MAX_LEVEL}.")
    if not 0 <= value <= MAX_LEVEL:
        raise ValueError(f"Invalid {name} {value}. Must be 0..{MAX_LEVEL}.")
