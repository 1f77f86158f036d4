"""Device MAC addresses as used by the Sengled cloud."""

from __future__ import annotations

import re
from dataclasses import dataclass

from sengled_cloud.errors import InvalidIdentifier

MAC_LENGTH = 6

_OCTET = re.compile(r"[0-9A-Fa-f]{1,2}")


@dataclass(frozen=True)
class Mac:
    """A 6-byte device identifier.

    The cloud calls this ``deviceUuid`` in device records and ``dn`` in
    commands.  Its text form is uppercase hex octets joined by colons::

        >>> str(Mac.parse("b0:ce:18:0a:1b:2c"))
        'B0:CE:18:0A:1B:2C'
    """

    octets: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "octets", bytes(self.octets))
        if len(self.octets) != MAC_LENGTH:
            raise InvalidIdentifier(
                f"MAC must be {MAC_LENGTH} bytes, got {len(self.octets)}."
            )

    @classmethod
    def parse(cls, text: str) -> Mac:
        """Parse colon-separated hex octets (case-insensitive).

        Raises :class:`InvalidIdentifier` unless *text* splits into exactly
        six segments of one or two hex digits.
        """
        parts = text.split(":")
        if len(parts) != MAC_LENGTH:
            raise InvalidIdentifier(
                f"Invalid MAC '{text}': expected {MAC_LENGTH} octets, got {len(parts)}."
            )
        for part in parts:
            if not _OCTET.fullmatch(part):
                raise InvalidIdentifier(f"Invalid MAC '{text}': bad octet '{part}'.")
        return cls(bytes(int(part, 16) for part in parts))

    def format(self) -> str:
        """Render as ``AA:BB:CC:DD:EE:FF``."""
        # Octets below 0x10 keep their leading zero ("0A", not "A"), matching
        # the deviceUuid strings the cloud returns.
        return ":".join(f"{b:02X}" for b in self.octets)

    def __str__(self) -> str:
        return self.format()

    def __bytes__(self) -> bytes:
        return self.octets
