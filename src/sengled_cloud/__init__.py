"""Python API and CLI for controlling Sengled Wi-Fi bulbs through the Sengled cloud."""

from sengled_cloud.client import Device, SengledApi
from sengled_cloud.commands import Command, CommandType
from sengled_cloud.errors import (
    AuthenticationFailure,
    DirectoryError,
    InvalidIdentifier,
    MqttError,
    SengledError,
    SerializationError,
    TransportError,
)
from sengled_cloud.mac import Mac

__all__ = [
    "AuthenticationFailure",
    "Command",
    "CommandType",
    "Device",
    "DirectoryError",
    "InvalidIdentifier",
    "Mac",
    "MqttError",
    "SengledApi",
    "SengledError",
    "SerializationError",
    "TransportError",
]
