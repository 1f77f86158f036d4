"""Exception hierarchy for :mod:`sengled_cloud`."""

from __future__ import annotations


class SengledError(Exception):
    """Base class for every error raised by this package."""


class TransportError(SengledError, ConnectionError):
    """Raised when an HTTP request fails below the protocol level.

    Covers DNS and TLS failures, timeouts, non-2xx statuses and response
    bodies that are not valid JSON.
    """


class MqttError(TransportError):
    """Raised when an MQTT connect or publish fails.

    Wraps :class:`aiomqtt.MqttError` so callers do not need to import
    ``aiomqtt`` to catch broker failures.
    """


class AuthenticationFailure(SengledError):
    """Raised when the login endpoint does not return a session id."""


class SerializationError(SengledError, ValueError):
    """Raised when a command cannot be encoded as JSON."""


class InvalidIdentifier(SengledError, ValueError):
    """Raised for a device MAC that is not exactly six hex octets."""


class DirectoryError(SengledError, ValueError):
    """Raised when the device list response cannot be parsed.

    One bad record fails the whole list.
    """
