"""Sengled cloud API client.

Provides programmatic access to Sengled Wi-Fi bulbs via the Sengled cloud
HTTP API and its MQTT broker.  :meth:`SengledApi.login` authenticates and
opens the broker connection; the returned client lists devices and sends
commands over that one connection::

    import asyncio
    from sengled_cloud import SengledApi

    async with await SengledApi.login("email@example.com", "password") as api:
        devices = await api.list_devices()
        lamp = next(d for d in devices if d.name == "Desk")
        await api.turn_on(lamp)
        await api.set_color(lamp, (255, 0, 0))

Commands are write-only: the broker acknowledges the publish, but the
cloud does not confirm that the bulb applied it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import ssl
from dataclasses import dataclass

import aiohttp
import aiomqtt

from sengled_cloud._constants import (
    DEVICE_LIST_URL,
    HTTP_TIMEOUT,
    LOGIN_APP_CODE,
    LOGIN_OS_TYPE,
    LOGIN_PRODUCT_CODE,
    LOGIN_URL,
    LOGIN_UUID,
    MQTT_CLIENT_HEADERS,
    MQTT_CLIENT_SUFFIX,
    MQTT_HOST,
    MQTT_PATH,
    MQTT_PORT,
    SESSION_COOKIE,
)
from sengled_cloud.commands import (
    Command,
    brightness_command,
    color_command,
    serialize,
    switch_command,
)
from sengled_cloud.errors import (
    AuthenticationFailure,
    DirectoryError,
    InvalidIdentifier,
    MqttError,
    TransportError,
)
from sengled_cloud.mac import Mac

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Device:
    """A bulb registered to the account.

    Obtained from :meth:`SengledApi.list_devices`.  Devices are plain
    values: commands copy the :class:`Mac`, so a device can be discarded
    while its commands are still in flight.
    """

    name: str
    """Display name (the ``name`` attribute of the device record)."""

    mac: Mac
    """Device identifier (``deviceUuid``)."""

    @property
    def uuid(self) -> bytes:
        """The six raw bytes of the device MAC."""
        return bytes(self.mac)


class SengledApi:
    """Sengled cloud session.

    Use :meth:`login` to authenticate and connect in one step.  The client
    owns the session id and one MQTT connection until :meth:`close`; there
    is no automatic reconnect or session refresh, so after a transport
    failure a new client must be created.
    """

    def __init__(self, session_id: str) -> None:
        self._session_id = session_id
        self._mqtt: aiomqtt.Client | None = None
        self._stack: contextlib.AsyncExitStack | None = None

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    async def login(cls, user: str, password: str) -> SengledApi:
        """Authenticate with Sengled and return a connected client.

        Raises:
            AuthenticationFailure: If the credentials are rejected.
            TransportError: If the login request fails.
            MqttError: If the broker connection cannot be opened.
        """
        session_id = await _http_login(user, password)
        api = cls(session_id)
        await api.connect()
        return api

    async def connect(self) -> None:
        """Open the persistent MQTT connection.

        Does nothing if the client is already connected.
        """
        if self._mqtt is not None:
            return
        stack = contextlib.AsyncExitStack()
        client = aiomqtt.Client(**_mqtt_params(self._session_id))  # type: ignore[arg-type]
        try:
            connected = await stack.enter_async_context(client)
        except aiomqtt.MqttError as e:
            raise MqttError(str(e)) from e
        self._stack = stack
        self._mqtt = connected
        _LOGGER.debug("Connected to %s:%s%s", MQTT_HOST, MQTT_PORT, MQTT_PATH)

    async def close(self) -> None:
        """Disconnect from the broker.  Safe to call more than once."""
        stack, self._stack, self._mqtt = self._stack, None, None
        if stack is None:
            return
        try:
            await stack.aclose()
        except aiomqtt.MqttError as e:
            raise MqttError(str(e)) from e
        _LOGGER.debug("Disconnected from %s", MQTT_HOST)

    async def __aenter__(self) -> SengledApi:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        """Session id issued at login (sent as the ``JSESSIONID`` cookie)."""
        return self._session_id

    @property
    def is_connected(self) -> bool:
        """True while the MQTT connection is open."""
        return self._mqtt is not None

    # ------------------------------------------------------------------
    # Devices (HTTP)
    # ------------------------------------------------------------------

    async def list_devices(self) -> list[Device]:
        """Fetch the devices registered to the account, in server order.

        Raises:
            TransportError: If the request fails.
            DirectoryError: If any device record is malformed.
        """
        async with aiohttp.ClientSession() as session:
            return await _fetch_devices(self._session_id, session)

    # ------------------------------------------------------------------
    # Control (MQTT)
    # ------------------------------------------------------------------

    async def turn_on(self, device: Device) -> None:
        await self.send_command(switch_command(device.mac, True))

    async def turn_off(self, device: Device) -> None:
        await self.send_command(switch_command(device.mac, False))

    async def set_brightness(self, device: Device, level: int) -> None:
        """Set brightness from an 8-bit *level*; 255 is full brightness.

        Raises :class:`ValueError` if *level* is outside 0-255.
        """
        await self.send_command(brightness_command(device.mac, level))

    async def set_color(self, device: Device, rgb: tuple[int, int, int]) -> None:
        """Set the bulb colour from an ``(r, g, b)`` tuple of 0-255 channels.

        Raises :class:`ValueError` if a channel is outside 0-255.
        """
        await self.send_command(color_command(device.mac, rgb))

    async def send_command(self, command: Command) -> None:
        """Publish *command* and wait for the broker to acknowledge it.

        Raises :class:`MqttError` if the client is not connected or the
        publish fails.
        """
        if self._mqtt is None:
            raise MqttError("Not connected. Call SengledApi.login() or connect() first.")
        payload = serialize(command)
        _LOGGER.debug("Publishing to %s: %s", command.topic, payload)
        try:
            await self._mqtt.publish(command.topic, payload, qos=1)
        except aiomqtt.MqttError as e:
            raise MqttError(str(e)) from e


# ---------------------------------------------------------------------------
# Private helpers
# ---------------------------------------------------------------------------


def _auth_headers(session_id: str) -> dict[str, str]:
    return {"Cookie": f"{SESSION_COOKIE}={session_id}"}


def _build_login_request(user: str, password: str) -> dict[str, str]:
    """Build the login body.  Only *user* and *password* vary."""
    return {
        "user": user,
        "pwd": password,
        "osType": LOGIN_OS_TYPE,
        "uuid": LOGIN_UUID,
        "productCode": LOGIN_PRODUCT_CODE,
        "appCode": LOGIN_APP_CODE,
    }


def _parse_login_response(body: object) -> str | None:
    """Return the session id from a login response, or ``None``.

    The endpoint has no status field: a successful login carries
    ``jsessionId`` and anything else is a failure.  Unexpected shapes
    return ``None`` rather than raising.
    """
    if not isinstance(body, dict):
        return None
    session_id = body.get("jsessionId")
    if not isinstance(session_id, str):
        return None
    return session_id


async def _post_json(
    session: aiohttp.ClientSession,
    url: str,
    *,
    json_body: object = None,
    headers: dict[str, str] | None = None,
) -> object:
    """POST to *url* and decode the JSON response.

    All HTTP, network and decoding failures are raised as
    :class:`TransportError`.
    """
    try:
        async with session.post(
            url,
            json=json_body,
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=HTTP_TIMEOUT),
        ) as resp:
            resp.raise_for_status()
            # The cloud does not always label its JSON as application/json.
            return await resp.json(content_type=None)
    except aiohttp.ClientResponseError as e:
        raise TransportError(f"HTTP {e.status} from {url}: {e.message}") from e
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise TransportError(f"Request to {url} failed: {e!r}") from e
    except ValueError as e:
        # Covers both undecodable bytes and invalid JSON.
        raise TransportError(f"Malformed JSON from {url}: {e}") from e


async def _http_login(user: str, password: str) -> str:
    """Log in and return the session id."""
    _LOGGER.debug("Logging in as %s", user)
    async with aiohttp.ClientSession() as session:
        body = await _post_json(session, LOGIN_URL, json_body=_build_login_request(user, password))
    session_id = _parse_login_response(body)
    if session_id is None:
        raise AuthenticationFailure("Login failed: no session id in response.")
    return session_id


async def _fetch_devices(session_id: str, session: aiohttp.ClientSession) -> list[Device]:
    """Fetch and parse the device list using the given session id."""
    body = await _post_json(session, DEVICE_LIST_URL, headers=_auth_headers(session_id))
    devices = _parse_device_list(body)
    _LOGGER.debug("Fetched %d device(s)", len(devices))
    return devices


def _parse_device_list(body: object) -> list[Device]:
    """Parse a ``device/list.json`` response into devices.

    Raises :class:`DirectoryError` if the response or any record in it is
    malformed; no partial list is returned.
    """
    if not isinstance(body, dict) or not isinstance(body.get("deviceList"), list):
        raise DirectoryError("Device list response has no 'deviceList' array.")
    return [_parse_device(record) for record in body["deviceList"]]


def _parse_device(record: object) -> Device:
    """Build a :class:`Device` from one ``deviceList`` entry."""
    if not isinstance(record, dict):
        raise DirectoryError(f"Device record is not an object: {record!r}")
    uuid = record.get("deviceUuid")
    if not isinstance(uuid, str):
        raise DirectoryError(f"Device record has no 'deviceUuid': {record!r}")
    attributes = record.get("attributeList")
    if not isinstance(attributes, list):
        raise DirectoryError(f"Device {uuid} has no 'attributeList'.")

    name = _find_attribute(attributes, "name")
    if name is None:
        raise DirectoryError(f"Device {uuid} has no 'name' attribute.")

    try:
        mac = Mac.parse(uuid)
    except InvalidIdentifier as e:
        raise DirectoryError(f"Device '{name}' has an invalid deviceUuid: {e}") from e
    return Device(name=name, mac=mac)


def _find_attribute(attributes: list[object], name: str) -> str | None:
    """Return the value of the first attribute called *name*.

    Every attribute is checked, including those after the match.
    """
    pairs: list[tuple[str, str]] = []
    for attr in attributes:
        if (
            not isinstance(attr, dict)
            or not isinstance(attr.get("name"), str)
            or not isinstance(attr.get("value"), str)
        ):
            raise DirectoryError(f"Malformed attribute: {attr!r}")
        pairs.append((attr["name"], attr["value"]))
    return next((value for key, value in pairs if key == name), None)


# ---------------------------------------------------------------------------
# MQTT
# ---------------------------------------------------------------------------


def _make_tls_context() -> ssl.SSLContext:
    """Create an SSL context that verifies against the system CA store."""
    return ssl.create_default_context()


def _mqtt_params(session_id: str) -> dict[str, object]:
    """Derive aiomqtt.Client constructor kwargs from the session id."""
    return {
        "hostname": MQTT_HOST,
        "port": MQTT_PORT,
        "identifier": f"{session_id}{MQTT_CLIENT_SUFFIX}",
        "transport": "websockets",
        "websocket_path": MQTT_PATH,
        "websocket_headers": {**_auth_headers(session_id), **MQTT_CLIENT_HEADERS},
        "tls_context": _make_tls_context(),
        "logger": _LOGGER,
    }
