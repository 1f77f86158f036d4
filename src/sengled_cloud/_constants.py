"""Internal constants for the Sengled cloud protocol (from the Sengled Home app)."""

from __future__ import annotations

LOGIN_URL = "https://ucenter.cloud.sengled.com/user/app/customer/v2/AuthenCross.json"
DEVICE_LIST_URL = "https://life2.cloud.sengled.com/life2/device/list.json"

HTTP_TIMEOUT = 15  # seconds, total per request

MQTT_HOST = "us-mqtt.cloud.sengled.com"
MQTT_PORT = 443
MQTT_PATH = "/mqtt"
MQTT_CLIENT_SUFFIX = "@lifeApp"

# Sent with every websocket upgrade; the broker rejects connections without it.
MQTT_CLIENT_HEADERS: dict[str, str] = {
    "X-Requested-With": "com.sengled.life2",
}

# Fixed login fields expected by the auth endpoint. They identify the client
# app, not the user, and are not configurable.
LOGIN_OS_TYPE = "ios"
LOGIN_UUID = "xxx"
LOGIN_PRODUCT_CODE = "life"
LOGIN_APP_CODE = "life"

SESSION_COOKIE = "JSESSIONID"
