"""MQTT bridge implementation."""

import asyncio
import json
import logging
import ssl
from typing import Any, Callable, Dict, Optional
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from constants import MQTT_CONNECT_TIMEOUT, MQTT_KEEPALIVE, MQTT_QOS

logger = logging.getLogger(__name__)

MessageHandler = Callable[[bytes], None]


class MqttError(Exception):
    """Connecting or subscribing to the broker failed."""


class MqttBridge:
    """Bridge between one paho MQTT session and the asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, url: str, client_id: str = ""):
        self.loop = loop
        self.url = url
        parsed = urlparse(url)
        if parsed.scheme not in ("mqtt", "mqtts", "tcp"):
            raise ValueError(f"Unsupported MQTT url '{url}'")
        self.host = parsed.hostname or "localhost"
        self.port = parsed.port or (8883 if parsed.scheme == "mqtts" else 1883)

        self.client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2, client_id=client_id)
        if parsed.username:
            self.client.username_pw_set(parsed.username, parsed.password)
        if parsed.scheme == "mqtts":
            self.client.tls_set(cert_reqs=ssl.CERT_REQUIRED)

        self.client.on_connect = self._on_connect
        self.client.on_message = self._on_message
        self.client.on_subscribe = self._on_subscribe

        self._handlers: Dict[str, MessageHandler] = {}
        self._connected: Optional[asyncio.Future] = None
        self._pending: Dict[int, asyncio.Future] = {}

    async def connect(self, timeout: float = MQTT_CONNECT_TIMEOUT):
        """Connect to MQTT broker and wait for the CONNACK."""
        self._connected = self.loop.create_future()
        try:
            self.client.connect(self.host, self.port, keepalive=MQTT_KEEPALIVE)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to connect to MQTT broker {self.url}: {e}")
            raise MqttError(f"cannot connect to {self.url}: {e}") from e
        self.client.loop_start()
        try:
            await asyncio.wait_for(self._connected, timeout)
        except asyncio.TimeoutError as e:
            self.close()
            raise MqttError(f"no answer from {self.url} within {timeout}s") from e
        except MqttError:
            self.close()
            raise
        logger.info(f"Connected to MQTT broker at {self.host}:{self.port}")

    async def subscribe(self, topic: str, handler: MessageHandler, timeout: float = MQTT_CONNECT_TIMEOUT):
        """Subscribe to topic and route its messages to handler."""
        self._handlers[topic] = handler
        result, mid = self.client.subscribe(topic, qos=MQTT_QOS)
        if result != mqtt.MQTT_ERR_SUCCESS:
            raise MqttError(f"subscribe to {topic} failed: {mqtt.error_string(result)}")
        future = self.loop.create_future()
        self._pending[mid] = future
        try:
            await asyncio.wait_for(future, timeout)
        except asyncio.TimeoutError as e:
            raise MqttError(f"subscribe to {topic} not acknowledged") from e
        finally:
            self._pending.pop(mid, None)
        logger.info(f"Subscribed to: {topic}")

    def publish_json(self, topic: str, payload: Dict[str, Any]):
        """Publish a JSON object (not retained)."""
        message = json.dumps(payload)
        self.client.publish(topic, payload=message, qos=MQTT_QOS, retain=False)
        logger.debug(f"Published to {topic}: {message}")

    def close(self):
        """Close MQTT connection."""
        try:
            self.client.disconnect()
        finally:
            self.client.loop_stop()

    # paho callbacks run on the network thread and hop onto the event loop

    def _on_connect(self, client, userdata, flags, reason_code, properties):
        """Handle MQTT connection."""
        self.loop.call_soon_threadsafe(self._connect_done, reason_code)

    def _connect_done(self, reason_code):
        failed = getattr(reason_code, "is_failure", reason_code != 0)
        if self._connected is not None and not self._connected.done():
            if failed:
                self._connected.set_exception(MqttError(f"broker refused connection: {reason_code}"))
            else:
                self._connected.set_result(True)
            return
        if failed:
            logger.warning(f"Reconnect to MQTT broker failed with code {reason_code}")
            return
        logger.info("Reconnected to MQTT broker, restoring subscriptions")
        for topic in self._handlers:
            self.client.subscribe(topic, qos=MQTT_QOS)

    def _on_subscribe(self, client, userdata, mid, reason_code_list, properties):
        self.loop.call_soon_threadsafe(self._subscribe_done, mid, list(reason_code_list))

    def _subscribe_done(self, mid, reason_codes):
        future = self._pending.get(mid)
        if future is None or future.done():
            return
        failures = [rc for rc in reason_codes if getattr(rc, "is_failure", False)]
        if failures:
            future.set_exception(MqttError(f"broker rejected subscription: {failures}"))
        else:
            future.set_result(True)

    def _on_message(self, client, userdata, msg):
        """Handle incoming MQTT message."""
        self.loop.call_soon_threadsafe(self._dispatch, msg.topic, msg.payload)

    def _dispatch(self, topic: str, payload: bytes):
        handler = self._handlers.get(topic)
        if handler is None:
            logger.debug(f"Ignoring message on unexpected topic: {topic}")
            return
        try:
            handler(payload)
        except Exception as e:
            logger.error(f"Error handling MQTT message on {topic}: {e}", exc_info=True)
