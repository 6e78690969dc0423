"""Device link: delivers the desired light state to a zigbee2mqtt light."""

import asyncio
import logging
from typing import Optional

from constants import DESIRED_STATE_DEBOUNCE, MAX_RESENDS, RESEND_TIMEOUT
from light_helpers import decode_payload, device_command, is_from_device, stamp
from models import LightDeviceConfig, LightState, Provenance, ServiceState
from mqtt_bridge import MqttBridge
from service import Service
from state_store import Record, StateStore, Subscription
from topics import record_desired, record_report, topic_device, topic_device_set

logger = logging.getLogger(__name__)


class LightDevice(Service):
    """
    Owns the MQTT session to one light.

    Desired states from the ``set`` record are published to the device and
    resent every ``resend_timeout`` seconds until the device reports back.
    Reports are written to the ``is`` record tagged with the device
    provenance. After ``max_resends`` unanswered resends the link gives up
    and reports itself degraded until a new desired state is acknowledged.
    """

    def __init__(
        self,
        store: StateStore,
        bridge: MqttBridge,
        config: LightDeviceConfig,
        resend_timeout: float = RESEND_TIMEOUT,
        max_resends: int = MAX_RESENDS,
        debounce: float = DESIRED_STATE_DEBOUNCE,
    ):
        super().__init__("light-device")
        self.store = store
        self.bridge = bridge
        self.config = config
        self.resend_timeout = resend_timeout
        self.max_resends = max_resends
        self.debounce = debounce

        self.light_topic = topic_device(config.mqtt_device_name)
        self.light_set_topic = topic_device_set(config.mqtt_device_name)

        self.report_record: Optional[Record] = None
        self.desired_record: Optional[Record] = None
        self.subscription: Optional[Subscription] = None

        self.last_command: Optional[LightState] = None
        self.resend_count = 0
        self.awaiting_ack = False
        self.resend_timer: Optional[asyncio.TimerHandle] = None
        self.debounce_timer: Optional[asyncio.TimerHandle] = None
        self.pending_state: Optional[LightState] = None

    async def start(self):
        """Connect to the broker and start following the desired state."""
        self.set_service_name(self.config.mqtt_device_name)
        self.set_state(ServiceState.BUSY)
        self.report_record = self.store.get_record(record_report(self.config.light_record))
        self.desired_record = self.store.get_record(record_desired(self.config.light_record))
        await self.bridge.connect()
        await self.bridge.subscribe(self.light_topic, self._on_message)
        await self.desired_record.when_ready()
        self.subscription = self.desired_record.subscribe(self._on_desired_state, emit_initial=True)
        self.set_state(ServiceState.OK)
        logger.info(f"Light device {self.name} following {self.desired_record.name}")

    async def stop(self):
        """Stop the device link."""
        self._cancel_resend()
        if self.debounce_timer is not None:
            self.debounce_timer.cancel()
            self.debounce_timer = None
        if self.subscription is not None:
            self.subscription.discard()
        for record in (self.desired_record, self.report_record):
            if record is not None:
                record.discard()
        self.bridge.close()
        self.set_state(ServiceState.INACTIVE)

    def _on_message(self, payload: bytes):
        message = decode_payload(payload)
        if message is None:
            return
        self.handle_report(message)

    def handle_report(self, message: LightState):
        """Any report from the device acknowledges the outstanding command."""
        self._cancel_resend()
        if self.awaiting_ack:
            self.awaiting_ack = False
            self.set_state(ServiceState.OK)
        logger.debug(f"Updating light record {self.report_record.name}: {message}")
        self.report_record.set(stamp(message, Provenance.DEVICE))

    def _on_desired_state(self, light_state: LightState):
        # only the latest state within the debounce window is acted upon
        self.pending_state = light_state
        if self.debounce_timer is not None:
            self.debounce_timer.cancel()
        loop = asyncio.get_running_loop()
        self.debounce_timer = loop.call_later(self.debounce, self._flush_desired_state)

    def _flush_desired_state(self):
        self.debounce_timer = None
        light_state, self.pending_state = self.pending_state, None
        if light_state is not None:
            self.set_light(light_state)

    def set_light(self, light_state: LightState):
        """Accept a new desired state and start delivering it."""
        if is_from_device(light_state):
            # avoid feedback loop
            return
        command = device_command(light_state)
        if not command:
            logger.debug(f"Nothing to publish for {self.name}")
            return
        self.last_command = command
        self.resend_count = 0
        self.awaiting_ack = True
        if self.state != ServiceState.DEGRADED:
            self.set_state(ServiceState.BUSY)
        self._send()

    def resend_command(self):
        """Resend timer fired without an acknowledgement."""
        self._cancel_resend()
        self.resend_count += 1
        if self.resend_count > self.max_resends:
            logger.error(f"{self.name} did not acknowledge after {self.max_resends} resends, giving up")
            # only an ack of a new command brings the link back
            self.awaiting_ack = False
            self.set_state(
                ServiceState.DEGRADED,
                f"no acknowledgement from {self.config.mqtt_device_name} after {self.max_resends} resends",
            )
            return
        logger.warning(f"Resending command to {self.light_set_topic} ({self.resend_count}/{self.max_resends})")
        self._send()

    def _send(self):
        logger.debug(f"Publishing to {self.light_set_topic}: {self.last_command}")
        self.bridge.publish_json(self.light_set_topic, self.last_command)
        self._cancel_resend()
        loop = asyncio.get_running_loop()
        self.resend_timer = loop.call_later(self.resend_timeout, self.resend_command)

    def _cancel_resend(self):
        if self.resend_timer is not None:
            self.resend_timer.cancel()
            self.resend_timer = None
