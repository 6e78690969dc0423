"""Shared plumbing for remote controls."""

import logging
from typing import Any, Dict, List, Optional

from light_helpers import decode_payload, merge_state, stamp
from models import LightBinding, LightState, Provenance, RemoteConfig, ServiceState, TemplateCursor
from mqtt_bridge import MqttBridge
from service import Service
from state_store import Record, StateStore
from topics import record_desired, record_report, topic_device

logger = logging.getLogger(__name__)


class RemoteService(Service):
    """
    Subscribes to a remote's event topic and writes commands for its lights.

    Subclasses implement handle_message(); the lights a remote addresses are
    read from the ``is`` record and commanded through the ``set`` record.
    """

    service_type = "remote"

    def __init__(self, store: StateStore, bridge: MqttBridge, config: RemoteConfig):
        super().__init__(self.service_type)
        if not config.lights:
            raise ValueError(f"Remote '{config.mqtt_device_name}' has no lights configured")
        self.store = store
        self.bridge = bridge
        self.config = config
        self.remote_topic = topic_device(config.mqtt_device_name)
        self.lights: List[LightBinding] = config.lights
        self.cursors: List[TemplateCursor] = [TemplateCursor() for _ in self.lights]
        self.device_index = 0
        self.report_records: List[Record] = []
        self.desired_records: List[Record] = []

    async def start(self):
        self.set_service_name(self.config.mqtt_device_name)
        self.set_state(ServiceState.BUSY)
        for light in self.lights:
            report = self.store.get_record(record_report(light.record_name))
            desired = self.store.get_record(record_desired(light.record_name))
            await report.when_ready()
            await desired.when_ready()
            self.report_records.append(report)
            self.desired_records.append(desired)
        await self.bridge.connect()
        await self.bridge.subscribe(self.remote_topic, self._on_message)
        self.set_state(ServiceState.OK)
        logger.info(f"Remote {self.name} controlling {len(self.lights)} light(s)")

    async def stop(self):
        self.bridge.close()
        for record in self.report_records + self.desired_records:
            record.discard()
        self.set_state(ServiceState.INACTIVE)

    def _on_message(self, payload: bytes):
        message = decode_payload(payload)
        if message is None:
            return
        logger.debug(f"Received action {message.get('action')}: {message}")
        self.handle_message(message)

    def handle_message(self, message: Dict[str, Any]):
        raise NotImplementedError

    def light_state(self, index: int) -> LightState:
        """
        Current state of a light: the device report, overlaid with the
        desired state when that was written more recently.
        """
        report = self.report_records[index]
        desired = self.desired_records[index]
        if desired.revision > report.revision:
            return merge_state(report.get(), desired.get())
        return report.get()

    def set_command(self, index: int, command: Optional[LightState]):
        if command is None:
            return
        record = self.desired_records[index]
        command = stamp(command, Provenance.CONTROL)
        logger.debug(f"Updating light record {record.name}: {command}")
        # the record holds the latest command only, nothing left from earlier ones
        record.replace(command)

    def cycle_device(self) -> int:
        self.device_index = (self.device_index + 1) % len(self.lights)
        logger.debug(f"Cycle device to {self.device_index} ({self.lights[self.device_index].record_name})")
        return self.device_index
