"""Main light-control application."""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Type, Union

from config import build_light_configs, build_remote_configs
from constants import HEALTH_HOST, HEALTH_PORT
from health_server import HealthServer
from light_device import LightDevice
from models import ServiceState
from mqtt_bridge import MqttBridge, MqttError
from paulmann_remote import PaulmannRemote
from philips_dimmer_switch import PhilipsDimmerSwitch
from remote import RemoteService
from service import ServiceRegistry
from state_store import StateStore
from tradfri_multi_remote import TradfriMultiRemote
from tradfri_remote import TradfriRemote

logger = logging.getLogger(__name__)

REMOTE_CLASSES: Dict[str, Type[RemoteService]] = {
    "tradfri": TradfriRemote,
    "tradfri_multi": TradfriMultiRemote,
    "paulmann": PaulmannRemote,
    "philips_dimmer": PhilipsDimmerSwitch,
}


class LightControl:
    """Wires device links and remotes around one shared state store."""

    def __init__(self, config: Dict[str, Any], store: Optional[StateStore] = None):
        self.loop = asyncio.get_running_loop()
        self.config = config
        self.store = store or StateStore()
        self.registry = ServiceRegistry()
        self.services: List[Union[LightDevice, RemoteService]] = []

        for light_config in build_light_configs(config):
            bridge = MqttBridge(self.loop, light_config.mqtt_url, client_id=f"light-control-{light_config.mqtt_device_name}")
            self.services.append(LightDevice(self.store, bridge, light_config))

        for remote_config in build_remote_configs(config):
            bridge = MqttBridge(self.loop, remote_config.mqtt_url, client_id=f"light-control-{remote_config.mqtt_device_name}")
            remote_class = REMOTE_CLASSES[remote_config.kind]
            self.services.append(remote_class(self.store, bridge, remote_config))

        for service in self.services:
            self.registry.register(service)

        health = config.get("health")
        self.health_server: Optional[HealthServer] = None
        if health is not False:
            health = health or {}
            self.health_server = HealthServer(
                self.registry,
                host=health.get("host", HEALTH_HOST),
                port=int(health.get("port", HEALTH_PORT)),
            )

        self.running = False
        self._stopped = asyncio.Event()

    async def start(self):
        """Start every service and run until stopped."""
        self.running = True
        if self.health_server is not None:
            await self.health_server.start()
        await asyncio.gather(*(self._start_service(service) for service in self.services))
        logger.info(f"Light control running with {len(self.services)} service(s)")
        await self._stopped.wait()

    async def _start_service(self, service: Union[LightDevice, RemoteService]):
        try:
            await service.start()
        except (MqttError, OSError) as e:
            # one unreachable broker must not take the other services down
            logger.error(f"Failed to start {service.name}: {e}")
            service.set_state(ServiceState.DEGRADED, str(e))

    async def stop(self):
        """Stop the application."""
        if not self.running:
            return
        self.running = False

        for service in self.services:
            if service.state == ServiceState.INACTIVE:
                continue
            try:
                await service.stop()
            except Exception as e:
                logger.warning(f"Error stopping {service.name}: {e}")
        if self.health_server is not None:
            await self.health_server.stop()
        self._stopped.set()
