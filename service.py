"""Service lifecycle and health reporting."""

import logging
from typing import Dict, List, Optional

from models import ServiceState

logger = logging.getLogger(__name__)


class Service:
    """Base class for components that report a coarse health state."""

    def __init__(self, name: str):
        self.name = name
        self.state = ServiceState.STARTING
        self.reason: Optional[str] = None

    def set_service_name(self, name: str):
        self.name = name

    def set_state(self, state: ServiceState, reason: Optional[str] = None):
        if state == self.state and reason == self.reason:
            return
        logger.debug(f"{self.name}: {self.state.value} -> {state.value}" + (f" ({reason})" if reason else ""))
        self.state = state
        self.reason = reason

    def describe(self) -> Dict[str, Optional[str]]:
        return {"state": self.state.value, "reason": self.reason}


class ServiceRegistry:
    """Collects services so their health can be served to the outside."""

    HEALTHY = (ServiceState.OK, ServiceState.BUSY)

    def __init__(self):
        self.services: List[Service] = []

    def register(self, service: Service) -> Service:
        self.services.append(service)
        return service

    def snapshot(self) -> Dict[str, Dict[str, Optional[str]]]:
        return {service.name: service.describe() for service in self.services}

    def healthy(self) -> bool:
        return all(service.state in self.HEALTHY for service in self.services)
