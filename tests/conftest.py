import json
from typing import Any, Callable, Dict, List, Tuple

import pytest

from models import BrightnessConfig, LightBinding, LightDeviceConfig, RemoteConfig
from state_store import StateStore


class FakeBridge:
    """Stands in for MqttBridge: records publishes and lets tests inject messages."""

    def __init__(self) -> None:
        self.connected = False
        self.closed = False
        self.handlers: Dict[str, Callable[[bytes], None]] = {}
        self.published: List[Tuple[str, Dict[str, Any]]] = []

    async def connect(self) -> None:
        self.connected = True

    async def subscribe(self, topic: str, handler: Callable[[bytes], None]) -> None:
        self.handlers[topic] = handler

    def publish_json(self, topic: str, payload: Dict[str, Any]) -> None:
        self.published.append((topic, payload))

    def close(self) -> None:
        self.closed = True

    def deliver(self, topic: str, payload: Any) -> None:
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload).encode("utf-8")
        elif isinstance(payload, str):
            payload = payload.encode("utf-8")
        self.handlers[topic](payload)


@pytest.fixture
def store() -> StateStore:
    return StateStore()


@pytest.fixture
def bridge() -> FakeBridge:
    return FakeBridge()


@pytest.fixture
def light_config() -> LightDeviceConfig:
    return LightDeviceConfig(
        mqtt_url="mqtt://localhost",
        mqtt_device_name="TV Light",
        light_record="light-control/devices/TV Light",
    )


@pytest.fixture
def hue_binding() -> LightBinding:
    """A color light with two templates and the transition quirk configured."""
    return LightBinding(
        record_name="light-control/devices/Living Room",
        templates=[
            {"color": {"hue": 30, "saturation": 90}, "effect": "candle"},
            {"color_temp": 300},
            {"color_temp": 370},
        ],
        brightness=BrightnessConfig(prop="brightness", steps=255),
        on_state={"state": "ON"},
        off_state={"state": "OFF"},
        transition_state={"transition": 0.2},
        no_transition_state={"transition": 0},
        reset_template={"color": None, "color_temp": None, "effect": None},
        command_template={"transition": 0.2},
    )


@pytest.fixture
def make_remote_config() -> Callable[..., RemoteConfig]:
    def _make(kind: str, lights: List[LightBinding]) -> RemoteConfig:
        return RemoteConfig(kind=kind, mqtt_url="mqtt://localhost", mqtt_device_name="Remote", lights=lights)

    return _make


@pytest.fixture
def bridge_factory() -> Callable[..., FakeBridge]:
    """Replacement for the MqttBridge constructor; keeps every bridge it hands out."""

    def _make(loop, url: str, client_id: str = "") -> FakeBridge:
        fake = FakeBridge()
        fake.url = url
        fake.client_id = client_id
        _make.created.append(fake)
        return fake

    _make.created = []
    return _make
