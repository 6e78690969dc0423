"""Data models and dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TypedDict

LightState = Dict[str, Any]


class Provenance(str, Enum):
    """Origin of a light state update."""
    DEVICE = "device"
    CONTROL = "control"


class ServiceState(str, Enum):
    """Coarse health state reported to the service registry."""
    STARTING = "starting"
    OK = "ok"
    BUSY = "busy"
    DEGRADED = "degraded"
    INACTIVE = "inactive"


class LightMode(Enum):
    """Which color channel the Paulmann color wheel currently drives."""
    RGB = "rgb"
    WHITE = "white"


class OnOffState(TypedDict, total=False):
    state: str
    brightness: int
    transition: float


class WhiteState(OnOffState, total=False):
    color_temp: Optional[int]
    color_temp_percent: float


class ColorState(WhiteState, total=False):
    color: Optional[Dict[str, Any]]


@dataclass
class BrightnessConfig:
    """Which state property carries brightness and its full scale."""
    prop: str = "brightness"
    steps: int = 255


@dataclass
class LightBinding:
    """One light a remote can address."""
    record_name: str
    templates: List[LightState] = field(default_factory=list)
    brightness: BrightnessConfig = field(default_factory=BrightnessConfig)
    on_state: LightState = field(default_factory=lambda: {"state": "ON"})
    off_state: LightState = field(default_factory=lambda: {"state": "OFF"})
    transition_state: LightState = field(default_factory=dict)
    no_transition_state: LightState = field(default_factory=dict)
    reset_template: LightState = field(default_factory=dict)
    command_template: LightState = field(default_factory=dict)
    strategy: Optional[Any] = None  # LightStrategy, continuous-move remotes only


@dataclass
class TemplateCursor:
    """Mutable per-binding cursor owned by a remote."""
    template_index: int = 0
    light_mode: LightMode = LightMode.WHITE


@dataclass
class LightDeviceConfig:
    """A light managed by a device link."""
    mqtt_url: str
    mqtt_device_name: str
    light_record: str


@dataclass
class RemoteConfig:
    """A remote control and the lights it addresses."""
    kind: str
    mqtt_url: str
    mqtt_device_name: str
    lights: List[LightBinding] = field(default_factory=list)
    color_presets: Optional[List[LightState]] = None
