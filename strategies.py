"""Per device family command builders used by continuous-move remotes."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type, Union

from color import hsv_to_rgb, rgb_to_hsv
from constants import COLOR_TEMP_MAX, COLOR_TEMP_MIN, MQTT_PAYLOAD_OFF, MQTT_PAYLOAD_ON
from light_helpers import clamp
from models import ColorState, LightState, OnOffState, WhiteState

# endpoints of the white spectrum when mixed from RGB channels
WARM_WHITE = {"r": 255, "g": 147, "b": 41}
COLD_WHITE = {"r": 201, "g": 226, "b": 255}


class LightStrategy(ABC):
    """
    Builds command patches for one kind of light.

    Every method takes the current light state and returns the patch to
    write, or None when the light cannot do what was asked.
    """

    def __init__(self, brightness_prop: str = "brightness", brightness_max: int = 254, brightness_step: int = 16):
        self.brightness_prop = brightness_prop
        self.brightness_max = brightness_max
        self.brightness_step = brightness_step

    def set_on_off(self, state: LightState, on: bool) -> Optional[OnOffState]:
        return {"state": MQTT_PAYLOAD_ON if on else MQTT_PAYLOAD_OFF}

    def increment_brightness(self, state: LightState) -> Optional[LightState]:
        brightness = state.get(self.brightness_prop, self.brightness_max)
        return {"state": MQTT_PAYLOAD_ON, self.brightness_prop: clamp(brightness + self.brightness_step, 1, self.brightness_max)}

    def decrement_brightness(self, state: LightState) -> Optional[LightState]:
        brightness = state.get(self.brightness_prop, self.brightness_max)
        return {self.brightness_prop: clamp(brightness - self.brightness_step, 1, self.brightness_max)}

    def set_brightness_percent(self, state: LightState, brightness: float) -> Optional[LightState]:
        return {self.brightness_prop: round(clamp(brightness, 0.0, 1.0) * self.brightness_max)}

    @abstractmethod
    def set_color_temp_percent(self, state: LightState, color_temp: float) -> Optional[LightState]:
        ...

    @abstractmethod
    def set_hue(self, state: LightState, hue: float) -> Optional[LightState]:
        ...

    @abstractmethod
    def set_saturation(self, state: LightState, saturation: float) -> Optional[LightState]:
        ...


class WhiteLightStrategy(LightStrategy):
    """Tunable white lights driven by color_temp in mired."""

    def __init__(self, color_temp_min: int = COLOR_TEMP_MIN, color_temp_max: int = COLOR_TEMP_MAX, **kwargs: Any):
        super().__init__(**kwargs)
        self.color_temp_min = color_temp_min
        self.color_temp_max = color_temp_max

    def set_color_temp_percent(self, state: LightState, color_temp: float) -> Optional[WhiteState]:
        span = self.color_temp_max - self.color_temp_min
        return {"color_temp": round(self.color_temp_min + span * clamp(color_temp, 0.0, 1.0))}

    def set_hue(self, state: LightState, hue: float) -> Optional[LightState]:
        return None

    def set_saturation(self, state: LightState, saturation: float) -> Optional[LightState]:
        return None


class HsvLightStrategy(WhiteLightStrategy):
    """Color lights taking color as hue (degrees) and saturation (percent)."""

    def set_color_temp_percent(self, state: LightState, color_temp: float) -> Optional[ColorState]:
        command = super().set_color_temp_percent(state, color_temp)
        command["color"] = None
        return command

    def set_hue(self, state: LightState, hue: float) -> Optional[ColorState]:
        color = state.get("color") or {}
        saturation = color.get("saturation", 100)
        return {"color": {"hue": round(hue) % 360, "saturation": saturation}, "color_temp": None}

    def set_saturation(self, state: LightState, saturation: float) -> Optional[ColorState]:
        color = state.get("color") or {}
        hue = color.get("hue", 0)
        return {"color": {"hue": hue, "saturation": round(clamp(saturation, 0.0, 1.0) * 100)}, "color_temp": None}


class RgbLightStrategy(LightStrategy):
    """RGB controllers taking color as {r, g, b}; white is mixed from the channels."""

    def _current_hsv(self, state: LightState):
        color = state.get("color") or {}
        if not all(channel in color for channel in ("r", "g", "b")):
            return (0.0, 1.0, 1.0)
        return rgb_to_hsv(color)

    def set_color_temp_percent(self, state: LightState, color_temp: float) -> Optional[ColorState]:
        # 0 is cold, 1 is warm, same direction as mired
        t = clamp(color_temp, 0.0, 1.0)
        mixed = {
            channel: int(round(COLD_WHITE[channel] + (WARM_WHITE[channel] - COLD_WHITE[channel]) * t))
            for channel in ("r", "g", "b")
        }
        return {"color": mixed}

    def set_hue(self, state: LightState, hue: float) -> Optional[ColorState]:
        _, saturation, _ = self._current_hsv(state)
        return {"color": hsv_to_rgb(hue, saturation or 1.0, 1.0)}

    def set_saturation(self, state: LightState, saturation: float) -> Optional[ColorState]:
        hue, _, _ = self._current_hsv(state)
        return {"color": hsv_to_rgb(hue, clamp(saturation, 0.0, 1.0), 1.0)}


STRATEGIES: Dict[str, Type[LightStrategy]] = {
    "white": WhiteLightStrategy,
    "hsv": HsvLightStrategy,
    "rgb": RgbLightStrategy,
}


def build_strategy(entry: Union[str, Dict[str, Any]]) -> LightStrategy:
    """Create a strategy from a config entry: a type name or {type: ..., **options}."""
    if isinstance(entry, str):
        entry = {"type": entry}
    options = dict(entry)
    kind = options.pop("type", None)
    if kind not in STRATEGIES:
        raise ValueError(f"Unknown light strategy '{kind}', expected one of {sorted(STRATEGIES)}")
    try:
        return STRATEGIES[kind](**options)
    except TypeError as e:
        raise ValueError(f"Invalid options for light strategy '{kind}': {e}") from e
