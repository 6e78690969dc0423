"""Configuration loading and validation."""

import logging
import os
from typing import Any, Dict, List, Optional

import yaml

from constants import CONFIG_ENV_VAR, DEFAULT_CONFIG_EXAMPLE_FILE, DEFAULT_CONFIG_FILE, REMOTE_TYPES
from models import BrightnessConfig, LightBinding, LightDeviceConfig, RemoteConfig
from strategies import build_strategy
from templates import resolve_templates

logger = logging.getLogger(__name__)

STATE_KEYS = (
    "on_state",
    "off_state",
    "transition_state",
    "no_transition_state",
    "reset_template",
    "command_template",
)


def resolve_config_path(path: Optional[str] = None) -> str:
    """Pick the config file from the argument, the environment or the default."""
    path = path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_FILE
    if os.path.isdir(path):
        path = os.path.join(path, DEFAULT_CONFIG_FILE)
    return path


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load and validate configuration file."""
    path = resolve_config_path(path)
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Configuration file '{path}' not found. "
            f"Please copy '{DEFAULT_CONFIG_EXAMPLE_FILE}' to '{DEFAULT_CONFIG_FILE}' "
            f"and update with your settings."
        )

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in '{path}': {e}")

    if not config:
        raise ValueError(f"'{path}' is empty")

    validate_config(config)
    logger.info(f"Loaded configuration from {path}")
    return config


def validate_config(config: Dict[str, Any]):
    # Validate required sections
    if "mqtt" not in config:
        raise ValueError("Missing 'mqtt' section in configuration")
    if "url" not in (config.get("mqtt") or {}):
        raise ValueError("Missing 'mqtt.url' in configuration")
    if not config.get("lights") and not config.get("remotes"):
        raise ValueError("Configuration defines neither 'lights' nor 'remotes'")

    for i, light in enumerate(config.get("lights") or []):
        for key in ("name", "record"):
            if key not in light:
                raise ValueError(f"Missing 'lights[{i}].{key}' in configuration")

    for i, remote in enumerate(config.get("remotes") or []):
        if remote.get("type") not in REMOTE_TYPES:
            raise ValueError(f"'remotes[{i}].type' must be one of {', '.join(REMOTE_TYPES)}")
        if "name" not in remote:
            raise ValueError(f"Missing 'remotes[{i}].name' in configuration")
        if remote["type"] == "tradfri":
            if "record" not in remote:
                raise ValueError(f"Missing 'remotes[{i}].record' in configuration")
            continue
        if not remote.get("lights"):
            raise ValueError(f"Missing 'remotes[{i}].lights' in configuration")
        for j, light in enumerate(remote["lights"]):
            if "record" not in light:
                raise ValueError(f"Missing 'remotes[{i}].lights[{j}].record' in configuration")
            if remote["type"] == "paulmann" and "strategy" not in light:
                raise ValueError(f"Missing 'remotes[{i}].lights[{j}].strategy' in configuration")


def build_light_configs(config: Dict[str, Any]) -> List[LightDeviceConfig]:
    mqtt_url = config["mqtt"]["url"]
    return [
        LightDeviceConfig(
            mqtt_url=light.get("mqtt_url", mqtt_url),
            mqtt_device_name=light["name"],
            light_record=light["record"],
        )
        for light in config.get("lights") or []
    ]


def build_binding(light: Dict[str, Any], named_templates: Dict[str, Any]) -> LightBinding:
    brightness = light.get("brightness") or {}
    binding = LightBinding(
        record_name=light["record"],
        templates=resolve_templates(light.get("templates"), named_templates),
        brightness=BrightnessConfig(
            prop=brightness.get("prop", "brightness"),
            steps=int(brightness.get("steps", 255)),
        ),
    )
    for key in STATE_KEYS:
        if key in light:
            if not isinstance(light[key], dict):
                raise ValueError(f"'{key}' of light '{light['record']}' must be a mapping")
            setattr(binding, key, dict(light[key]))
    if "strategy" in light:
        binding.strategy = build_strategy(light["strategy"])
    return binding


def build_remote_configs(config: Dict[str, Any]) -> List[RemoteConfig]:
    mqtt_url = config["mqtt"]["url"]
    named_templates = config.get("templates") or {}
    remotes = []
    for remote in config.get("remotes") or []:
        if remote["type"] == "tradfri":
            lights = [LightBinding(record_name=remote["record"])]
        else:
            lights = [build_binding(light, named_templates) for light in remote["lights"]]
        color_presets = remote.get("color_presets")
        remotes.append(
            RemoteConfig(
                kind=remote["type"],
                mqtt_url=remote.get("mqtt_url", mqtt_url),
                mqtt_device_name=remote["name"],
                lights=lights,
                color_presets=resolve_templates(color_presets, named_templates) if color_presets else None,
            )
        )
    return remotes
