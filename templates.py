"""Color preset tables."""

from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple


def _freeze(presets: Sequence[Mapping[str, Any]]) -> Tuple[Mapping[str, Any], ...]:
    return tuple(MappingProxyType(dict(preset)) for preset in presets)


DEFAULT_COLOR_PRESETS = _freeze([
    {"color_temp_percent": 100},
    {"color_temp_percent": 50},
    {"color_temp_percent": 0},
    {"color": {"r": 255, "g": 147, "b": 41}},  # candle
    {"color": {"r": 255, "g": 179, "b": 102}},  # candle 2
    {"color": {"r": 255, "g": 134, "b": 41}},  # candle 3
    {"color": {"r": 255, "g": 117, "b": 107}},  # apricot
    {"color": {"r": 255, "g": 216, "b": 77}},  # lemon
    {"color": {"r": 97, "g": 255, "b": 121}},  # gloom
    {"color": {"r": 108, "g": 148, "b": 122}},  # green/gray
    {"color": {"r": 191, "g": 102, "b": 255}},  # lilac
    {"color": {"r": 64, "g": 156, "b": 255}},  # blue sky
])


def resolve_templates(
    templates: Any,
    named_sets: Optional[Mapping[str, List[Dict[str, Any]]]] = None,
) -> List[Dict[str, Any]]:
    """
    Resolve a binding's templates entry.

    Accepts an inline list of partial states or the name of a set declared
    in the top-level ``templates`` section of the configuration.
    """
    if templates is None:
        return []
    if isinstance(templates, str):
        if not named_sets or templates not in named_sets:
            raise ValueError(f"Unknown template set '{templates}'")
        templates = named_sets[templates]
    if not isinstance(templates, list) or not all(isinstance(t, dict) for t in templates):
        raise ValueError("Templates must be a list of mappings")
    return [dict(t) for t in templates]
