"""
YAML configuration for highlight schedules.

Reads config/highlight.yml (or any file of the same shape) into frozen
dataclasses. Missing keys fall back to the compiled-in defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from errors import ConfigError
from schedule_compiler import DEFAULT_PALETTE, DEFAULT_TIMING, HighlightPalette, ScheduleTiming

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "highlight.yml"


@dataclass(frozen=True)
class HighlightConfig:
    timing: ScheduleTiming = field(default_factory=ScheduleTiming)
    palette: HighlightPalette = field(default_factory=HighlightPalette)


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, Mapping):
        raise ConfigError(f"'{name}' must be a mapping.")
    return section


def _timing(section: Mapping[str, Any]) -> ScheduleTiming:
    values = {}
    for f in fields(ScheduleTiming):
        raw = section.get(f.name, getattr(DEFAULT_TIMING, f.name))
        if isinstance(raw, bool) or not isinstance(raw, int) or raw < 0:
            raise ConfigError(f"timing.{f.name} must be a non-negative integer, got {raw!r}.")
        values[f.name] = raw
    return ScheduleTiming(**values)


def _palette(section: Mapping[str, Any]) -> HighlightPalette:
    values = {}
    for f in fields(HighlightPalette):
        raw = section.get(f.name, getattr(DEFAULT_PALETTE, f.name))
        if not isinstance(raw, str) or not raw:
            raise ConfigError(f"colors.{f.name} must be a non-empty string, got {raw!r}.")
        values[f.name] = raw
    return HighlightPalette(**values)


def parse_config(data: Mapping[str, Any] | None) -> HighlightConfig:
    if data is None:
        return HighlightConfig()
    if not isinstance(data, Mapping):
        raise ConfigError("Configuration root must be a mapping.")
    return HighlightConfig(
        timing=_timing(_section(data, "timing")),
        palette=_palette(_section(data, "colors")),
    )


def load_config(path: Optional[Path] = None) -> HighlightConfig:
    """
    Load a config file. With no path, use config/highlight.yml when it exists
    alongside the modules and the built-in defaults otherwise.
    """
    import yaml  # type: ignore

    if path is None:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            return HighlightConfig()
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        raise ConfigError(f"{path} is not valid YAML: {exc}") from exc
    return parse_config(data)
