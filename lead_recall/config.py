"""Configuration helpers for campaign thresholds and business settings."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

LOGGER = logging.getLogger(__name__)


class ConfigurationError(RuntimeError):
    """Raised when configuration files are missing or malformed."""


_SUPPORTED_EXTENSIONS = {".json", ".yaml", ".yml"}


def load_configuration(path: str | Path) -> Dict[str, Any]:
    """Load configuration data from a JSON or YAML file."""

    file_path = Path(path)
    if not file_path.exists():
        raise ConfigurationError(f"Configuration file '{file_path}' was not found")

    if file_path.suffix.lower() not in _SUPPORTED_EXTENSIONS:
        raise ConfigurationError(
            f"Unsupported configuration format '{file_path.suffix}'. Supported extensions: {sorted(_SUPPORTED_EXTENSIONS)}"
        )

    text = file_path.read_text(encoding="utf-8")
    if file_path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid JSON: {exc}") from exc
    else:
        import yaml

        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Configuration file '{file_path}' is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{file_path}' must contain a mapping at the top level")
    return data


@dataclass(slots=True)
class Settings:
    """Tunable values for the campaign tools.

    ``utc_offset_hours`` is the business's local zone used for "today" and
    ages; the default matches Dhaka time.
    """

    utc_offset_hours: float = 6.0
    dormant_days: int = 30
    follow_up_days: int = 7
    import_min_phone_length: int = 11
    business_id: str = ""

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "Settings":
        section = config.get("campaign", config)
        if not isinstance(section, Mapping):
            raise ConfigurationError("The 'campaign' section must be a mapping")

        known = {item.name: item for item in fields(cls)}
        values: Dict[str, Any] = {}
        for key, raw in section.items():
            if key not in known:
                raise ConfigurationError(f"Unknown campaign setting '{key}'")
            values[key] = _coerce(key, raw, known[key].default)
        return cls(**values)


def _coerce(key: str, raw: Any, default: Any) -> Any:
    if isinstance(default, str):
        return "" if raw is None else str(raw)
    if isinstance(raw, bool):
        raise ConfigurationError(f"Setting '{key}' must be numeric, got {raw!r}")
    try:
        return type(default)(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Setting '{key}' must be numeric, got {raw!r}") from exc


def load_settings(path: Optional[str | Path] = None) -> Settings:
    if path is None:
        return Settings()
    settings = Settings.from_mapping(load_configuration(path))
    LOGGER.debug("Loaded settings from %s: %s", path, settings)
    return settings
