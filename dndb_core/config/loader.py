"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import InvalidConfigurationError
from .defaults import ResolutionConfig, get_default_config
from .validation import ConfigValidator


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ResolutionConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Load deployment-wide overrides from resolution.yaml."""
        overrides_file = self.config_dir / "resolution.yaml"

        if not overrides_file.exists():
            return {}

        with open(overrides_file) as f:
            file_config = yaml.safe_load(f)

        return (file_config or {}).get("resolution") or {}  # type: ignore[no-any-return]

    def merge_config(self, call_overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Per-call overrides (highest priority)
        2. resolution.yaml overrides
        3. Global defaults (lowest priority)
        """
        # Start with global defaults
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file_overrides())

        if call_overrides:
            config = self._deep_merge(config, call_overrides)

        return config

    def build_config(self, call_overrides: Optional[dict[str, Any]] = None) -> ResolutionConfig:
        """
        Build a validated ResolutionConfig from the merged configuration.

        Raises:
            InvalidConfigurationError: If any merged value fails validation
        """
        merged = self.merge_config(call_overrides)

        errors = ConfigValidator.validate_config(merged)
        if errors:
            raise InvalidConfigurationError(
                "Resolution configuration is invalid",
                errors=[f"{err.field}: {err.message} (got: {err.value!r})" for err in errors],
            )

        sections = {}
        for section in fields(self.defaults):
            params_cls = type(getattr(self.defaults, section.name))
            known = {f.name: f for f in fields(params_cls)}
            values = {}
            for key, value in merged.get(section.name, {}).items():
                if key not in known:
                    continue
                # YAML yields lists where the dataclasses hold tuples
                values[key] = tuple(value) if isinstance(value, list) else value
            sections[section.name] = params_cls(**values)

        return ResolutionConfig(**sections)

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result


def load_config(
    config_dir: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None
) -> ResolutionConfig:
    """Shortcut for ConfigLoader.create(config_dir).build_config(overrides)."""
    return ConfigLoader.create(config_dir).build_config(overrides)
