import os
import re
from dataclasses import asdict, dataclass, fields
from pathlib import Path

import yaml


DEFAULT_CONFIG_NAME = "vpcplan.yml"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class PlannerConfig:
    """Tunable limits for subnet planning."""

    # Deepest split allowed; also the VPC prefix at which planning is refused.
    max_prefix: int = 27
    # Addresses the cloud platform keeps in every subnet.
    reserved_per_block: int = 5
    min_usable: int = 20
    compact_threshold: int = 30
    example_count: int = 8

    def to_dict(self) -> dict:
        return asdict(self)


def resolve_config(path: str | None) -> Path | None:
    """Resolve an explicit config path, or the default file in the working directory."""
    if path:
        candidate = Path(path)
        if not candidate.exists():
            raise ConfigError(f"Config file '{path}' not found")
        return candidate.resolve()

    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    if candidate.exists():
        return candidate.resolve()
    return None


def load_config(path: Path) -> dict:
    """Load a planner YAML file; settings may sit at the top level or under 'planner'."""
    with open(path) as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid config file: {path}")
    section = data.get("planner", data)
    if not isinstance(section, dict):
        raise ConfigError(f"Invalid 'planner' section in {path}")
    return interpolate_variables(section)


def interpolate_variables(settings: dict) -> dict:
    """Interpolate ${VAR} references from the environment."""

    def _replace(obj):
        if isinstance(obj, str):
            def _sub(m):
                env_val = os.environ.get(m.group(1))
                if env_val is not None:
                    return env_val
                return m.group(0)  # leave unresolved
            return re.sub(r"\$\{(\w+)\}", _sub, obj)
        elif isinstance(obj, dict):
            return {k: _replace(v) for k, v in obj.items()}
        elif isinstance(obj, list):
            return [_replace(item) for item in obj]
        return obj

    return _replace(settings)


def build_config(settings: dict | None = None) -> PlannerConfig:
    """Coerce a settings mapping into a validated PlannerConfig."""
    known = {f.name for f in fields(PlannerConfig)}
    values = {}
    for key, raw in (settings or {}).items():
        if key not in known:
            raise ConfigError(
                f"Unknown setting '{key}'. Valid settings: {', '.join(sorted(known))}"
            )
        try:
            values[key] = int(raw)
        except (TypeError, ValueError):
            raise ConfigError(f"Setting '{key}' must be an integer, got '{raw}'")

    config = PlannerConfig(**values)
    validate_config(config)
    return config


def validate_config(config: PlannerConfig) -> None:
    """Validate ranges of planner settings."""
    if not 0 < config.max_prefix <= 32:
        raise ConfigError(f"max_prefix must be between 1 and 32, got {config.max_prefix}")
    if config.reserved_per_block < 0:
        raise ConfigError("reserved_per_block cannot be negative")
    if config.min_usable < 1:
        raise ConfigError("min_usable must be at least 1")
    if config.compact_threshold < config.min_usable:
        raise ConfigError("compact_threshold cannot be lower than min_usable")
    if config.example_count < 0:
        raise ConfigError("example_count cannot be negative")


def apply_overrides(config: PlannerConfig, overrides: list[str] | tuple[str, ...]) -> PlannerConfig:
    """Apply KEY=VAL overrides on top of an existing config."""
    if not overrides:
        return config

    settings = {}
    for o in overrides:
        if "=" not in o:
            raise ConfigError(f"Invalid override format: {o} (expected KEY=VAL)")
        k, v = o.split("=", 1)
        settings[k.strip()] = v.strip()

    merged = {**config.to_dict(), **settings}
    return build_config(merged)


def get_config(path: str | None = None, overrides: list[str] | tuple[str, ...] = ()) -> PlannerConfig:
    """Resolve, load, and override the planner config in one step."""
    resolved = resolve_config(path)
    settings = load_config(resolved) if resolved else {}
    config = build_config(settings)
    return apply_overrides(config, overrides)
