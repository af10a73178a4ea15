"""Configuration helpers for the simultaneous colour contrast experiment.

The dataclasses here describe how every trial colour is generated.  Each
visual entity (the target disk and the two backgrounds) owns three
:class:`AxisSpec` values, one per HSL channel.  Keeping these values in a
separate module makes it easy to see what can be tweaked without touching the
generation or export code, and lets the same configuration be stored as JSON
next to the collected data.
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple


class ConfigurationError(ValueError):
    """Raised when an axis or experiment configuration cannot be resolved."""


class AxisMode(str, Enum):
    """How a single HSL channel varies across trials."""

    FIXED = "fixed"
    RANGE = "range"
    LIST = "list"
    MAPPING = "mapping"


@dataclass(frozen=True)
class ParameterMapping:
    """Sparse ``key -> value`` table keyed by another axis's resolved values.

    Pairs are kept in the order they were given; on duplicate keys the last
    pair wins.  Looking up a key that has no entry returns the key itself.
    """

    pairs: Tuple[Tuple[float, float], ...] = ()

    def as_dict(self) -> Dict[float, float]:
        return {key: value for key, value in self.pairs}

    def lookup(self, key: float) -> float:
        """Return the mapped value for ``key`` (or ``key`` when unmapped)."""

        return self.as_dict().get(key, key)

    def __contains__(self, key: object) -> bool:
        return key in self.as_dict()

    def __len__(self) -> int:
        return len(self.as_dict())


@dataclass(frozen=True)
class AxisSpec:
    """Generation rule for one channel of one entity."""

    mode: AxisMode = AxisMode.FIXED
    value: float = 0.0
    start: float = 0.0
    end: float = 0.0
    steps: int = 1
    values: Tuple[float, ...] = ()
    mapping: ParameterMapping = field(default_factory=ParameterMapping)

    @classmethod
    def fixed(cls, value: float) -> "AxisSpec":
        return cls(mode=AxisMode.FIXED, value=value)

    @classmethod
    def from_range(cls, start: float, end: float, steps: int) -> "AxisSpec":
        return cls(mode=AxisMode.RANGE, start=start, end=end, steps=steps)

    @classmethod
    def from_list(cls, values: Iterable[float]) -> "AxisSpec":
        return cls(mode=AxisMode.LIST, values=tuple(values))

    @classmethod
    def from_mapping(cls, pairs: Iterable[Tuple[float, float]]) -> "AxisSpec":
        return cls(
            mode=AxisMode.MAPPING,
            mapping=ParameterMapping(tuple((key, value) for key, value in pairs)),
        )

    # ------------------------------------------------------------------
    # JSON helpers
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, object]:
        if self.mode is AxisMode.FIXED:
            return {"mode": self.mode.value, "value": self.value}
        if self.mode is AxisMode.RANGE:
            return {
                "mode": self.mode.value,
                "start": self.start,
                "end": self.end,
                "steps": self.steps,
            }
        if self.mode is AxisMode.LIST:
            return {"mode": self.mode.value, "values": list(self.values)}
        return {
            "mode": self.mode.value,
            "mapping": [
                {"target": key, "value": value} for key, value in self.mapping.pairs
            ],
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, path: str = "axis") -> "AxisSpec":
        """Build an axis from its JSON form, naming ``path`` in any error."""

        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"{path}: expected an object, got {payload!r}")
        try:
            mode = AxisMode(str(payload.get("mode", "")).lower())
        except ValueError:
            raise ConfigurationError(
                f"{path}: unknown mode {payload.get('mode')!r} "
                f"(expected one of {', '.join(m.value for m in AxisMode)})"
            ) from None

        if mode is AxisMode.FIXED:
            return cls.fixed(_number(payload, "value", path))
        if mode is AxisMode.RANGE:
            steps = payload.get("steps")
            if isinstance(steps, bool) or not isinstance(steps, int):
                raise ConfigurationError(f"{path}.steps: expected an integer, got {steps!r}")
            return cls.from_range(
                _number(payload, "start", path),
                _number(payload, "end", path),
                steps,
            )
        if mode is AxisMode.LIST:
            raw_values = payload.get("values")
            if not isinstance(raw_values, list):
                raise ConfigurationError(f"{path}.values: expected a list, got {raw_values!r}")
            return cls.from_list(
                _coerce_number(item, f"{path}.values[{index}]")
                for index, item in enumerate(raw_values)
            )

        raw_pairs = payload.get("mapping")
        if not isinstance(raw_pairs, list):
            raise ConfigurationError(f"{path}.mapping: expected a list, got {raw_pairs!r}")
        pairs: List[Tuple[float, float]] = []
        for index, entry in enumerate(raw_pairs):
            entry_path = f"{path}.mapping[{index}]"
            if not isinstance(entry, Mapping):
                raise ConfigurationError(f"{entry_path}: expected an object, got {entry!r}")
            pairs.append((_number(entry, "target", entry_path), _number(entry, "value", entry_path)))
        return cls.from_mapping(pairs)


def _coerce_number(value: object, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{path}: expected a number, got {value!r}")
    return value


def _number(payload: Mapping[str, Any], key: str, path: str) -> float:
    if key not in payload:
        raise ConfigurationError(f"{path}.{key}: missing")
    return _coerce_number(payload[key], f"{path}.{key}")


@dataclass(frozen=True)
class EntityConfig:
    """Hue, saturation and lightness rules for one visual entity."""

    h: AxisSpec = field(default_factory=AxisSpec)
    s: AxisSpec = field(default_factory=AxisSpec)
    l: AxisSpec = field(default_factory=AxisSpec)

    def axes(self) -> Tuple[Tuple[str, AxisSpec], ...]:
        return (("h", self.h), ("s", self.s), ("l", self.l))

    def to_dict(self) -> Dict[str, object]:
        return {name: axis.to_dict() for name, axis in self.axes()}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any], *, path: str = "entity") -> "EntityConfig":
        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"{path}: expected an object, got {payload!r}")
        axes: Dict[str, AxisSpec] = {}
        for name in ("h", "s", "l"):
            if name not in payload:
                raise ConfigurationError(f"{path}.{name}: missing")
            axes[name] = AxisSpec.from_dict(payload[name], path=f"{path}.{name}")
        return cls(**axes)


EXPORT_FIELDS: Tuple[str, ...] = (
    "subject_id",
    "subject_age",
    "subject_gender",
    "trial_id",
    "random_seed",
    "reaction_time",
    "perceived_same",
    "timed_out",
    "target_mode",
    "target_css",
    "target_h",
    "target_s",
    "target_l",
    "target_L",
    "target_a",
    "target_b",
    "bgA_css",
    "bgA_h",
    "bgA_s",
    "bgA_l",
    "bgA_L",
    "bgA_a",
    "bgA_b",
    "bgB_css",
    "bgB_h",
    "bgB_s",
    "bgB_l",
    "bgB_L",
    "bgB_a",
    "bgB_b",
    "delta_E_ab",
    "delta_H",
)

ENTITY_NAMES: Tuple[str, ...] = ("target", "background_a", "background_b")


@dataclass(frozen=True)
class ExperimentConfig:
    """Container for the trial generation rules and runtime options."""

    target: EntityConfig = field(default_factory=EntityConfig)
    background_a: EntityConfig = field(default_factory=EntityConfig)
    background_b: EntityConfig = field(default_factory=EntityConfig)
    randomize_order: bool = True
    random_seed: Optional[int] = None
    experiment_name: str = "experiment"
    results_directory: str = "data"
    response_timeout_ms: int = 5000
    data_fields: Tuple[str, ...] = EXPORT_FIELDS

    def to_dict(self) -> Dict[str, object]:
        return {
            "target": self.target.to_dict(),
            "background_a": self.background_a.to_dict(),
            "background_b": self.background_b.to_dict(),
            "randomize_order": self.randomize_order,
            "random_seed": self.random_seed,
            "experiment_name": self.experiment_name,
            "results_directory": self.results_directory,
            "response_timeout_ms": self.response_timeout_ms,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ExperimentConfig":
        """Parse a configuration object; optional runtime keys keep their defaults."""

        if not isinstance(payload, Mapping):
            raise ConfigurationError(f"configuration: expected an object, got {payload!r}")
        entities: Dict[str, EntityConfig] = {}
        for name in ENTITY_NAMES:
            if name not in payload:
                raise ConfigurationError(f"{name}: missing")
            entities[name] = EntityConfig.from_dict(payload[name], path=name)

        options: Dict[str, Any] = {}
        if "randomize_order" in payload:
            randomize = payload["randomize_order"]
            if not isinstance(randomize, bool):
                raise ConfigurationError(
                    f"randomize_order: expected true or false, got {randomize!r}"
                )
            options["randomize_order"] = randomize
        seed = payload.get("random_seed")
        if seed is not None:
            if isinstance(seed, bool) or not isinstance(seed, int):
                raise ConfigurationError(f"random_seed: expected an integer, got {seed!r}")
            options["random_seed"] = seed
        for key in ("experiment_name", "results_directory"):
            if key in payload:
                options[key] = str(payload[key])
        if "response_timeout_ms" in payload:
            timeout = payload["response_timeout_ms"]
            if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout <= 0:
                raise ConfigurationError(
                    f"response_timeout_ms: expected a positive integer, got {timeout!r}"
                )
            options["response_timeout_ms"] = timeout
        return cls(**entities, **options)


def load_config(path: str | os.PathLike[str]) -> ExperimentConfig:
    """Read an :class:`ExperimentConfig` from a JSON file."""

    config_path = Path(path)
    with config_path.open("r", encoding="utf-8") as config_file:
        try:
            payload = json.load(config_file)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"{config_path.name}: invalid JSON ({exc})") from exc
    return ExperimentConfig.from_dict(payload)


def save_config(config: ExperimentConfig, path: str | os.PathLike[str]) -> Path:
    """Write ``config`` as indented JSON and return the written path."""

    config_path = Path(path)
    with config_path.open("w", encoding="utf-8") as config_file:
        json.dump(config.to_dict(), config_file, indent=2)
    return config_path


DEFAULT_CONFIG = ExperimentConfig(
    target=EntityConfig(
        h=AxisSpec.from_range(0, 360, 4),
        s=AxisSpec.from_list([20, 50, 60]),
        l=AxisSpec.from_list([30, 50]),
    ),
    background_a=EntityConfig(
        # hue entries are offsets added to the target hue
        h=AxisSpec.from_list([60, 120, 180]),
        s=AxisSpec.from_mapping([(20, 80), (50, 50), (60, 40)]),
        l=AxisSpec.from_mapping([(30, 70), (50, 50)]),
    ),
    background_b=EntityConfig(
        h=AxisSpec.fixed(60),
        s=AxisSpec.fixed(30),
        l=AxisSpec.fixed(80),
    ),
    randomize_order=True,
)


__all__ = [
    "AxisMode",
    "AxisSpec",
    "ConfigurationError",
    "DEFAULT_CONFIG",
    "ENTITY_NAMES",
    "EXPORT_FIELDS",
    "EntityConfig",
    "ExperimentConfig",
    "ParameterMapping",
    "load_config",
    "save_config",
]
