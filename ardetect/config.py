"""Pipeline configuration.

Every tunable of the pipeline lives here; nothing is hardcoded in the core.
Values can come from defaults, a dict (e.g. parsed settings) or
ARDETECT_* environment variables.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from .core.distance import (
    DEFAULT_FOCAL_LENGTH_PX,
    DEFAULT_MAX_HIT_DISTANCE_M,
    DEFAULT_REAL_WIDTH_M,
    KNOWN_WIDTHS_M,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "ARDETECT_"


class ConfigError(ValueError):
    """Invalid configuration value."""


@dataclass
class PipelineConfig:
    # Tilt gate
    target_angle_deg: float = -45.0
    angle_tolerance_deg: float = 20.0

    # Scheduler
    min_detection_interval_ms: int = 3000

    # Detection zone (ratios of the frame size)
    zone_width_ratio: float = 0.4
    zone_height_ratio: float = 0.3

    # Detector
    confidence_threshold: float = 0.5
    max_results: int = 10

    # Distance
    focal_length_px: float = DEFAULT_FOCAL_LENGTH_PX
    default_real_width_m: float = DEFAULT_REAL_WIDTH_M
    real_widths_m: Dict[str, float] = field(default_factory=lambda: dict(KNOWN_WIDTHS_M))
    max_hit_distance_m: float = DEFAULT_MAX_HIT_DISTANCE_M
    hit_test_enabled: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigError on values the pipeline cannot work with."""
        if self.angle_tolerance_deg <= 0:
            raise ConfigError(f"angle_tolerance_deg must be > 0, got {self.angle_tolerance_deg}")
        if self.min_detection_interval_ms < 0:
            raise ConfigError(f"min_detection_interval_ms must be >= 0, got {self.min_detection_interval_ms}")
        for name in ("zone_width_ratio", "zone_height_ratio"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ConfigError(f"{name} must be in (0, 1], got {value}")
        if not 0 <= self.confidence_threshold <= 1:
            raise ConfigError(f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}")
        if self.max_results < 1:
            raise ConfigError(f"max_results must be >= 1, got {self.max_results}")
        if self.focal_length_px <= 0:
            raise ConfigError(f"focal_length_px must be > 0, got {self.focal_length_px}")
        if self.default_real_width_m <= 0:
            raise ConfigError(f"default_real_width_m must be > 0, got {self.default_real_width_m}")
        for label, width in self.real_widths_m.items():
            if width <= 0:
                raise ConfigError(f"real width for {label!r} must be > 0, got {width}")
        if self.max_hit_distance_m <= 0:
            raise ConfigError(f"max_hit_distance_m must be > 0, got {self.max_hit_distance_m}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineConfig":
        """Build a config from a mapping; unknown keys are ignored with a warning.

        `real_widths_m` entries are merged over the default table.
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            kwargs[key] = value

        if "real_widths_m" in kwargs:
            widths = dict(KNOWN_WIDTHS_M)
            widths.update({str(k): float(v) for k, v in kwargs["real_widths_m"].items()})
            kwargs["real_widths_m"] = widths
        return cls(**kwargs)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "PipelineConfig":
        """Read ARDETECT_<FIELD> variables (e.g. ARDETECT_TARGET_ANGLE_DEG=-30).

        ARDETECT_REAL_WIDTHS_M takes a JSON object of label -> metres.
        """
        environ = os.environ if environ is None else environ
        data: Dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            data[f.name] = _parse_env_value(f.name, raw, type(getattr(_DEFAULTS, f.name)))
        return cls.from_dict(data)


def _parse_env_value(name: str, raw: str, kind: type) -> Any:
    try:
        if kind is bool:
            lowered = raw.strip().lower()
            if lowered in ("1", "true", "yes", "on"):
                return True
            if lowered in ("0", "false", "no", "off"):
                return False
            raise ValueError(raw)
        if kind is dict:
            value = json.loads(raw)
            if not isinstance(value, dict):
                raise ValueError(raw)
            return value
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e


_DEFAULTS = PipelineConfig()
