"""Trainer settings.

Settings come from three layers, later ones winning: built-in defaults, an
optional JSON file (``BINARY_TRAINER_CONFIG`` or ``~/.binary_trainer.json``),
and ``BINARY_TRAINER_*`` environment variables.  Bad or missing values fall
back to the defaults; a range that does not fit the bit width is repaired and
a warning is logged, so the app always starts.
"""

from __future__ import annotations

import json
import logging
import math
import os
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from .binary_drill import BinaryDrillConfig
from .bounded_value import NumberRange
from .challenge import InitialBits

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "BINARY_TRAINER_CONFIG"
ENV_PREFIX = "BINARY_TRAINER_"
MAX_BIT_WIDTH = 16


@dataclass(frozen=True, slots=True)
class TrainerConfig:
    bit_width: int = 8
    min_value: int = 0
    max_value: int = 255
    initial_bits: InitialBits = InitialBits.ZEROS
    practice_questions: int = 3
    scored_duration_s: float = 120.0
    difficulty: float = 0.5
    log_level: str = "WARNING"

    @property
    def value_range(self) -> NumberRange:
        return NumberRange(self.min_value, self.max_value)

    def drill_config(self) -> BinaryDrillConfig:
        return BinaryDrillConfig(
            bit_width=self.bit_width,
            value_range=self.value_range,
            initial=self.initial_bits,
            scored_duration_s=self.scored_duration_s,
            practice_questions=self.practice_questions,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bit_width": int(self.bit_width),
            "min_value": int(self.min_value),
            "max_value": int(self.max_value),
            "initial_bits": self.initial_bits.value,
            "practice_questions": int(self.practice_questions),
            "scored_duration_s": float(self.scored_duration_s),
            "difficulty": float(self.difficulty),
            "log_level": self.log_level,
        }

    @classmethod
    def from_dict(cls, data: object, *, base: "TrainerConfig | None" = None) -> "TrainerConfig":
        base = base or cls()
        if not isinstance(data, Mapping):
            return base
        bit_width = _as_int(data.get("bit_width"), base.bit_width)
        if not 1 <= bit_width <= MAX_BIT_WIDTH:
            logger.warning("bit_width %d outside 1..%d, using %d", bit_width, MAX_BIT_WIDTH, base.bit_width)
            bit_width = base.bit_width
        cfg = replace(
            base,
            bit_width=bit_width,
            min_value=_as_int(data.get("min_value"), base.min_value),
            max_value=_as_int(data.get("max_value"), base.max_value),
            initial_bits=_as_initial_bits(data.get("initial_bits"), base.initial_bits),
            practice_questions=max(0, _as_int(data.get("practice_questions"), base.practice_questions)),
            scored_duration_s=_as_positive_float(data.get("scored_duration_s"), base.scored_duration_s),
            difficulty=_clamp(_as_float(data.get("difficulty"), base.difficulty), 0.0, 1.0),
            log_level=_as_log_level(data.get("log_level"), base.log_level),
        )
        return _repair_range(cfg)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ
    explicit = env.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()
    return Path.home() / ".binary_trainer.json"


def load_config(path: Path | None = None, environ: Mapping[str, str] | None = None) -> TrainerConfig:
    env = os.environ if environ is None else environ
    cfg = TrainerConfig()

    path = path if path is not None else default_config_path(env)
    if path.exists():
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        else:
            cfg = TrainerConfig.from_dict(payload, base=cfg)

    overrides = {
        key: env[ENV_PREFIX + key.upper()]
        for key in ("bit_width", "min_value", "max_value", "initial_bits", "log_level")
        if ENV_PREFIX + key.upper() in env
    }
    # Short aliases for the range bounds.
    for short, key in (("MIN", "min_value"), ("MAX", "max_value")):
        if ENV_PREFIX + short in env:
            overrides[key] = env[ENV_PREFIX + short]
    if overrides:
        cfg = TrainerConfig.from_dict(overrides, base=cfg)
    return cfg


def save_config(cfg: TrainerConfig, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_suffix(f"{path.suffix}.tmp")
    tmp_path.write_text(json.dumps(cfg.to_dict(), indent=2), encoding="utf-8")
    tmp_path.replace(path)


def configure_logging(level: str = "WARNING") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _repair_range(cfg: TrainerConfig) -> TrainerConfig:
    top = (1 << cfg.bit_width) - 1
    lo = int(_clamp(cfg.min_value, 0, top))
    hi = int(_clamp(cfg.max_value, 0, top))
    if lo > hi:
        lo, hi = hi, lo
    if (lo, hi) != (cfg.min_value, cfg.max_value):
        logger.warning(
            "Range [%d, %d] does not fit %d bits, using [%d, %d]",
            cfg.min_value,
            cfg.max_value,
            cfg.bit_width,
            lo,
            hi,
        )
        cfg = replace(cfg, min_value=lo, max_value=hi)
    return cfg


def _as_int(value: object, fallback: int) -> int:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        return int(str(value).strip())
    except ValueError:
        return fallback


def _as_float(value: object, fallback: float) -> float:
    if value is None or isinstance(value, bool):
        return fallback
    try:
        out = float(str(value).strip())
    except ValueError:
        return fallback
    return out if math.isfinite(out) else fallback


def _as_positive_float(value: object, fallback: float) -> float:
    out = _as_float(value, fallback)
    return out if out > 0 else fallback


def _as_initial_bits(value: object, fallback: InitialBits) -> InitialBits:
    try:
        return InitialBits(str(value).strip().lower())
    except ValueError:
        return fallback


def _as_log_level(value: object, fallback: str) -> str:
    name = str(value).strip().upper() if value is not None else ""
    return name if name in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL") else fallback


def _clamp(value: float, lo: float, hi: float) -> float:
    if value <= lo:
        return lo
    if value >= hi:
        return hi
    return value
