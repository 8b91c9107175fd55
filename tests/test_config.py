from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path

import pytest

from binary_trainer.binary_drill import build_binary_drill
from binary_trainer.bounded_value import NumberRange
from binary_trainer.challenge import InitialBits
from binary_trainer.config import TrainerConfig, default_config_path, load_config, save_config


@dataclass
class FakeClock:
    t: float = 0.0

    def now(self) -> float:
        return self.t


def test_defaults_describe_one_unsigned_byte() -> None:
    cfg = TrainerConfig()
    assert cfg.bit_width == 8
    assert cfg.value_range == NumberRange(0, 255)
    assert cfg.initial_bits is InitialBits.ZEROS

    drill = cfg.drill_config()
    assert drill.bit_width == 8
    assert drill.value_range == NumberRange(0, 255)
    assert drill.practice_questions == cfg.practice_questions


def test_from_dict_falls_back_on_bad_fields() -> None:
    cfg = TrainerConfig.from_dict(
        {
            "bit_width": "lots",
            "max_value": 100,
            "initial_bits": "sideways",
            "practice_questions": -4,
            "scored_duration_s": 0,
            "difficulty": 7,
            "log_level": "chatty",
        }
    )
    assert cfg.bit_width == 8
    assert cfg.max_value == 100
    assert cfg.initial_bits is InitialBits.ZEROS
    assert cfg.practice_questions == 0
    assert cfg.scored_duration_s == 120.0
    assert cfg.difficulty == 1.0
    assert cfg.log_level == "WARNING"
    assert TrainerConfig.from_dict(["not", "a", "mapping"]) == TrainerConfig()


def test_from_dict_rejects_non_finite_numbers() -> None:
    cfg = TrainerConfig.from_dict({"difficulty": "nan", "scored_duration_s": "inf"})
    assert cfg.difficulty == 0.5
    assert cfg.scored_duration_s == 120.0
    engine = build_binary_drill(clock=FakeClock(), seed=1, difficulty=cfg.difficulty, config=cfg.drill_config())
    assert engine.difficulty == 0.5


def test_range_is_repaired_to_fit_bit_width(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="binary_trainer.config"):
        cfg = TrainerConfig.from_dict({"bit_width": 4})
    assert cfg.value_range == NumberRange(0, 15)
    assert "does not fit 4 bits" in caplog.text

    swapped = TrainerConfig.from_dict({"min_value": 50, "max_value": 10})
    assert swapped.value_range == NumberRange(10, 50)


def test_load_config_layers_file_then_environment(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"bit_width": 6, "max_value": 40, "initial_bits": "random"}), encoding="utf-8")

    cfg = load_config(path, environ={})
    assert cfg.bit_width == 6
    assert cfg.value_range == NumberRange(0, 40)
    assert cfg.initial_bits is InitialBits.RANDOM

    cfg = load_config(path, environ={"BINARY_TRAINER_MAX": "20", "BINARY_TRAINER_LOG_LEVEL": "debug"})
    assert cfg.value_range == NumberRange(0, 20)
    assert cfg.log_level == "DEBUG"


def test_load_config_ignores_unreadable_file(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING, logger="binary_trainer.config"):
        cfg = load_config(path, environ={})
    assert cfg == TrainerConfig()
    assert "Ignoring unreadable settings file" in caplog.text


def test_config_path_from_environment(tmp_path: Path) -> None:
    target = tmp_path / "custom.json"
    assert default_config_path({"BINARY_TRAINER_CONFIG": str(target)}) == target

    save_config(TrainerConfig(bit_width=4, max_value=15), target)
    cfg = load_config(environ={"BINARY_TRAINER_CONFIG": str(target)})
    assert cfg.bit_width == 4
    assert cfg.max_value == 15
