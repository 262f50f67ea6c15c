"""Load and validate the cycle log heuristics configuration.

The config lives in ``cycle_config.yaml`` alongside this module.  It is loaded
once on first use and cached.  Call ``reload_cycle_config()`` to re-read it
from disk.

Usage::

    from cyclelog.tracker.config_loader import get_cycle_config

    config = get_cycle_config()
    config.prediction.luteal_phase_days     # 14
    config.symptom_label("cramps")          # "Cramps"
"""

from __future__ import annotations

import calendar
import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from cyclelog.models.snapshot import SymptomCode

logger = logging.getLogger("cyclelog.tracker.config")

# Path to the YAML file sitting next to this module
_CONFIG_PATH = Path(__file__).parent / "cycle_config.yaml"

_WEEKDAYS = {
    "monday": calendar.MONDAY,
    "sunday": calendar.SUNDAY,
}


# ---------------------------------------------------------------------------
# Typed config sections
# ---------------------------------------------------------------------------


@dataclass
class PredictionConfig:
    """Cycle length averaging and forecast settings."""

    default_cycle_length: int = 28
    min_gap_days: int = 10   # gaps <= this are outliers
    max_gap_days: int = 60   # gaps >= this are outliers
    luteal_phase_days: int = 14


@dataclass
class FertileWindowConfig:
    """Offsets of the fertile window around the predicted ovulation day."""

    days_before_ovulation: int = 5
    days_after_ovulation: int = 1

    @property
    def length(self) -> int:
        return self.days_before_ovulation + self.days_after_ovulation + 1


@dataclass
class TemperatureConfig:
    """Plausible basal body temperature range in °C."""

    min_c: float = 34.0
    max_c: float = 43.0

    def is_plausible(self, temp: float) -> bool:
        return self.min_c <= temp <= self.max_c


@dataclass
class CycleConfig:
    """Complete, validated cycle log configuration.

    Attributes:
        version:         Config schema version string.
        prediction:      Averaging thresholds and the luteal phase length.
        fertile_window:  Window offsets around ovulation.
        first_weekday:   First column of the month grid (``calendar`` weekday).
        temperature:     Accepted temperature range.
        chart_window_days: How far back the temperature chart reaches.
        symptom_labels:  Symptom code → display label.
    """

    version: str = "1.0"
    prediction: PredictionConfig = field(default_factory=PredictionConfig)
    fertile_window: FertileWindowConfig = field(default_factory=FertileWindowConfig)
    first_weekday: int = calendar.SUNDAY
    temperature: TemperatureConfig = field(default_factory=TemperatureConfig)
    chart_window_days: int = 60
    symptom_labels: dict[str, str] = field(default_factory=dict)

    def symptom_label(self, code: str) -> str:
        """Return the display label for a symptom code, or the code itself."""
        return self.symptom_labels.get(code, code)


# ---------------------------------------------------------------------------
# Loader / validation
# ---------------------------------------------------------------------------


class ConfigValidationError(ValueError):
    """Raised when cycle_config.yaml fails validation."""


def _load_yaml(path: Path) -> dict:
    """Read and parse a YAML file.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the YAML is malformed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Cycle config not found: {path}")

    with path.open("r", encoding="utf-8") as fh:
        try:
            return yaml.safe_load(fh) or {}
        except yaml.YAMLError as exc:
            raise ConfigValidationError(f"YAML parse error in {path}: {exc}") from exc


def _validate_and_build(raw: dict) -> CycleConfig:
    """Validate the raw YAML dict and construct a CycleConfig.

    Every problem is collected before raising so the error lists them all.

    Raises:
        ConfigValidationError: If any value is missing its expected type or
            violates a range constraint.
    """
    errors: list[str] = []

    def _int(section: dict, key: str, default: int, where: str) -> int:
        value = section.get(key, default)
        if isinstance(value, bool):
            errors.append(f"{where}.{key} must be an integer, got {value!r}")
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            errors.append(f"{where}.{key} must be an integer, got {value!r}")
            return default

    def _float(section: dict, key: str, default: float, where: str) -> float:
        value = section.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            errors.append(f"{where}.{key} must be a number, got {value!r}")
            return default

    def _section(name: str) -> dict[str, Any]:
        value = raw.get(name) or {}
        if not isinstance(value, dict):
            errors.append(f"'{name}' must be a mapping")
            return {}
        return value

    version = str(raw.get("version", "1.0"))

    # ── Prediction ──
    pr_raw = _section("prediction")
    prediction = PredictionConfig(
        default_cycle_length=_int(pr_raw, "default_cycle_length", 28, "prediction"),
        min_gap_days=_int(pr_raw, "min_gap_days", 10, "prediction"),
        max_gap_days=_int(pr_raw, "max_gap_days", 60, "prediction"),
        luteal_phase_days=_int(pr_raw, "luteal_phase_days", 14, "prediction"),
    )
    if prediction.default_cycle_length <= 0:
        errors.append("prediction.default_cycle_length must be positive")
    if prediction.min_gap_days >= prediction.max_gap_days:
        errors.append(
            f"prediction.min_gap_days ({prediction.min_gap_days}) must be below "
            f"max_gap_days ({prediction.max_gap_days})"
        )
    if prediction.luteal_phase_days < 0:
        errors.append("prediction.luteal_phase_days must not be negative")

    # ── Fertile window ──
    fw_raw = _section("fertile_window")
    fertile_window = FertileWindowConfig(
        days_before_ovulation=_int(fw_raw, "days_before_ovulation", 5, "fertile_window"),
        days_after_ovulation=_int(fw_raw, "days_after_ovulation", 1, "fertile_window"),
    )
    if fertile_window.days_before_ovulation < 0 or fertile_window.days_after_ovulation < 0:
        errors.append("fertile_window offsets must not be negative")

    # ── Calendar ──
    cal_raw = _section("calendar")
    weekday_name = str(cal_raw.get("first_weekday", "sunday")).lower()
    first_weekday = _WEEKDAYS.get(weekday_name)
    if first_weekday is None:
        errors.append(
            f"calendar.first_weekday must be one of {sorted(_WEEKDAYS)}, got {weekday_name!r}"
        )
        first_weekday = calendar.SUNDAY

    # ── Temperature ──
    t_raw = _section("temperature")
    temperature = TemperatureConfig(
        min_c=_float(t_raw, "min_c", 34.0, "temperature"),
        max_c=_float(t_raw, "max_c", 43.0, "temperature"),
    )
    if temperature.min_c >= temperature.max_c:
        errors.append("temperature.min_c must be below temperature.max_c")

    # ── Chart ──
    chart_window_days = _int(_section("chart"), "window_days", 60, "chart")
    if chart_window_days <= 0:
        errors.append("chart.window_days must be positive")

    # ── Symptom labels ──
    labels_raw = _section("symptoms")
    known_codes = {code.value for code in SymptomCode}
    symptom_labels: dict[str, str] = {}
    for code, label in labels_raw.items():
        if code not in known_codes:
            errors.append(f"symptoms.{code} is not a known symptom code")
            continue
        symptom_labels[code] = str(label)
    missing = known_codes - set(symptom_labels)
    if missing:
        logger.warning(
            "No display label configured for symptom(s) %s; codes will be shown as-is",
            ", ".join(sorted(missing)),
        )

    if errors:
        raise ConfigValidationError(
            f"cycle_config.yaml has {len(errors)} validation error(s):\n"
            + "\n".join(f"  • {e}" for e in errors)
        )

    return CycleConfig(
        version=version,
        prediction=prediction,
        fertile_window=fertile_window,
        first_weekday=first_weekday,
        temperature=temperature,
        chart_window_days=chart_window_days,
        symptom_labels=symptom_labels,
    )


def load_cycle_config(path: Path | None = None) -> CycleConfig:
    """Load and validate the cycle config from disk.

    Args:
        path: Override path to YAML. Uses the bundled cycle_config.yaml by default.
    """
    target = path or _CONFIG_PATH
    raw = _load_yaml(target)
    config = _validate_and_build(raw)
    logger.info("Loaded cycle config v%s from %s", config.version, target)
    return config


# ---------------------------------------------------------------------------
# Cached instance with reload support
# ---------------------------------------------------------------------------

_config: CycleConfig | None = None
_config_lock = threading.Lock()


def get_cycle_config() -> CycleConfig:
    """Return the cached CycleConfig, loading it on first call."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:  # double-checked locking
                _config = load_cycle_config()
    return _config


def reload_cycle_config(path: Path | None = None) -> CycleConfig:
    """Reload the cycle config from disk and replace the cached instance.

    If validation fails the old config is retained and the error re-raised.

    Raises:
        ConfigValidationError: If the new config is invalid.
        FileNotFoundError:     If the config file is missing.
    """
    global _config
    new_config = load_cycle_config(path)  # validate before acquiring lock
    with _config_lock:
        old_version = _config.version if _config else "none"
        _config = new_config
    logger.info("Reloaded cycle config: %s → %s", old_version, new_config.version)
    return new_config
