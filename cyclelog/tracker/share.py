"""Read-only views of the store for sharing and charting."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta

from cyclelog.tracker.config_loader import CycleConfig, get_cycle_config
from cyclelog.tracker.dates import format_date, to_date_string
from cyclelog.tracker.store import CycleLogStore


@dataclass
class TemperaturePoint:
    date: str
    label: str  # short display date, e.g. "3/14"
    temp: float


def build_share_text(
    store: CycleLogStore, day: str, config: CycleConfig | None = None
) -> str:
    """Plain-text summary of one day, suitable for the clipboard.

    Lines for data that was not logged are left out.
    """
    cfg = config or get_cycle_config()
    lines = [f"Log for {format_date(day)}"]

    if store.is_period_day(day):
        lines.append("- On period")
    if store.has_spotting(day):
        lines.append("- Spotting")

    temp = store.temperature_on(day)
    if temp is not None:
        lines.append(f"- Basal temperature: {temp:g} °C")

    symptoms = store.symptoms_on(day)
    if symptoms:
        labels = ", ".join(cfg.symptom_label(code) for code in symptoms)
        lines.append(f"- Symptoms: {labels}")

    note = store.note_on(day)
    if note:
        lines.append("- Note:")
        lines.append(note)

    return "\n".join(lines).strip()


def temperature_series(
    store: CycleLogStore,
    config: CycleConfig | None = None,
    today: date | None = None,
) -> list[TemperaturePoint]:
    """Temperature readings from the chart window, oldest first."""
    cfg = config or get_cycle_config()
    cutoff = to_date_string((today or date.today()) - timedelta(days=cfg.chart_window_days))
    readings = sorted(
        (r for r in store.temperatures if r.temp is not None and r.date >= cutoff),
        key=lambda r: r.date,
    )
    return [
        TemperaturePoint(date=r.date, label=format_date(r.date, "short"), temp=r.temp)
        for r in readings
    ]
