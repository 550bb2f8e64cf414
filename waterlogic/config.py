from __future__ import annotations

from dataclasses import dataclass

from . import canon


@dataclass
class EngineConfig:
    # Calendar days are taken in this timezone for tz-aware timestamps
    tz: str = canon.DEFAULT_TZ

    # Seeded +/- jitter added to estimated meter values (gallons)
    variation_amplitude: float = canon.VARIATION_GALLONS

    # Date-only CSV values and accepted estimates land at this local hour
    noon_hour: int = canon.NOON_HOUR

    chlorine_decimals: int = 2

    accept_note: str = canon.ACCEPT_NOTE


def default_config() -> EngineConfig:
    return EngineConfig()
