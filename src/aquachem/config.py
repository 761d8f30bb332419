"""
Runtime configuration read from environment variables.
"""
import os
from dataclasses import dataclass

DEFAULT_DATABASE_URL = "sqlite:///./aquachem.db"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class Settings:
    """Engine thresholds and infrastructure settings"""
    database_url: str = DEFAULT_DATABASE_URL
    minimum_data_points: int = 10
    max_history_days: int = 90
    max_days_ahead: int = 30
    default_days_ahead: int = 7
    history_limit: int = 50
    match_window_days: int = 1
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL),
            minimum_data_points=_int_env("AQUACHEM_MIN_DATA_POINTS", 10),
            max_history_days=_int_env("AQUACHEM_MAX_HISTORY_DAYS", 90),
            max_days_ahead=_int_env("AQUACHEM_MAX_DAYS_AHEAD", 30),
            default_days_ahead=_int_env("AQUACHEM_DEFAULT_DAYS_AHEAD", 7),
            history_limit=_int_env("AQUACHEM_HISTORY_LIMIT", 50),
            match_window_days=_int_env("AQUACHEM_MATCH_WINDOW_DAYS", 1),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
