from __future__ import annotations
import os


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


def _env_str(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


# percentile model: normalized scores ~ N(mean, sd)
PERCENTILE_MEAN: float = 50.0
PERCENTILE_SD: float = 15.0

STRAIGHTLINE_MAX_PERCENT: float = 80.0
MIN_VALUES_FOR_VARIABILITY: int = 3
VARIABILITY_MIN_NORMALIZED_SD: float = 0.15
VARIABILITY_SCORE_FACTOR: float = 400.0
DEFAULT_SCALE: tuple[float, float] = (1.0, 5.0)
EXTREME_MAX_PERCENT: float = 70.0
COMPLETION_MIN_PERCENT: float = 80.0
MIN_SECONDS_PER_ITEM: float = 2.0

# pass-rate lower bounds, checked in order; anything below is "poor"
RATING_BANDS: tuple[tuple[float, str], ...] = (
    (0.9, "excellent"),
    (0.7, "good"),
    (0.5, "questionable"),
)

SIMILAR_AREA_MIN: float = 75.0

DISCLAIMER_SHARE: str = "For informational purposes only. Not for clinical diagnosis."
DISCLAIMER_COMPARE: str = "For informational purposes only."

PROFILE_ID_LENGTH: int = 12
COMPARISON_ID_LENGTH: int = 16
PROFILE_ID_SECRET: str = ""

LOG_LEVEL: str = "INFO"

# // env overrides for staging/ops; defaults follow the published scoring rules.
STRAIGHTLINE_MAX_PERCENT = _env_float("STRAIGHTLINE_MAX_PERCENT", STRAIGHTLINE_MAX_PERCENT)
VARIABILITY_MIN_NORMALIZED_SD = _env_float("VARIABILITY_MIN_NORMALIZED_SD", VARIABILITY_MIN_NORMALIZED_SD)
EXTREME_MAX_PERCENT = _env_float("EXTREME_MAX_PERCENT", EXTREME_MAX_PERCENT)
COMPLETION_MIN_PERCENT = _env_float("COMPLETION_MIN_PERCENT", COMPLETION_MIN_PERCENT)
MIN_SECONDS_PER_ITEM = _env_float("MIN_SECONDS_PER_ITEM", MIN_SECONDS_PER_ITEM)
PROFILE_ID_LENGTH = _env_int("PROFILE_ID_LENGTH", PROFILE_ID_LENGTH)
COMPARISON_ID_LENGTH = _env_int("COMPARISON_ID_LENGTH", COMPARISON_ID_LENGTH)
PROFILE_ID_SECRET = _env_str("PROFILE_ID_SECRET", PROFILE_ID_SECRET)
LOG_LEVEL = _env_str("LOG_LEVEL", LOG_LEVEL).upper()
