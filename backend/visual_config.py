"""
Visual selection config - API credentials, timeouts and scoring constants.

Everything here is read once at import/startup and treated as read-only.
Credentials come from the environment (.env supported via python-dotenv);
a missing key simply means the corresponding image source is skipped.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Missing or unreadable .env must never take the pipeline down.
try:
    load_dotenv()
except Exception as e:
    print(f"⚠️  visual_config: load_dotenv skipped: {e}")


def _env_str(name: str, default: str = "") -> str:
    return str(os.getenv(name, default) or "").strip()


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return float(default)
    try:
        return float(raw)
    except Exception:
        return float(default)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not str(raw).strip():
        return int(default)
    try:
        return int(float(raw))
    except Exception:
        return int(default)


# ============================================================================
# PROVIDER ENDPOINTS + TIMEOUTS
# ============================================================================

CLEARBIT_BASE_URL = "https://logo.clearbit.com"
LOGODEV_BASE_URL = "https://img.logo.dev"
GOOGLE_SEARCH_URL = "https://www.googleapis.com/customsearch/v1"
UNSPLASH_BASE_URL = "https://api.unsplash.com"
PEXELS_BASE_URL = "https://api.pexels.com/v1"

# Seconds. Logo lookups are HEAD requests, search APIs get a bit more.
LOGO_TIMEOUT_SEC = 3.0
SEARCH_TIMEOUT_SEC = 5.0

# Delay between two segment resolutions (~3 req/s, safe for free tiers)
RATE_LIMIT_DELAY_SEC = 0.35


# ============================================================================
# SCORING
# ============================================================================

@dataclass(frozen=True)
class ScoringWeights:
    """
    Stock-photo candidate scoring constants.

    Theoretical max = 66 (50 + 6 + 6 + 4); generic_penalty can subtract 20.
    min_text_relevance is the hard gate: 8 pts ~ 1 matched keyword out of 6.
    """
    text_relevance: float = 50.0
    orientation_bonus: float = 6.0
    resolution: float = 6.0
    position_bonus: float = 4.0
    generic_penalty: float = 20.0
    min_text_relevance: float = 8.0
    minimum_score: float = 35.0
    first_image_min_score: float = 45.0
    minimum_width: int = 800
    ideal_width: int = 2000
    candidate_count: int = 5

    def __post_init__(self) -> None:
        # First image is logo-adjacent; it can never be looser than later ones.
        if self.first_image_min_score < self.minimum_score:
            object.__setattr__(self, "first_image_min_score", self.minimum_score)
        if self.ideal_width <= self.minimum_width:
            raise ValueError("ideal_width must be greater than minimum_width")


DEFAULT_SCORING_WEIGHTS = ScoringWeights()


# ============================================================================
# RUNTIME SETTINGS (env)
# ============================================================================

@dataclass(frozen=True)
class VisualSettings:
    pexels_api_key: str = ""
    unsplash_access_key: str = ""
    logodev_api_key: str = ""
    google_api_key: str = ""
    google_search_engine_id: str = ""
    rate_limit_delay_sec: float = RATE_LIMIT_DELAY_SEC
    source_throttle_sec: float = 0.0
    logo_timeout_sec: float = LOGO_TIMEOUT_SEC
    search_timeout_sec: float = SEARCH_TIMEOUT_SEC
    scoring: ScoringWeights = field(default_factory=ScoringWeights)

    def configured_sources(self) -> list:
        """Names of sources that have the credentials they need."""
        names = ["clearbit"]
        if self.logodev_api_key:
            names.append("logodev")
        if self.google_api_key and self.google_search_engine_id:
            names.append("google")
        if self.unsplash_access_key:
            names.append("unsplash")
        if self.pexels_api_key:
            names.append("pexels")
        return names


def load_settings(scoring: Optional[ScoringWeights] = None) -> VisualSettings:
    """Build VisualSettings from the current environment."""
    if scoring is None:
        base = DEFAULT_SCORING_WEIGHTS
        scoring = ScoringWeights(
            minimum_score=_env_float("IMAGE_SCORING_MIN_SCORE", base.minimum_score),
            first_image_min_score=_env_float("IMAGE_SCORING_FIRST_MIN_SCORE", base.first_image_min_score),
            candidate_count=_env_int("IMAGE_SCORING_CANDIDATES", base.candidate_count),
        )
    return VisualSettings(
        pexels_api_key=_env_str("PEXELS_API_KEY"),
        unsplash_access_key=_env_str("UNSPLASH_ACCESS_KEY"),
        logodev_api_key=_env_str("LOGODEV_API_KEY"),
        google_api_key=_env_str("GOOGLE_CUSTOM_SEARCH_KEY"),
        google_search_engine_id=_env_str("GOOGLE_SEARCH_ENGINE_ID"),
        rate_limit_delay_sec=max(0.0, _env_float("IMAGE_RATE_LIMIT_DELAY_SEC", RATE_LIMIT_DELAY_SEC)),
        source_throttle_sec=max(0.0, _env_float("IMAGE_SOURCE_THROTTLE_SEC", 0.0)),
        logo_timeout_sec=_env_float("IMAGE_LOGO_TIMEOUT_SEC", LOGO_TIMEOUT_SEC),
        search_timeout_sec=_env_float("IMAGE_SEARCH_TIMEOUT_SEC", SEARCH_TIMEOUT_SEC),
        scoring=scoring,
    )
