"""Runtime settings read from the environment (after load_env)."""

import os
from dataclasses import dataclass
from pathlib import Path

from .matcher import HIGH_CONFIDENCE, LOW_CONFIDENCE

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    db_path: Path = Path("data/catalog.db")
    source_dir: Path = Path("public/images/shows")
    output_dir: Path = Path("public/images/tv-shows")
    image_url_prefix: str = "/images/tv-shows/"
    log_level: str = "INFO"
    log_dir: Path = Path("logs")
    high_confidence: float = HIGH_CONFIDENCE
    low_confidence: float = LOW_CONFIDENCE


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _log_level_env(name: str, default: str) -> str:
    level = (os.getenv(name) or default).strip().upper()
    if level not in LOG_LEVELS:
        choices = ", ".join(LOG_LEVELS)
        raise ValueError(f"{name} must be one of {choices}, got {level!r}")
    return level


def load_settings() -> Settings:
    defaults = Settings()
    return Settings(
        db_path=Path(os.getenv("SHOWMATCH_DB") or defaults.db_path),
        source_dir=Path(os.getenv("SHOWMATCH_SOURCE_DIR") or defaults.source_dir),
        output_dir=Path(os.getenv("SHOWMATCH_OUTPUT_DIR") or defaults.output_dir),
        image_url_prefix=os.getenv("SHOWMATCH_IMAGE_URL_PREFIX") or defaults.image_url_prefix,
        log_level=_log_level_env("SHOWMATCH_LOG_LEVEL", defaults.log_level),
        log_dir=Path(os.getenv("SHOWMATCH_LOG_DIR") or defaults.log_dir),
        high_confidence=_float_env("SHOWMATCH_HIGH_CONFIDENCE", defaults.high_confidence),
        low_confidence=_float_env("SHOWMATCH_LOW_CONFIDENCE", defaults.low_confidence),
    )
