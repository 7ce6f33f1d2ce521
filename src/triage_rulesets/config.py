"""Engine configuration — reads settings from environment variables.

All settings have sensible defaults for local development.  Embedding
applications typically override the delays (0 in tests, the default 1.2s
in the app) and the ruleset directory.
"""

import logging
import os
from dataclasses import dataclass

from triage_rulesets.constants import DEFAULT_ANALYZE_DELAY, DEFAULT_SUBMIT_DELAY
from triage_rulesets.errors import ConfigurationError

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class EngineSettings:
    """Immutable engine configuration read from environment at startup."""

    # Ruleset directory (None → RulesetStore default, which is v1/ from repo root)
    ruleset_dir: str | None = None

    # Cosmetic delays in seconds; 0 returns results immediately
    submit_delay: float = DEFAULT_SUBMIT_DELAY
    analyze_delay: float = DEFAULT_ANALYZE_DELAY

    # Logging
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if self.submit_delay < 0 or self.analyze_delay < 0:
            raise ConfigurationError(
                f"delays must be non-negative, got submit_delay={self.submit_delay} "
                f"analyze_delay={self.analyze_delay}"
            )


def load_settings() -> EngineSettings:
    """Build settings from ``TRIAGE_*`` environment variables."""
    return EngineSettings(
        ruleset_dir=os.getenv("TRIAGE_RULESET_DIR") or None,
        submit_delay=float(os.getenv("TRIAGE_SUBMIT_DELAY", str(DEFAULT_SUBMIT_DELAY))),
        analyze_delay=float(os.getenv("TRIAGE_ANALYZE_DELAY", str(DEFAULT_ANALYZE_DELAY))),
        log_level=os.getenv("TRIAGE_LOG_LEVEL", "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Apply the package log format to the root logger."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
