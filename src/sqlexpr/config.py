"""Command-line configuration.

The library itself never reads the environment; only the CLI builds an
EngineConfig and passes its values down explicitly.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

_TRUTHY = {"true", "1", "yes"}


@dataclass
class EngineConfig:
    """Settings for the sqlexpr front end.

    Attributes:
        pretty: Render parsed trees as an indented dump instead of text
        log_level: Name of the logging level for the ``sqlexpr`` logger
    """

    pretty: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> EngineConfig:
        """Create config from environment variables.

        - SQLEXPR_PRETTY: true/1/yes (case-insensitive) enables tree dumps
        - SQLEXPR_LOG_LEVEL: a logging level name, default WARNING
        """
        pretty = os.environ.get("SQLEXPR_PRETTY", "").strip().lower() in _TRUTHY
        log_level = os.environ.get("SQLEXPR_LOG_LEVEL", "").strip().upper() or "WARNING"
        return cls(pretty=pretty, log_level=log_level)

    @property
    def level(self) -> int:
        """Numeric logging level; unknown names fall back to WARNING."""
        value = logging.getLevelName(self.log_level)
        return value if isinstance(value, int) else logging.WARNING
