"""
Outcome of a conversion run: counters plus the warnings raised on the way.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ConversionReport:
    """Summary of one import or export pass."""

    settings: int = 0
    players: int = 0
    byes: int = 0
    warnings: List[str] = field(default_factory=list)

    def warn(self, message: str, log: Optional[logging.Logger] = None):
        """Record a non-fatal problem and log it."""
        (log or logger).warning(message)
        self.warnings.append(message)


def warn(report: Optional[ConversionReport], log: logging.Logger, message: str):
    """Log a warning, recording it on ``report`` when one is being kept."""
    if report is None:
        log.warning(message)
    else:
        report.warn(message, log)
