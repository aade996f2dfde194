"""
End-of-support evaluation for a single Kubernetes version.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

import structlog

from .versions import SupportWindowTable

logger = structlog.get_logger(__name__)


class Classification(str, Enum):
    EXPIRED = "expired"
    EXPIRING = "expiring"
    HEALTHY = "healthy"


@dataclass(frozen=True)
class EvaluationResult:
    """Support status of one cluster (or requested version)."""

    subject_name: str
    version: str
    days_left: int
    classification: Classification
    end_of_support: date

    @property
    def needs_alert(self) -> bool:
        return self.classification is not Classification.HEALTHY


def days_until(end: date, today: date) -> int:
    """Whole calendar days from today to end, negative once end has passed."""
    return (end - today).days


def classify(days_left: int, warn_days: int) -> Classification:
    if days_left < 0:
        return Classification.EXPIRED
    if days_left <= warn_days:
        return Classification.EXPIRING
    return Classification.HEALTHY


def evaluate(
    version: str,
    table: Optional[SupportWindowTable],
    today: date,
    subject_name: str = "",
) -> Optional[EvaluationResult]:
    """Evaluate a version against the support-window table.

    Returns None when the table is unavailable or has no entry for the
    version (usually a version newer than the table).
    """
    if table is None:
        return None

    entry = table.get(version)
    if entry is None:
        logger.debug("version_not_in_support_windows", version=version, subject=subject_name)
        return None

    days_left = days_until(entry.end_of_support, today)
    return EvaluationResult(
        subject_name=subject_name,
        version=version,
        days_left=days_left,
        classification=classify(days_left, entry.warn_days),
        end_of_support=entry.end_of_support,
    )
