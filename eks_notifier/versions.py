"""
Support-window table for EKS Kubernetes versions.

The table maps a Kubernetes minor version ("1.29") to the date standard
support ends and the number of days before that date when alerts start.
It comes either from the static table below or from a JSON document
fetched once per invocation:

    {"1.29": {"end": "2025-03-23", "days": 90}, ...}
"""

import asyncio
from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Any, Mapping, Optional

import httpx
import structlog

from .config import Settings, settings

logger = structlog.get_logger(__name__)

# Standard support end dates, https://docs.aws.amazon.com/eks/latest/userguide/kubernetes-versions.html
STATIC_SUPPORT_WINDOWS: dict[str, dict[str, Any]] = {
    "1.23": {"end": "2023-10-11", "days": 90},
    "1.24": {"end": "2024-01-31", "days": 90},
    "1.25": {"end": "2024-05-01", "days": 90},
    "1.26": {"end": "2024-06-11", "days": 90},
    "1.27": {"end": "2024-07-24", "days": 90},
    "1.28": {"end": "2024-11-26", "days": 90},
    "1.29": {"end": "2025-03-23", "days": 90},
    "1.30": {"end": "2025-07-23", "days": 90},
    "1.31": {"end": "2025-11-26", "days": 90},
    "1.32": {"end": "2026-03-23", "days": 90},
    "1.33": {"end": "2026-07-29", "days": 90},
    "1.34": {"end": "2026-12-02", "days": 90},
}


class SupportWindowError(ValueError):
    """The support-window document is malformed."""


@dataclass(frozen=True)
class SupportWindowEntry:
    """End of standard support for one Kubernetes version."""

    version: str
    end_of_support: date
    warn_days: int

    def __post_init__(self):
        if self.warn_days < 0:
            raise SupportWindowError(
                f"warn days for {self.version} must be non-negative, got {self.warn_days}"
            )


SupportWindowTable = Mapping[str, SupportWindowEntry]


def parse_support_windows(document: Any) -> SupportWindowTable:
    """Build a read-only table from the decoded JSON document.

    Raises:
        SupportWindowError: If the document or any entry is malformed.
    """
    if not isinstance(document, dict):
        raise SupportWindowError(f"expected a JSON object, got {type(document).__name__}")

    entries: dict[str, SupportWindowEntry] = {}
    for version, raw in document.items():
        if not isinstance(raw, dict):
            raise SupportWindowError(f"entry for {version} is not an object")
        try:
            end = date.fromisoformat(str(raw["end"])[:10])
            days = raw["days"]
        except KeyError as exc:
            raise SupportWindowError(f"entry for {version} is missing {exc}") from exc
        except ValueError as exc:
            raise SupportWindowError(f"entry for {version} has a bad end date: {exc}") from exc
        if isinstance(days, bool) or not isinstance(days, int):
            raise SupportWindowError(f"entry for {version} has non-integer days: {days!r}")
        entries[str(version)] = SupportWindowEntry(
            version=str(version), end_of_support=end, warn_days=days
        )
    return MappingProxyType(entries)


def dump_support_windows(table: SupportWindowTable) -> dict[str, dict[str, Any]]:
    """Inverse of parse_support_windows."""
    return {
        version: {"end": entry.end_of_support.isoformat(), "days": entry.warn_days}
        for version, entry in table.items()
    }


@dataclass
class InvocationContext:
    """State scoped to a single invocation.

    Holds the memoised support-window table so a second load within the
    same invocation never hits the network again. Create a new context for
    every trigger.
    """

    today: date
    support_windows: Optional[SupportWindowTable] = field(default=None, repr=False)
    support_windows_loaded: bool = False


class SupportWindowSource:
    """Loads the support-window table from the static table or the remote document."""

    def __init__(self, config: Optional[Settings] = None):
        self._config = config or settings

    async def load(self, ctx: InvocationContext) -> Optional[SupportWindowTable]:
        """Return the table, or None when it could not be loaded.

        The outcome (including a failure) is memoised on ``ctx``.
        """
        if ctx.support_windows_loaded:
            return ctx.support_windows

        if self._config.versions_source == "static":
            table = parse_support_windows(STATIC_SUPPORT_WINDOWS)
            logger.debug("support_windows_loaded", source="static", versions=len(table))
        else:
            table = await self._fetch()

        ctx.support_windows = table
        ctx.support_windows_loaded = True
        return table

    async def _fetch(self) -> Optional[SupportWindowTable]:
        url = self._config.support_windows_url
        timeout = self._config.versions_timeout_seconds
        try:
            document = await asyncio.wait_for(self._get_document(url, timeout), timeout)
            table = parse_support_windows(document)
        except (httpx.TimeoutException, asyncio.TimeoutError):
            logger.warning("support_windows_timeout", url=url, timeout=timeout)
            return None
        except (httpx.HTTPError, ValueError) as exc:
            # ValueError covers JSON decoding and SupportWindowError
            logger.warning("support_windows_fetch_failed", url=url, error=str(exc))
            return None

        logger.info("support_windows_loaded", source="remote", url=url, versions=len(table))
        return table

    @staticmethod
    async def _get_document(url: str, timeout: float) -> Any:
        # httpx timeouts apply per connect/read step; wait_for bounds the whole request
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
            return resp.json()
