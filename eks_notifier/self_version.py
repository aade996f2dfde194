"""
Latest published version of EKS Notifier in the Serverless Application Repository.
"""

import asyncio
import re
from itertools import zip_longest
from typing import Optional

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from .config import Settings, settings

logger = structlog.get_logger(__name__)


def _component(part: str) -> int:
    # leading digits only: "2-beta" is 2, "x" is 0
    match = re.match(r"\d+", part.strip())
    return int(match.group(0)) if match else 0


def compare_versions(version1: str, version2: str) -> int:
    """Compare dotted numeric versions.

    Missing components count as 0, so "1.2" < "1.2.1" and "2.0" == "2.0.0".

    Returns:
        -1, 0 or 1 as version1 is lower than, equal to, or higher than version2.
    """
    parts1 = [_component(p) for p in version1.split(".")]
    parts2 = [_component(p) for p in version2.split(".")]
    for a, b in zip_longest(parts1, parts2, fillvalue=0):
        if a < b:
            return -1
        if a > b:
            return 1
    return 0


class SelfVersionProbe:
    """Reads the version list of the notifier application."""

    def __init__(self, sar_client=None, config: Optional[Settings] = None):
        self._config = config or settings
        self._sar = sar_client or boto3.client(
            "serverlessrepo", region_name=self._config.aws_region
        )

    def _list_versions(self) -> list[dict]:
        paginator = self._sar.get_paginator("list_application_versions")
        versions: list[dict] = []
        for page in paginator.paginate(ApplicationId=self._config.registry_application_id):
            versions.extend(page.get("Versions", []))
        return versions

    async def latest_published_version(self) -> Optional[str]:
        """Return the last published semantic version, or None on any failure."""
        application_id = self._config.registry_application_id
        if not application_id:
            logger.debug("application_id not configured, skipping")
            return None

        try:
            versions = await asyncio.to_thread(self._list_versions)
        except (BotoCoreError, ClientError) as exc:
            logger.error(
                "latest_version_fetch_failed",
                application_id=application_id,
                error=str(exc),
            )
            return None

        if not versions:
            logger.warning("no_published_versions", application_id=application_id)
            return None

        latest = versions[-1].get("SemanticVersion")
        logger.info("latest_version", application_id=application_id, version=latest)
        return latest or None
