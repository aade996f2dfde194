"""
Cluster inventory: lists clusters and resolves each one's Kubernetes version.

Listing failures propagate to the caller. A cluster whose version cannot be
resolved is logged and left out; the rest of the fleet is still reported.
"""

import asyncio
import re
from dataclasses import dataclass
from typing import Optional, Protocol

import boto3
import structlog
from kubernetes import client, config

from .config import Settings, settings

logger = structlog.get_logger(__name__)

_MINOR_DIGITS = re.compile(r"\d+")


@dataclass(frozen=True)
class ClusterVersion:
    name: str
    version: str


class ClusterInventoryProbe(Protocol):
    async def list_cluster_versions(self) -> list[ClusterVersion]: ...


async def _resolve_all(names: list[str], describe) -> list[ClusterVersion]:
    """Run ``describe(name)`` for every cluster concurrently, in listing order."""
    outcomes = await asyncio.gather(
        *(asyncio.to_thread(describe, name) for name in names),
        return_exceptions=True,
    )

    clusters: list[ClusterVersion] = []
    for name, outcome in zip(names, outcomes):
        if isinstance(outcome, BaseException):
            logger.warning("cluster_describe_failed", cluster=name, error=str(outcome))
            continue
        clusters.append(ClusterVersion(name=name, version=outcome))
    return clusters


class EksInventoryProbe:
    """EKS control-plane inventory via boto3."""

    def __init__(self, eks_client=None, region: Optional[str] = None):
        self._eks = eks_client or boto3.client("eks", region_name=region or settings.aws_region)

    def _list_cluster_names(self) -> list[str]:
        paginator = self._eks.get_paginator("list_clusters")
        names: list[str] = []
        for page in paginator.paginate():
            names.extend(page.get("clusters", []))
        return names

    def _describe_version(self, name: str) -> str:
        resp = self._eks.describe_cluster(name=name)
        return resp["cluster"]["version"]

    async def list_cluster_versions(self) -> list[ClusterVersion]:
        names = await asyncio.to_thread(self._list_cluster_names)
        logger.info("clusters_listed", count=len(names))
        return await _resolve_all(names, self._describe_version)


class KubeconfigInventoryProbe:
    """Treats every context in a kubeconfig as a cluster.

    Useful for fleets that are not all EKS; the API server's reported version
    is reduced to ``major.minor`` so it matches support-window keys.
    """

    def __init__(self, kubeconfig_path: Optional[str] = None):
        self._kubeconfig_path = kubeconfig_path

    @staticmethod
    def normalize_version(major: str, minor: str) -> str:
        # Managed control planes report minors like "29+"
        match = _MINOR_DIGITS.search(minor or "")
        if not match:
            raise ValueError(f"unparseable server minor version: {minor!r}")
        return f"{major}.{match.group(0)}"

    def _list_context_names(self) -> list[str]:
        contexts, _ = config.list_kube_config_contexts(config_file=self._kubeconfig_path)
        return [ctx["name"] for ctx in contexts or []]

    def _describe_version(self, context_name: str) -> str:
        api_client = config.new_client_from_config(
            config_file=self._kubeconfig_path, context=context_name
        )
        try:
            info = client.VersionApi(api_client).get_code()
        finally:
            api_client.close()
        return self.normalize_version(info.major, info.minor)

    async def list_cluster_versions(self) -> list[ClusterVersion]:
        names = await asyncio.to_thread(self._list_context_names)
        logger.info("kubeconfig_contexts_listed", count=len(names))
        return await _resolve_all(names, self._describe_version)


def get_inventory_probe(cfg: Optional[Settings] = None) -> ClusterInventoryProbe:
    """Build the inventory probe selected by ``inventory_backend``."""
    cfg = cfg or settings
    if cfg.inventory_backend == "kubeconfig":
        return KubeconfigInventoryProbe(cfg.kubeconfig_path)
    return EksInventoryProbe(region=cfg.aws_region)
