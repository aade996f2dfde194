"""Shared test fixtures for eks-notifier."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest
import structlog

from eks_notifier.config import Settings
from eks_notifier.inventory import ClusterVersion
from eks_notifier.versions import parse_support_windows

TODAY = date(2025, 1, 1)

TOPIC_ARN = "arn:aws:sns:us-east-1:123456789012:eks-alerts"
APPLICATION_ID = "arn:aws:serverlessrepo:us-east-1:123456789012:applications/eks-notifier"


# ---------------------------------------------------------------------------
# Environment / settings
# ---------------------------------------------------------------------------


@pytest.fixture
def settings_env(monkeypatch):
    """Set the environment the deployment template provides."""
    monkeypatch.setenv("AWS_REGION", "us-east-1")
    monkeypatch.setenv("VERSION", "1.0.0")
    monkeypatch.setenv("STACK_NAME", "serverlessrepo-eks-notifier")
    monkeypatch.setenv("STACK_ID", "arn:aws:cloudformation:us-east-1:123456789012:stack/eks/abc")
    monkeypatch.setenv("TOPIC_ARN", TOPIC_ARN)
    monkeypatch.setenv("APPLICATION_ID", APPLICATION_ID)
    monkeypatch.setenv("APPLICATION_ID_CN", "arn:aws-cn:serverlessrepo:cn-north-1:1:applications/eks-notifier")


@pytest.fixture
def app_config():
    """Explicit Settings, independent of the process environment."""
    return Settings(
        aws_region="us-east-1",
        version="1.0.0",
        stack_name="serverlessrepo-eks-notifier",
        stack_id="arn:aws:cloudformation:us-east-1:123456789012:stack/eks/abc",
        topic_arn=TOPIC_ARN,
        application_id=APPLICATION_ID,
        versions_source="static",
    )


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any structlog.configure() done by the code under test."""
    yield
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Support windows
# ---------------------------------------------------------------------------


@pytest.fixture
def support_table():
    """Relative to TODAY: 1.24 expired 5 days ago, 1.28 ends in 10 days, 1.30 in 400."""
    return parse_support_windows(
        {
            "1.24": {"end": "2024-12-27", "days": 30},
            "1.28": {"end": "2025-01-11", "days": 30},
            "1.30": {"end": "2026-02-05", "days": 30},
        }
    )


@pytest.fixture
def mock_support_windows(support_table):
    source = MagicMock()
    source.load = AsyncMock(return_value=support_table)
    return source


# ---------------------------------------------------------------------------
# Probes and notifier
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_inventory():
    inventory = MagicMock()
    inventory.list_cluster_versions = AsyncMock(
        return_value=[
            ClusterVersion(name="prod", version="1.24"),
            ClusterVersion(name="staging", version="1.28"),
            ClusterVersion(name="dev", version="1.30"),
        ]
    )
    return inventory


@pytest.fixture
def mock_self_version():
    probe = MagicMock()
    probe.latest_published_version = AsyncMock(return_value="1.0.0")
    return probe


@pytest.fixture
def notify():
    return AsyncMock(return_value={"sns": True})


@pytest.fixture
def router(mock_inventory, mock_self_version, mock_support_windows, notify, app_config):
    from eks_notifier.router import EventRouter

    return EventRouter(
        inventory=mock_inventory,
        self_version=mock_self_version,
        support_windows=mock_support_windows,
        notify=notify,
        config=app_config,
        today=lambda: TODAY,
    )


def _mock_httpx_client(*, response=None, exception=None):
    """Build a mock httpx.AsyncClient context manager for GET requests."""
    mock_client = AsyncMock()
    if exception is not None:
        mock_client.get = AsyncMock(side_effect=exception)
    else:
        mock_client.get = AsyncMock(return_value=response)
    mock_client.post = AsyncMock(return_value=response or MagicMock())
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


@pytest.fixture
def mock_httpx_client():
    return _mock_httpx_client
