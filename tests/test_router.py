"""Tests for the event router (eks_notifier.router)."""

from datetime import date
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from eks_notifier.events import (
    ClusterEventName,
    ClusterLifecycle,
    Scheduled,
    StackLifecycle,
    StackStatus,
)
from eks_notifier.inventory import ClusterVersion


def _sent(notify):
    """Titles of all alerts passed to the notify callback, in order."""
    return [call.args[0].title for call in notify.await_args_list]


def _texts(notify):
    return [call.args[0].render() for call in notify.await_args_list]


FLEET_TITLE = "EKS clusters need to be upgraded"
UPGRADE_TITLE = "EKS-Notifier needs to be upgraded"
NEW_CLUSTER_TITLE = "Risk alert for creating EKS cluster with lower version"
TODAY = date(2025, 1, 1)


# ---------------------------------------------------------------------------
# Cluster lifecycle
# ---------------------------------------------------------------------------


class TestClusterEvents:
    @pytest.mark.asyncio
    async def test_delete_cluster_sends_single_notice(
        self, router, notify, mock_inventory, mock_self_version, mock_support_windows
    ):
        await router.dispatch(ClusterLifecycle(ClusterEventName.DELETE_CLUSTER, "demo"))

        notify.assert_awaited_once()
        text = _texts(notify)[0]
        assert "demo" in text
        assert "end of support" not in text
        mock_inventory.list_cluster_versions.assert_not_awaited()
        mock_self_version.latest_published_version.assert_not_awaited()
        mock_support_windows.load.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_cluster_with_expiring_version(self, router, notify, mock_self_version):
        mock_self_version.latest_published_version.return_value = "1.1.0"

        await router.dispatch(ClusterLifecycle(ClusterEventName.CREATE_CLUSTER, "new", "1.28"))

        assert _sent(notify) == [UPGRADE_TITLE, NEW_CLUSTER_TITLE]
        risk = notify.await_args_list[1].args[0]
        assert "new" in risk.body_lines[0]
        assert "10 days left" in risk.body_lines[0]

    @pytest.mark.asyncio
    async def test_create_cluster_with_supported_version(self, router, notify, mock_inventory):
        await router.dispatch(ClusterLifecycle(ClusterEventName.CREATE_CLUSTER, "new", "1.30"))
        notify.assert_not_awaited()
        mock_inventory.list_cluster_versions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_cluster_with_unknown_version(self, router, notify):
        await router.dispatch(ClusterLifecycle(ClusterEventName.CREATE_CLUSTER, "new", "1.99"))
        notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_cluster_without_table(self, router, notify, mock_support_windows):
        mock_support_windows.load.return_value = None
        await router.dispatch(ClusterLifecycle(ClusterEventName.CREATE_CLUSTER, "new", "1.24"))
        notify.assert_not_awaited()


# ---------------------------------------------------------------------------
# Stack lifecycle
# ---------------------------------------------------------------------------


class TestStackEvents:
    @pytest.mark.asyncio
    async def test_update_in_progress(self, router, notify, mock_inventory):
        await router.dispatch(StackLifecycle(StackStatus.UPDATE_IN_PROGRESS))
        assert _sent(notify) == ["EKS-Notifier Updating"]
        assert "stackId=arn:aws:cloudformation" in _texts(notify)[0]
        mock_inventory.list_cluster_versions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_complete_runs_fleet_check(
        self, router, notify, mock_inventory, mock_self_version
    ):
        await router.dispatch(StackLifecycle(StackStatus.UPDATE_COMPLETE))
        assert _sent(notify) == ["EKS-Notifier Updated", FLEET_TITLE]
        assert "Version: 1.0.0" in _texts(notify)[0]
        mock_inventory.list_cluster_versions.assert_awaited_once()
        mock_self_version.latest_published_version.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_in_progress(self, router, notify, mock_inventory):
        await router.dispatch(StackLifecycle(StackStatus.DELETE_IN_PROGRESS))
        assert _sent(notify) == ["EKS-Notifier Deleting"]
        assert "eks-notifier deleting..." in _texts(notify)[0]
        mock_inventory.list_cluster_versions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_complete_order(self, router, notify, mock_self_version):
        mock_self_version.latest_published_version.return_value = "2.0.0"
        await router.dispatch(StackLifecycle(StackStatus.CREATE_COMPLETE))
        assert _sent(notify) == [UPGRADE_TITLE, "EKS-Notifier Created", FLEET_TITLE]


# ---------------------------------------------------------------------------
# Scheduled / fleet check
# ---------------------------------------------------------------------------


class TestScheduled:
    @pytest.mark.asyncio
    async def test_self_check_runs_before_fleet_check(self, router, notify, mock_self_version):
        mock_self_version.latest_published_version.return_value = "1.1.0"
        await router.dispatch(Scheduled())
        assert _sent(notify) == [UPGRADE_TITLE, FLEET_TITLE]

    @pytest.mark.asyncio
    async def test_fleet_alert_contents(self, router, notify):
        await router.dispatch(Scheduled())

        alert = notify.await_args_list[0].args[0]
        assert alert.body_lines[0].startswith("Cluster prod with version 1.24 has reached")
        assert "5 days ago" in alert.body_lines[0]
        assert alert.body_lines[1].startswith("Cluster staging with version 1.28 will reach")
        assert not any("dev" in line for line in alert.body_lines)

    @pytest.mark.asyncio
    async def test_healthy_fleet_is_silent(self, router, notify, mock_inventory):
        mock_inventory.list_cluster_versions.return_value = [ClusterVersion("dev", "1.30")]
        await router.dispatch(Scheduled())
        notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_table_skips_fleet_but_not_self_check(
        self, router, notify, mock_inventory, mock_self_version, mock_support_windows
    ):
        mock_support_windows.load.return_value = None
        mock_self_version.latest_published_version.return_value = "1.1.0"

        await router.dispatch(Scheduled())

        assert _sent(notify) == [UPGRADE_TITLE]
        mock_inventory.list_cluster_versions.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_registry_failure_does_not_block_fleet_check(
        self, router, notify, mock_self_version
    ):
        mock_self_version.latest_published_version.side_effect = RuntimeError("registry down")
        await router.dispatch(Scheduled())
        assert _sent(notify) == [FLEET_TITLE]

    @pytest.mark.asyncio
    async def test_listing_failure_is_fatal(self, router, notify, mock_inventory):
        mock_inventory.list_cluster_versions.side_effect = ClientError(
            {"Error": {"Code": "AccessDeniedException", "Message": "denied"}}, "ListClusters"
        )
        with pytest.raises(ClientError):
            await router.dispatch(Scheduled())
        notify.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_each_dispatch_gets_fresh_context(self, router, mock_support_windows):
        await router.dispatch(Scheduled())
        await router.dispatch(Scheduled())
        first_ctx = mock_support_windows.load.await_args_list[0].args[0]
        second_ctx = mock_support_windows.load.await_args_list[1].args[0]
        assert first_ctx is not second_ctx

    @pytest.mark.asyncio
    async def test_unknown_event_object_runs_scheduled_checks(self, router, notify):
        await router.dispatch(MagicMock())
        assert _sent(notify) == [FLEET_TITLE]


@pytest.mark.asyncio
async def test_fleet_check_with_partial_inventory(
    mock_self_version, mock_support_windows, notify, app_config
):
    """A cluster dropped by the probe does not stop the others from being reported."""
    from eks_notifier.inventory import EksInventoryProbe
    from eks_notifier.router import EventRouter

    eks = MagicMock()
    eks.get_paginator.return_value.paginate.return_value = [
        {"clusters": ["prod", "broken", "staging"]}
    ]

    def describe_cluster(name):
        if name == "broken":
            raise ClientError({"Error": {"Code": "ServerException", "Message": "x"}}, "DescribeCluster")
        return {"cluster": {"version": {"prod": "1.24", "staging": "1.28"}[name]}}

    eks.describe_cluster.side_effect = describe_cluster

    router = EventRouter(
        inventory=EksInventoryProbe(eks_client=eks),
        self_version=mock_self_version,
        support_windows=mock_support_windows,
        notify=notify,
        config=app_config,
        today=lambda: TODAY,
    )
    await router.dispatch(Scheduled())

    alert = notify.await_args_list[0].args[0]
    assert "prod" in alert.body_lines[0]
    assert "staging" in alert.body_lines[1]
    assert not any("broken" in line for line in alert.body_lines)


@pytest.mark.asyncio
async def test_upgrade_alert_publishes_to_the_topic_it_advertises(
    mock_inventory, mock_self_version, mock_support_windows, app_config, monkeypatch
):
    """A router built with its own Settings publishes to that topic, not the global one."""
    from eks_notifier.config import settings
    from eks_notifier.notifier import notify_all
    from eks_notifier.router import EventRouter

    monkeypatch.setattr(settings, "topic_arn", "arn:aws:sns:us-east-1:123456789012:other")
    monkeypatch.setattr(settings, "slack_webhook_url", None)
    mock_self_version.latest_published_version.return_value = "2.0.0"
    sns = MagicMock()
    sns.publish.return_value = {"MessageId": "abc-123"}

    router = EventRouter(
        inventory=mock_inventory,
        self_version=mock_self_version,
        support_windows=mock_support_windows,
        notify=notify_all,
        config=app_config,
        today=lambda: TODAY,
    )
    with patch("eks_notifier.notifier.get_sns_client", return_value=sns):
        alert = await router.run_self_upgrade_check()

    assert f"【SnsArn】{app_config.topic_arn}" in alert.lines()
    sns.publish.assert_called_once_with(Message=alert.render(), TopicArn=app_config.topic_arn)
