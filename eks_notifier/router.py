"""
Event router: decides which checks run for a trigger, and in what order.

Dispatch table (the self-upgrade check always runs before cluster work):

    CreateCluster       self-upgrade check, new-cluster risk alert
    DeleteCluster       deletion notice
    UPDATE_IN_PROGRESS  updating notice
    UPDATE_COMPLETE     updated notice, fleet check
    DELETE_IN_PROGRESS  deleting notice
    CREATE_COMPLETE     self-upgrade check, created notice, fleet check
    scheduled / other   self-upgrade check, fleet check
"""

from datetime import date, datetime, timezone
from typing import Any, Callable, Coroutine, Optional

import structlog

from .composer import (
    AlertMessage,
    LifecycleKind,
    compose_cluster_alert,
    compose_lifecycle_alert,
    compose_upgrade_alert,
)
from .config import Settings, settings
from .evaluator import evaluate
from .events import (
    ClusterEventName,
    ClusterLifecycle,
    Scheduled,
    StackLifecycle,
    StackStatus,
    TriggerEvent,
)
from .inventory import ClusterInventoryProbe
from .links import clusters_link, stack_link, upgrade_link
from .self_version import SelfVersionProbe
from .versions import InvocationContext, SupportWindowSource

logger = structlog.get_logger(__name__)

# called with the alert and the Settings it was composed from
NotifyCallback = Callable[[AlertMessage, Settings], Coroutine[Any, Any, Any]]

_STACK_NOTICES = {
    StackStatus.UPDATE_IN_PROGRESS: LifecycleKind.STACK_UPDATING,
    StackStatus.UPDATE_COMPLETE: LifecycleKind.STACK_UPDATED,
    StackStatus.DELETE_IN_PROGRESS: LifecycleKind.STACK_DELETING,
    StackStatus.CREATE_COMPLETE: LifecycleKind.STACK_CREATED,
}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class EventRouter:
    """Runs the checks for one trigger.

    Collaborators are injected so each invocation (and each test) gets its
    own. The router itself holds no state between dispatches; per-invocation
    state lives in the InvocationContext created by ``dispatch``.
    """

    def __init__(
        self,
        inventory: ClusterInventoryProbe,
        self_version: SelfVersionProbe,
        support_windows: SupportWindowSource,
        notify: NotifyCallback,
        config: Optional[Settings] = None,
        today: Callable[[], date] = utc_today,
    ):
        self._inventory = inventory
        self._self_version = self_version
        self._support_windows = support_windows
        self._notify = notify
        self._config = config or settings
        self._today = today

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def dispatch(self, event: TriggerEvent) -> None:
        ctx = InvocationContext(today=self._today())
        logger.info("dispatching_event", event=repr(event), today=ctx.today.isoformat())

        if isinstance(event, ClusterLifecycle):
            await self._on_cluster_event(event, ctx)
        elif isinstance(event, StackLifecycle):
            await self._on_stack_event(event, ctx)
        else:
            if not isinstance(event, Scheduled):
                logger.warning("unknown_event_type", event_type=type(event).__name__)
            await self.run_self_upgrade_check()
            await self.run_fleet_check(ctx)

    async def _on_cluster_event(self, event: ClusterLifecycle, ctx: InvocationContext) -> None:
        if event.event_name is ClusterEventName.CREATE_CLUSTER:
            await self.run_self_upgrade_check()
            await self.run_new_cluster_check(event, ctx)
        elif event.event_name is ClusterEventName.DELETE_CLUSTER:
            await self._send_lifecycle(
                LifecycleKind.CLUSTER_DELETING,
                {"name": event.cluster_name, "clusters_link": clusters_link(self._config)},
            )

    async def _on_stack_event(self, event: StackLifecycle, ctx: InvocationContext) -> None:
        if event.status is StackStatus.CREATE_COMPLETE:
            await self.run_self_upgrade_check()

        await self._send_lifecycle(
            _STACK_NOTICES[event.status],
            {
                "app_name": self._config.app_name,
                "version": self._config.version,
                "stack_link": stack_link(self._config),
            },
        )

        if event.status in (StackStatus.UPDATE_COMPLETE, StackStatus.CREATE_COMPLETE):
            await self.run_fleet_check(ctx)

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    async def run_fleet_check(self, ctx: InvocationContext) -> Optional[AlertMessage]:
        """Evaluate every cluster and send one combined alert.

        Raises whatever the inventory listing raises; per-cluster failures
        are handled by the probe.
        """
        table = await self._support_windows.load(ctx)
        if table is None:
            logger.warning("fleet_check_skipped", reason="support windows unavailable")
            return None

        clusters = await self._inventory.list_cluster_versions()
        results = [
            evaluate(c.version, table, ctx.today, subject_name=c.name) for c in clusters
        ]
        alert = compose_cluster_alert(
            results,
            clusters_link(self._config),
            region=self._config.aws_region,
            language=self._config.notifier_language,
        )
        logger.info(
            "fleet_check_complete",
            clusters=len(clusters),
            evaluated=sum(1 for r in results if r is not None),
            alerting=sum(1 for r in results if r is not None and r.needs_alert),
        )
        if alert is not None:
            await self._notify(alert, self._config)
        return alert

    async def run_new_cluster_check(
        self, event: ClusterLifecycle, ctx: InvocationContext
    ) -> Optional[AlertMessage]:
        """Warn when a cluster is being created with an outdated version."""
        if not event.requested_version:
            logger.info("create_cluster_without_version", cluster=event.cluster_name)
            return None

        table = await self._support_windows.load(ctx)
        result = evaluate(
            event.requested_version, table, ctx.today, subject_name=event.cluster_name
        )
        alert = compose_cluster_alert(
            [result],
            clusters_link(self._config),
            region=self._config.aws_region,
            language=self._config.notifier_language,
            new_cluster=True,
        )
        if alert is not None:
            await self._notify(alert, self._config)
        return alert

    async def run_self_upgrade_check(self) -> Optional[AlertMessage]:
        """Best effort: never raises, never blocks the cluster checks."""
        try:
            latest = await self._self_version.latest_published_version()
        except Exception as exc:
            logger.error("self_upgrade_check_failed", error=str(exc))
            return None

        alert = compose_upgrade_alert(
            self._config.version,
            latest,
            upgrade_link=upgrade_link(self._config),
            app_name=self._config.app_name,
            topic_arn=self._config.topic_arn,
            region=self._config.aws_region,
            language=self._config.notifier_language,
        )
        if alert is not None:
            await self._notify(alert, self._config)
        return alert

    async def _send_lifecycle(self, kind: LifecycleKind, details: dict) -> AlertMessage:
        alert = compose_lifecycle_alert(
            kind,
            details,
            region=self._config.aws_region,
            language=self._config.notifier_language,
        )
        await self._notify(alert, self._config)
        return alert
