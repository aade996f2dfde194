"""
Trigger event decoding.

EventBridge delivers three kinds of triggers: CloudTrail-backed EKS API
calls, CloudFormation stack status changes for the notifier's own stack,
and the scheduled rule. Anything that does not decode cleanly into one of
the first two is treated as a scheduled tick.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

import structlog

logger = structlog.get_logger(__name__)

CLUSTER_LIFECYCLE_SOURCE = "aws.eks"
STACK_LIFECYCLE_SOURCE = "aws.cloudformation"


class ClusterEventName(str, Enum):
    CREATE_CLUSTER = "CreateCluster"
    DELETE_CLUSTER = "DeleteCluster"


class StackStatus(str, Enum):
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    CREATE_COMPLETE = "CREATE_COMPLETE"


@dataclass(frozen=True)
class ClusterLifecycle:
    event_name: ClusterEventName
    cluster_name: str
    requested_version: Optional[str] = None


@dataclass(frozen=True)
class StackLifecycle:
    status: StackStatus


@dataclass(frozen=True)
class Scheduled:
    pass


TriggerEvent = Union[ClusterLifecycle, StackLifecycle, Scheduled]


def _decode_cluster_event(detail: dict) -> ClusterLifecycle:
    params = detail.get("requestParameters") or {}
    name = params.get("name")
    if not isinstance(name, str) or not name:
        raise ValueError("requestParameters.name is missing")
    version = params.get("version")
    return ClusterLifecycle(
        event_name=ClusterEventName(detail.get("eventName")),
        cluster_name=name,
        requested_version=str(version) if version is not None else None,
    )


def _decode_stack_event(detail: dict) -> StackLifecycle:
    status = (detail.get("status-details") or {}).get("status")
    return StackLifecycle(status=StackStatus(status))


def parse_event(raw: Any) -> TriggerEvent:
    """Decode a raw trigger payload. Never raises."""
    if not isinstance(raw, dict):
        return Scheduled()

    source = raw.get("source")
    detail = raw.get("detail")
    if source not in (CLUSTER_LIFECYCLE_SOURCE, STACK_LIFECYCLE_SOURCE):
        return Scheduled()

    try:
        if not isinstance(detail, dict):
            raise ValueError("detail is not an object")
        if source == CLUSTER_LIFECYCLE_SOURCE:
            return _decode_cluster_event(detail)
        return _decode_stack_event(detail)
    except (ValueError, AttributeError) as exc:
        logger.warning("unrecognized_event_treated_as_scheduled", source=source, error=str(exc))
        return Scheduled()
