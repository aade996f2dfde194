"""
Alert composition.

Turns evaluation results and lifecycle notices into AlertMessage objects.
Compose functions return None when there is nothing worth sending; an
AlertMessage always has at least one body line.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from .evaluator import Classification, EvaluationResult
from .links import DOC_LINK
from .messages import SEPARATOR, t
from .self_version import compare_versions


@dataclass
class AlertMessage:
    """A composed alert, ready for the notifier."""

    title: str
    body_lines: list[str]
    region: str
    language: str = "en"
    links: dict[str, str] = field(default_factory=dict)

    def lines(self) -> list[str]:
        header = [f"【{self.title}】", SEPARATOR, t(self.language, "region", region=self.region)]
        return header + self.body_lines

    def render(self) -> str:
        return "\n".join(self.lines())


class LifecycleKind(str, Enum):
    CLUSTER_DELETING = "cluster_deleting"
    STACK_UPDATING = "stack_updating"
    STACK_UPDATED = "stack_updated"
    STACK_DELETING = "stack_deleting"
    STACK_CREATED = "stack_created"


def _cluster_line(result: EvaluationResult, prefix: str, language: str) -> str:
    if result.classification is Classification.EXPIRED:
        return t(
            language,
            f"{prefix}_expired",
            name=result.subject_name,
            version=result.version,
            days=abs(result.days_left),
        )
    return t(
        language,
        f"{prefix}_expiring",
        name=result.subject_name,
        version=result.version,
        end=result.end_of_support.isoformat(),
        days=result.days_left,
    )


def compose_cluster_alert(
    results: Iterable[Optional[EvaluationResult]],
    list_link: str,
    *,
    region: str,
    language: str = "en",
    new_cluster: bool = False,
) -> Optional[AlertMessage]:
    """Compose the end-of-support alert for one or more clusters.

    Results keep their input order. Healthy results and None entries (versions
    with no support window) are dropped; if nothing remains the alert is
    suppressed.

    Args:
        results: Evaluation results in cluster-listing order.
        list_link: Console link to the cluster list.
        region: Operating region shown in the header.
        language: Catalog language ("en" or "zh").
        new_cluster: Use the CreateCluster phrasing and title.
    """
    prefix = "new_cluster" if new_cluster else "fleet"
    body = [
        _cluster_line(r, prefix, language)
        for r in results
        if r is not None and r.needs_alert
    ]
    if not body:
        return None

    body += [
        SEPARATOR,
        t(language, "cluster_list", link=list_link),
        t(language, "doc", link=DOC_LINK),
    ]
    return AlertMessage(
        title=t(language, f"{prefix}_title"),
        body_lines=body,
        region=region,
        language=language,
        links={"clusters": list_link, "doc": DOC_LINK},
    )


def compose_upgrade_alert(
    current: str,
    latest: Optional[str],
    *,
    upgrade_link: str,
    app_name: str,
    topic_arn: Optional[str],
    region: str,
    language: str = "en",
) -> Optional[AlertMessage]:
    """Compose the self-upgrade notice, or None when already up to date."""
    if latest is None or compare_versions(current, latest) >= 0:
        return None

    body = [
        t(language, "upgrade_available", latest=latest, current=current, link=upgrade_link),
        SEPARATOR,
        t(language, "upgrade_copy_variables"),
        t(language, "upgrade_app_name", app_name=app_name),
        t(language, "upgrade_topic_arn", topic_arn=topic_arn or ""),
    ]
    return AlertMessage(
        title=t(language, "upgrade_title"),
        body_lines=body,
        region=region,
        language=language,
        links={"upgrade": upgrade_link},
    )


def compose_lifecycle_alert(
    kind: LifecycleKind,
    details: dict,
    *,
    region: str,
    language: str = "en",
) -> AlertMessage:
    """Compose a one-line lifecycle notice.

    ``details`` supplies the template fields for ``kind`` (``name`` for
    cluster deletion, ``app_name`` and ``version`` for stack notices) plus
    ``clusters_link`` or ``stack_link`` where the notice carries a link.
    """
    fields = {k: v for k, v in details.items() if not k.endswith("_link")}
    body = [t(language, kind.value, **fields)]
    links: dict[str, str] = {}

    if kind is LifecycleKind.CLUSTER_DELETING:
        links["clusters"] = details["clusters_link"]
        body += [SEPARATOR, t(language, "cluster_list", link=links["clusters"])]
    elif kind in (LifecycleKind.STACK_UPDATING, LifecycleKind.STACK_DELETING):
        links["stack"] = details["stack_link"]
        body.append(t(language, "processing", link=links["stack"]))

    return AlertMessage(
        title=t(language, f"{kind.value}_title"),
        body_lines=body,
        region=region,
        language=language,
        links=links,
    )
