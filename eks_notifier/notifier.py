"""
Notification delivery for EKS Notifier.

Publishes rendered alerts to the SNS topic and, when configured, mirrors
them to a Slack webhook. All senders are fire-and-forget: errors are
logged, never raised.
"""

import asyncio
from datetime import datetime, timezone
from typing import Optional

import boto3
import httpx
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from .composer import AlertMessage
from .config import Settings, settings

logger = structlog.get_logger(__name__)

SLACK_COLOR = "#ff9900"


async def send_sns(alert: AlertMessage, config: Optional[Settings] = None) -> bool:
    """Publish the rendered alert to the configured SNS topic."""
    cfg = config or settings
    if not cfg.topic_arn:
        logger.debug("topic_arn not configured, skipping")
        return False

    try:
        result = await asyncio.to_thread(
            get_sns_client(cfg.aws_region).publish,
            Message=alert.render(),
            TopicArn=cfg.topic_arn,
        )
    except (BotoCoreError, ClientError) as exc:
        logger.error("sns_publish_failed", title=alert.title, error=str(exc))
        return False

    logger.info("sns_published", title=alert.title, message_id=result.get("MessageId"))
    return True


async def send_slack(alert: AlertMessage, config: Optional[Settings] = None) -> bool:
    """Mirror the alert to Slack via webhook."""
    cfg = config or settings
    if not cfg.slack_webhook_url:
        logger.debug("slack_webhook_url not configured, skipping")
        return False

    payload = {
        "attachments": [
            {
                "color": SLACK_COLOR,
                "title": alert.title,
                "text": "\n".join(alert.lines()[2:]),
                "ts": int(datetime.now(timezone.utc).timestamp()),
            }
        ],
    }

    try:
        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(cfg.slack_webhook_url, json=payload)
            resp.raise_for_status()
            logger.info("slack_notification_sent", title=alert.title)
            return True
    except Exception as exc:
        logger.error("slack_notification_failed", error=str(exc))
        return False


async def notify_all(alert: AlertMessage, config: Optional[Settings] = None) -> dict[str, bool]:
    """Dispatch an alert to every configured channel.

    Channels come from ``config`` (the global settings by default), the same
    object the alert was composed from.

    Returns:
        Dict mapping channel name to success/failure boolean.
    """
    cfg = config or settings
    results: dict[str, bool] = {}

    if cfg.topic_arn:
        results["sns"] = await send_sns(alert, cfg)

    if cfg.slack_webhook_url:
        results["slack"] = await send_slack(alert, cfg)

    logger.info(
        "notify_all_dispatched",
        title=alert.title,
        channels=list(results.keys()),
        successes=sum(1 for v in results.values() if v),
    )

    return results


# ---------------------------------------------------------------------------
# SNS clients
# ---------------------------------------------------------------------------

_sns_clients: dict[str, object] = {}


def get_sns_client(region: Optional[str] = None):
    """Get or create the SNS client for ``region`` (the configured region by default)."""
    region = region or settings.aws_region
    if region not in _sns_clients:
        _sns_clients[region] = boto3.client("sns", region_name=region)
    return _sns_clients[region]
