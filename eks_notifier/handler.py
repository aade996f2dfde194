"""
AWS Lambda entry point for EKS Notifier.

Each invocation decodes the trigger, builds fresh collaborators and runs
the router once. A failure to list clusters propagates so the invocation
is marked failed; the next scheduled tick tries again.
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

from .config import settings
from .events import parse_event
from .inventory import get_inventory_probe
from .notifier import notify_all
from .router import EventRouter
from .self_version import SelfVersionProbe
from .versions import SupportWindowSource

logger = structlog.get_logger(__name__)


def configure_logging(level: str = "info") -> None:
    """JSON log lines at ``level``, one per event, for CloudWatch."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def build_router() -> EventRouter:
    return EventRouter(
        inventory=get_inventory_probe(settings),
        self_version=SelfVersionProbe(config=settings),
        support_windows=SupportWindowSource(settings),
        notify=notify_all,
        config=settings,
    )


async def run(raw_event) -> None:
    event = parse_event(raw_event)
    await build_router().dispatch(event)


def handler(event, context=None):
    """Lambda handler."""
    configure_logging(settings.log_level)
    structlog.contextvars.clear_contextvars()
    request_id = getattr(context, "aws_request_id", None)
    if request_id:
        structlog.contextvars.bind_contextvars(request_id=request_id)

    logger.info("event_received", raw_event=event)
    try:
        asyncio.run(run(event))
    except Exception:
        logger.exception("invocation_failed", raw_event=event)
        raise
    return {"status": "ok"}


def main(argv=None) -> int:
    """Run one invocation locally: ``python -m eks_notifier [event.json]``."""
    parser = argparse.ArgumentParser(prog="eks_notifier", description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "event",
        nargs="?",
        help="Path to a JSON trigger payload; omit for a scheduled check",
    )
    args = parser.parse_args(argv)

    raw_event = {}
    if args.event:
        with open(args.event, encoding="utf-8") as fh:
            raw_event = json.load(fh)

    try:
        handler(raw_event)
    except Exception:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
