"""AWS console links embedded in alert messages."""

from typing import Optional

from .config import Settings, settings

DOC_LINK = "https://docs.aws.amazon.com/eks/latest/userguide/kubernetes-versions.html"


def _console_host(cfg: Settings) -> str:
    if cfg.is_china:
        return f"https://{cfg.aws_region}.console.amazonaws.cn"
    return f"https://{cfg.aws_region}.console.aws.amazon.com"


def clusters_link(cfg: Optional[Settings] = None) -> str:
    cfg = cfg or settings
    return f"{_console_host(cfg)}/eks/home?region={cfg.aws_region}#/clusters"


def stack_link(cfg: Optional[Settings] = None) -> str:
    cfg = cfg or settings
    return (
        f"{_console_host(cfg)}/cloudformation/home?region={cfg.aws_region}"
        f"#/stacks/events?filteringText=&filteringStatus=active&viewNested=true"
        f"&stackId={cfg.stack_id}"
    )


def upgrade_link(cfg: Optional[Settings] = None) -> str:
    """Serverless Application Repository deploy page for the latest release."""
    cfg = cfg or settings
    host = "https://console.amazonaws.cn" if cfg.is_china else _console_host(cfg)
    return (
        f"{host}/lambda/home?region={cfg.aws_region}"
        f"#/create/app?applicationId={cfg.registry_application_id}"
    )
