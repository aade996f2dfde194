"""
Configuration for EKS Notifier.
"""

from typing import Literal, Optional

from pydantic_settings import BaseSettings

DEPLOYMENT_PREFIX = "serverlessrepo-"


class Settings(BaseSettings):
    """Application settings from environment variables.

    Variable names match the ones the deployment template sets on the
    function, so no prefix is used.
    """

    # Deployment
    aws_region: str = "us-east-1"
    version: str = "0.0.0"
    stack_name: str = ""
    stack_id: str = ""

    # Notification - SNS
    topic_arn: Optional[str] = None

    # Notification - Slack mirror
    slack_webhook_url: Optional[str] = None

    # Serverless Application Repository
    application_id: str = ""
    application_id_cn: str = ""

    # Support-window document
    versions_source: Literal["remote", "static"] = "remote"
    versions_url: str = (
        "https://raw.githubusercontent.com/aws-samples/"
        "aws-serverless-notifier-plugins/main/eks/versions.json"
    )
    versions_url_cn: str = (
        "https://gcore.jsdelivr.net/gh/aws-samples/"
        "aws-serverless-notifier-plugins/eks/versions.json"
    )
    versions_timeout_seconds: float = 5.0

    # Cluster inventory
    inventory_backend: Literal["eks", "kubeconfig"] = "eks"
    kubeconfig_path: Optional[str] = None

    # Output
    notifier_language: Literal["en", "zh"] = "en"
    log_level: str = "info"

    @property
    def is_china(self) -> bool:
        return self.aws_region.startswith("cn")

    @property
    def app_name(self) -> str:
        """Stack name without the deployment prefix added by the repository."""
        return self.stack_name.replace(DEPLOYMENT_PREFIX, "", 1)

    @property
    def registry_application_id(self) -> str:
        return self.application_id_cn if self.is_china else self.application_id

    @property
    def support_windows_url(self) -> str:
        return self.versions_url_cn if self.is_china else self.versions_url


settings = Settings()
