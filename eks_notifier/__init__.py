"""
EKS Notifier - end-of-support alerts for managed Kubernetes clusters.

Watches EKS cluster versions against the published support calendar and
watches its own deployment for newer releases, then reports to SNS.
"""

__version__ = "1.4.0"
