"""Rebuild-and-restart of the served site."""

from .journal import DeploymentLogger
from .models import DeploymentAttempt, DeployStatus
from .trigger import DeploymentTrigger

__all__ = [
    "DeploymentAttempt",
    "DeployStatus",
    "DeploymentLogger",
    "DeploymentTrigger",
]
