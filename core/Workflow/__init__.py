"""Workflow-side helpers: node discovery and the in-process webhook host."""

from .node_registry import NodeRegistry
from .webhook_host import ApiWebhookHost

__all__ = [
    "NodeRegistry",
    "ApiWebhookHost",
]
