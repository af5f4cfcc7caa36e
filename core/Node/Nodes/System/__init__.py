"""
System Nodes Package

Provides system-level nodes that talk to the workflow's HTTP transport.
"""

from .RespondToWebhook import RespondToWebhookNode

__all__ = ['RespondToWebhookNode']
