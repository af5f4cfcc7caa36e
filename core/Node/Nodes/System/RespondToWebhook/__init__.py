"""
Respond to Webhook Node Package

Sends the response for a webhook-triggered workflow: JSON, text, items,
binary, JWT, redirect or no data, optionally streamed.
"""

from .node import RespondToWebhookNode
from .formatter import ResponseFormatter, FormatterResult, Responded, Streamed, Deferred, Failed
from .host import WebhookHost, WebhookResponse, ParentNode, ChunkType, StreamChunk
from .options import RespondOptions, HeaderEntry

__all__ = [
    'RespondToWebhookNode',
    'ResponseFormatter', 'FormatterResult', 'Responded', 'Streamed', 'Deferred', 'Failed',
    'WebhookHost', 'WebhookResponse', 'ParentNode', 'ChunkType', 'StreamChunk',
    'RespondOptions', 'HeaderEntry',
]
