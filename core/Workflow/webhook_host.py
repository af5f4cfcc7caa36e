"""
API Webhook Host

Single Responsibility: Provide WebhookHost capabilities for one in-process
request/response execution, and render what the node sent as a Django
response.

The host records every chunk, the final response and any wait request. The
view that owns the HTTP request calls to_django_response() once the
workflow run returns.
"""

import json
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

import structlog

from config.django_setup import ensure_django_configured
from log_safe import log_safe_output, redact_headers
from Node.Core.Node.Core import BinaryData, NodeItem, NodeOperationError
from Node.Nodes.System.RespondToWebhook.host import (
    ChunkType,
    ParentNode,
    StreamChunk,
    WebhookHost,
    WebhookResponse,
)
from Node.Nodes.System.RespondToWebhook._shared import BinaryReference

ensure_django_configured()

from django.http import HttpResponse, StreamingHttpResponse  # noqa: E402

logger = structlog.get_logger(__name__)

STREAM_CONTENT_TYPE = "application/x-ndjson"
JSON_CONTENT_TYPE = "application/json; charset=utf-8"
TEXT_CONTENT_TYPE = "text/html; charset=utf-8"


class ApiWebhookHost(WebhookHost):
    """
    WebhookHost for a single API-mode execution.

    Args:
        items: Input items of the responding node (for binary lookups).
        parent_nodes: Upstream nodes, as ParentNode or plain dicts.
        credentials: Credential data keyed by credential name.
        streaming: Whether the client accepts a chunked response.
        continue_on_fail: Whether node errors become output items.
        binary_store: Content of externally stored binary data, keyed by id.
    """

    def __init__(
        self,
        items: Optional[Iterable[NodeItem]] = None,
        parent_nodes: Optional[Iterable[Union[ParentNode, Dict[str, Any]]]] = None,
        credentials: Optional[Dict[str, Dict[str, Any]]] = None,
        streaming: bool = False,
        continue_on_fail: bool = False,
        binary_store: Optional[Dict[str, bytes]] = None,
    ):
        self.items: List[NodeItem] = list(items or [])
        self.parent_nodes: List[ParentNode] = [
            node if isinstance(node, ParentNode) else ParentNode.model_validate(node)
            for node in (parent_nodes or [])
        ]
        self.credentials = dict(credentials or {})
        self.streaming = streaming
        self._continue_on_fail = continue_on_fail
        self.binary_store = dict(binary_store or {})

        self.chunks: List[StreamChunk] = []
        self.response: Optional[WebhookResponse] = None
        self.wait_till: Optional[datetime] = None

    def get_parent_nodes(self, node_name: str) -> List[ParentNode]:
        return list(self.parent_nodes)

    def is_streaming(self) -> bool:
        return self.streaming

    async def send_chunk(self, chunk_type: ChunkType, item_index: int, content: Any = None) -> None:
        if self.response is not None:
            raise RuntimeError("Cannot stream after the response was sent")
        self.chunks.append(StreamChunk(type=chunk_type, item_index=item_index, content=content))

    async def send_response(self, response: WebhookResponse) -> None:
        if self.response is not None:
            raise RuntimeError("Response already sent for this execution")
        self.response = response
        logger.debug(
            "Webhook response recorded",
            status_code=response.status_code,
            headers=redact_headers(response.headers),
            body=log_safe_output(response.body),
        )

    async def put_execution_to_wait(self, wait_till: datetime) -> None:
        self.wait_till = wait_till

    async def get_credentials(self, name: str) -> Dict[str, Any]:
        if name not in self.credentials:
            raise NodeOperationError(f'Node does not have any credentials set for "{name}"')
        return dict(self.credentials[name])

    def assert_binary_data(self, item_index: int, field_name: str) -> BinaryData:
        binary = None
        if 0 <= item_index < len(self.items):
            binary = (self.items[item_index].binary or {}).get(field_name)
        if binary is None:
            raise NodeOperationError(
                f"This operation expects the node's input data to contain a binary file "
                f"'{field_name}', but none was found [item {item_index}]"
            )
        return binary

    def continue_on_fail(self) -> bool:
        return self._continue_on_fail

    def get_binary_content(self, binary_id: str) -> Optional[bytes]:
        return self.binary_store.get(binary_id)

    @property
    def deferred(self) -> bool:
        return self.wait_till is not None and self.response is None

    @property
    def streamed(self) -> bool:
        return bool(self.chunks) and self.response is None

    def _iter_chunks(self) -> Iterator[bytes]:
        for chunk in self.chunks:
            yield (json.dumps(chunk.model_dump(mode="json"), default=str) + "\n").encode("utf-8")

    def _render_body(self, body: Any):
        """Encoded body and the content type to use when none is configured."""
        if body is None:
            return b"", None
        if isinstance(body, BinaryReference):
            content = self.get_binary_content(body.id)
            if content is None:
                raise NodeOperationError(f"Binary data '{body.id}' could not be loaded")
            return content, body.mime_type
        if isinstance(body, (bytes, bytearray)):
            return bytes(body), "application/octet-stream"
        if isinstance(body, str):
            return body.encode("utf-8"), TEXT_CONTENT_TYPE
        return json.dumps(body, default=str).encode("utf-8"), JSON_CONTENT_TYPE

    def to_django_response(self) -> Optional[HttpResponse]:
        """
        HTTP response for what the node delivered.

        Returns None when nothing is owed to the client yet (the execution
        waits for a chat delivery, or the node has not run).
        """
        if self.response is None:
            if self.chunks:
                return StreamingHttpResponse(self._iter_chunks(), content_type=STREAM_CONTENT_TYPE)
            return None

        content, default_content_type = self._render_body(self.response.body)
        http_response = HttpResponse(
            content,
            status=self.response.status_code,
            content_type=self.response.headers.get("content-type") or default_content_type,
        )
        for name, value in self.response.headers.items():
            if value is None or name == "content-type":
                continue
            http_response[name] = str(value)
        return http_response
