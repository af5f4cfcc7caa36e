"""
Webhook Host Interface

Single Responsibility: Define the host capabilities the Respond to Webhook
node needs (transport, credentials, workflow graph) and the shapes exchanged
with them.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ....Core.Node.Core import BinaryData


class ChunkType(str, Enum):
    BEGIN = "begin"
    ITEM = "item"
    END = "end"


class StreamChunk(BaseModel):
    type: ChunkType
    item_index: int = 0
    content: Any = None


class ParentNode(BaseModel):
    """Upstream node as seen from the workflow graph."""

    name: str = ""
    type: str
    disabled: bool = False
    parameters: Dict[str, Any] = Field(default_factory=dict)


class WebhookResponse(BaseModel):
    """Finalised HTTP response handed to the webhook transport."""

    status_code: int = 200
    headers: Dict[str, Any] = Field(default_factory=dict)
    body: Any = None

    def to_json(self) -> Dict[str, Any]:
        """Shape used for the response output branch."""
        body = self.body.model_dump() if isinstance(self.body, BaseModel) else self.body
        return {
            "body": body,
            "headers": dict(self.headers),
            "statusCode": self.status_code,
        }


class WebhookHost(ABC):
    """
    Capabilities the executing workflow engine provides to the node.

    Transport calls are coroutines and are awaited one after another; the
    node never runs them concurrently.
    """

    @abstractmethod
    def get_parent_nodes(self, node_name: str) -> List[ParentNode]:
        """All upstream nodes of `node_name`, including their parameters."""

    @abstractmethod
    def is_streaming(self) -> bool:
        """Whether the open request accepts chunked delivery."""

    @abstractmethod
    async def send_chunk(self, chunk_type: ChunkType, item_index: int, content: Any = None) -> None:
        """Push one streaming chunk to the client."""

    @abstractmethod
    async def send_response(self, response: WebhookResponse) -> None:
        """Answer the open request with a complete response."""

    @abstractmethod
    async def put_execution_to_wait(self, wait_till: datetime) -> None:
        """Suspend the execution until `wait_till` or until it is resumed."""

    @abstractmethod
    async def get_credentials(self, name: str) -> Dict[str, Any]:
        """Decrypted credential data stored under `name`."""

    @abstractmethod
    def assert_binary_data(self, item_index: int, field_name: str) -> BinaryData:
        """
        Binary attachment `field_name` of input item `item_index`.

        Raises:
            NodeOperationError: If the item has no such attachment.
        """

    @abstractmethod
    def continue_on_fail(self) -> bool:
        """Whether node errors become output items instead of failing the run."""

    def get_binary_content(self, binary_id: str) -> Optional[bytes]:
        """Content of externally stored binary data, when the host can load it."""
        return None
