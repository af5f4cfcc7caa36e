from typing import Any, Dict, List, Optional, Union
from uuid import uuid4
from pydantic import BaseModel, Field
from enum import Enum


class PoolType(Enum):
    ASYNC = "ASYNC"
    THREAD = "THREAD"
    PROCESS = "PROCESS"


class NodeConfigData(BaseModel):
    """
    Data for the node config.
    """
    form: Dict[str, Any] = Field(
        default=None, description="Form data for the node"
    )
    config: Dict[str, Any] = Field(
        default=None, description="Config data for the node (e.g. type version)"
    )


class NodeConfig(BaseModel):
    """
    Static initialization/config settings for a node.
    """

    id: str = Field(..., description="Unique identifier for the node")
    type: str = Field(..., description="Node type identifier")
    name: Optional[str] = Field(
        default=None, description="Display name of the node inside its workflow"
    )
    data: NodeConfigData = Field(
        default=None, description="Data for the node"
    )

    def get_config_value(self, key: str, default: Any = None) -> Any:
        if self.data is None or not self.data.config:
            return default
        return self.data.config.get(key, default)


class BinaryData(BaseModel):
    """
    Binary attachment carried by an item.

    Either inline (base64 in `data`) or stored elsewhere and referenced by `id`.
    """

    data: str = Field(default="", description="Base64 encoded content")
    mime_type: str = Field(default="application/octet-stream")
    file_name: Optional[str] = None
    file_size: Optional[int] = Field(default=None, description="Size in bytes, when known")
    id: Optional[str] = Field(default=None, description="Reference to externally stored data")


class NodeItem(BaseModel):
    """
    A single workflow item: a JSON object with optional named binary attachments.
    """

    json_data: Dict[str, Any] = Field(default_factory=dict, alias="json")
    binary: Optional[Dict[str, BinaryData]] = None
    paired_item: Optional[int] = Field(
        default=None, description="Index of the input item this item derives from"
    )
    send_message: Optional[str] = Field(
        default=None, description="Message handed to a chat trigger instead of an HTTP response"
    )

    model_config = {"populate_by_name": True}


class NodeOutputMetaData(BaseModel):
    """
    Metadata for the node output.
    """

    sourceNodeID: Optional[str] = Field(
        ..., description="ID of the node that produced the output"
    )
    destinationNodeIDs: Optional[List[str]] = Field(
        ..., description="IDs of the nodes that will receive the output"
    )


class NodeOutput(BaseModel):
    """
    Runtime payload for the iteration.

    `items` is the ordered item list on the main branch. Nodes with more than
    one output port put every branch in `branches`, keyed by port id.
    """

    id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this unit of work",
    )
    data: Dict[str, Any] = Field(default_factory=dict, description="Main data payload")
    items: List[NodeItem] = Field(default_factory=list, description="Ordered workflow items")
    branches: Dict[str, List[NodeItem]] = Field(
        default_factory=dict, description="Items per output port"
    )

    metadata: Optional[Union[NodeOutputMetaData, Dict[str, Any]]] = Field(
        default_factory=dict, description="Optional metadata"
    )

    def get_items(self) -> List[NodeItem]:
        """Items of this payload; a bare `data` dict counts as a single item."""
        if self.items:
            return list(self.items)
        return [NodeItem(json=dict(self.data))]

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


class ExecutionCompleted(NodeOutput):
    """
    Sentinel signal indicating that the workflow execution should stop/cleanup.
    Unlike normal NodeOutput, this payload triggers cleanup() instead of execute().
    """
    metadata: Optional[Union[NodeOutputMetaData, Dict[str, Any]]] = Field(
        default_factory=lambda: {"__execution_completed__": True}
    )
