"""
Respond to Webhook Node

Single Responsibility: Answer the HTTP request that started the workflow.

The node reads its parameters from RespondToWebhookForm, hands the input
items to ResponseFormatter and returns the formatter's output branches.
Transport (chunks, final response, waiting) goes through the injected
WebhookHost.
"""

from typing import List, Optional

import structlog

from ....Core.Node.Core import BlockingNode, NodeOutput, PoolType
from ....Core.Form import BaseForm
from .constants import DEFAULT_VERSION, SUPPORTED_VERSIONS
from .form import RespondToWebhookForm
from .formatter import Deferred, FormatterResult, ResponseFormatter
from .host import WebhookHost
from ._shared import configured_outputs

logger = structlog.get_logger(__name__)


class RespondToWebhookNode(BlockingNode):
    """
    BlockingNode that sends the webhook response.

    Output:
    - items: the input items (main branch), or error items when the node
      continues on failure, or a single send_message item when a chat
      trigger delivers the reply.
    - branches["response"]: [{"response": {...}}] when the response branch
      is enabled (always on version 1.3).
    """

    def __init__(self, config, host: Optional[WebhookHost] = None):
        super().__init__(config)
        self.host = host

    @classmethod
    def identifier(cls) -> str:
        """Unique identifier for this node type."""
        return "respond-to-webhook"

    @classmethod
    def supported_versions(cls) -> List[float]:
        return list(SUPPORTED_VERSIONS)

    @classmethod
    def default_version(cls) -> float:
        return DEFAULT_VERSION

    @property
    def label(self) -> str:
        return "Respond to Webhook"

    @property
    def description(self) -> str:
        return "Returns data for Webhook. Requires a webhook trigger set to respond using this node."

    @property
    def icon(self) -> str:
        return "webhook"

    @property
    def execution_pool(self) -> PoolType:
        """Use ASYNC pool - all work is host I/O."""
        return PoolType.ASYNC

    @property
    def output_ports(self) -> list:
        enable_response_output = self.form.fields['enable_response_output'].to_python(
            self.form.get_field_value('enable_response_output')
        )
        return configured_outputs(self.version, bool(enable_response_output))

    def get_form(self) -> Optional[BaseForm]:
        return RespondToWebhookForm()

    def bind_host(self, host: WebhookHost) -> None:
        """Attach the host of the execution about to run."""
        self.host = host

    async def execute(self, node_data: NodeOutput) -> NodeOutput:
        """
        Build and deliver the webhook response for the incoming items.
        """
        if self.host is None:
            raise ValueError(f"Node {self.node_config.id} has no webhook host bound")

        options = self.form.to_options(self.version)
        formatter = ResponseFormatter(self.host, node_name=self.name, node_id=self.node_config.id)
        result = await formatter.execute(node_data.get_items(), options)

        logger.info(
            "Respond to Webhook executed",
            node_id=self.node_config.id,
            outcome=result.outcome.kind,
            branches=len(result.branches),
            execution_count=self.execution_count + 1,
        )
        return self._to_node_output(node_data, result)

    def _to_node_output(self, node_data: NodeOutput, result: FormatterResult) -> NodeOutput:
        branches = {"default": result.branches[0]}
        if len(result.branches) > 1:
            branches["response"] = result.branches[1]

        metadata = {
            "sourceNodeID": self.node_config.id,
            "sourceNodeName": self.node_config.type,
            "operation": "respond_to_webhook",
            "outcome": result.outcome.kind,
        }
        if isinstance(result.outcome, Deferred):
            metadata["__execution_waiting__"] = True

        return NodeOutput(
            id=node_data.id,
            data=node_data.data,
            items=result.branches[0],
            branches=branches,
            metadata=metadata,
        )

    async def on_message(self, node_data: NodeOutput) -> NodeOutput:
        """Resumed after a chat delivery: pass the input items on unchanged."""
        items = node_data.get_items()
        return NodeOutput(
            id=node_data.id,
            data=node_data.data,
            items=items,
            branches={"default": items},
            metadata={
                "sourceNodeID": self.node_config.id,
                "sourceNodeName": self.node_config.type,
                "operation": "respond_to_webhook_resume",
            },
        )
