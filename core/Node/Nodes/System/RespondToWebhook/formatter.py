"""
Response Formatter

Single Responsibility: Turn the input items and Respond to Webhook options
into one webhook response, and deliver it through the host.

Each response mode has one handler that fills a ResponseDraft. After the
handler runs, the draft is either handed to a waiting chat trigger, or
sandboxed if needed and sent (unless it was already streamed).
"""

import json
from typing import Any, Awaitable, Callable, Dict, List, Literal, Optional, Union

import structlog
from pydantic import BaseModel, Field

from log_safe import log_safe_output
from ....Core.Node.Core import NodeItem, NodeOperationError
from .constants import (
    CHAT_RESPONSE_MODE_RESPONSE_NODES,
    CHAT_TRIGGER_NODE_TYPE,
    DEFAULT_REDIRECT_STATUS_CODE,
    DEFAULT_STATUS_CODE,
    JWT_CREDENTIAL_NAME,
    PARENT_WEBHOOK_CHECK_VERSION,
    STREAMING_MODES,
    STREAMING_VERSION,
    WAIT_INDEFINITELY,
    WEBHOOK_NODE_TYPES,
    RespondWith,
)
from .host import ChunkType, ParentNode, WebhookHost, WebhookResponse
from .options import RespondOptions
from ._shared import (
    get_binary_response,
    has_response_output,
    is_html_rendered_content_type,
    sandbox_html_response,
    set_path,
    sign_token,
)

logger = structlog.get_logger(__name__)

NO_BINARY_DATA_MESSAGE = "No binary data exists on the first item!"


class Responded(BaseModel):
    kind: Literal["responded"] = "responded"
    response: WebhookResponse


class Streamed(BaseModel):
    """The payload went out as chunks; `response` is what would have been sent."""

    kind: Literal["streamed"] = "streamed"
    response: WebhookResponse


class Deferred(BaseModel):
    """Execution parked; a chat trigger delivers `message` later."""

    kind: Literal["deferred"] = "deferred"
    message: str


class Failed(BaseModel):
    """Error captured as items because the node continues on failure."""

    kind: Literal["failed"] = "failed"
    message: str


FormatterOutcome = Union[Responded, Streamed, Deferred, Failed]


class FormatterResult(BaseModel):
    branches: List[List[NodeItem]]
    outcome: FormatterOutcome = Field(discriminator="kind")


class ResponseDraft(BaseModel):
    """Response under construction by a mode handler."""

    mode: RespondWith
    headers: Dict[str, Any]
    status_code: int
    should_stream: bool
    body: Any = None

    @property
    def content_type(self) -> Optional[str]:
        return self.headers.get("content-type")

    @property
    def has_html_content_type(self) -> bool:
        return is_html_rendered_content_type(self.content_type)

    def to_response(self) -> WebhookResponse:
        return WebhookResponse(status_code=self.status_code, headers=self.headers, body=self.body)


def _has_body(body: Any) -> bool:
    return body not in (None, "", 0, False)


def chat_message_from_body(body: Any) -> str:
    """
    Message for a chat trigger: the first of output/text/message, else the
    whole object as indented JSON (also when the extracted value is empty).
    Lists and scalars give an empty message.
    """
    if not isinstance(body, dict):
        return ""
    for key in ("output", "text", "message"):
        value = body.get(key)
        if value is not None:
            message = value if isinstance(value, str) else json.dumps(value, default=str)
            if message:
                return message
            break
    if body:
        return json.dumps(body, indent=2, default=str)
    return ""


class ResponseFormatter:
    """
    Builds and delivers the webhook response for one execution.

    Args:
        host: Host capabilities (graph, credentials, transport).
        node_name: Workflow name of the responding node, used to find parents.
        node_id: Node id for logs and errors.
    """

    def __init__(self, host: WebhookHost, node_name: str, node_id: Optional[str] = None):
        self.host = host
        self.node_name = node_name
        self.node_id = node_id
        self._handlers: Dict[RespondWith, Callable[[List[NodeItem], RespondOptions, ResponseDraft], Awaitable[None]]] = {
            RespondWith.ALL_INCOMING_ITEMS: self._respond_all_items,
            RespondWith.BINARY: self._respond_binary,
            RespondWith.FIRST_INCOMING_ITEM: self._respond_first_item,
            RespondWith.JSON: self._respond_json,
            RespondWith.JWT: self._respond_jwt,
            RespondWith.NO_DATA: self._respond_no_data,
            RespondWith.REDIRECT: self._respond_redirect,
            RespondWith.TEXT: self._respond_text,
        }

    def _error(self, message: str, description: Optional[str] = None) -> NodeOperationError:
        return NodeOperationError(message, description=description, node_id=self.node_id)

    async def execute(self, items: List[NodeItem], options: RespondOptions) -> FormatterResult:
        """
        Respond to the webhook.

        Returns the output branches and what happened to the response.

        Raises:
            NodeOperationError: On any failure, unless the host continues on fail.
        """
        try:
            parents = self.host.get_parent_nodes(self.node_name)
            self._check_webhook_parent(parents, options.version)

            mode = self._resolve_mode(options.respond_with)
            draft = ResponseDraft(
                mode=mode,
                headers=options.build_headers(),
                status_code=options.response_code or DEFAULT_STATUS_CODE,
                should_stream=self._should_stream(mode, options),
            )
            await self._handlers[mode](items, options, draft)

            chat_trigger = self._find_chat_trigger(parents)
            if chat_trigger is not None:
                return await self._defer_to_chat(draft)

            if draft.has_html_content_type and mode not in (RespondWith.TEXT, RespondWith.BINARY) and _has_body(draft.body):
                draft.body = sandbox_html_response(json.dumps(draft.body, default=str, ensure_ascii=False))

            response = draft.to_response()
            if draft.should_stream:
                outcome: FormatterOutcome = Streamed(response=response)
            else:
                await self.host.send_response(response)
                outcome = Responded(response=response)

            logger.info(
                "Webhook response delivered",
                node_id=self.node_id,
                respond_with=mode.value,
                status_code=response.status_code,
                streamed=draft.should_stream,
                body=log_safe_output(response.body),
            )
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            if self.host.continue_on_fail():
                logger.warning(
                    "Respond to Webhook failed, continuing",
                    node_id=self.node_id,
                    error=log_safe_output(message),
                )
                return FormatterResult(branches=[self._error_items(items, message)], outcome=Failed(message=message))
            logger.error(
                "Respond to Webhook failed",
                node_id=self.node_id,
                error=log_safe_output(message),
                exc_info=True,
            )
            raise

        branches = [list(items)]
        if has_response_output(options.version, options.enable_response_output):
            branches.append([NodeItem(json={"response": response.to_json()})])
        return FormatterResult(branches=branches, outcome=outcome)

    def _check_webhook_parent(self, parents: List[ParentNode], version: float) -> None:
        if version < PARENT_WEBHOOK_CHECK_VERSION:
            return
        if not any(parent.type in WEBHOOK_NODE_TYPES for parent in parents):
            raise self._error(
                "No Webhook node found in the workflow",
                description=(
                    'Insert a Webhook node to your workflow and set the "Respond" '
                    'parameter to "Using Respond to Webhook Node"'
                ),
            )

    def _resolve_mode(self, respond_with: str) -> RespondWith:
        try:
            return RespondWith(respond_with)
        except ValueError:
            raise self._error(f'The Response Data option "{respond_with}" is not supported!') from None

    def _should_stream(self, mode: RespondWith, options: RespondOptions) -> bool:
        return (
            options.version >= STREAMING_VERSION
            and mode in STREAMING_MODES
            and options.streaming_enabled
            and self.host.is_streaming()
        )

    async def _stream_item(self, item_index: int, content: Any) -> None:
        await self.host.send_chunk(ChunkType.BEGIN, item_index)
        await self.host.send_chunk(ChunkType.ITEM, item_index, content)
        await self.host.send_chunk(ChunkType.END, item_index)

    async def _respond_json(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        raw = options.response_body
        if isinstance(raw, str):
            if raw:
                try:
                    draft.body = json.loads(raw)
                except json.JSONDecodeError as e:
                    raise self._error(
                        "Invalid JSON in 'Response Body' field",
                        description="Check that the syntax of the JSON in the 'Response Body' parameter is valid",
                    ) from e
        elif raw is not None:
            draft.body = raw

        if draft.should_stream:
            await self._stream_item(0, draft.body)

    async def _respond_jwt(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        try:
            credentials = await self.host.get_credentials(JWT_CREDENTIAL_NAME)
            token = sign_token(self._jwt_payload(options.payload), credentials)
        except Exception as e:
            raise self._error("Error signing JWT token", description=str(e)) from e

        draft.body = {"token": token}
        if draft.should_stream:
            await self._stream_item(0, draft.body)

    @staticmethod
    def _jwt_payload(raw: Any) -> Dict[str, Any]:
        if raw is None or raw == "":
            return {}
        payload = json.loads(raw) if isinstance(raw, str) else raw
        if not isinstance(payload, dict):
            raise ValueError("JWT payload must be a JSON object")
        return payload

    async def _respond_all_items(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        respond_items = []
        for index, item in enumerate(items):
            if draft.should_stream:
                await self._stream_item(index, item.json_data)
            respond_items.append(item.json_data)
        draft.body = set_path(options.response_key, respond_items) if options.response_key else respond_items

    async def _respond_first_item(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        if not items:
            raise self._error("No input item to respond with")
        first = items[0].json_data
        draft.body = set_path(options.response_key, first) if options.response_key else first
        if draft.should_stream:
            await self._stream_item(0, first)

    async def _respond_text(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        raw = options.response_body
        if raw is None:
            raw = ""
        elif not isinstance(raw, str):
            raw = json.dumps(raw, default=str)

        # A browser renders a body without content-type as HTML too
        if draft.has_html_content_type or not draft.content_type:
            draft.body = sandbox_html_response(raw)
        else:
            draft.body = raw

        if draft.should_stream:
            await self._stream_item(0, raw)

    async def _respond_binary(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        if not items or items[0].binary is None:
            raise self._error(NO_BINARY_DATA_MESSAGE)

        if options.response_data_source == "set":
            field_name = options.input_field_name
        else:
            binary_keys = list(items[0].binary.keys())
            if not binary_keys:
                raise self._error(NO_BINARY_DATA_MESSAGE)
            field_name = binary_keys[0]

        binary_data = self.host.assert_binary_data(0, field_name)
        draft.body = get_binary_response(binary_data, draft.headers)

    async def _respond_redirect(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        draft.headers["location"] = options.redirect_url
        draft.status_code = (
            options.response_code if options.response_code is not None else DEFAULT_REDIRECT_STATUS_CODE
        )

    async def _respond_no_data(self, items: List[NodeItem], options: RespondOptions, draft: ResponseDraft) -> None:
        draft.body = None

    @staticmethod
    def _find_chat_trigger(parents: List[ParentNode]) -> Optional[ParentNode]:
        """Enabled chat trigger that leaves replies to response nodes, if any."""
        for parent in parents:
            if parent.type != CHAT_TRIGGER_NODE_TYPE or parent.disabled:
                continue
            options = parent.parameters.get("options") or {}
            if options.get("responseMode") == CHAT_RESPONSE_MODE_RESPONSE_NODES:
                return parent
            return None
        return None

    async def _defer_to_chat(self, draft: ResponseDraft) -> FormatterResult:
        message = chat_message_from_body(draft.body)
        await self.host.put_execution_to_wait(WAIT_INDEFINITELY)
        logger.info(
            "Execution waiting for chat delivery",
            node_id=self.node_id,
            message=log_safe_output(message),
        )
        return FormatterResult(
            branches=[[NodeItem(json={}, send_message=message)]],
            outcome=Deferred(message=message),
        )

    @staticmethod
    def _error_items(items: List[NodeItem], message: str) -> List[NodeItem]:
        if not items:
            return [NodeItem(json={"error": message})]
        return [NodeItem(json={"error": message}, paired_item=index) for index in range(len(items))]
