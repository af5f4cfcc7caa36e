"""
Unit tests for ResponseFormatter: response modes, streaming, chat hand-off,
failure policy and version gating.
"""

import base64

import jwt

import pytest

from Node.Core.Node.Core import BinaryData, NodeItem, NodeOperationError
from Node.Nodes.System.RespondToWebhook import ResponseFormatter, RespondOptions
from Node.Nodes.System.RespondToWebhook.constants import WAIT_INDEFINITELY
from Node.Nodes.System.RespondToWebhook._shared import BinaryReference
from Workflow.webhook_host import ApiWebhookHost

WEBHOOK_PARENTS = [{"name": "Webhook", "type": "webhook-producer"}]


def make_host(**kwargs) -> ApiWebhookHost:
    kwargs.setdefault("parent_nodes", WEBHOOK_PARENTS)
    return ApiWebhookHost(**kwargs)


async def respond(host, items, **options):
    formatter = ResponseFormatter(host, node_name="Respond to Webhook", node_id="respond-1")
    return await formatter.execute(items, RespondOptions(**options))


@pytest.mark.asyncio
async def test_json_body_is_parsed():
    """A JSON string body is sent as the parsed object with status 200."""
    host = make_host()
    items = [NodeItem(json={"x": 1})]
    result = await respond(host, items, respond_with="json", response_body='{"a":1}')
    assert host.response.body == {"a": 1}
    assert host.response.status_code == 200
    assert result.outcome.kind == "responded"
    assert result.branches == [items]


@pytest.mark.asyncio
async def test_json_body_object_passes_through():
    """An object body is sent as-is."""
    host = make_host()
    await respond(host, [NodeItem(json={})], respond_with="json", response_body={"nested": [1, 2]})
    assert host.response.body == {"nested": [1, 2]}


@pytest.mark.asyncio
async def test_json_body_empty_sends_no_body():
    """An empty JSON body leaves the response without a body."""
    host = make_host()
    await respond(host, [NodeItem(json={})], respond_with="json", response_body="")
    assert host.response.body is None


@pytest.mark.asyncio
async def test_invalid_json_raises_field_error():
    """Malformed JSON fails with a message naming the field and sends nothing."""
    host = make_host()
    with pytest.raises(NodeOperationError, match="Invalid JSON in 'Response Body' field") as exc_info:
        await respond(host, [NodeItem(json={})], respond_with="json", response_body="{not json")
    assert "Check that the syntax" in exc_info.value.description
    assert host.response is None


@pytest.mark.asyncio
async def test_invalid_json_continue_on_fail_yields_error_per_item():
    """With continue-on-fail each input item becomes an error item and nothing is raised."""
    host = make_host(continue_on_fail=True)
    items = [NodeItem(json={"n": i}) for i in range(3)]
    result = await respond(host, items, respond_with="json", response_body="{broken")

    assert result.outcome.kind == "failed"
    assert len(result.branches) == 1
    errors = result.branches[0]
    assert [item.json_data for item in errors] == [
        {"error": "Invalid JSON in 'Response Body' field"}
    ] * 3
    assert [item.paired_item for item in errors] == [0, 1, 2]
    assert host.response is None


@pytest.mark.asyncio
async def test_text_without_content_type_is_sandboxed():
    """Text without a content-type header is escaped into a sandboxed iframe."""
    host = make_host()
    await respond(host, [NodeItem(json={})], respond_with="text", response_body="<script>alert(1)</script>")
    body = host.response.body
    assert body.startswith("<iframe srcdoc=")
    assert "<script>" not in body
    assert "&lt;script&gt;" in body
    assert "allow-scripts" not in body


@pytest.mark.asyncio
async def test_text_with_html_content_type_is_sandboxed():
    """An explicit HTML content type is sandboxed as well."""
    host = make_host()
    await respond(
        host,
        [NodeItem(json={})],
        respond_with="text",
        response_body="<h1>Hi</h1>",
        response_headers=[{"name": "Content-Type", "value": "text/html; charset=utf-8"}],
    )
    assert host.response.body.startswith("<iframe")
    assert host.response.headers["content-type"] == "text/html; charset=utf-8"


@pytest.mark.asyncio
async def test_text_with_plain_content_type_is_raw():
    """Non-HTML content types get the text untouched."""
    host = make_host()
    await respond(
        host,
        [NodeItem(json={})],
        respond_with="text",
        response_body="<b>done</b>",
        response_headers=[{"name": "content-type", "value": "text/plain"}],
    )
    assert host.response.body == "<b>done</b>"


@pytest.mark.asyncio
async def test_redirect_defaults_to_307():
    """Redirect sets the location header and defaults to 307."""
    host = make_host()
    await respond(host, [NodeItem(json={})], respond_with="redirect", redirect_url="http://x")
    assert host.response.headers["location"] == "http://x"
    assert host.response.status_code == 307


@pytest.mark.asyncio
async def test_redirect_keeps_configured_code():
    """A configured response code overrides the redirect default."""
    host = make_host()
    await respond(host, [NodeItem(json={})], respond_with="redirect", redirect_url="http://x", response_code=301)
    assert host.response.status_code == 301


@pytest.mark.asyncio
async def test_no_data_sends_empty_body():
    """noData answers with the configured status and no body."""
    host = make_host()
    await respond(host, [NodeItem(json={"a": 1})], respond_with="noData", response_code=204)
    assert host.response.body is None
    assert host.response.status_code == 204


@pytest.mark.asyncio
async def test_first_item_in_field():
    """firstIncomingItem with a response key nests the first item's JSON."""
    host = make_host()
    items = [NodeItem(json={"id": 1}), NodeItem(json={"id": 2})]
    await respond(host, items, respond_with="firstIncomingItem", response_key="data")
    assert host.response.body == {"data": {"id": 1}}


@pytest.mark.asyncio
async def test_first_item_without_items_fails():
    """firstIncomingItem with no input items is an error."""
    host = make_host()
    with pytest.raises(NodeOperationError, match="No input item"):
        await respond(host, [], respond_with="firstIncomingItem")


@pytest.mark.asyncio
async def test_all_items_at_top_level_and_nested_path():
    """allIncomingItems returns every item's JSON, optionally under a dotted path."""
    items = [NodeItem(json={"id": 1}), NodeItem(json={"id": 2})]

    host = make_host()
    await respond(host, items, respond_with="allIncomingItems")
    assert host.response.body == [{"id": 1}, {"id": 2}]

    host = make_host()
    await respond(host, items, respond_with="allIncomingItems", response_key="result.rows")
    assert host.response.body == {"result": {"rows": [{"id": 1}, {"id": 2}]}}


@pytest.mark.asyncio
async def test_headers_are_lowercased_and_last_write_wins():
    """Header names are case-insensitive; the last entry for a name wins."""
    host = make_host()
    await respond(
        host,
        [NodeItem(json={})],
        respond_with="noData",
        response_headers=[
            {"name": "X-Request-Id", "value": 1},
            {"name": "x-request-id", "value": "2"},
            {"name": "Cache-Control", "value": "no-store"},
        ],
    )
    assert host.response.headers == {"x-request-id": "2", "cache-control": "no-store"}


@pytest.mark.asyncio
async def test_html_content_type_sandboxes_json_body():
    """Non-text bodies with an HTML content type are stringified and sandboxed."""
    host = make_host()
    await respond(
        host,
        [NodeItem(json={})],
        respond_with="json",
        response_body={"html": "<b>bold</b>"},
        response_headers=[{"name": "content-type", "value": "text/html"}],
    )
    body = host.response.body
    assert isinstance(body, str)
    assert body.startswith("<iframe")
    assert "<b>" not in body


@pytest.mark.asyncio
async def test_html_sandboxed_json_keeps_non_ascii_text():
    """Non-ASCII characters survive re-sandboxing instead of becoming \\u escapes."""
    host = make_host()
    await respond(
        host,
        [NodeItem(json={})],
        respond_with="json",
        response_body={"greeting": "héllo 世界"},
        response_headers=[{"name": "content-type", "value": "text/html"}],
    )
    body = host.response.body
    assert "héllo 世界" in body
    assert "\\u" not in body


@pytest.mark.asyncio
async def test_binary_without_binary_data_fails():
    """Binary mode needs binary data on the first item."""
    host = make_host()
    with pytest.raises(NodeOperationError, match="No binary data exists on the first item!"):
        await respond(host, [NodeItem(json={})], respond_with="binary")

    host = make_host()
    with pytest.raises(NodeOperationError, match="No binary data exists on the first item!"):
        await respond(host, [NodeItem(json={}, binary={})], respond_with="binary")


@pytest.mark.asyncio
async def test_binary_inline_data_is_decoded():
    """Inline binary data is decoded; length and type headers are derived from it."""
    items = [NodeItem(json={}, binary={"file": BinaryData(data=base64.b64encode(b"hello").decode(), mime_type="text/plain")})]
    host = make_host(items=items)
    await respond(host, items, respond_with="binary")
    assert host.response.body == b"hello"
    assert host.response.headers["content-length"] == 5
    assert host.response.headers["content-type"] == "text/plain"


@pytest.mark.asyncio
async def test_binary_explicit_field_and_configured_content_type():
    """A named binary field is used and a configured content-type is kept."""
    items = [NodeItem(json={}, binary={
        "first": BinaryData(data=base64.b64encode(b"one").decode(), mime_type="text/plain"),
        "report": BinaryData(data=base64.b64encode(b"%PDF").decode(), mime_type="application/pdf"),
    })]
    host = make_host(items=items)
    await respond(
        host,
        items,
        respond_with="binary",
        response_data_source="set",
        input_field_name="report",
        response_headers=[{"name": "Content-Type", "value": "application/octet-stream"}],
    )
    assert host.response.body == b"%PDF"
    assert host.response.headers["content-type"] == "application/octet-stream"


@pytest.mark.asyncio
async def test_binary_missing_named_field_fails():
    """Naming a binary field the item does not have is an error."""
    items = [NodeItem(json={}, binary={"file": BinaryData(data="", mime_type="text/plain")})]
    host = make_host(items=items)
    with pytest.raises(NodeOperationError, match="'other'"):
        await respond(host, items, respond_with="binary", response_data_source="set", input_field_name="other")


@pytest.mark.asyncio
async def test_binary_stored_data_is_referenced():
    """Binary data stored by id becomes a reference with its known size."""
    items = [NodeItem(json={}, binary={"data": BinaryData(id="bin-1", mime_type="image/png", file_size=42)})]
    host = make_host(items=items)
    await respond(host, items, respond_with="binary")
    assert isinstance(host.response.body, BinaryReference)
    assert host.response.body.id == "bin-1"
    assert host.response.headers["content-length"] == 42
    assert host.response.headers["content-type"] == "image/png"


@pytest.mark.asyncio
async def test_unsupported_mode_fails():
    """Unknown response modes are rejected."""
    host = make_host()
    with pytest.raises(NodeOperationError, match='The Response Data option "xml" is not supported!'):
        await respond(host, [NodeItem(json={})], respond_with="xml")


@pytest.mark.asyncio
async def test_missing_webhook_parent_fails_from_version_1_1():
    """From version 1.1 a webhook-type parent is required."""
    host = make_host(parent_nodes=[{"type": "http-request"}])
    with pytest.raises(NodeOperationError, match="No Webhook node found in the workflow"):
        await respond(host, [NodeItem(json={})], respond_with="noData", version=1.1)


@pytest.mark.asyncio
async def test_version_1_skips_webhook_parent_check():
    """Version 1 responds without checking parents."""
    host = make_host(parent_nodes=[])
    await respond(host, [NodeItem(json={})], respond_with="noData", version=1.0)
    assert host.response is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("parent_type", ["form-trigger", "wait", "chat-trigger"])
async def test_other_webhook_parent_types_are_accepted(parent_type):
    """Form, wait and chat triggers also hold an open request."""
    host = make_host(parent_nodes=[{"type": parent_type}])
    await respond(host, [NodeItem(json={})], respond_with="noData")
    assert host.response is not None


@pytest.mark.asyncio
async def test_streaming_json_emits_one_triplet_and_no_final_send():
    """Streaming a JSON body sends begin/item/end and skips the final response."""
    host = make_host(streaming=True)
    result = await respond(host, [NodeItem(json={})], respond_with="json", response_body='{"a":1}', version=1.5)

    assert [(chunk.type.value, chunk.item_index) for chunk in host.chunks] == [
        ("begin", 0), ("item", 0), ("end", 0),
    ]
    assert host.chunks[1].content == {"a": 1}
    assert host.response is None
    assert result.outcome.kind == "streamed"
    assert result.outcome.response.body == {"a": 1}


@pytest.mark.asyncio
async def test_streaming_all_items_emits_triplet_per_item_in_order():
    """Each item gets its own begin/item/end triplet, in input order."""
    host = make_host(streaming=True)
    items = [NodeItem(json={"id": 1}), NodeItem(json={"id": 2})]
    await respond(host, items, respond_with="allIncomingItems", version=1.5)
    assert [(chunk.type.value, chunk.item_index) for chunk in host.chunks] == [
        ("begin", 0), ("item", 0), ("end", 0),
        ("begin", 1), ("item", 1), ("end", 1),
    ]
    assert [chunk.content for chunk in host.chunks if chunk.type.value == "item"] == [{"id": 1}, {"id": 2}]


@pytest.mark.asyncio
async def test_streaming_text_sends_raw_text():
    """The stream carries the raw text, not the sandboxed document."""
    host = make_host(streaming=True)
    await respond(host, [NodeItem(json={})], respond_with="text", response_body="<p>hi</p>", version=1.5)
    assert host.chunks[1].content == "<p>hi</p>"


@pytest.mark.asyncio
async def test_streaming_disabled_or_old_version_sends_response():
    """Streaming needs version 1.5, a streaming request and the toggle left on."""
    for options in (
        {"version": 1.4},
        {"version": 1.5, "enable_streaming": False},
    ):
        host = make_host(streaming=True)
        await respond(host, [NodeItem(json={})], respond_with="json", response_body='{"a":1}', **options)
        assert host.chunks == []
        assert host.response.body == {"a": 1}

    host = make_host(streaming=False)
    await respond(host, [NodeItem(json={})], respond_with="json", response_body='{"a":1}', version=1.5)
    assert host.chunks == []
    assert host.response is not None


@pytest.mark.asyncio
async def test_binary_never_streams():
    """Binary responses are sent whole even when streaming is available."""
    items = [NodeItem(json={}, binary={"data": BinaryData(data=base64.b64encode(b"x").decode())})]
    host = make_host(items=items, streaming=True)
    await respond(host, items, respond_with="binary", version=1.5)
    assert host.chunks == []
    assert host.response.body == b"x"


@pytest.mark.asyncio
async def test_jwt_token_is_signed_with_passphrase():
    """JWT mode signs the payload with the credential secret."""
    secret = "a-test-secret-that-is-long-enough-for-hs256"
    host = make_host(credentials={"jwtAuth": {"keyType": "passphrase", "secret": secret, "algorithm": "HS256"}})
    await respond(host, [NodeItem(json={})], respond_with="jwt", payload='{"sub": "42", "role": "admin"}')
    token = host.response.body["token"]
    assert jwt.decode(token, secret, algorithms=["HS256"]) == {"sub": "42", "role": "admin"}


@pytest.mark.asyncio
async def test_jwt_failures_are_wrapped():
    """Missing credentials or a bad payload fail with a fixed message."""
    host = make_host()
    with pytest.raises(NodeOperationError, match="Error signing JWT token") as exc_info:
        await respond(host, [NodeItem(json={})], respond_with="jwt", payload="{}")
    assert "jwtAuth" in exc_info.value.description

    host = make_host(credentials={"jwtAuth": {"keyType": "passphrase", "secret": "x" * 32}})
    with pytest.raises(NodeOperationError, match="Error signing JWT token"):
        await respond(host, [NodeItem(json={})], respond_with="jwt", payload="[1, 2]")


@pytest.mark.asyncio
async def test_version_1_3_always_has_response_branch():
    """Version 1.3 adds the response branch unconditionally."""
    host = make_host()
    items = [NodeItem(json={"a": 1})]
    result = await respond(host, items, respond_with="firstIncomingItem", version=1.3)
    assert len(result.branches) == 2
    assert result.branches[1][0].json_data == {
        "response": {"body": {"a": 1}, "headers": {}, "statusCode": 200}
    }


@pytest.mark.asyncio
async def test_response_branch_toggle_from_version_1_4():
    """From 1.4 the response branch follows the toggle; before 1.3 it never appears."""
    items = [NodeItem(json={"a": 1})]
    for version, toggle, expected in ((1.4, False, 1), (1.4, True, 2), (1.5, True, 2), (1.2, True, 1)):
        result = await respond(make_host(), items, respond_with="noData", version=version, enable_response_output=toggle)
        assert len(result.branches) == expected, (version, toggle)


@pytest.mark.asyncio
async def test_chat_trigger_defers_with_extracted_message():
    """A chat trigger in responseNodes mode gets the message; no HTTP response is sent."""
    host = make_host(parent_nodes=[{
        "name": "Chat",
        "type": "chat-trigger",
        "parameters": {"options": {"responseMode": "responseNodes"}},
    }])
    result = await respond(host, [NodeItem(json={})], respond_with="json", response_body='{"output": "Hello there"}')

    assert result.outcome.kind == "deferred"
    assert result.outcome.message == "Hello there"
    assert result.branches == [[NodeItem(json={}, send_message="Hello there")]]
    assert host.wait_till == WAIT_INDEFINITELY
    assert host.response is None


@pytest.mark.asyncio
async def test_chat_message_falls_back_to_json():
    """Without output/text/message the whole body is sent as indented JSON."""
    host = make_host(parent_nodes=[{
        "type": "chat-trigger",
        "parameters": {"options": {"responseMode": "responseNodes"}},
    }])
    result = await respond(host, [NodeItem(json={"a": 1})], respond_with="firstIncomingItem")
    assert result.outcome.message == '{\n  "a": 1\n}'


@pytest.mark.asyncio
async def test_chat_message_with_empty_output_falls_back_to_json():
    """An empty output value does not produce an empty chat message."""
    host = make_host(parent_nodes=[{
        "type": "chat-trigger",
        "parameters": {"options": {"responseMode": "responseNodes"}},
    }])
    result = await respond(host, [NodeItem(json={})], respond_with="json", response_body='{"output": "", "x": 1}')
    assert result.outcome.message == '{\n  "output": "",\n  "x": 1\n}'


@pytest.mark.asyncio
async def test_disabled_or_other_mode_chat_trigger_responds_normally():
    """Disabled chat triggers and other response modes do not defer."""
    for parent in (
        {"type": "chat-trigger", "disabled": True, "parameters": {"options": {"responseMode": "responseNodes"}}},
        {"type": "chat-trigger", "parameters": {"options": {"responseMode": "lastNode"}}},
    ):
        host = make_host(parent_nodes=[parent, {"type": "webhook-producer"}])
        result = await respond(host, [NodeItem(json={})], respond_with="noData")
        assert result.outcome.kind == "responded"
        assert host.wait_till is None
