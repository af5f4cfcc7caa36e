"""
Respond to Webhook Constants

Response modes, trigger node types and version thresholds.
"""

from datetime import datetime, timezone
from enum import Enum


class RespondWith(str, Enum):
    ALL_INCOMING_ITEMS = "allIncomingItems"
    BINARY = "binary"
    FIRST_INCOMING_ITEM = "firstIncomingItem"
    JSON = "json"
    JWT = "jwt"
    NO_DATA = "noData"
    REDIRECT = "redirect"
    TEXT = "text"


RESPOND_WITH_CHOICES = [
    (RespondWith.ALL_INCOMING_ITEMS.value, "All Incoming Items"),
    (RespondWith.BINARY.value, "Binary File"),
    (RespondWith.FIRST_INCOMING_ITEM.value, "First Incoming Item"),
    (RespondWith.JSON.value, "JSON"),
    (RespondWith.JWT.value, "JWT Token"),
    (RespondWith.NO_DATA.value, "No Data"),
    (RespondWith.REDIRECT.value, "Redirect"),
    (RespondWith.TEXT.value, "Text"),
]

# Modes whose payload can be sent as begin/item/end chunks
STREAMING_MODES = frozenset({
    RespondWith.ALL_INCOMING_ITEMS,
    RespondWith.FIRST_INCOMING_ITEM,
    RespondWith.JSON,
    RespondWith.JWT,
    RespondWith.TEXT,
})

RESPONSE_DATA_SOURCE_CHOICES = [
    ("automatically", "Choose Automatically From Input"),
    ("set", "Specify Myself"),
]

# Upstream node types that hold an open HTTP request
WEBHOOK_NODE_TYPE = "webhook-producer"
FORM_TRIGGER_NODE_TYPE = "form-trigger"
CHAT_TRIGGER_NODE_TYPE = "chat-trigger"
WAIT_NODE_TYPE = "wait"
WEBHOOK_NODE_TYPES = frozenset({
    WEBHOOK_NODE_TYPE,
    FORM_TRIGGER_NODE_TYPE,
    CHAT_TRIGGER_NODE_TYPE,
    WAIT_NODE_TYPE,
})

# Chat trigger responseMode that delegates replies to response nodes
CHAT_RESPONSE_MODE_RESPONSE_NODES = "responseNodes"

# Sentinel date the host treats as "wait until resumed"
WAIT_INDEFINITELY = datetime(3000, 1, 1, tzinfo=timezone.utc)

JWT_CREDENTIAL_NAME = "jwtAuth"

SUPPORTED_VERSIONS = [1.0, 1.1, 1.2, 1.3, 1.4, 1.5]
# 1.5 streams; it stays opt-in until hosts support chunked delivery
DEFAULT_VERSION = 1.4
PARENT_WEBHOOK_CHECK_VERSION = 1.1
RESPONSE_OUTPUT_ALWAYS_VERSION = 1.3
RESPONSE_OUTPUT_TOGGLE_VERSION = 1.4
STREAMING_VERSION = 1.5

DEFAULT_STATUS_CODE = 200
DEFAULT_REDIRECT_STATUS_CODE = 307
