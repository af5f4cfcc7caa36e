"""
Respond to Webhook Options

Validated parameter set the formatter works from, independent of the form
that collected it.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from .constants import DEFAULT_VERSION, RespondWith


class HeaderEntry(BaseModel):
    name: Any
    value: Any = None


class RespondOptions(BaseModel):
    """
    Parameters of one Respond to Webhook execution.

    `respond_with` stays a plain string: unknown modes are reported by the
    formatter, not rejected here.
    """

    respond_with: str = RespondWith.FIRST_INCOMING_ITEM.value
    response_body: Any = None
    payload: Any = None
    redirect_url: str = ""
    response_data_source: str = "automatically"
    input_field_name: str = "data"
    response_code: Optional[int] = Field(default=None, ge=100, le=599)
    response_headers: List[HeaderEntry] = Field(default_factory=list)
    response_key: str = ""
    enable_streaming: Optional[bool] = None
    enable_response_output: bool = False
    version: float = DEFAULT_VERSION

    @field_validator("response_key", "redirect_url", "input_field_name", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value

    @property
    def streaming_enabled(self) -> bool:
        """Unset counts as enabled; only an explicit False turns streaming off."""
        return self.enable_streaming is not False

    def build_headers(self) -> Dict[str, Any]:
        """
        Header mapping keyed by lower-case name. Later entries override earlier
        ones with the same name; values are sent as strings.
        """
        headers: Dict[str, Any] = {}
        for entry in self.response_headers:
            name = str(entry.name).lower()
            headers[name] = None if entry.value is None else str(entry.value)
        return headers
