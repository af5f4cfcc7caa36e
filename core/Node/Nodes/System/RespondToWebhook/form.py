"""
Respond to Webhook Form

Single Responsibility: Form field definitions for the Respond to Webhook node.
"""

from django import forms

from ....Core.Form import BaseForm, HeaderEntriesField, JSONTextareaWidget
from .constants import RESPOND_WITH_CHOICES, RESPONSE_DATA_SOURCE_CHOICES, RespondWith
from .options import RespondOptions


class RespondToWebhookForm(BaseForm):
    """
    Form for configuring the Respond to Webhook node.

    Fields holding JSON (response body, JWT payload) are read raw, so objects
    stored in the workflow definition pass through without a string round trip.
    The response body is parsed by the node, which reports parse errors for
    that field specifically.
    """

    # Plain select so that unknown modes reach the node and fail there
    respond_with = forms.CharField(
        required=False,
        initial=RespondWith.FIRST_INCOMING_ITEM.value,
        widget=forms.Select(choices=RESPOND_WITH_CHOICES),
        label='Respond With',
        help_text='The data that should be returned.',
    )

    response_body = forms.CharField(
        required=False,
        strip=False,
        widget=JSONTextareaWidget(attrs={'placeholder': '{\n  "myField": "value"\n}'}),
        label='Response Body',
        help_text='JSON body for "JSON", message for "Text". Jinja supported, evaluated against the first item.',
    )

    payload = forms.CharField(
        required=False,
        widget=JSONTextareaWidget(attrs={'placeholder': '{\n  "myField": "value"\n}'}),
        label='Payload',
        help_text='Claims to include in the JWT token.',
    )

    redirect_url = forms.CharField(
        required=False,
        max_length=2048,
        label='Redirect URL',
        help_text='The URL to redirect to.',
        widget=forms.TextInput(attrs={'placeholder': 'e.g. https://example.com'}),
    )

    response_data_source = forms.ChoiceField(
        required=False,
        choices=RESPONSE_DATA_SOURCE_CHOICES,
        initial='automatically',
        label='Response Data Source',
        help_text='Pick the single binary field automatically, or name it yourself.',
    )

    input_field_name = forms.CharField(
        required=False,
        initial='data',
        max_length=255,
        label='Input Field Name',
        help_text='The name of the input field holding the binary data.',
    )

    response_code = forms.IntegerField(
        required=False,
        min_value=100,
        max_value=599,
        label='Response Code',
        help_text='HTTP status code. Defaults to 200 (307 for redirects).',
    )

    response_headers = HeaderEntriesField(
        required=False,
        label='Response Headers',
        help_text='List of {"name", "value"} entries. Names are case-insensitive; the last one wins.',
    )

    response_key = forms.CharField(
        required=False,
        max_length=255,
        label='Put Response in Field',
        help_text='Nest the items under this field, e.g. data. Only for "All Incoming Items" and "First Incoming Item".',
    )

    enable_streaming = forms.NullBooleanField(
        required=False,
        label='Enable Streaming',
        help_text='Stream the response when the webhook accepts it (version 1.5 and later). On by default.',
    )

    enable_response_output = forms.NullBooleanField(
        required=False,
        label='Enable Response Output Branch',
        help_text='Add an output branch carrying the response sent to the webhook (version 1.4 and later).',
    )

    def to_options(self, version: float) -> RespondOptions:
        """Build the formatter options from a validated form."""
        cleaned = self.cleaned_data
        return RespondOptions(
            respond_with=cleaned.get('respond_with') or RespondWith.FIRST_INCOMING_ITEM.value,
            response_body=self.get_field_value('response_body'),
            payload=self.get_field_value('payload'),
            redirect_url=cleaned.get('redirect_url') or '',
            response_data_source=cleaned.get('response_data_source') or 'automatically',
            input_field_name=self.get_field_value('input_field_name') or 'data',
            response_code=cleaned.get('response_code'),
            response_headers=cleaned.get('response_headers') or [],
            response_key=cleaned.get('response_key') or '',
            enable_streaming=cleaned.get('enable_streaming'),
            enable_response_output=bool(cleaned.get('enable_response_output')),
            version=version,
        )
