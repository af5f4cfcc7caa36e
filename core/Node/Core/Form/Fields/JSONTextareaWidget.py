"""
JSON Textarea Widget Module

Marks textarea fields as JSON editors for frontend rendering.
"""

import json

from django import forms


class JSONTextareaWidget(forms.Textarea):
    """
    Textarea rendered as a JSON editor by the frontend.

    Adds the 'data-json-mode' attribute; `rows` sets the editor height.
    """

    def __init__(self, attrs=None, rows=4):
        default_attrs = {'data-json-mode': 'true', 'rows': rows}
        if attrs:
            default_attrs.update(attrs)
        super().__init__(attrs=default_attrs)

    def format_value(self, value):
        # Objects stored directly in the node config are shown as JSON text
        if isinstance(value, (dict, list)):
            return json.dumps(value, indent=2)
        return super().format_value(value)
