"""
Header Entries Field Module

Form field for an ordered list of HTTP header name/value pairs.
"""

import json

from django import forms

from .JSONTextareaWidget import JSONTextareaWidget


class HeaderEntriesField(forms.Field):
    """
    Accepts header entries in any of the shapes a workflow definition stores:

    - a JSON string or list: [{"name": "X-Id", "value": "1"}, ...]
    - a fixed collection: {"entries": [...]}
    - a plain mapping: {"X-Id": "1"}

    Cleans to a list of {"name", "value"} dicts in their original order.
    """

    widget = JSONTextareaWidget

    default_error_messages = {
        'invalid_json': 'Response headers must be valid JSON: %(error)s',
        'invalid_shape': 'Response headers must be a list of {"name", "value"} entries or an object.',
        'missing_name': 'Header entry %(index)s has no name.',
    }

    def to_python(self, value):
        if value in self.empty_values:
            return []
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise forms.ValidationError(
                    self.error_messages['invalid_json'], code='invalid_json', params={'error': e}
                )
        if isinstance(value, dict):
            if isinstance(value.get('entries'), list):
                value = value['entries']
            else:
                value = [{'name': name, 'value': header_value} for name, header_value in value.items()]
        if not isinstance(value, list):
            raise forms.ValidationError(self.error_messages['invalid_shape'], code='invalid_shape')

        entries = []
        for index, entry in enumerate(value):
            if not isinstance(entry, dict):
                raise forms.ValidationError(self.error_messages['invalid_shape'], code='invalid_shape')
            name = entry.get('name')
            if name is None or str(name) == '':
                raise forms.ValidationError(
                    self.error_messages['missing_name'], code='missing_name', params={'index': index}
                )
            entries.append({'name': name, 'value': entry.get('value')})
        return entries
