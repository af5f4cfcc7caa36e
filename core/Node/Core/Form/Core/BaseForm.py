"""
Base Form Module

Django form base class for node parameters.

Node forms are filled incrementally from workflow definitions (one
update_field call per configured parameter) and re-read after Jinja
rendering, so values may be raw JSON objects as well as strings.
"""

from abc import ABCMeta

from django import forms
from django.forms.forms import DeclarativeFieldsMetaclass
from django.forms.utils import ErrorDict

from config.django_setup import ensure_django_configured

ensure_django_configured()


class FormABCMeta(DeclarativeFieldsMetaclass, ABCMeta):
    """Metaclass that combines Django's form metaclass with ABCMeta."""
    pass


class BaseForm(forms.Form, metaclass=FormABCMeta):
    """
    Base form for node configuration.

    Handles incremental field updates, raw value access and validation.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._incremental_data = {}

    def _get_field_value(self, field_name):
        """Value from bound data, falling back to initial values."""
        if self.is_bound and self.data and field_name in self.data:
            return self.data.get(field_name)
        if field_name in self.initial:
            return self.initial.get(field_name)
        field = self.fields.get(field_name)
        if field is not None and field.initial is not None:
            return field.initial
        return None

    def _rebind_form(self):
        """Merge incremental data into the bound data and rebind."""
        updated_data = {}
        if self.is_bound and self.data:
            if hasattr(self.data, 'dict'):
                updated_data.update(self.data.dict())
            else:
                updated_data.update(dict(self.data))
        updated_data.update(self._incremental_data)

        self.data = updated_data
        self.is_bound = True
        # Drop cached validation so the next errors/cleaned_data access revalidates
        self._errors = None

    def update_field(self, field_name, value):
        """
        Set a field value and rebind the form.

        Args:
            field_name: Name of the field to update
            value: Raw value (string, number, bool, or JSON object)
        """
        self._incremental_data[field_name] = value
        self._rebind_form()

    def get_field_value(self, field_name):
        """
        Current raw value of a field, most recent update first.
        Unlike cleaned_data, JSON objects are returned untouched.
        """
        if field_name in self._incremental_data:
            return self._incremental_data[field_name]
        return self._get_field_value(field_name)

    def get_all_field_values(self):
        return {field_name: self.get_field_value(field_name) for field_name in self.fields}

    def validate_field(self, field_name):
        """
        Validate a single field and record its errors.

        Returns:
            bool: True if field is valid, False otherwise
        """
        if field_name not in self.fields:
            return False

        if self._errors and field_name in self._errors:
            del self._errors[field_name]

        try:
            self.fields[field_name].clean(self.get_field_value(field_name))
            return True
        except forms.ValidationError as e:
            if self._errors is None:
                self._errors = ErrorDict()
            self._errors[field_name] = self.error_class(e.messages)
            return False

    def validate(self):
        """
        Trigger full form validation.

        Returns:
            bool: True if form is valid, False otherwise
        """
        if not self.is_bound:
            # A form nobody configured is validated against its initial values
            self._rebind_form()
        self.full_clean()
        return not self.errors

    def get_errors(self):
        return self.errors
