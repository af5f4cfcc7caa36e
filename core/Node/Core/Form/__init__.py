from .Core.BaseForm import BaseForm
from .Fields import JSONTextareaWidget, HeaderEntriesField

__all__ = ['BaseForm', 'JSONTextareaWidget', 'HeaderEntriesField']
