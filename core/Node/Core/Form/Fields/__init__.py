from .JSONTextareaWidget import JSONTextareaWidget
from .HeaderEntriesField import HeaderEntriesField

__all__ = ['JSONTextareaWidget', 'HeaderEntriesField']
