"""
Core form components.
"""
from .BaseForm import BaseForm
