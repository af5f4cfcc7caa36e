"""
Respond to Webhook Shared Utilities
"""

from .binary import BinaryReference, get_binary_response
from .html_sandbox import is_html_rendered_content_type, sandbox_html_response
from .jwt_signing import format_private_key, sign_token
from .outputs import configured_outputs, has_response_output
from .paths import set_path

__all__ = [
    'BinaryReference', 'get_binary_response',
    'is_html_rendered_content_type', 'sandbox_html_response',
    'format_private_key', 'sign_token',
    'configured_outputs', 'has_response_output',
    'set_path',
]
