"""
Node execution errors.

NodeOperationError is what a node raises for user-facing failures: a short
message, an optional longer description, and the node that failed.
"""

from typing import Any, Dict, Optional


class NodeOperationError(ValueError):
    """
    Raised by a node when it cannot complete its operation.

    Subclasses ValueError so callers that already handle node validation
    failures keep working.
    """

    def __init__(
        self,
        message: str,
        description: Optional[str] = None,
        node_id: Optional[str] = None,
    ):
        self.message = message
        self.description = description
        self.node_id = node_id
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Error payload for API responses and execution logs."""
        result: Dict[str, Any] = {
            'error': self.message,
            'error_code': self.__class__.__name__,
        }
        if self.description:
            result['description'] = self.description
        if self.node_id:
            result['node_id'] = self.node_id
        if self.__cause__ is not None:
            result['cause'] = str(self.__cause__)
        return result
