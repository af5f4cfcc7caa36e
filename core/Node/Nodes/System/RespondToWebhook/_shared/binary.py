"""
Binary response building.
"""

import base64
import binascii
from typing import Any, Dict, Optional

from pydantic import BaseModel

from .....Core.Node.Core import BinaryData, NodeOperationError


class BinaryReference(BaseModel):
    """Response body pointing at binary data the transport must load itself."""

    id: str
    mime_type: str
    file_name: Optional[str] = None
    file_size: Optional[int] = None


def get_binary_response(binary_data: BinaryData, headers: Dict[str, Any]) -> Any:
    """
    Body for a binary response. Fills content-type (unless configured) and
    content-length in `headers`.

    Inline data is decoded to bytes; stored data becomes a BinaryReference.
    """
    if binary_data.id:
        body: Any = BinaryReference(
            id=binary_data.id,
            mime_type=binary_data.mime_type,
            file_name=binary_data.file_name,
            file_size=binary_data.file_size,
        )
        if binary_data.file_size is not None:
            headers["content-length"] = binary_data.file_size
    else:
        try:
            body = base64.b64decode(binary_data.data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise NodeOperationError(
                "Binary data is not valid base64",
                description=str(e),
            ) from e
        headers["content-length"] = len(body)

    if not headers.get("content-type"):
        headers["content-type"] = binary_data.mime_type
    return body
