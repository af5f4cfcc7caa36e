"""
Output branch configuration.

Version 1.3 always exposes the response branch; from 1.4 it is opt-in.
"""

from typing import List

from ..constants import RESPONSE_OUTPUT_ALWAYS_VERSION, RESPONSE_OUTPUT_TOGGLE_VERSION

INPUT_DATA_PORT = {"id": "default", "label": "Input Data"}
RESPONSE_PORT = {"id": "response", "label": "Response"}


def has_response_output(version: float, enable_response_output: bool) -> bool:
    if version == RESPONSE_OUTPUT_ALWAYS_VERSION:
        return True
    return version >= RESPONSE_OUTPUT_TOGGLE_VERSION and bool(enable_response_output)


def configured_outputs(version: float, enable_response_output: bool) -> List[dict]:
    if has_response_output(version, enable_response_output):
        return [dict(INPUT_DATA_PORT), dict(RESPONSE_PORT)]
    return [{"id": "default", "label": "Out"}]
