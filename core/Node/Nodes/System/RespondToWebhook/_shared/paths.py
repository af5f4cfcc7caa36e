"""
Nested assignment by dotted path ("data.items", "rows[0].value").
"""

import re
from typing import Any, Dict, List, Tuple

_TOKEN = re.compile(r"\[(\d+)\]|([^.\[\]]+)")


def _parse_path(path: str) -> List[Tuple[Any, bool]]:
    tokens = []
    for match in _TOKEN.finditer(path):
        index, key = match.groups()
        if index is not None:
            tokens.append((int(index), True))
        else:
            tokens.append((key, False))
    return tokens


def _assign(container: Any, key: Any, value: Any) -> None:
    if isinstance(container, list):
        while len(container) <= key:
            container.append(None)
    container[key] = value


def set_path(path: str, value: Any) -> Dict[str, Any]:
    """
    Return a new dict with `value` placed at `path`.

    Bracketed integers create lists; everything else creates dicts. A path
    without tokens places the value under the literal key.
    """
    tokens = _parse_path(path)
    if not tokens:
        return {path: value}

    root: Dict[str, Any] = {}
    current: Any = root
    # A leading index on a dict root is used as a plain key
    if tokens[0][1]:
        tokens[0] = (str(tokens[0][0]), False)

    for position, (key, _) in enumerate(tokens[:-1]):
        next_is_index = tokens[position + 1][1]
        child: Any = [] if next_is_index else {}
        _assign(current, key, child)
        current = child

    _assign(current, tokens[-1][0], value)
    return root
