"""
JWT signing with the jwtAuth credential.

Credential fields: key_type ("passphrase" or "pemKey"), secret, private_key,
algorithm. camelCase keys (keyType, privateKey) are accepted as stored by
credential editors.
"""

import re
from typing import Any, Dict

import jwt

DEFAULT_ALGORITHM = "HS256"

_PEM_BOUNDARY = re.compile(r"(-----[A-Z0-9 ]+-----)")
_ENCRYPTION_HEADER = re.compile(r"(Proc-Type|DEK-Info):\s*")


def format_private_key(private_key: str) -> str:
    """
    Normalise a PEM key pasted on a single line.

    Keys that already contain newlines are returned untouched. Otherwise the
    BEGIN/END boundaries are kept and the body whitespace (or literal "\\n"
    sequences) becomes line breaks.
    """
    if not private_key or "\n" in private_key:
        return private_key

    formatted = []
    for part in _PEM_BOUNDARY.split(private_key.replace("\\n", "\n")):
        if not part.strip():
            continue
        if _PEM_BOUNDARY.fullmatch(part):
            formatted.append(part)
            continue
        part = _ENCRYPTION_HEADER.sub(lambda m: f"{m.group(1)}:", part)
        formatted.append("\n".join(part.split()))
    return "\n".join(formatted) + "\n"


def _credential(credentials: Dict[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    value = credentials.get(snake)
    if value is None:
        value = credentials.get(camel, default)
    return value


def sign_token(payload: Dict[str, Any], credentials: Dict[str, Any]) -> str:
    """
    Sign `payload` with the key and algorithm from `credentials`.

    Raises:
        jwt.PyJWTError, ValueError, TypeError: On unusable keys or payloads.
    """
    key_type = _credential(credentials, "key_type", "keyType", "passphrase")
    algorithm = credentials.get("algorithm") or DEFAULT_ALGORITHM

    if key_type == "passphrase":
        key = credentials.get("secret") or ""
    else:
        key = format_private_key(_credential(credentials, "private_key", "privateKey", ""))

    return jwt.encode(payload, key, algorithm=algorithm)
