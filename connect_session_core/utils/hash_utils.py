"""
Hash utilities for token verifiers.

Only the verifier of a bearer token is stored. With a configured key the
verifier is an HMAC-SHA256, otherwise a plain SHA-256 digest.
"""

import hashlib
import hmac
from typing import Optional

from ..config import get_config


def hash_value(value: str, key: Optional[str] = None) -> str:
    """
    Derive the hex verifier of a secret.

    Args:
        value: Raw secret
        key: HMAC key, defaults to ``security.hash_key`` from config

    Returns:
        64 character hex digest
    """
    if key is None:
        key = get_config().security.hash_key

    if key:
        return hmac.new(key.encode("utf-8"), value.encode("utf-8"), hashlib.sha256).hexdigest()
    return hashlib.sha256(value.encode("utf-8")).hexdigest()

