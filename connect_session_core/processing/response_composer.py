"""
Composition of the token reply returned to the caller.
"""

from datetime import UTC, datetime
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from ..config import get_config
from ..constants import SESSION_TOKEN_QUERY_PARAM
from ..db.db_base import as_utc
from ..exceptions import IssuanceError
from ..schemas.connect_session_schemas import ConnectSessionToken
from ..schemas.private_key_schemas import PrivateKeyRead


def build_connect_link(connect_url: str, token: str) -> str:
    """
    Append the session token to the connect UI URL.

    Existing query parameters are kept; a stale ``session_token`` is replaced.

    Args:
        connect_url: Absolute base URL of the connect UI
        token: Raw session token

    Returns:
        Absolute URL carrying the token
    """
    parts = urlsplit(connect_url)
    query = [
        (key, value)
        for key, value in parse_qsl(parts.query, keep_blank_values=True)
        if key != SESSION_TOKEN_QUERY_PARAM
    ]
    query.append((SESSION_TOKEN_QUERY_PARAM, token))
    path = parts.path or "/"
    return urlunsplit((parts.scheme, parts.netloc, path, urlencode(query), parts.fragment))


def format_expires_at(value: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a ``Z`` suffix."""
    return as_utc(value).astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def compose_session_reply(token: str, private_key: PrivateKeyRead) -> ConnectSessionToken:
    """
    Build the success payload from the issued token and its stored metadata.

    Raises:
        IssuanceError: If the key was issued without an expiry
    """
    if private_key.expires_at is None:
        raise IssuanceError(
            "Connect session key issued without expiry", private_key_id=private_key.id
        )

    return ConnectSessionToken(
        token=token,
        connect_link=build_connect_link(get_config().connect.connect_url, token),
        expires_at=format_expires_at(private_key.expires_at),
    )
