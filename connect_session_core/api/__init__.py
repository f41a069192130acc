"""HTTP boundary for connect session issuance."""

from .http_utils import error_response, json_response, parse_json_body, require_empty_query
from .post_connect_sessions import post_connect_sessions, result_to_response
from .tenant_headers import tenant_from_headers

__all__ = [
    "error_response",
    "json_response",
    "parse_json_body",
    "require_empty_query",
    "post_connect_sessions",
    "result_to_response",
    "tenant_from_headers",
]
