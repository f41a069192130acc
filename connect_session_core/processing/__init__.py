"""Connect session issuance: reference checks, transaction body and reply composition."""

from .issuance_result import SessionIssuanceResult
from .reference_checks import check_integrations_exist, gate_overrides
from .response_composer import build_connect_link, compose_session_reply, format_expires_at
from .session_issuer import ConnectSessionIssuer, generate_session

__all__ = [
    "SessionIssuanceResult",
    "check_integrations_exist",
    "gate_overrides",
    "build_connect_link",
    "compose_session_reply",
    "format_expires_at",
    "ConnectSessionIssuer",
    "generate_session",
]
