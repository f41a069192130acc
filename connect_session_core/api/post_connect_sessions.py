"""
``POST /connect/sessions``: issue a connect session and its token.

The tenant scope is resolved by authentication upstream and passed in.
Responses:

    201 {"data": {"token", "connect_link", "expires_at"}}
    400 {"error": {"code": "invalid_query_params", "errors": [...]}}
    400 {"error": {"code": "invalid_body", "errors": [...]}}
    403 {"error": {"code": "forbidden", "message": ...}}
    500 {"error": {"code": "server_error", "message": ...}}
"""

from typing import Optional

import azure.functions as func

from ..constants import WireErrorCode
from ..context.operation_context import operation
from ..context.tenant_context import tenant_context
from ..enums import IssuanceOutcome
from ..exceptions import SchemaValidationError
from ..processing.issuance_result import SessionIssuanceResult
from ..processing.session_issuer import ConnectSessionIssuer
from ..schemas.connect_session_schemas import PostConnectSessionsBody
from ..schemas.tenant_schemas import TenantScope
from .http_utils import error_response, json_response, parse_json_body, require_empty_query

_OUTCOME_WIRE_CODES = {
    IssuanceOutcome.INVALID_BODY: WireErrorCode.INVALID_BODY,
    IssuanceOutcome.FORBIDDEN: WireErrorCode.FORBIDDEN,
    IssuanceOutcome.SERVER_ERROR: WireErrorCode.SERVER_ERROR,
}


def result_to_response(result: SessionIssuanceResult) -> func.HttpResponse:
    """Translate an issuance result into its HTTP response."""
    if result.success and result.data is not None:
        return json_response({"data": result.data.model_dump(mode="json")}, result.status_code)

    code = _OUTCOME_WIRE_CODES[result.outcome]
    if result.outcome == IssuanceOutcome.INVALID_BODY:
        return error_response(code, result.status_code, errors=result.errors)
    return error_response(code, result.status_code, message=result.message)


@operation(name="connect_sessions.post")
def _handle(
    req: func.HttpRequest, tenant: TenantScope, issuer: Optional[ConnectSessionIssuer]
) -> func.HttpResponse:
    query_errors = require_empty_query(req)
    if query_errors:
        return error_response(WireErrorCode.INVALID_QUERY_PARAMS, 400, errors=query_errors)

    try:
        body = parse_json_body(req, PostConnectSessionsBody)
    except SchemaValidationError as e:
        return result_to_response(
            SessionIssuanceResult.invalid_body(e.field_errors, error_type=type(e).__name__)
        )

    issuer = issuer or ConnectSessionIssuer()
    return result_to_response(issuer.issue(body, tenant))


def post_connect_sessions(
    req: func.HttpRequest,
    tenant: TenantScope,
    issuer: Optional[ConnectSessionIssuer] = None,
) -> func.HttpResponse:
    """
    Handle a create connect session request for an authenticated tenant.

    Args:
        req: Incoming HTTP request
        tenant: Account, environment and plan of the caller
        issuer: Issuer to use, defaults to one over the global database manager

    Returns:
        JSON HttpResponse
    """
    with tenant_context(tenant):
        return _handle(req, tenant, issuer)
