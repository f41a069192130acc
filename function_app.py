"""
Connect Sessions Azure Functions App

Exposes ``POST /connect/sessions``. The gateway in front of the app
authenticates the caller and forwards the tenant scope as headers
(``x-account-id``, ``x-environment-id`` and a JSON ``x-plan``).

Run with: func start
Test with: POST to http://localhost:7071/api/connect/sessions
"""

import azure.functions as func

from connect_session_core.api import error_response, post_connect_sessions, tenant_from_headers
from connect_session_core.config import get_config
from connect_session_core.constants import WireErrorCode
from connect_session_core.db.db_config import (
    get_development_config,
    get_production_config,
    initialize_db,
)
from connect_session_core.exceptions import ValidationError
from connect_session_core.utils.logger import configure_logging

app = func.FunctionApp()

# Initialize framework services (once per app)
logger = configure_logging("connect_sessions")
initialize_db(
    get_production_config()
    if get_config().environment == "production"
    else get_development_config()
)


@app.function_name(name="PostConnectSessions")
@app.route(route="connect/sessions", methods=["POST"], auth_level=func.AuthLevel.ANONYMOUS)
def connect_sessions(req: func.HttpRequest) -> func.HttpResponse:
    """
    Create a connect session and return its short-lived token.

    Example request:
    POST /api/connect/sessions
    {
        "end_user": {"id": "u1", "email": "a@b.co"},
        "allowed_integrations": ["github"]
    }
    """
    try:
        tenant = tenant_from_headers(req)
    except ValidationError as e:
        return error_response(WireErrorCode.UNAUTHORIZED, 401, message=e.message)

    return post_connect_sessions(req, tenant)
