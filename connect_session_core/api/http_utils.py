"""
Helpers shared by HTTP-triggered functions.
"""

from typing import Any, Dict, List, Optional, Type, TypeVar

import azure.functions as func
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from ..constants import ReplyMessage, WireErrorCode
from ..enums import FieldErrorKind
from ..exceptions import SchemaValidationError
from ..schemas.connect_session_schemas import EmptyQuery
from ..schemas.http_schemas import ErrorEnvelope, FieldError, field_errors_from_pydantic
from ..utils.json_utils import dumps

M = TypeVar("M", bound=BaseModel)

JSON_MIMETYPE = "application/json"


def require_empty_query(req: func.HttpRequest) -> Optional[List[FieldError]]:
    """Field errors for every query parameter, or None when there are none."""
    try:
        EmptyQuery.model_validate(dict(req.params))
    except PydanticValidationError as e:
        return field_errors_from_pydantic(e)
    return None


def parse_json_body(req: func.HttpRequest, model: Type[M]) -> M:
    """
    Parse and validate a JSON request body.

    An empty body is treated as an empty object.

    Raises:
        SchemaValidationError: If the body is not JSON or does not match the model
    """
    raw = req.get_body()
    if not raw or not raw.strip():
        payload: Any = {}
    else:
        try:
            payload = req.get_json()
        except ValueError as e:
            raise SchemaValidationError(
                ReplyMessage.INVALID_JSON,
                field_errors=[
                    FieldError(path=[], code="invalid_json", message=ReplyMessage.INVALID_JSON)
                ],
                cause=e,
            ) from e

    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise SchemaValidationError(
            field_errors=field_errors_from_pydantic(e, FieldErrorKind.SCHEMA)
        ) from e


def json_response(body: Dict[str, Any], status_code: int) -> func.HttpResponse:
    return func.HttpResponse(dumps(body), status_code=status_code, mimetype=JSON_MIMETYPE)


def error_response(
    code: WireErrorCode,
    status_code: int,
    errors: Optional[List[FieldError]] = None,
    message: Optional[str] = None,
) -> func.HttpResponse:
    """Error envelope carrying either field errors or a message."""
    if errors is not None:
        envelope = ErrorEnvelope.with_errors(code, errors)
    else:
        envelope = ErrorEnvelope.with_message(code, message or "")
    return json_response(envelope.to_wire(), status_code)
