"""
Tenant scope from gateway headers.

Authentication happens before the function runs; the gateway forwards the
resolved account, environment and plan (JSON) as headers.
"""

from typing import Optional

import azure.functions as func
from pydantic import ValidationError as PydanticValidationError

from ..constants import TenantHeader
from ..exceptions import ErrorCode, ValidationError
from ..schemas.plan_schemas import PlanRead
from ..schemas.tenant_schemas import TenantScope


def tenant_from_headers(req: func.HttpRequest) -> TenantScope:
    """
    Build the tenant scope of a request.

    Raises:
        ValidationError: If the account or environment header is missing,
            or the plan header is not a valid plan
    """
    account_id = req.headers.get(TenantHeader.ACCOUNT_ID.value)
    environment_id = req.headers.get(TenantHeader.ENVIRONMENT_ID.value)
    if not account_id or not environment_id:
        raise ValidationError(
            "Missing tenant headers",
            error_code=ErrorCode.MISSING_REQUIRED,
            field="tenant",
            has_account=bool(account_id),
            has_environment=bool(environment_id),
        )

    plan: Optional[PlanRead] = None
    raw_plan = req.headers.get(TenantHeader.PLAN.value)
    if raw_plan:
        try:
            plan = PlanRead.model_validate_json(raw_plan)
        except PydanticValidationError as e:
            raise ValidationError(
                "Invalid plan header",
                error_code=ErrorCode.INVALID_FORMAT,
                field=TenantHeader.PLAN.value,
                cause=e,
            ) from e

    return TenantScope(account_id=account_id, environment_id=environment_id, plan=plan)
