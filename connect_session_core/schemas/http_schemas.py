"""
Pydantic schemas for HTTP error and success envelopes.

Field errors keep their internal kind (schema vs. reference) while the wire
representation only exposes ``code``, ``message`` and ``path``.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ..constants import WireErrorCode
from ..enums import FieldErrorKind

PathSegment = Union[str, int]


class FieldError(BaseModel):
    """A single rejected field, addressed by its breadcrumb path."""

    model_config = ConfigDict(frozen=True)

    path: List[PathSegment] = Field(default_factory=list, description="Breadcrumb to the field")
    code: str = Field(..., description="Machine readable reason")
    message: str = Field(..., description="Human readable reason")
    kind: FieldErrorKind = Field(
        default=FieldErrorKind.SCHEMA, exclude=True, description="Internal failure kind"
    )

    def to_wire(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "path": list(self.path)}


def field_errors_from_pydantic(
    error: PydanticValidationError, kind: FieldErrorKind = FieldErrorKind.SCHEMA
) -> List[FieldError]:
    """
    Flatten a pydantic ValidationError into field errors.

    Args:
        error: Error raised by ``model_validate``
        kind: Kind recorded on every produced field error

    Returns:
        Field errors in the order pydantic reported them
    """
    return [
        FieldError(path=list(item["loc"]), code=item["type"], message=item["msg"], kind=kind)
        for item in error.errors(include_url=False)
    ]


class ErrorDetail(BaseModel):
    code: WireErrorCode
    message: Optional[str] = None
    errors: Optional[List[Dict[str, Any]]] = None


class ErrorEnvelope(BaseModel):
    error: ErrorDetail

    @classmethod
    def with_errors(cls, code: WireErrorCode, errors: List[FieldError]) -> "ErrorEnvelope":
        return cls(error=ErrorDetail(code=code, errors=[e.to_wire() for e in errors]))

    @classmethod
    def with_message(cls, code: WireErrorCode, message: str) -> "ErrorEnvelope":
        return cls(error=ErrorDetail(code=code, message=message))

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)
