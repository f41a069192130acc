"""
Integration reference checks and the overrides permission gate.

Both are pure: they inspect already-parsed input against already-loaded
tenant data and never touch storage.
"""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set, Union

from ..constants import ReplyMessage
from ..enums import FieldErrorKind, GateDecision
from ..schemas.connect_session_schemas import IntegrationOverride
from ..schemas.http_schemas import FieldError, PathSegment

REFERENCE_ERROR_CODE = "custom"


def check_integrations_exist(
    records: Optional[Union[Mapping[str, Any], Sequence[str]]],
    known_keys: Set[str],
    path: List[PathSegment],
) -> Optional[List[FieldError]]:
    """
    Check that every referenced integration key exists for the tenant.

    Mappings are checked by key and reported as ``path + [key]``. Sequences
    are checked by value and reported as ``path + [index]``.

    Args:
        records: Referencing records, or None when the field was absent
        known_keys: Unique keys of the tenant's integrations
        path: Breadcrumb of the referencing field

    Returns:
        One field error per unknown key in iteration order, or None
    """
    if not records:
        return None

    entries: Iterable
    if isinstance(records, Mapping):
        entries = ((key, key) for key in records.keys())
    else:
        entries = enumerate(records)

    errors = [
        FieldError(
            path=[*path, segment],
            code=REFERENCE_ERROR_CODE,
            message=ReplyMessage.INTEGRATION_NOT_FOUND,
            kind=FieldErrorKind.REFERENCE,
        )
        for segment, key in entries
        if key not in known_keys
    ]
    return errors or None


def gate_overrides(
    overrides: Optional[Mapping[str, IntegrationOverride]],
    can_override_docs_connect_url: bool,
) -> GateDecision:
    """Deny when any override sets a documentation link the plan does not allow."""
    if can_override_docs_connect_url or not overrides:
        return GateDecision.ALLOWED

    if any(override.docs_connect for override in overrides.values()):
        return GateDecision.DENIED
    return GateDecision.ALLOWED
