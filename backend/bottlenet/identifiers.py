"""
BottleNet Backend: Identifier Helpers
======================================

What:  Generation and validation of the opaque document ids used by every
       collection (users, messages, threads).
Why:   Ids cross the HTTP boundary as hex strings; a malformed id must be
       rejected with 400 before any store lookup happens.

Format:
    32 lowercase hex characters (uuid4().hex). Uppercase input is accepted
    and normalized; anything else is a ValidationError.
"""

import re
import uuid
from typing import Optional

from bottlenet.exceptions import ValidationError

OBJECT_ID_LENGTH = 32
_OBJECT_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def new_object_id() -> str:
    """Generate a fresh store id."""
    return uuid.uuid4().hex


def is_object_id(value: Optional[str]) -> bool:
    if not isinstance(value, str):
        return False
    return bool(_OBJECT_ID_RE.match(value.strip().lower()))


def validate_object_id(value: Optional[str], field: str = "id") -> str:
    """
    Return the normalized id or raise ValidationError.

    Args:
        value: Raw id from a path, query string or body
        field: Client-facing field name, echoed in the error details

    Raises:
        ValidationError: Missing or malformed id (→ 400)
    """
    if not is_object_id(value):
        raise ValidationError(
            message=f"Invalid {field}",
            field=field,
            context={"value": value},
        )
    return value.strip().lower()
