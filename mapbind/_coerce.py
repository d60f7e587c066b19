"""mapbind value coercion — raw map value → typed field value.

Resolution order for a present key:

    1. cast (if declared) produces the candidate, else the raw value is it
    2. a Mapping candidate on a nested field is handed to the nested from_map
    3. candidate matches the declared type (nilability stripped) → accept
    4. field has a default                                       → default
    5. field is nilable                                          → None
    6. candidate is None                                         → MissingRequiredField
    7. otherwise                                                 → TypeMismatch

A declared cast sees every present value, None included.  A present
``None`` that no cast turned into a value behaves like an absent key,
except that the presence flag records it as seen.

Casts that raise ValueError or TypeError count as a failed type check, so
defaults and nilability still apply; if nothing rescues the field the
TypeMismatch chains the cast's exception.  Any other exception a cast
raises propagates as is.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from ._descriptor import FieldDescriptor
from ._errors import MissingRequiredField, TypeMismatch
from ._types import matches, strip_nil, type_name


def missing_message(desc: FieldDescriptor) -> str:
    return ("Value for key {} is not present, and this field is not nilable "
            "and has no default.".format(desc.key))


def coerce(desc: FieldDescriptor, raw: Any, klass: str) -> Any:
    """Coerce the value found at ``desc.key`` for the type named ``klass``."""
    candidate = raw
    cause: Optional[Exception] = None

    if desc.cast is not None:
        try:
            candidate = desc.cast(raw)
        except (ValueError, TypeError) as exc:
            cause = exc

    if cause is None:
        if desc.nested is not None and isinstance(candidate, Mapping):
            return desc.nested.from_map(candidate)
        if candidate is not None and matches(candidate, strip_nil(desc.declared_type)):
            return candidate

    if desc.has_default:
        return desc.default_value()
    if desc.nilable:
        return None
    # A None the cast could not convert is still a missing value.
    if candidate is None:
        raise MissingRequiredField(missing_message(desc), klass, desc.name)

    expected = type_name(strip_nil(desc.declared_type))
    if cause is not None:
        message = "Cast for key {} failed: {}".format(desc.key, cause)
    else:
        message = "Expected {} for key {}, got {} {!r}".format(
            expected, desc.key, type(candidate).__name__, candidate)
    raise TypeMismatch(message, klass, desc.name,
                       expected=desc.declared_type, value=raw) from cause
