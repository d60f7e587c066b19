"""mapbind — bind string-keyed maps to typed Python classes and back.

Declare fields once, as annotations, and get two inverse operations:

    >>> from typing import Optional
    >>> from mapbind import Serializable, field
    >>> class Note(Serializable):
    ...     message: str = "DEFAULT"
    >>> class Location(Serializable):
    ...     latitude: float = field(key="lat")
    ...     longitude: float = field(key="lon")
    ...     note: Optional[Note] = None
    >>> loc = Location.from_map({"lat": 12.3, "lon": 34.5, "note": {}})
    >>> loc.note.message
    'DEFAULT'
    >>> loc.to_map()
    {'lat': 12.3, 'lon': 34.5, 'note': {'message': 'DEFAULT'}}

Per-field rules go in ``field(...)``: key aliasing, defaults, presence
tracking, casts and the ignore flags.  What happens to input keys no field
claims is chosen by composing a mixin:

    - nothing      unknown keys are dropped
    - Strict       unknown keys raise UnknownKey
    - Unmapped[T]  unknown keys are kept in ``map_unmapped`` and re-emitted

All failures are SerializableError subclasses whose message ends with
"parsing <TypeName>#<field>".
"""

from __future__ import annotations

from ._casts import get_cast, register_cast
from ._core import Serializable, normalize_key
from ._descriptor import MISSING, FieldDescriptor, field
from ._errors import (
    ERR_CONFIG,
    ERR_DECODE,
    ERR_MISSING,
    ERR_TYPE,
    ERR_UNKNOWN_KEY,
    ConfigurationError,
    DecodeError,
    MissingRequiredField,
    SerializableError,
    TypeMismatch,
    UnknownKey,
)
from ._json_adapter import from_json, to_json
from ._policy import Strict, Unmapped

__version__ = "0.1.0"

__all__ = [
    # Marshaling
    "Serializable",
    "field",
    "FieldDescriptor",
    "MISSING",
    "normalize_key",
    # Unknown-key policies
    "Strict",
    "Unmapped",
    # Casts
    "register_cast",
    "get_cast",
    # JSON
    "from_json",
    "to_json",
    # Exceptions
    "SerializableError",
    "ConfigurationError",
    "MissingRequiredField",
    "TypeMismatch",
    "UnknownKey",
    "DecodeError",
    # Error codes
    "ERR_CONFIG",
    "ERR_MISSING",
    "ERR_TYPE",
    "ERR_UNKNOWN_KEY",
    "ERR_DECODE",
]
