"""mapbind error codes and exception classes.

Every failure surfaced by the library is a ``SerializableError``.  The
subclass tells you *when* it happened (descriptor build vs. construction
vs. JSON decoding); the ``.code`` attribute is the grep-friendly string
that the CLI prints and tests compare against.

The message always carries its context:

    Value for key count is not present, and this field is not nilable and has no default.
      parsing Counter#count
"""

from __future__ import annotations

from typing import Optional

from ._constants import ERROR_CONTEXT

# ── Error codes ───────────────────────────────────────────────

ERR_CONFIG: str = "ERR_CONFIG"            # bad class declaration (build time)
ERR_MISSING: str = "ERR_MISSING"          # required field absent or None
ERR_TYPE: str = "ERR_TYPE"                # value not coercible to field type
ERR_UNKNOWN_KEY: str = "ERR_UNKNOWN_KEY"  # leftover key under Strict
ERR_DECODE: str = "ERR_DECODE"            # input (JSON text, bytes key) not decodable


class SerializableError(Exception):
    """Base exception for mapbind.

    ``klass`` is the name of the type being parsed (or declared), and
    ``attribute`` the field or key the error is about, when there is one.
    """

    code: str = "ERR_SERIALIZABLE"

    def __init__(self, message: str, klass: str,
                 attribute: Optional[str] = None) -> None:
        self.message = message
        self.klass = klass
        self.attribute = attribute
        super().__init__(ERROR_CONTEXT.format(
            message=message,
            klass=klass,
            attribute="#{}".format(attribute) if attribute else "",
        ))


class ConfigurationError(SerializableError):
    """The class declaration itself is invalid.  Retrying cannot help."""

    code = ERR_CONFIG


class MissingRequiredField(SerializableError):
    code = ERR_MISSING


class TypeMismatch(SerializableError):
    """A present value could not be coerced to the declared type."""

    code = ERR_TYPE

    def __init__(self, message: str, klass: str,
                 attribute: Optional[str] = None,
                 expected: object = None, value: object = None) -> None:
        super().__init__(message, klass, attribute)
        self.expected = expected
        self.value = value


class UnknownKey(SerializableError):
    code = ERR_UNKNOWN_KEY


class DecodeError(SerializableError):
    """Input could not be decoded (JSON text, a bytes key) before any binding
    took place."""

    code = ERR_DECODE
