"""mapbind named casts — the registry behind ``field(cast="name")``.

A cast is a unary callable applied to the raw map value before the type
check.  Fields may pass a callable directly; passing a string looks the
callable up here *at descriptor build time*, so a typo in a cast name is a
ConfigurationError when the class is defined rather than a surprise on the
first document that happens to carry the key.

Built-in names:

    int, float, str     the builtins
    bool                strings from a fixed true/false vocabulary, or bool()
    decimal             decimal.Decimal, via str() for floats
    datetime, date      ISO 8601 strings; values already of the type pass through
    upper, lower, strip the str methods; non-str values fail the cast

None is a value like any other to a cast.  The built-ins reject it with
TypeError, so a null still falls back to the field's default or None.
"""

from __future__ import annotations

import datetime
import decimal
import logging
import operator
from typing import Any, Callable, Dict

from ._constants import FALSE_STRINGS, TRUE_STRINGS
from ._errors import ConfigurationError

logger = logging.getLogger(__name__)

Cast = Callable[[Any], Any]


def _to_str(value: Any) -> str:
    if value is None:
        raise TypeError("cannot cast None to str")
    return str(value)


def _str_method(name: str) -> Cast:
    call = operator.methodcaller(name)

    def cast(value: Any) -> str:
        if not isinstance(value, str):
            raise TypeError("{} needs a str, got {}".format(name, type(value).__name__))
        return call(value)

    cast.__name__ = name
    return cast


def _to_bool(value: Any) -> bool:
    if value is None:
        raise TypeError("cannot cast None to bool")
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_STRINGS:
            return True
        if lowered in FALSE_STRINGS:
            return False
        raise ValueError("not a boolean string: {!r}".format(value))
    return bool(value)


def _to_decimal(value: Any) -> decimal.Decimal:
    # Decimal(0.1) keeps the binary float error; going through str() doesn't.
    if isinstance(value, float):
        value = str(value)
    try:
        return decimal.Decimal(value)
    except decimal.InvalidOperation as exc:
        raise ValueError("not a decimal: {!r}".format(value)) from exc


def _to_datetime(value: Any) -> datetime.datetime:
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, str):
        # fromisoformat() only learned the "Z" suffix in 3.11.
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        return datetime.datetime.fromisoformat(value)
    raise TypeError("cannot cast {} to datetime".format(type(value).__name__))


def _to_date(value: Any) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        return datetime.date.fromisoformat(value)
    raise TypeError("cannot cast {} to date".format(type(value).__name__))


_REGISTRY: Dict[str, Cast] = {
    "int": int,
    "float": float,
    "str": _to_str,
    "bool": _to_bool,
    "decimal": _to_decimal,
    "datetime": _to_datetime,
    "date": _to_date,
    "upper": _str_method("upper"),
    "lower": _str_method("lower"),
    "strip": _str_method("strip"),
}


def register_cast(name: str, fn: Cast, *, replace: bool = False) -> None:
    """Make ``fn`` available as ``field(cast=name)``.

    Registering a name twice is a ConfigurationError unless ``replace`` is
    set.  Classes already defined keep the callable they resolved.
    """
    if not callable(fn):
        raise ConfigurationError(
            "cast {!r} must be callable, got {}".format(name, type(fn).__name__),
            "register_cast")
    if name in _REGISTRY and not replace:
        raise ConfigurationError(
            "cast {!r} is already registered".format(name), "register_cast")
    _REGISTRY[name] = fn
    logger.debug("registered cast %r -> %r", name, fn)


def get_cast(name: str) -> Cast:
    """Look up a registered cast.  Raises KeyError for unknown names."""
    return _REGISTRY[name]


def resolve_cast(cast: Any, klass: str, attribute: str) -> Cast:
    """Turn a ``field(cast=...)`` argument into a callable, or fail the build."""
    if isinstance(cast, str):
        try:
            return _REGISTRY[cast]
        except KeyError:
            raise ConfigurationError(
                "Unknown cast {!r}".format(cast), klass, attribute) from None
    if callable(cast):
        return cast
    raise ConfigurationError(
        "cast must be a callable or a registered cast name, got {}".format(
            type(cast).__name__),
        klass, attribute)
