"""mapbind unknown-key policies — what happens to keys no field claims.

    (nothing composed)  Ignore    leftover keys are dropped
    Strict              Strict    the first leftover key raises UnknownKey
    Unmapped[T]         Unmapped  leftovers are kept in ``map_unmapped`` and
                                  re-emitted by ``to_map``

A class picks a policy by listing the mixin among its bases, in any
position:

    class Params(Strict, Serializable): ...
    class Record(Serializable, Unmapped[Union[str, int, None]]): ...

The mixins only carry a class attribute; ``Serializable.on_unknown_key``
dispatches on it, so the order of bases never matters.  Override
``on_unknown_key`` on a class for anything more exotic.
"""

from __future__ import annotations

import logging
from typing import Any

from ._constants import UNMAPPED_ATTR
from ._errors import ConfigurationError, UnknownKey
from ._types import matches, type_name

logger = logging.getLogger(__name__)

POLICY_ATTR = "__map_policy__"
UNMAPPED_TYPE_ATTR = "__map_unmapped_type__"

POLICY_IGNORE = "ignore"
POLICY_STRICT = "strict"
POLICY_UNMAPPED = "unmapped"


class Strict:
    """Fail construction on any key that no field binds to."""

    __map_policy__ = POLICY_STRICT


class Unmapped:
    """Capture unknown keys and round-trip them through ``to_map``.

    ``Unmapped[T]`` bounds the captured values: a leftover value that is
    not a ``T`` is stored as None.  Bare ``Unmapped`` accepts anything.
    """

    __map_policy__ = POLICY_UNMAPPED
    __map_unmapped_type__: Any = Any

    def __class_getitem__(cls, value_type: Any) -> type:
        return type(
            "{}[{}]".format(cls.__name__, type_name(value_type)),
            (cls,),
            {UNMAPPED_TYPE_ATTR: value_type, "__module__": cls.__module__},
        )


def policy_of(cls: type) -> str:
    return getattr(cls, POLICY_ATTR, POLICY_IGNORE)


def check_policy(cls: type) -> None:
    """Reject classes that compose conflicting policies."""
    if issubclass(cls, Strict) and issubclass(cls, Unmapped):
        raise ConfigurationError(
            "Strict and Unmapped cannot be combined", cls.__name__)


def handle_unknown_key(obj: Any, key: str, value: Any) -> None:
    cls = type(obj)
    policy = policy_of(cls)

    if policy == POLICY_STRICT:
        raise UnknownKey("Unknown map key: {}".format(key), cls.__name__, key)

    if policy == POLICY_UNMAPPED:
        store = obj.__dict__.setdefault(UNMAPPED_ATTR, {})
        bound = getattr(cls, UNMAPPED_TYPE_ATTR, Any)
        store[key] = value if matches(value, bound) else None
        return

    logger.debug("ignoring unknown key %r for %s", key, cls.__name__)
