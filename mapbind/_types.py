"""mapbind static type analysis — nilability, runtime type checks, nested resolution.

Everything in here works on *resolved* type hints (the output of
``typing.get_type_hints``), never on annotation strings.  The results that
only depend on the hint (nilability, the nested marshalable type) are
computed once per field at descriptor build time and cached on the
descriptor; ``matches`` is the only function called per value.

Supported hint shapes:

    Any, object               — anything, including None
    None / NoneType           — only None
    Optional[T], T | None     — Union with NoneType
    Union[A, B, ...]          — any member
    Literal[...]              — membership (type-exact, so True != 1)
    list[T], set[T], ...      — container class + every element
    tuple[T, ...], tuple[A, B]
    dict[K, V], Mapping[K, V] — container class + every key and value
    NewType, TypeVar          — supertype / bound
    any other class           — isinstance
"""

from __future__ import annotations

import collections.abc
import types
from typing import (
    Any,
    Literal,
    Optional,
    Tuple,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

NONE_TYPE = type(None)

# ``int | None`` (PEP 604) produces types.UnionType rather than typing.Union.
_UNION_ORIGINS: Tuple[Any, ...] = tuple(
    o for o in (Union, getattr(types, "UnionType", None)) if o is not None
)

_SEQUENCE_ORIGINS = (list, set, frozenset,
                     collections.abc.Sequence,
                     collections.abc.MutableSequence,
                     collections.abc.Set,
                     collections.abc.MutableSet,
                     collections.abc.Collection,
                     collections.abc.Iterable)

_MAPPING_ORIGINS = (dict,
                    collections.abc.Mapping,
                    collections.abc.MutableMapping)


def union_members(tp: Any) -> Tuple[Any, ...]:
    """Flatten a Union/Optional into its members; anything else is a 1-tuple."""
    if get_origin(tp) in _UNION_ORIGINS:
        return tuple(get_args(tp))
    return (tp,)


def is_nilable(tp: Any) -> bool:
    """True when None is an acceptable value for ``tp``."""
    if tp is Any or tp is object or tp is None or tp is NONE_TYPE:
        return True
    return any(m is NONE_TYPE or m is Any or m is object
               for m in union_members(tp))


def strip_nil(tp: Any) -> Any:
    """Remove NoneType from a union.  ``Optional[int]`` → ``int``."""
    members = [m for m in union_members(tp) if m is not NONE_TYPE]
    if not members:
        return NONE_TYPE
    if len(members) == 1:
        return members[0]
    return Union[tuple(members)]


def resolve_nested(tp: Any, base: type) -> Optional[type]:
    """Return the marshalable class a field recurses into, or None.

    Nilability is stripped and unions unwrapped; the first member that is
    a subclass of ``base`` wins.  Only the field's own type counts, a
    ``list[Note]`` is a leaf.
    """
    for member in union_members(strip_nil(tp)):
        if isinstance(member, type) and issubclass(member, base):
            return member
    return None


def type_name(tp: Any) -> str:
    """Human-readable name of a hint, for error messages."""
    if tp is NONE_TYPE or tp is None:
        return "None"
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__name__
    return repr(tp).replace("typing.", "")


# ── Runtime type check ────────────────────────────────────────
# The one Python trap that matters here: bool is a subclass of int, so
# isinstance(True, int) is True.  A field declared ``int`` must not
# silently accept True, and a ``bool`` field must not accept 1.

def matches(value: Any, tp: Any) -> bool:
    """Check ``value`` against a resolved type hint."""
    if tp is Any or tp is object:
        return True
    if tp is None or tp is NONE_TYPE:
        return value is None

    origin = get_origin(tp)
    args = get_args(tp)

    if origin in _UNION_ORIGINS:
        return any(matches(value, m) for m in args)

    if origin is Literal:
        return any(type(value) is type(a) and value == a for a in args)

    if origin is tuple:
        if not isinstance(value, tuple):
            return False
        if not args:
            return True
        if len(args) == 2 and args[1] is Ellipsis:
            return all(matches(v, args[0]) for v in value)
        if args == ((),):  # tuple[()]
            return len(value) == 0
        return len(value) == len(args) and all(
            matches(v, a) for v, a in zip(value, args))

    if origin in _MAPPING_ORIGINS:
        if not isinstance(value, origin):
            return False
        if len(args) != 2:
            return True
        return all(matches(k, args[0]) and matches(v, args[1])
                   for k, v in value.items())

    if origin in _SEQUENCE_ORIGINS:
        # A str is a Sequence, but nobody declaring Sequence[str] means it.
        if isinstance(value, (str, bytes)):
            return False
        if not isinstance(value, origin):
            return False
        if not args:
            return True
        return all(matches(v, args[0]) for v in value)

    if origin is not None:
        # Some other parametrised generic: check the runtime class only.
        return isinstance(origin, type) and isinstance(value, origin)

    if isinstance(tp, TypeVar):
        if tp.__bound__ is not None:
            return matches(value, tp.__bound__)
        if tp.__constraints__:
            return any(matches(value, c) for c in tp.__constraints__)
        return True

    supertype = getattr(tp, "__supertype__", None)  # typing.NewType
    if supertype is not None:
        return matches(value, supertype)

    if tp is bool:
        return isinstance(value, bool)
    if tp is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if tp is float:
        # Numeric tower: an int is an acceptable float.
        return isinstance(value, (int, float)) and not isinstance(value, bool)

    if isinstance(tp, type):
        return isinstance(value, tp)

    return False
