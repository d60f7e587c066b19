"""mapbind core — the Serializable base class: from_map, to_map, construction.

Subclassing ``Serializable`` builds the class's field descriptors once
(see ``_descriptor``) and gives it two inverse operations:

    Cls.from_map(mapping) -> Cls     map → object, all-or-nothing
    obj.to_map()          -> dict    object → map

Construction stages every field value first and only hands back an
instance once every field resolved and the unknown-key policy accepted the
leftovers; a failure at any point raises and no instance escapes.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any, Dict, Tuple, Type, TypeVar

from ._coerce import coerce, missing_message
from ._constants import DESCRIPTORS_ATTR, UNMAPPED_ATTR
from ._descriptor import FieldDescriptor, build_descriptors, harvest_specs
from ._errors import (
    ConfigurationError,
    DecodeError,
    MissingRequiredField,
    TypeMismatch,
)
from ._policy import POLICY_UNMAPPED, check_policy, handle_unknown_key, policy_of

logger = logging.getLogger(__name__)

T = TypeVar("T", bound="Serializable")


# ── Key normalisation ────────────────────────────────────────
# Descriptors bind str keys.  Callers may hand us bytes, enum members or
# anything else with a sensible str(); they all collapse to str before
# lookup.  If two input keys collapse to the same str, the later one wins.

def normalize_key(key: Any) -> str:
    # Enum first: a (str, Enum) member is a str but not a plain one.
    if isinstance(key, Enum):
        return str.__str__(key.value) if isinstance(key.value, str) else key.name
    if isinstance(key, str):
        return key
    if isinstance(key, bytes):
        return key.decode("utf-8")
    return str(key)


def normalize_keys(mapping: Mapping, klass: str) -> Dict[str, Any]:
    """Normalise every key of ``mapping``; raises DecodeError for bad bytes."""
    data: Dict[str, Any] = {}
    for key, value in mapping.items():
        try:
            data[normalize_key(key)] = value
        except UnicodeDecodeError as exc:
            raise DecodeError(
                "map key {!r} is not valid UTF-8".format(key), klass) from exc
    return data


class Serializable:
    """Base class for types bound to and from string-keyed maps.

    Example:
        >>> class Note(Serializable):
        ...     message: str = "DEFAULT"
        >>> class House(Serializable):
        ...     address: str
        ...     note: Note
        >>> house = House.from_map({"address": "Crystal Road 1234",
        ...                         "note": {"message": "Nice Address"}})
        >>> house.note.message
        'Nice Address'
        >>> house.to_map()
        {'address': 'Crystal Road 1234', 'note': {'message': 'Nice Address'}}
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        harvest_specs(cls)
        check_policy(cls)
        try:
            setattr(cls, DESCRIPTORS_ATTR, build_descriptors(cls, Serializable))
        except NameError as exc:
            # Forward reference to a class defined later; retried on first use.
            logger.debug("deferring descriptor build for %s: %s",
                         cls.__name__, exc)

    @classmethod
    def descriptors(cls) -> Tuple[FieldDescriptor, ...]:
        """The class's field descriptors, built on first call if deferred."""
        cached = cls.__dict__.get(DESCRIPTORS_ATTR)
        if cached is None:
            try:
                cached = build_descriptors(cls, Serializable)
            except NameError as exc:
                raise ConfigurationError(
                    "cannot resolve type hints: {}".format(exc),
                    cls.__name__) from exc
            setattr(cls, DESCRIPTORS_ATTR, cached)
        return cached

    def __init__(self, **kwargs: Any) -> None:
        """Construct from attribute values directly.

        Defaults and nilability apply as in ``from_map``; no casting, no
        nested resolution, presence flags start False.
        """
        cls = type(self)
        descriptors = cls.descriptors()
        names = {d.name for d in descriptors}
        for name in kwargs:
            if name not in names:
                raise TypeError("{}() got an unexpected keyword argument {!r}"
                                .format(cls.__name__, name))

        for desc in descriptors:
            if desc.name in kwargs:
                value = kwargs[desc.name]
            elif desc.has_default:
                value = desc.default_value()
            elif desc.nilable:
                value = None
            else:
                raise MissingRequiredField(
                    missing_message(desc), cls.__name__, desc.name)
            setattr(self, desc.name, value)

        for desc in descriptors:
            if desc.presence and desc.presence_attr not in names:
                setattr(self, desc.presence_attr, False)
        if policy_of(cls) == POLICY_UNMAPPED:
            setattr(self, UNMAPPED_ATTR, {})
        self.after_initialize()

    # ── map → object ──────────────────────────────────────────

    @classmethod
    def from_map(cls: Type[T], mapping: Mapping) -> T:
        klass = cls.__name__
        if not isinstance(mapping, Mapping):
            raise TypeMismatch(
                "from_map requires a mapping, but got a {}".format(
                    type(mapping).__name__),
                klass, expected=Mapping, value=mapping)

        data = normalize_keys(mapping, klass)
        found: Dict[str, bool] = {}
        staged: Dict[str, Any] = {}
        presence: Dict[str, bool] = {}

        for desc in cls.descriptors():
            if not desc.readable:
                staged[desc.name] = desc.default_value() if desc.has_default else None
                if desc.presence:
                    presence[desc.presence_attr] = False
                continue

            if desc.key in data:
                found[desc.key] = True
                staged[desc.name] = coerce(desc, data[desc.key], klass)
            else:
                found[desc.key] = False
                if desc.has_default:
                    staged[desc.name] = desc.default_value()
                elif desc.nilable:
                    staged[desc.name] = None
                else:
                    raise MissingRequiredField(missing_message(desc), klass, desc.name)

            if desc.presence:
                presence[desc.presence_attr] = found[desc.key]

        instance = cls.__new__(cls)
        for name, value in staged.items():
            setattr(instance, name, value)
        # Presence flags win over a declared companion field of the same name.
        for name, flag in presence.items():
            setattr(instance, name, flag)
        if policy_of(cls) == POLICY_UNMAPPED:
            setattr(instance, UNMAPPED_ATTR, {})

        for key, value in data.items():
            if key not in found:
                instance.on_unknown_key(key, value)

        instance.after_initialize()
        return instance

    # ── object → map ──────────────────────────────────────────

    def to_map(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        for desc in type(self).descriptors():
            if not desc.writable:
                continue
            value = getattr(self, desc.name)
            if isinstance(value, Serializable):
                value = value.to_map()
            result[desc.key] = value

        # Declared keys win; Unmapped never holds one in practice.
        unmapped = self.__dict__.get(UNMAPPED_ATTR)
        if unmapped:
            for key, value in unmapped.items():
                result.setdefault(key, value)
        return result

    # ── Hooks ─────────────────────────────────────────────────

    def after_initialize(self) -> None:
        """Called once the instance is fully populated.  Raise to reject it."""

    def on_unknown_key(self, key: str, value: Any) -> None:
        """Called for each input key no field claimed, in input order."""
        handle_unknown_key(self, key, value)

    # ── Value semantics ───────────────────────────────────────

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        for desc in type(self).descriptors():
            if getattr(self, desc.name) != getattr(other, desc.name):
                return False
        return (self.__dict__.get(UNMAPPED_ATTR)
                == other.__dict__.get(UNMAPPED_ATTR))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        parts = ", ".join(
            "{}={!r}".format(d.name, getattr(self, d.name, None))
            for d in type(self).descriptors())
        return "{}({})".format(type(self).__name__, parts)
