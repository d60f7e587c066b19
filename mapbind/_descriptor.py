"""mapbind field descriptors — per-field marshaling rules, built once per class.

A marshalable class declares its fields as annotations, dataclass style:

    class Location(Serializable):
        latitude: float = field(key="lat")
        longitude: float = field(key="lon")
        label: Optional[str] = None

``build_descriptors`` turns those annotations into a tuple of frozen
``FieldDescriptor`` objects.  All configuration errors (duplicate keys,
unknown casts, mutable defaults...) surface here, so a bad declaration
fails when the class is built rather than on the first document.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple

from ._casts import Cast, resolve_cast
from ._constants import MUTABLE_DEFAULT_TYPES, PRESENCE_SUFFIX
from ._errors import ConfigurationError
from ._types import is_nilable, resolve_nested

logger = logging.getLogger(__name__)

# Class attribute holding the FieldSpec objects harvested from one class body.
SPECS_ATTR = "__map_fieldspecs__"


class _Missing:
    __slots__ = ()

    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


class FieldSpec:
    """What ``field(...)`` returns; only lives in a class body until harvested."""

    __slots__ = ("key", "default", "default_factory", "presence", "cast",
                 "ignore", "ignore_on_read", "ignore_on_write")

    def __init__(self, key, default, default_factory, presence, cast,
                 ignore, ignore_on_read, ignore_on_write):
        self.key = key
        self.default = default
        self.default_factory = default_factory
        self.presence = presence
        self.cast = cast
        self.ignore = ignore
        self.ignore_on_read = ignore_on_read
        self.ignore_on_write = ignore_on_write

    def __repr__(self) -> str:
        return "field(key={!r}, default={!r})".format(self.key, self.default)


def field(*, key: Optional[str] = None,
          default: Any = MISSING,
          default_factory: Any = MISSING,
          presence: bool = False,
          cast: Any = None,
          ignore: bool = False,
          ignore_on_read: bool = False,
          ignore_on_write: bool = False) -> Any:
    """Declare marshaling rules for one field.

    key              map key to bind to (default: the attribute name)
    default          value used when the key is absent
    default_factory  zero-argument callable producing the default
    presence         maintain ``<name>_present`` on the instance
    cast             callable, or registered cast name, applied to the raw value
    ignore           skip the field in both directions
    ignore_on_read   skip it in ``from_map`` only
    ignore_on_write  skip it in ``to_map`` only
    """
    return FieldSpec(key, default, default_factory, presence, cast,
                     ignore, ignore_on_read, ignore_on_write)


@dataclass(frozen=True)
class FieldDescriptor:
    name: str
    key: str
    declared_type: Any
    nilable: bool
    has_default: bool
    default: Any = MISSING
    default_factory: Optional[Callable[[], Any]] = None
    presence: bool = False
    cast: Optional[Cast] = None
    ignore: bool = False
    ignore_on_read: bool = False
    ignore_on_write: bool = False
    nested: Optional[type] = None

    @property
    def readable(self) -> bool:
        return not (self.ignore or self.ignore_on_read)

    @property
    def writable(self) -> bool:
        return not (self.ignore or self.ignore_on_write)

    @property
    def presence_attr(self) -> str:
        return self.name + PRESENCE_SUFFIX

    def default_value(self) -> Any:
        """Materialise the default.  Factories run on every call."""
        if self.default_factory is not None:
            return self.default_factory()
        return self.default


# ── Harvesting ────────────────────────────────────────────────
# field(...) objects must not stay behind as class attributes, or an
# instance missing the attribute would read the FieldSpec back.  They are
# moved into a per-class dict and replaced by the plain default, if any.

def harvest_specs(cls: type) -> None:
    specs: Dict[str, FieldSpec] = {}
    for name, value in list(cls.__dict__.items()):
        if isinstance(value, FieldSpec):
            specs[name] = value
            if value.default is not MISSING:
                setattr(cls, name, value.default)
            else:
                delattr(cls, name)
    setattr(cls, SPECS_ATTR, specs)


def _lookup(cls: type, name: str) -> Tuple[Optional[FieldSpec], Any]:
    """Find the spec and the plain class-level default for ``name`` along the MRO."""
    for klass in cls.__mro__:
        spec = klass.__dict__.get(SPECS_ATTR, {}).get(name)
        if spec is not None:
            return spec, MISSING
        if name in klass.__dict__:
            return None, klass.__dict__[name]
    return None, MISSING


def _is_classvar(tp: Any) -> bool:
    return tp is ClassVar or typing.get_origin(tp) is ClassVar


# ── Building ──────────────────────────────────────────────────

def resolve_hints(cls: type) -> Dict[str, Any]:
    """Resolve annotations of ``cls`` and its bases.

    NameError (a forward reference to something not defined yet) is left
    to the caller, which may retry later.  Anything else is fatal.
    """
    try:
        return typing.get_type_hints(cls)
    except NameError:
        raise
    except TypeError as exc:
        raise ConfigurationError(
            "cannot resolve type hints: {}".format(exc), cls.__name__) from exc


def build_descriptors(cls: type, base: type) -> Tuple[FieldDescriptor, ...]:
    """Build the descriptor tuple for ``cls``.

    ``base`` is the marshalable base class; fields whose type is a subclass
    of it are marked for nested resolution.
    """
    klass = cls.__name__
    hints = resolve_hints(cls)

    descriptors = []
    seen_keys: Dict[str, str] = {}
    for name, tp in hints.items():
        if name.startswith("__") or _is_classvar(tp):
            continue

        spec, plain_default = _lookup(cls, name)
        if spec is None:
            spec = FieldSpec(None, plain_default, MISSING, False, None,
                             False, False, False)

        if spec.default is not MISSING and spec.default_factory is not MISSING:
            raise ConfigurationError(
                "cannot specify both default and default_factory", klass, name)
        if isinstance(spec.default, MUTABLE_DEFAULT_TYPES):
            raise ConfigurationError(
                "mutable default {} is not allowed, use default_factory".format(
                    type(spec.default).__name__),
                klass, name)
        if spec.default_factory is not MISSING and not callable(spec.default_factory):
            raise ConfigurationError("default_factory must be callable", klass, name)

        key = name if spec.key is None else str(spec.key)
        if key in seen_keys:
            raise ConfigurationError(
                "duplicate key {!r} (also used by field {})".format(
                    key, seen_keys[key]),
                klass, name)
        seen_keys[key] = name

        nilable = is_nilable(tp)
        has_default = (spec.default is not MISSING
                       or spec.default_factory is not MISSING)
        if (spec.ignore or spec.ignore_on_read) and not (has_default or nilable):
            raise ConfigurationError(
                "field ignored on read needs a default or an Optional type",
                klass, name)

        descriptors.append(FieldDescriptor(
            name=name,
            key=key,
            declared_type=tp,
            nilable=nilable,
            has_default=has_default,
            default=spec.default,
            default_factory=(None if spec.default_factory is MISSING
                             else spec.default_factory),
            presence=bool(spec.presence),
            cast=(None if spec.cast is None
                  else resolve_cast(spec.cast, klass, name)),
            ignore=bool(spec.ignore),
            ignore_on_read=bool(spec.ignore_on_read),
            ignore_on_write=bool(spec.ignore_on_write),
            nested=resolve_nested(tp, base),
        ))

    logger.debug("built %d field descriptor(s) for %s", len(descriptors), klass)
    return tuple(descriptors)
