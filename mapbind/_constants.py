"""mapbind constants — attribute naming, error context format, cast vocabulary.

Everything here is library-wide.  Per-class configuration lives on the
class declaration itself (annotations, ``field(...)`` and mixins).
"""

from __future__ import annotations

# Companion attribute written for ``field(presence=True)``:
# ``created_at`` -> ``created_at_present``.
PRESENCE_SUFFIX: str = "_present"

# Instance attribute holding captured leftover keys (Unmapped policy).
UNMAPPED_ATTR: str = "map_unmapped"

# Class attribute caching the built descriptor tuple.  Looked up through
# ``cls.__dict__`` only, so a subclass never sees its parent's cache.
DESCRIPTORS_ATTR: str = "__map_descriptors__"

# Error context appended to every SerializableError message.
# Rendered as "<message>\n  parsing <TypeName>[#<attribute>]".
ERROR_CONTEXT: str = "{message}\n  parsing {klass}{attribute}"

# ── Boolean cast vocabulary ──────────────────────────────────
# Lower-cased string forms accepted by the named "bool" cast.
TRUE_STRINGS = frozenset({"true", "yes", "on", "1", "t", "y"})
FALSE_STRINGS = frozenset({"false", "no", "off", "0", "f", "n"})

# Container defaults that would be shared between instances.
MUTABLE_DEFAULT_TYPES = (list, dict, set)
