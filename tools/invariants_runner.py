#!/usr/bin/env python3
# tools/invariants_runner.py
#
# Marshaling invariants (property tests) over a handful of sample schemas.
#
# This runner:
# - generates random instances of the sample classes below
# - checks round trip, default idempotence, presence accuracy,
#   Unmapped re-emission and key normalisation
#
# Exit code:
#   0 -> all checks passed
#   1 -> invariant violation

import datetime
import enum
import os
import random
import sys
from typing import Any, Dict, List, Optional

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from mapbind import Serializable, Unmapped, field  # noqa: E402

SEED = int(os.environ.get("MAPBIND_SEED", "1337"))
TRIALS = int(os.environ.get("MAPBIND_TRIALS", "2000"))
MAX_STR = int(os.environ.get("MAPBIND_MAX_STR", "24"))
MAX_LIST = int(os.environ.get("MAPBIND_MAX_LIST", "6"))


# ── Sample schemas ────────────────────────────────────────────

class Note(Serializable):
    message: str = "DEFAULT"


class Location(Serializable):
    latitude: float = field(key="lat")
    longitude: float = field(key="lon")
    note: Note


class House(Serializable):
    address: str
    location: Optional[Location] = None
    note: Note
    tags: List[str] = field(default_factory=list)


class Reading(Serializable, Unmapped):
    sensor: str
    value: Optional[int] = field(presence=True)
    taken_at: datetime.datetime = field(key="ts")


# ── Generators ────────────────────────────────────────────────

def rand_str() -> str:
    n = random.randint(0, MAX_STR)
    return "".join(chr(random.randint(0x20, 0x7E)) for _ in range(n))


def rand_float() -> float:
    return round(random.uniform(-180, 180), 6)


def gen_note() -> Note:
    return Note(message=rand_str())


def gen_location() -> Location:
    return Location(latitude=rand_float(), longitude=rand_float(), note=gen_note())


def gen_house() -> House:
    return House(
        address=rand_str(),
        location=gen_location() if random.random() < 0.7 else None,
        note=gen_note(),
        tags=[rand_str() for _ in range(random.randint(0, MAX_LIST))],
    )


def gen_extras(taken: List[str]) -> Dict[str, Any]:
    extras: Dict[str, Any] = {}
    for _ in range(random.randint(0, 4)):
        k = "x_" + rand_str()
        if k in taken:
            continue
        extras[k] = random.choice([rand_str(), random.randint(-1000, 1000), None, True])
    return extras


def gen_reading_map() -> Dict[str, Any]:
    m: Dict[str, Any] = {
        "sensor": rand_str(),
        "ts": datetime.datetime(2024, 1, 1) + datetime.timedelta(
            seconds=random.randint(0, 10**8)),
    }
    r = random.random()
    if r < 0.4:
        m["value"] = random.randint(-1000, 1000)
    elif r < 0.6:
        m["value"] = None
    m.update(gen_extras(list(m)))
    return m


class _Key(enum.Enum):
    sensor = 1
    value = 2
    ts = 3


def fail(msg: str, ctx: Any) -> int:
    print("INVARIANT FAIL:", msg)
    print("CTX:", repr(ctx)[:2000])
    return 1


def main(trials: Optional[int] = None) -> int:
    random.seed(SEED)
    trials = TRIALS if trials is None else trials

    for _ in range(trials):
        # (1) Round trip through to_map/from_map, nested objects included.
        house = gen_house()
        if House.from_map(house.to_map()) != house:
            return fail("round trip", house)

        # (2) Defaults are idempotent: absent key -> default -> re-exported.
        loc_map = gen_location().to_map()
        loc_map["note"] = {}
        if Location.from_map(loc_map).to_map()["note"] != {"message": "DEFAULT"}:
            return fail("default idempotence", loc_map)

        # (3) Presence flag tracks the key, not the value.
        m = gen_reading_map()
        reading = Reading.from_map(m)
        if reading.value_present != ("value" in m):
            return fail("presence accuracy", m)

        # (4) Unmapped re-emits the input exactly (absent Optional aside).
        out = reading.to_map()
        if "value" not in m:
            out.pop("value")
        if out != m:
            return fail("unmapped re-emission", (m, out))

        # (5) Enum keys normalise to the same object as str keys.
        by_enum = {_Key[k]: v for k, v in m.items() if k in _Key.__members__}
        by_str = {k: v for k, v in m.items() if k in _Key.__members__}
        if Reading.from_map(by_enum) != Reading.from_map(by_str):
            return fail("key normalisation", m)

    print(f"OK: invariants passed for TRIALS={trials} seed={SEED}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
