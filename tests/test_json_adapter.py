"""Tests for the JSON adapter: strict parsing in front of from_map, and to_json."""

import datetime
import decimal
import json
import os
import sys
import unittest
from typing import Optional

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mapbind import (
    ERR_DECODE,
    DecodeError,
    Serializable,
    Strict,
    TypeMismatch,
    UnknownKey,
    field,
    from_json,
    to_json,
)


class Note(Serializable):
    message: str = "DEFAULT"


class Event(Serializable):
    name: str
    at: datetime.datetime = field(cast="datetime")
    cost: Optional[decimal.Decimal] = field(cast="decimal")
    note: Note


class StrictEvent(Strict, Serializable):
    name: str


# ── from_json ─────────────────────────────────────────────────

class TestFromJson(unittest.TestCase):
    RAW = b'{"name": "launch", "at": "2024-05-01T10:00:00", "cost": "1.50", "note": {"message": "go"}}'

    def test_bytes(self):
        ev = from_json(Event, self.RAW)
        self.assertEqual(ev.name, "launch")
        self.assertEqual(ev.at, datetime.datetime(2024, 5, 1, 10, 0))
        self.assertEqual(ev.cost, decimal.Decimal("1.50"))
        self.assertEqual(ev.note.message, "go")

    def test_str(self):
        self.assertEqual(from_json(Event, self.RAW.decode("utf-8")),
                         from_json(Event, self.RAW))

    def test_binding_errors_pass_through(self):
        with self.assertRaises(TypeMismatch):
            from_json(Event, b'{"name": 1, "at": "2024-05-01", "note": {}}')
        with self.assertRaises(UnknownKey):
            from_json(StrictEvent, b'{"name": "n", "extra": 1}')


class TestJsonStrictness(unittest.TestCase):
    def assertDecodeError(self, raw):
        with self.assertRaises(DecodeError) as ctx:
            from_json(StrictEvent, raw)
        self.assertEqual(ctx.exception.code, ERR_DECODE)
        self.assertEqual(ctx.exception.klass, "StrictEvent")
        return ctx.exception

    def test_duplicate_key(self):
        err = self.assertDecodeError(b'{"name": "a", "name": "b"}')
        self.assertEqual(err.attribute, "name")

    def test_nested_duplicate_key(self):
        self.assertDecodeError(b'{"name": {"a": 1, "a": 2}}')

    def test_bom_rejected(self):
        self.assertDecodeError(b'\xef\xbb\xbf{"name": "b"}')
        self.assertDecodeError('\ufeff{"name": "b"}')

    def test_invalid_utf8(self):
        err = self.assertDecodeError(b'{"name": "\xff"}')
        self.assertIsInstance(err.__cause__, UnicodeDecodeError)

    def test_non_finite_numbers(self):
        for raw in [b'{"name": NaN}', b'{"name": Infinity}', b'{"name": -Infinity}']:
            with self.subTest(raw=raw):
                self.assertDecodeError(raw)

    def test_malformed(self):
        err = self.assertDecodeError(b'{"name": ')
        self.assertIsInstance(err.__cause__, json.JSONDecodeError)

    def test_root_must_be_object(self):
        for raw in [b'[]', b'"name"', b'1', b'null']:
            with self.subTest(raw=raw):
                self.assertDecodeError(raw)


# ── to_json ───────────────────────────────────────────────────

class TestToJson(unittest.TestCase):
    def test_round_trip(self):
        ev = Event(name="launch", at=datetime.datetime(2024, 5, 1, 10, 0),
                   cost=decimal.Decimal("1.50"), note=Note(message="go"))
        text = to_json(ev, sort_keys=True)
        self.assertEqual(
            json.loads(text),
            {"name": "launch", "at": "2024-05-01T10:00:00", "cost": "1.50",
             "note": {"message": "go"}},
        )
        self.assertEqual(from_json(Event, text), ev)

    def test_unserializable_value(self):
        class Holder(Serializable):
            thing: object

        with self.assertRaises(TypeError):
            to_json(Holder(thing=object()))

    def test_custom_default_wins(self):
        class Holder(Serializable):
            thing: object

        self.assertEqual(to_json(Holder(thing=object()), default=lambda o: "?"),
                         '{"thing": "?"}')


if __name__ == "__main__":
    unittest.main()
