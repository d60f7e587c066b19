"""Tests for the runtime type checker and the static helpers in mapbind._types."""

import datetime
import os
import sys
import unittest
from typing import (
    Any,
    Dict,
    List,
    Literal,
    Mapping,
    NewType,
    Optional,
    Sequence,
    Set,
    Tuple,
    TypeVar,
    Union,
)

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mapbind import Serializable
from mapbind._types import (
    NONE_TYPE,
    is_nilable,
    matches,
    resolve_nested,
    strip_nil,
    type_name,
)


class Note(Serializable):
    message: str = "DEFAULT"


UserId = NewType("UserId", int)
Num = TypeVar("Num", int, float)
Bounded = TypeVar("Bounded", bound=str)


# ── bool / int / float ────────────────────────────────────────

class TestNumbers(unittest.TestCase):
    """bool is a subclass of int in Python; the checker must not care."""

    def test_bool_is_not_int(self):
        self.assertFalse(matches(True, int))
        self.assertFalse(matches(False, float))

    def test_int_is_not_bool(self):
        self.assertFalse(matches(1, bool))
        self.assertTrue(matches(True, bool))

    def test_int_is_float(self):
        self.assertTrue(matches(3, float))
        self.assertTrue(matches(3.5, float))
        self.assertFalse(matches(3.5, int))


# ── Special forms ─────────────────────────────────────────────

class TestSpecialForms(unittest.TestCase):
    def test_any(self):
        for value in [None, 1, "x", [1], {"a": 1}]:
            with self.subTest(value=value):
                self.assertTrue(matches(value, Any))
                self.assertTrue(matches(value, object))

    def test_none(self):
        self.assertTrue(matches(None, None))
        self.assertTrue(matches(None, NONE_TYPE))
        self.assertFalse(matches(0, NONE_TYPE))

    def test_union(self):
        self.assertTrue(matches("x", Union[int, str]))
        self.assertTrue(matches(None, Optional[int]))
        self.assertFalse(matches(1.5, Union[int, str]))

    @unittest.skipIf(sys.version_info < (3, 10), "PEP 604 unions need 3.10")
    def test_pep604_union(self):
        tp = eval("int | None")
        self.assertTrue(matches(None, tp))
        self.assertTrue(matches(1, tp))
        self.assertTrue(is_nilable(tp))
        self.assertIs(strip_nil(tp), int)

    def test_literal(self):
        tp = Literal["a", "b", 1]
        self.assertTrue(matches("a", tp))
        self.assertTrue(matches(1, tp))
        self.assertFalse(matches(True, tp))
        self.assertFalse(matches("c", tp))

    def test_newtype(self):
        self.assertTrue(matches(5, UserId))
        self.assertFalse(matches("5", UserId))

    def test_typevar(self):
        self.assertTrue(matches(1.5, Num))
        self.assertFalse(matches("x", Num))
        self.assertTrue(matches("x", Bounded))

    def test_plain_classes(self):
        self.assertTrue(matches(datetime.datetime.now(), datetime.date))
        self.assertFalse(matches(datetime.date.today(), datetime.datetime))
        self.assertTrue(matches(Note(), Note))


# ── Containers ────────────────────────────────────────────────

class TestContainers(unittest.TestCase):
    def test_list(self):
        self.assertTrue(matches([1, 2], List[int]))
        self.assertFalse(matches([1, "2"], List[int]))
        self.assertFalse(matches((1, 2), List[int]))
        self.assertTrue(matches([1, "x"], list))
        self.assertTrue(matches([], List))

    def test_sequence_rejects_strings(self):
        self.assertTrue(matches(("a", "b"), Sequence[str]))
        self.assertFalse(matches("ab", Sequence[str]))

    def test_set(self):
        self.assertTrue(matches({1, 2}, Set[int]))
        self.assertFalse(matches([1, 2], Set[int]))

    def test_tuple(self):
        self.assertTrue(matches((1, "a"), Tuple[int, str]))
        self.assertFalse(matches((1, 2), Tuple[int, str]))
        self.assertFalse(matches((1,), Tuple[int, str]))
        self.assertTrue(matches((1, 2, 3), Tuple[int, ...]))
        self.assertTrue(matches((), Tuple[()]))

    def test_dict(self):
        self.assertTrue(matches({"a": 1}, Dict[str, int]))
        self.assertFalse(matches({"a": "1"}, Dict[str, int]))
        self.assertFalse(matches({1: 1}, Dict[str, int]))
        self.assertTrue(matches({"a": [1]}, Mapping[str, List[int]]))
        self.assertFalse(matches([("a", 1)], Dict[str, int]))


# ── Static helpers ────────────────────────────────────────────

class TestStaticHelpers(unittest.TestCase):
    def test_is_nilable(self):
        self.assertTrue(is_nilable(Optional[int]))
        self.assertTrue(is_nilable(Any))
        self.assertTrue(is_nilable(Union[int, None, str]))
        self.assertFalse(is_nilable(int))
        self.assertFalse(is_nilable(Union[int, str]))

    def test_strip_nil(self):
        self.assertIs(strip_nil(Optional[int]), int)
        self.assertEqual(strip_nil(Union[int, str, None]), Union[int, str])
        self.assertIs(strip_nil(int), int)

    def test_resolve_nested(self):
        self.assertIs(resolve_nested(Note, Serializable), Note)
        self.assertIs(resolve_nested(Optional[Note], Serializable), Note)
        self.assertIs(resolve_nested(Union[int, Note, None], Serializable), Note)
        self.assertIsNone(resolve_nested(int, Serializable))
        self.assertIsNone(resolve_nested(List[Note], Serializable))

    def test_type_name(self):
        self.assertEqual(type_name(int), "int")
        self.assertEqual(type_name(None), "None")
        self.assertEqual(type_name(Note), "Note")
        self.assertEqual(type_name(List[int]), "List[int]")


if __name__ == "__main__":
    unittest.main()
