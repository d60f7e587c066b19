"""mapbind command-line interface.

Usage:
    echo '{"lat": 1.5, "lon": 2}' | python3 -m mapbind bind --type geo.models:Location
    python3 -m mapbind bind --type geo.models:Location --input doc.json
    python3 -m mapbind fields --type geo.models:Location
    python3 -m mapbind version

``bind`` reads a JSON document, binds it to the given Serializable class
and prints the class's re-exported map as JSON.  It is a quick way to
check a document against a declaration.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from typing import List, Optional

from . import Serializable, SerializableError, __version__, from_json, to_json
from ._types import type_name


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mapbind",
        description="mapbind: bind string-keyed maps to typed classes",
    )
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Log descriptor builds and dropped keys to stderr")
    sub = parser.add_subparsers(dest="command")

    # ── bind ──
    bind_p = sub.add_parser("bind", help="Bind a JSON document and re-export it")
    bind_p.add_argument("--type", "-t", required=True, metavar="MODULE:CLASS",
                        help="Serializable class to bind to")
    bind_p.add_argument("--input", "-i", metavar="FILE",
                        help="Read JSON from FILE instead of stdin")
    bind_p.add_argument("--indent", type=int, default=None,
                        help="Indent the printed JSON")

    # ── fields ──
    fields_p = sub.add_parser("fields", help="Print a class's field descriptors")
    fields_p.add_argument("--type", "-t", required=True, metavar="MODULE:CLASS",
                          help="Serializable class to describe")

    # ── version ──
    sub.add_parser("version", help="Print version and exit")

    return parser


def _load_type(spec: str) -> type:
    """Import ``module:Class`` (or ``module.Class``)."""
    if ":" in spec:
        module_name, _, attr = spec.partition(":")
    else:
        module_name, _, attr = spec.rpartition(".")
    if not module_name or not attr:
        raise ValueError("type must look like module:Class, got {!r}".format(spec))
    module = importlib.import_module(module_name)
    obj = module
    for part in attr.split("."):
        obj = getattr(obj, part)
    if not (isinstance(obj, type) and issubclass(obj, Serializable)):
        raise ValueError("{} is not a Serializable class".format(spec))
    return obj


def _read_input(filepath: Optional[str]) -> bytes:
    """Read JSON bytes from a file or stdin."""
    if filepath:
        with open(filepath, "rb") as f:
            return f.read()
    if sys.stdin.isatty():
        print("mapbind: reading from stdin (Ctrl-D to end)...", file=sys.stderr)
    return sys.stdin.buffer.read()


def _cmd_bind(cls: type, args: argparse.Namespace) -> None:
    obj = from_json(cls, _read_input(args.input))
    print(to_json(obj, indent=args.indent))


def _cmd_fields(cls: type, args: argparse.Namespace) -> None:
    for d in cls.descriptors():
        flags = []
        if d.ignore:
            flags.append("ignore")
        if d.ignore_on_read:
            flags.append("ignore_on_read")
        if d.ignore_on_write:
            flags.append("ignore_on_write")
        if d.presence:
            flags.append("presence")
        if d.cast is not None:
            flags.append("cast")
        if d.has_default:
            flags.append("default")
        if d.nested is not None:
            flags.append("nested")
        print("{}\t{}\t{}\t{}".format(
            d.name, d.key, type_name(d.declared_type), ",".join(flags)))


def _fail(e: SerializableError) -> None:
    print(f"mapbind: error [{e.code}]: {e}", file=sys.stderr)
    sys.exit(2)


def main(argv: Optional[List[str]] = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, stream=sys.stderr,
                            format="%(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "version":
        print(f"mapbind {__version__}")
        return

    try:
        cls = _load_type(args.type)
    except SerializableError as e:
        _fail(e)
    except (ImportError, AttributeError, ValueError) as e:
        print(f"mapbind: cannot load type: {e}", file=sys.stderr)
        sys.exit(2)

    # Exceptions from user casts and hooks propagate.
    try:
        if args.command == "bind":
            _cmd_bind(cls, args)
        elif args.command == "fields":
            _cmd_fields(cls, args)
    except SerializableError as e:
        _fail(e)


if __name__ == "__main__":
    main()
