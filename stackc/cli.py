"""stackc - command line driver

Reads one JSON document (a program envelope or a bare statement tree),
compiles it, and writes the instruction stream as JSON.

Usage examples:
  stackc program.json -o program.vm.json
  stackc < program.json
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from stackc import __version__
from stackc.compiler import Compiler


def _configure_logging(verbosity: int) -> None:
    """0 -> WARNING, 1 -> INFO, 2+ -> DEBUG on the ``stackc`` logger."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("stackc")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    ap = argparse.ArgumentParser(prog="stackc", description="AST to stack machine compiler")
    ap.add_argument("source", nargs="?", default="-", help="Input JSON document (default: stdin)")
    ap.add_argument("-o", dest="output", required=False, help="Output file (default: stdout)")
    ap.add_argument("--indent", type=int, default=None, help="Indent the JSON output")
    ap.add_argument("--keep-labels", action="store_true",
                    help="Do not reset label counters between compilations")
    ap.add_argument("--no-verify", action="store_true", help="Skip label checks")
    ap.add_argument("-v", "--verbose", action="count", default=0)
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    args = ap.parse_args(argv)

    _configure_logging(args.verbose)

    compiler = Compiler(
        reset_labels=False if args.keep_labels else None,
        verify=not args.no_verify,
        indent=args.indent,
    )

    if args.source == "-":
        result = compiler.compile_json(sys.stdin.read())
    else:
        result = compiler.compile_file(args.source, args.output)

    for w in result.warnings:
        print("Warning:", w, file=sys.stderr)
    if not result.success:
        for e in result.errors:
            print("Error:", e, file=sys.stderr)
        return 1

    if result.output_file is None:
        text = compiler.dumps(result.program)
        if args.output:
            try:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(text + "\n")
            except OSError as e:
                print("Error:", f"Failed to write output file: {e}", file=sys.stderr)
                return 1
        else:
            print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
