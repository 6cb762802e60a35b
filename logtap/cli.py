"""Command line entry point: ``python -m logtap``.

Subcommands:
    expand  Print a module with its tap call-sites expanded.
    run     Expand a script in memory and execute it with logging configured.
"""

import argparse
import logging
import sys
from typing import List, Optional

from .macro import TapMacroError, expand_source, run_path
from .tap import DEFAULT_METHOD, TAP_METHODS

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _read(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def cmd_expand(args: argparse.Namespace) -> int:
    """Write the expanded source to stdout or ``--output``."""
    filename = "<stdin>" if args.file == "-" else args.file
    expanded = expand_source(
        _read(args.file), filename=filename, method=args.method, names=args.name
    )
    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(expanded + "\n")
    else:
        print(expanded)
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Execute a script after expansion."""
    logging.basicConfig(level=args.level, format=LOG_FORMAT)
    saved_argv = sys.argv
    sys.argv = [args.file, *args.args]
    try:
        run_path(args.file, method=args.method, names=args.name)
    finally:
        sys.argv = saved_argv
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logtap", description="Expand tap() call-sites into inline logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--method",
        default=DEFAULT_METHOD,
        choices=sorted(TAP_METHODS),
        help="logger method the expanded code calls (default: %(default)s)",
    )
    common.add_argument(
        "--name",
        action="append",
        default=[],
        help="extra identifier to treat as tap (repeatable)",
    )

    expand = subparsers.add_parser("expand", parents=[common], help="print expanded source")
    expand.add_argument("file", help="Python source file, or - for stdin")
    expand.add_argument("-o", "--output", help="write to this file instead of stdout")
    expand.set_defaults(func=cmd_expand)

    run = subparsers.add_parser("run", parents=[common], help="expand and execute a script")
    run.add_argument(
        "--level",
        default="INFO",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="root logging level (default: %(default)s)",
    )
    run.add_argument("file", help="Python script to run")
    run.add_argument("args", nargs=argparse.REMAINDER, help="arguments passed to the script")
    run.set_defaults(func=cmd_run)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.func(args)
    except TapMacroError as e:
        print(f"{e.filename}:{e.lineno}: {e.msg}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
