"""Command dispatch for the cmfault CLI."""

from __future__ import annotations

import sys
from typing import Optional

from cmfault.cli.parser import _build_parser, _preprocess_argv


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``cmfault`` CLI.

    Args:
        argv: Argument list to parse.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 on success, non-zero on error.
    """
    if argv is None:
        argv = sys.argv[1:]

    argv = _preprocess_argv(argv)

    # Late import to allow tests to monkeypatch cmfault.cli.cmd_xxx
    import cmfault.cli as cli

    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.cmd == "analyze":
        return cli.cmd_analyze(
            fault_file=args.fault_file,
            elf=args.elf,
            addr2line=args.addr2line,
            timeout=args.timeout,
            json_mode=args.json,
        )
    if args.cmd == "decode-cfsr":
        return cli.cmd_decode_cfsr(
            cfsr=args.cfsr,
            mmar=args.mmar,
            bfar=args.bfar,
            json_mode=args.json,
        )

    parser.error(f"unknown command: {args.cmd}")
    return 2


def console_main() -> None:
    sys.exit(main())
