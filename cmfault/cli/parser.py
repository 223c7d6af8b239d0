"""Argument parser for the cmfault CLI."""

from __future__ import annotations

import argparse


def _preprocess_argv(argv: list[str]) -> list[str]:
    """Move the global ``--json`` flag in front of the subcommand.

    argparse only accepts top-level flags before the subcommand; allowing
    ``--json`` anywhere is friendlier for scripts.

    Args:
        argv: Raw argument list (without ``sys.argv[0]``).

    Returns:
        Reordered argument list with global flags moved to the front.
    """
    global_args = [token for token in argv if token == "--json"]
    rest = [token for token in argv if token != "--json"]
    return global_args + rest


def _int_literal(text: str) -> int:
    """Parse 0x-prefixed hex, 0b/0o literals, or decimal."""
    try:
        value = int(text, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid register value: {text!r}")
    if not 0 <= value <= 0xFFFFFFFF:
        raise argparse.ArgumentTypeError(f"value out of 32-bit range: {text!r}")
    return value


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmfault",
        description="Cortex-M hard-fault post-mortem analyzer",
    )
    parser.add_argument("--json", action="store_true", help="Output machine-parseable JSON")

    sub = parser.add_subparsers(dest="cmd", required=True)

    p_analyze = sub.add_parser("analyze", help="Decode and symbolize a fault dump")
    p_analyze.add_argument(
        "fault_file", nargs="?", default=None,
        help="Fault log to analyze (prompts for input if omitted)",
    )
    p_analyze.add_argument(
        "--elf", default=None,
        help="Firmware ELF with debug symbols (default: $CMFAULT_ELF or ./firmware.elf)",
    )
    p_analyze.add_argument(
        "--addr2line", default=None,
        help="addr2line binary (default: $CMFAULT_ADDR2LINE or arm-none-eabi-addr2line)",
    )
    p_analyze.add_argument(
        "--timeout", type=float, default=None,
        help="Timeout in seconds for each addr2line call (default: 10)",
    )

    p_decode = sub.add_parser("decode-cfsr", help="Decode a CFSR value (no ELF needed)")
    p_decode.add_argument("cfsr", type=_int_literal, help="CFSR value, e.g. 0x00010000")
    p_decode.add_argument("--mmar", type=_int_literal, default=None, help="MMAR value")
    p_decode.add_argument("--bfar", type=_int_literal, default=None, help="BFAR value")

    return parser
