"""
cmfault: command-line front end for the Cortex-M fault analyzer.

Commands:
- analyze: symbolize and decode a captured fault dump
- decode-cfsr: decode a CFSR value without an ELF

Entry points:
- cmfault: console script (installed via pip)
- Can also be imported and called programmatically via main(argv)
"""

from __future__ import annotations

from cmfault.cli.helpers import _print, _read_fault_text
from cmfault.cli.analyze_cmd import cmd_analyze
from cmfault.cli.decode_cmd import cmd_decode_cfsr
from cmfault.cli.dispatch import main

__all__ = [
    "_print",
    "_read_fault_text",
    "cmd_analyze",
    "cmd_decode_cfsr",
    "main",
]
