"""Shared utilities for cmfault CLI commands."""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Any, Optional, TextIO

logger = logging.getLogger(__name__)

PROMPT = "Enter Fault Log:"


def _print(obj: Any, *, json_mode: bool) -> None:
    if json_mode:
        print(json.dumps(obj, indent=2, sort_keys=True))
    else:
        if isinstance(obj, str):
            print(obj)
        else:
            print(json.dumps(obj, indent=2, sort_keys=True))


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _read_multiline_input(stream: TextIO) -> str:
    """Read lines until the first empty line or EOF."""
    lines: list[str] = []
    for raw in stream:
        line = raw.rstrip("\r\n")
        if line == "":
            break
        lines.append(line)
    return "\n".join(lines)


def _read_fault_text(
    fault_path: Optional[str],
    *,
    stdin: Optional[TextIO] = None,
    prompt: bool = True,
) -> str:
    """Read the fault dump from a file, or interactively when no file is usable.

    Args:
        fault_path: Path to the dump, or None.
        stdin: Stream to read from in interactive mode (defaults to sys.stdin).
        prompt: Print the input prompt before reading.
    """
    if fault_path:
        if os.path.isfile(fault_path):
            return _read_text(fault_path)
        logger.warning("Fault file not found: %s (reading from stdin)", fault_path)

    if prompt:
        print(PROMPT)
    return _read_multiline_input(stdin if stdin is not None else sys.stdin)
