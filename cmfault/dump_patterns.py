"""Line patterns and parsers for Cortex-M fault dumps.

A fault dump is free-form text; two line shapes carry information:
- Register lines:  CFSR : 0x00010000
- Backtrace lines: #1 : unknown@0x0001C38C+182 PC:0x0001C442

Every other line is ignored. Dumps captured through a serial terminal
(e.g. OctoPrint) may prefix each line with "Recv: "; that marker is
stripped before matching.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional


@dataclass(frozen=True)
class RegisterRecord:
    """One ``NAME : 0xVALUE`` line from the register dump."""
    name: str
    """Register name as it appeared in the dump (compare case-insensitively)."""

    value: int
    """Register value (unsigned 32-bit)."""


@dataclass(frozen=True)
class BacktraceLine:
    """One unwound stack frame as printed by the firmware."""
    position: int
    """Stack depth index (0 = innermost)."""

    name: str
    """Symbol name printed by the firmware, ``unknown`` if it had none."""

    fn_address: int
    """Start address of the enclosing function."""

    fn_offset: int
    """Byte offset of the PC within the function."""

    pc: int
    """Program counter of the frame."""


# Placeholder the firmware prints when it has no symbol for a frame
UNKNOWN_SYMBOL = "unknown"


# =============================================================================
# Pattern Matchers
# =============================================================================

# Serial terminals echo received lines with a "Recv: " marker (any case)
_RECV_PREFIX_RE = re.compile(r"^recv: ", re.IGNORECASE)

# R0   : 0x00000001
# CFSR : 0x00000000
_REGISTER_RE = re.compile(r"^\s*([A-Za-z0-9]+)\s*:\s*0x([0-9A-Fa-f]+)\s*$")

# #1 : unknown@0x0001C38C+182 PC:0x0001C442
# position and offset are decimal, addresses hex
_BACKTRACE_RE = re.compile(
    r"#(\d+) : ([^@]+)@0x([0-9A-Fa-f]+)\+(\d+) PC:0x([0-9A-Fa-f]+)"
)


# =============================================================================
# Parsers
# =============================================================================

def normalize_line(line: str) -> str:
    """Strip a leading ``recv: `` terminal marker (any case) from one line."""
    return _RECV_PREFIX_RE.sub("", line, count=1)


def normalize_lines(text: str) -> list[str]:
    """Split raw dump text into lines with terminal markers removed."""
    return [normalize_line(line.rstrip("\r")) for line in text.split("\n")]


def parse_register_line(line: str) -> Optional[RegisterRecord]:
    """Parse a ``NAME : 0xHEX`` register line, or return None."""
    m = _REGISTER_RE.match(line)
    if not m:
        return None
    return RegisterRecord(name=m.group(1), value=int(m.group(2), 16) & 0xFFFFFFFF)


def parse_backtrace_line(line: str) -> Optional[BacktraceLine]:
    """Parse a ``#N : name@0xADDR+OFF PC:0xADDR`` backtrace line, or return None."""
    m = _BACKTRACE_RE.search(line)
    if not m:
        return None
    return BacktraceLine(
        position=int(m.group(1), 10),
        name=m.group(2),
        fn_address=int(m.group(3), 16) & 0xFFFFFFFF,
        fn_offset=int(m.group(4), 10),
        pc=int(m.group(5), 16) & 0xFFFFFFFF,
    )


def parse_registers(lines: Iterable[str]) -> list[RegisterRecord]:
    """Collect every register line, in input order."""
    records: list[RegisterRecord] = []
    for line in lines:
        record = parse_register_line(line)
        if record:
            records.append(record)
    return records


def parse_backtrace(lines: Iterable[str]) -> list[BacktraceLine]:
    """Collect every backtrace line, in input order (no re-sorting)."""
    frames: list[BacktraceLine] = []
    for line in lines:
        frame = parse_backtrace_line(line)
        if frame:
            frames.append(frame)
    return frames


def find_register(records: Iterable[RegisterRecord], name: str) -> Optional[RegisterRecord]:
    """Case-insensitive lookup; the first occurrence of a name wins."""
    wanted = name.upper()
    for record in records:
        if record.name.upper() == wanted:
            return record
    return None


def format_hex(value: int) -> str:
    """Render a 32-bit value as ``0x`` plus 8 lowercase hex digits."""
    return f"0x{value:08x}"
