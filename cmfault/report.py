"""Post-mortem report assembly.

Architecture:
    analyze_text()
        -> normalize_lines() strips terminal markers
        -> parse_registers() collects NAME : 0xVALUE lines
        -> Symbolizer.resolve() for LR and PC
        -> decode_cfsr() with CFSR/MMAR/BFAR
        -> parse_backtrace() + Symbolizer.resolve() per frame
        -> returns PostmortemReport

format_report() renders the register/fault table and the backtrace table;
report_to_dict() gives the same content as JSON-ready data.

Unresolved addresses never drop a row: LR/PC rows and backtrace frames are
kept with blank symbol columns, and a diagnostic is recorded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .cfsr import CfsrFinding, decode_cfsr
from .dump_patterns import (
    UNKNOWN_SYMBOL,
    BacktraceLine,
    RegisterRecord,
    find_register,
    format_hex,
    normalize_lines,
    parse_backtrace,
    parse_registers,
)
from .symbolizer import SymbolInfo, Symbolizer
from .table import render_table

logger = logging.getLogger(__name__)

REGISTER_HEADER = ["Register", "Value"]
BACKTRACE_HEADER = ["#", "Function", "Address", "PC", "File:Line"]
BACKTRACE_TITLE = "Backtrace"

# Registers whose value is a code address worth symbolizing, in report order
CODE_REGISTERS = ("LR", "PC")


@dataclass(frozen=True)
class ResolvedRegister:
    """A code-address register with its source location, if known."""
    name: str
    value: int
    resolved: Optional[SymbolInfo] = None


@dataclass(frozen=True)
class BacktraceFrame:
    """A parsed backtrace line plus its symbolized PC."""
    position: int
    symbol_name: str
    function_address: int
    function_offset: int
    program_counter: int
    resolved: Optional[SymbolInfo] = None

    @classmethod
    def from_line(cls, line: BacktraceLine, resolved: Optional[SymbolInfo]) -> "BacktraceFrame":
        return cls(
            position=line.position,
            symbol_name=line.name,
            function_address=line.fn_address,
            function_offset=line.fn_offset,
            program_counter=line.pc,
            resolved=resolved,
        )

    @property
    def function_cell(self) -> str:
        """``<symbolized> (<raw name>)``; the raw name alone if unresolved."""
        if self.resolved is None:
            return self.symbol_name
        if self.symbol_name == UNKNOWN_SYMBOL:
            return self.resolved.function_name
        return f"{self.resolved.function_name} ({self.symbol_name})"


@dataclass
class PostmortemReport:
    """Everything extracted from one fault dump."""
    registers: list[RegisterRecord] = field(default_factory=list)
    code_registers: list[ResolvedRegister] = field(default_factory=list)
    cfsr: Optional[int] = None
    findings: list[CfsrFinding] = field(default_factory=list)
    frames: list[BacktraceFrame] = field(default_factory=list)
    diagnostics: list[str] = field(default_factory=list)
    """Lookup failures, kept apart from the report output."""


def _diagnose(report: PostmortemReport, message: str) -> None:
    logger.warning(message)
    report.diagnostics.append(message)


def analyze_text(text: str, symbolizer: Symbolizer) -> PostmortemReport:
    """Run the full pipeline over raw fault dump text.

    Args:
        text: Fault dump as captured (may include ``Recv: `` prefixes).
        symbolizer: Address resolver for LR, PC and backtrace frames.

    Returns:
        PostmortemReport. Text with no fault data gives an empty report.
    """
    lines = normalize_lines(text)
    report = PostmortemReport(registers=parse_registers(lines))

    for name in CODE_REGISTERS:
        record = find_register(report.registers, name)
        if record is None:
            continue
        resolved = symbolizer.resolve(record.value)
        if resolved is None:
            _diagnose(report, f"Failed to lookup {name}: {record.value:x}")
        report.code_registers.append(ResolvedRegister(name, record.value, resolved))

    cfsr = find_register(report.registers, "CFSR")
    if cfsr is not None:
        mmar = find_register(report.registers, "MMAR")
        bfar = find_register(report.registers, "BFAR")
        report.cfsr = cfsr.value
        report.findings = decode_cfsr(
            cfsr.value,
            mmar=mmar.value if mmar else None,
            bfar=bfar.value if bfar else None,
        )

    for bt in parse_backtrace(lines):
        resolved = symbolizer.resolve(bt.pc)
        if resolved is None:
            _diagnose(report, f"Failed to lookup address: {bt.pc:x}")
        report.frames.append(BacktraceFrame.from_line(bt, resolved))

    return report


# =============================================================================
# Table Rows
# =============================================================================

def register_rows(report: PostmortemReport) -> list[list[str]]:
    """Rows of the register/fault table, header first."""
    rows = [list(REGISTER_HEADER)]
    for reg in report.code_registers:
        if reg.resolved:
            rows.append([reg.name, format_hex(reg.value), reg.resolved.function_name, reg.resolved.location])
        else:
            rows.append([reg.name, format_hex(reg.value), "", ""])

    for finding in report.findings:
        # empty first column indents the fault lines under the registers
        row = ["", finding.label]
        if finding.extra_detail:
            row.append(finding.extra_detail)
        rows.append(row)
    return rows


def backtrace_rows(report: PostmortemReport) -> list[list[str]]:
    """Rows of the backtrace table, header first."""
    rows = [list(BACKTRACE_HEADER)]
    for frame in report.frames:
        rows.append([
            f"#{frame.position}",
            frame.function_cell,
            f"@ {format_hex(frame.function_address)} + {frame.function_offset}",
            f"PC:{format_hex(frame.program_counter)}",
            frame.resolved.location if frame.resolved else "",
        ])
    return rows


def format_report(report: PostmortemReport) -> str:
    """Render both tables as human-readable text."""
    lines = render_table(register_rows(report))
    lines.append("")
    lines.append(BACKTRACE_TITLE)
    lines.extend(render_table(backtrace_rows(report)))
    return "\n".join(lines)


# =============================================================================
# JSON
# =============================================================================

def _symbol_dict(info: Optional[SymbolInfo]) -> Optional[dict[str, Any]]:
    if info is None:
        return None
    return {
        "function": info.function_name,
        "file": info.file_name,
        "file_path": info.file_path,
        "line": info.line,
    }


def findings_to_list(findings: list[CfsrFinding]) -> list[dict[str, Any]]:
    """JSON-ready CFSR findings, grouped by category in report order."""
    out: list[dict[str, Any]] = []
    for finding in findings:
        if finding.is_header:
            out.append({"category": finding.category.value, "flags": []})
            continue
        flag: dict[str, Any] = {"name": finding.flag_name, "description": finding.description}
        if finding.extra_detail:
            flag["detail"] = finding.extra_detail
        out[-1]["flags"].append(flag)
    return out


def report_to_dict(report: PostmortemReport) -> dict[str, Any]:
    """Machine-readable form of a report."""
    return {
        "schema_version": 1,
        "registers": [{"name": r.name, "value": format_hex(r.value)} for r in report.registers],
        "code_registers": [
            {"name": r.name, "value": format_hex(r.value), "symbol": _symbol_dict(r.resolved)}
            for r in report.code_registers
        ],
        "cfsr": format_hex(report.cfsr) if report.cfsr is not None else None,
        "faults": findings_to_list(report.findings),
        "backtrace": [
            {
                "position": f.position,
                "name": f.symbol_name,
                "fn_address": format_hex(f.function_address),
                "fn_offset": f.function_offset,
                "pc": format_hex(f.program_counter),
                "symbol": _symbol_dict(f.resolved),
            }
            for f in report.frames
        ],
        "diagnostics": list(report.diagnostics),
    }
