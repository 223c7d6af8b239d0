"""
cmfault - Cortex-M hard-fault post-mortem analyzer

Turns a raw fault dump (register values plus an unwound backtrace) and the
matching firmware ELF into a readable report: decoded CFSR fault causes and
a symbolized call chain.
"""

from .cfsr import CfsrFinding, FaultCategory, decode_cfsr
from .config import AnalyzerConfig
from .dump_patterns import (
    BacktraceLine,
    RegisterRecord,
    normalize_lines,
    parse_backtrace_line,
    parse_register_line,
)
from .errors import CmfaultError, ImageNotFoundError, SymbolizerUnavailableError
from .report import BacktraceFrame, PostmortemReport, analyze_text, format_report
from .symbolizer import Addr2LineSymbolizer, SymbolInfo, Symbolizer

__all__ = [
    "AnalyzerConfig",
    "Addr2LineSymbolizer",
    "BacktraceFrame",
    "BacktraceLine",
    "CfsrFinding",
    "CmfaultError",
    "FaultCategory",
    "ImageNotFoundError",
    "PostmortemReport",
    "RegisterRecord",
    "SymbolInfo",
    "Symbolizer",
    "SymbolizerUnavailableError",
    "analyze_text",
    "decode_cfsr",
    "format_report",
    "normalize_lines",
    "parse_backtrace_line",
    "parse_register_line",
]
