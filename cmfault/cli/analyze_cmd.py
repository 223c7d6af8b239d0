"""Fault dump analysis command for cmfault."""

from __future__ import annotations

from typing import Optional

from cmfault.config import AnalyzerConfig
from cmfault.errors import CmfaultError
from cmfault.report import analyze_text, format_report, report_to_dict
from cmfault.symbolizer import Addr2LineSymbolizer
from cmfault.cli.helpers import _print, _read_fault_text


def cmd_analyze(
    *,
    fault_file: Optional[str],
    elf: Optional[str],
    addr2line: Optional[str],
    timeout: Optional[float],
    json_mode: bool,
) -> int:
    """Decode registers and symbolize the backtrace of a fault dump.

    The ELF and addr2line are checked before any input is read, so a bad
    setup fails fast instead of after the user pasted a log.

    Args:
        fault_file: Fault log path; None prompts for input on stdin.
        elf: Firmware ELF path (env/default when None).
        addr2line: addr2line binary (env/default when None).
        timeout: Per-lookup addr2line timeout in seconds.
        json_mode: Emit machine-parseable JSON output.

    Returns:
        Exit code: 0 on success, 2 if the ELF or addr2line is unusable.
    """
    config = AnalyzerConfig.resolve(
        addr2line=addr2line,
        elf_path=elf,
        fault_path=fault_file,
        timeout_s=timeout,
    )

    try:
        symbolizer = Addr2LineSymbolizer(
            config.elf_path,
            addr2line=config.addr2line,
            timeout_s=config.timeout_s,
        )
        text = _read_fault_text(config.fault_path, prompt=not json_mode)
        report = analyze_text(text, symbolizer)
    except CmfaultError as e:
        if json_mode:
            _print({"error": str(e)}, json_mode=True)
        else:
            print(f"ERROR: {e}")
        return 2

    if json_mode:
        _print(report_to_dict(report), json_mode=True)
    else:
        _print(format_report(report), json_mode=False)
        print("done")
    return 0
