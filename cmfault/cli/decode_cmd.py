"""Offline CFSR decode command for cmfault."""

from __future__ import annotations

from typing import Optional

from cmfault.cfsr import decode_cfsr
from cmfault.dump_patterns import format_hex
from cmfault.report import findings_to_list
from cmfault.table import render_table
from cmfault.cli.helpers import _print


def cmd_decode_cfsr(
    *,
    cfsr: int,
    mmar: Optional[int],
    bfar: Optional[int],
    json_mode: bool,
) -> int:
    """Decode a CFSR value typed in by hand.

    Returns:
        Exit code: always 0 (every 32-bit value decodes).
    """
    findings = decode_cfsr(cfsr, mmar=mmar, bfar=bfar)

    if json_mode:
        _print({"cfsr": format_hex(cfsr), "faults": findings_to_list(findings)}, json_mode=True)
        return 0

    rows = [["CFSR", format_hex(cfsr)]]
    for finding in findings:
        if finding.is_header:
            rows.append(["", finding.label])
        else:
            rows.append(["", finding.label, finding.extra_detail or "", finding.description])
    if not findings:
        rows.append(["", "No fault bits set"])
    _print("\n".join(render_table(rows)), json_mode=False)
    return 0
