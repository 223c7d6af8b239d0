"""ARM Cortex-M Configurable Fault Status Register (CFSR) decoder.

The CFSR at 0xE000ED28 packs three fault status registers:
    MMFSR [7:0]   MemManage faults
    BFSR  [15:8]  BusFault faults
    UFSR  [31:16] UsageFault faults

decode_cfsr() turns a CFSR value into an ordered list of findings: one
header per category whose status bits are non-zero, followed by one entry
per set flag of that category.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

# =============================================================================
# CFSR Sub-register Masks
# =============================================================================

MEMFAULTSR_MASK = 0x000000FF
BUSFAULTSR_MASK = 0x0000FF00
USAGEFAULTSR_MASK = 0xFFFF0000

# =============================================================================
# CFSR Bitfield Definitions
# =============================================================================

# MemManage faults [7:0]
IACCVIOL_MASK = 1 << 0
DACCVIOL_MASK = 1 << 1
MUNSTKERR_MASK = 1 << 3
MSTKERR_MASK = 1 << 4
MLSPERR_MASK = 1 << 5
MMARVALID_MASK = 1 << 7

# BusFault faults [15:8]
IBUSERR_MASK = 1 << 8
PRECISERR_MASK = 1 << 9
IMPRECISERR_MASK = 1 << 10
UNSTKERR_MASK = 1 << 11
STKERR_MASK = 1 << 12
LSPERR_MASK = 1 << 13
BFARVALID_MASK = 1 << 15

# UsageFault faults [31:16]
UNDEFINSTR_MASK = 1 << 16
INVSTATE_MASK = 1 << 17
INVPC_MASK = 1 << 18
NOCP_MASK = 1 << 19
UNALIGNED_MASK = 1 << 24
DIVBYZERO_MASK = 1 << 25


class FaultCategory(enum.Enum):
    """CFSR sub-register, valued by its report heading."""

    MEM_MANAGE = "Memory Management Fault"
    BUS = "Bus Fault"
    USAGE = "Usage Fault"


# Report order of the flags within each category: (mask, name, description)
MEMFAULT_FLAGS = (
    (MMARVALID_MASK, "MMARVALID", "MMAR holds a valid fault address"),
    (MLSPERR_MASK, "MLSPERR", "MemManage fault during floating-point lazy state preservation"),
    (MSTKERR_MASK, "MSTKERR", "MemManage fault on stacking for exception entry"),
    (MUNSTKERR_MASK, "MUNSTKERR", "MemManage fault on unstacking for return from exception"),
    (DACCVIOL_MASK, "DACCVIOL", "Data access violation"),
    (IACCVIOL_MASK, "IACCVIOL", "Instruction access violation"),
)

BUSFAULT_FLAGS = (
    (BFARVALID_MASK, "BFARVALID", "BFAR holds a valid fault address"),
    (LSPERR_MASK, "LSPERR", "BusFault during floating-point lazy state preservation"),
    (STKERR_MASK, "STKERR", "BusFault on stacking for exception entry"),
    (UNSTKERR_MASK, "UNSTKERR", "BusFault on unstacking for return from exception"),
    (IMPRECISERR_MASK, "IMPRECISERR", "Imprecise data bus error"),
    (PRECISERR_MASK, "PRECISERR", "Precise data bus error"),
    (IBUSERR_MASK, "IBUSERR", "Instruction bus error"),
)

USAGEFAULT_FLAGS = (
    (DIVBYZERO_MASK, "DIVBYZERO", "Divide by zero"),
    (UNALIGNED_MASK, "UNALIGNED", "Unaligned memory access"),
    (NOCP_MASK, "NOCP", "No coprocessor (attempted coprocessor access)"),
    (INVPC_MASK, "INVPC", "Invalid PC load (e.g., bad EXC_RETURN)"),
    (INVSTATE_MASK, "INVSTATE", "Invalid state (e.g., Thumb bit not set)"),
    (UNDEFINSTR_MASK, "UNDEFINSTR", "Undefined instruction"),
)

# (category, sub-register mask, flags), in report order
CATEGORIES = (
    (FaultCategory.MEM_MANAGE, MEMFAULTSR_MASK, MEMFAULT_FLAGS),
    (FaultCategory.BUS, BUSFAULTSR_MASK, BUSFAULT_FLAGS),
    (FaultCategory.USAGE, USAGEFAULTSR_MASK, USAGEFAULT_FLAGS),
)


@dataclass(frozen=True)
class CfsrFinding:
    """One decoded CFSR entry.

    A header entry (``flag_name is None``) opens each category block; flag
    entries follow it.
    """

    category: FaultCategory
    flag_name: Optional[str] = None
    extra_detail: Optional[str] = None
    description: str = ""

    @property
    def is_header(self) -> bool:
        return self.flag_name is None

    @property
    def label(self) -> str:
        """Text shown in the report's value column."""
        return self.category.value if self.flag_name is None else self.flag_name


def _address_detail(register: str, value: Optional[int]) -> Optional[str]:
    if value is None:
        return None
    return f"{register}: 0x{value:08x}"


def decode_cfsr(
    cfsr: int,
    mmar: Optional[int] = None,
    bfar: Optional[int] = None,
) -> list[CfsrFinding]:
    """Decode a CFSR value into ordered findings.

    Args:
        cfsr: CFSR register value.
        mmar: MMAR value, shown next to MMARVALID when given.
        bfar: BFAR value, shown next to BFARVALID when given.

    Returns:
        Findings in report order. Empty when no category bit is set.
    """
    details = {
        "MMARVALID": _address_detail("MMAR", mmar),
        "BFARVALID": _address_detail("BFAR", bfar),
    }

    findings: list[CfsrFinding] = []
    for category, category_mask, flags in CATEGORIES:
        if not cfsr & category_mask:
            continue
        findings.append(CfsrFinding(category=category))
        for mask, name, desc in flags:
            if cfsr & mask:
                findings.append(CfsrFinding(
                    category=category,
                    flag_name=name,
                    extra_detail=details.get(name),
                    description=desc,
                ))
    return findings
