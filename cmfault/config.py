"""Analyzer configuration.

Everything the pipeline needs from the outside world is collected here and
passed explicitly; nothing is kept in module-level state.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_ADDR2LINE = "arm-none-eabi-addr2line"
DEFAULT_ELF = "./firmware.elf"
DEFAULT_TIMEOUT_S = 10.0

ADDR2LINE_ENV = "CMFAULT_ADDR2LINE"
ELF_ENV = "CMFAULT_ELF"


@dataclass(frozen=True)
class AnalyzerConfig:
    """Settings for one analysis run."""

    addr2line: str = DEFAULT_ADDR2LINE
    """addr2line binary name or path."""

    elf_path: str = DEFAULT_ELF
    """Firmware ELF with debug symbols."""

    fault_path: Optional[str] = None
    """Fault dump file. None means read the dump interactively."""

    timeout_s: float = DEFAULT_TIMEOUT_S
    """Timeout for a single addr2line invocation."""

    @classmethod
    def resolve(
        cls,
        *,
        addr2line: Optional[str] = None,
        elf_path: Optional[str] = None,
        fault_path: Optional[str] = None,
        timeout_s: Optional[float] = None,
    ) -> "AnalyzerConfig":
        """Build a config from CLI values, falling back to env vars, then defaults.

        Precedence per field: explicit argument > environment > default.
        """
        return cls(
            addr2line=addr2line or os.environ.get(ADDR2LINE_ENV) or DEFAULT_ADDR2LINE,
            elf_path=elf_path or os.environ.get(ELF_ENV) or DEFAULT_ELF,
            fault_path=fault_path,
            timeout_s=DEFAULT_TIMEOUT_S if timeout_s is None else timeout_s,
        )
