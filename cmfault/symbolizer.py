"""Address-to-source symbolization.

The analyzer only needs one capability: map a code address to
function/file/line, or learn that it cannot be mapped. Symbolizer is that
interface; Addr2LineSymbolizer implements it by running the toolchain's
addr2line against the firmware ELF.
"""

from __future__ import annotations

import logging
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from elftools.common.exceptions import ELFError
from elftools.elf.elffile import ELFFile

from .errors import ImageNotFoundError, SymbolizerUnavailableError
from .toolchain import find_addr2line

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SymbolInfo:
    """Source location of a code address."""
    function_name: str
    file_name: str
    file_path: str
    line: int

    @property
    def location(self) -> str:
        """``file:line`` as shown in the report."""
        return f"{self.file_name}:{self.line}"


class Symbolizer(ABC):
    """Maps code addresses to source locations."""

    @abstractmethod
    def resolve(self, address: int) -> Optional[SymbolInfo]:
        """Return the source location of ``address``, or None if unknown.

        Must not raise for an address that merely cannot be resolved.
        """


# addr2line location line: "E:\src/app/main.c:339" or "main.c:42 (discriminator 3)"
_LOCATION_RE = re.compile(r"^(.+):(\d+)")


def _basename(path: str) -> str:
    # addr2line reports paths as they were at build time, possibly Windows-style
    return re.split(r"[\\/]", path)[-1] or path


def parse_addr2line_output(output: str) -> Optional[SymbolInfo]:
    """Parse the two-line ``addr2line -f`` answer for a single address.

    Line 1 is the function name, line 2 is ``path:line``. Returns None when
    addr2line did not know the address (``??`` / ``??:0``).
    """
    lines = output.splitlines()
    if len(lines) < 2:
        return None

    function = lines[0].strip()
    m = _LOCATION_RE.match(lines[1].strip())
    if not m:
        return None

    file_path = m.group(1)
    if function == "??" and file_path == "??":
        return None

    return SymbolInfo(
        function_name=function,
        file_name=_basename(file_path),
        file_path=file_path,
        line=int(m.group(2)),
    )


def check_elf_image(elf_path: str) -> None:
    """Verify the firmware image exists and is an ELF file.

    Raises:
        ImageNotFoundError: If the file is missing or not ELF.
    """
    path = Path(elf_path)
    if not path.is_file():
        raise ImageNotFoundError(f"Elf file not found: {elf_path}")
    try:
        with open(path, "rb") as f:
            ELFFile(f)
    except ELFError as e:
        raise ImageNotFoundError(f"Not an ELF file: {elf_path} ({e})") from e


class Addr2LineSymbolizer(Symbolizer):
    """Symbolizer backed by ``addr2line -e <elf> -f -C <addr>``.

    Usage:
        symbolizer = Addr2LineSymbolizer("build/firmware.elf")
        info = symbolizer.resolve(0x0001C442)
        if info:
            print(info.function_name, info.location)

    Results are memoized per address; the LR and the innermost frame's PC
    often point at the same place.
    """

    def __init__(
        self,
        elf_path: str,
        addr2line: Optional[str] = None,
        timeout_s: float = 10.0,
    ):
        """Initialize Addr2LineSymbolizer.

        Args:
            elf_path: Path to ELF file with debug symbols.
            addr2line: addr2line binary name or path (ARM defaults if None).
            timeout_s: Timeout for a single addr2line invocation.

        Raises:
            ImageNotFoundError: If the ELF is missing or invalid.
            SymbolizerUnavailableError: If no addr2line binary can be found.
        """
        check_elf_image(elf_path)
        tool = find_addr2line(addr2line)
        if not tool:
            raise SymbolizerUnavailableError(
                f"addr2line not found: {addr2line or 'arm-none-eabi-addr2line'}"
            )
        self.elf_path = elf_path
        self.timeout_s = timeout_s
        self._addr2line = tool
        self._cache: dict[int, Optional[SymbolInfo]] = {}

    @property
    def addr2line(self) -> str:
        return self._addr2line

    def resolve(self, address: int) -> Optional[SymbolInfo]:
        if address not in self._cache:
            self._cache[address] = self._run(address)
        return self._cache[address]

    def _run(self, address: int) -> Optional[SymbolInfo]:
        try:
            # -f: print function name, -C: demangle
            result = subprocess.run(
                [self._addr2line, "-e", self.elf_path, "-f", "-C", f"{address:x}"],
                capture_output=True,
                text=True,
                timeout=self.timeout_s,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise SymbolizerUnavailableError(f"Cannot run {self._addr2line}: {e}") from e
        except subprocess.TimeoutExpired:
            logger.warning("addr2line timed out for 0x%08x", address)
            return None
        except OSError as e:
            logger.warning("addr2line failed for 0x%08x: %s", address, e)
            return None

        if result.returncode != 0:
            logger.warning("addr2line failed for 0x%08x: %s", address, result.stderr.strip())
            return None

        info = parse_addr2line_output(result.stdout)
        if info is None:
            logger.debug("addr2line has no location for 0x%08x: %r", address, result.stdout)
        return info
