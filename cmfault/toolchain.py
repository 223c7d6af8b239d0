"""addr2line discovery for ARM toolchains.

Searches PATH first, then the install locations of the Zephyr SDK and the
Arm GNU toolchain, which are often not on the user's PATH.
"""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import Optional

# Tried in order when the configured binary is not found as given
ARM_ADDR2LINE_NAMES = (
    "arm-none-eabi-addr2line",
    "arm-zephyr-eabi-addr2line",
)


def _find_in_sdk_dirs(name: str) -> Optional[str]:
    """Search for a tool in known SDK directories beyond PATH.

    Args:
        name: Binary name to search for (e.g., arm-none-eabi-addr2line).

    Returns:
        Absolute path to the binary, or None if not found.
    """
    home = Path.home()
    # Zephyr SDK (glob for version-numbered dirs)
    for sdk_dir in sorted(home.glob("zephyr-sdk-*"), reverse=True):
        candidate = sdk_dir / "arm-zephyr-eabi" / "bin" / name
        if candidate.is_file():
            return str(candidate)
    # Arm GNU toolchain tarballs unpacked under /opt or ~/opt
    for root in (Path("/opt"), home / "opt"):
        for tool_dir in sorted(root.glob("*arm-none-eabi*/bin"), reverse=True):
            candidate = tool_dir / name
            if candidate.is_file():
                return str(candidate)
    return None


def which_or_sdk(name: str) -> Optional[str]:
    """Find a toolchain binary on PATH or in known SDK directories.

    Args:
        name: Binary name to search for.

    Returns:
        Absolute path to the binary, or None if not found.
    """
    return shutil.which(name) or _find_in_sdk_dirs(name)


def find_addr2line(preferred: Optional[str] = None) -> Optional[str]:
    """Locate an addr2line binary.

    An explicit path is used only if it is an executable file. A bare name
    is looked up on PATH and in SDK dirs, then the standard ARM names are
    tried.

    Args:
        preferred: Configured binary name or path.

    Returns:
        Path to addr2line, or None if nothing usable was found.
    """
    if preferred:
        if Path(preferred).is_file() and os.access(preferred, os.X_OK):
            return preferred
        if "/" in preferred or "\\" in preferred:
            return None
        found = which_or_sdk(preferred)
        if found:
            return found
    for name in ARM_ADDR2LINE_NAMES:
        if name == preferred:
            continue
        found = which_or_sdk(name)
        if found:
            return found
    return None
