"""Exceptions raised by cmfault.

Only resource problems are exceptions. Unparseable lines and failed
address lookups are reported through return values and logging.
"""

from __future__ import annotations


class CmfaultError(Exception):
    """Base class for cmfault errors."""


class ImageNotFoundError(CmfaultError):
    """The firmware ELF image is missing or is not an ELF file."""


class SymbolizerUnavailableError(CmfaultError):
    """The address symbolizer (addr2line) cannot be found or executed."""
