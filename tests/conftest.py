"""Shared pytest configuration for cmfault tests."""

from __future__ import annotations

from typing import Optional

import pytest

from cmfault.symbolizer import SymbolInfo, Symbolizer


class FakeSymbolizer(Symbolizer):
    """Symbolizer answering from a fixed address table; records every lookup."""

    def __init__(self, table: Optional[dict[int, SymbolInfo]] = None):
        self.table = dict(table or {})
        self.calls: list[int] = []

    def resolve(self, address: int) -> Optional[SymbolInfo]:
        self.calls.append(address)
        return self.table.get(address)


def _make_symbol(function: str, path: str, line: int) -> SymbolInfo:
    return SymbolInfo(
        function_name=function,
        file_name=path.replace("\\", "/").rsplit("/", 1)[-1],
        file_path=path,
        line=line,
    )


@pytest.fixture
def make_symbol():
    return _make_symbol


@pytest.fixture
def empty_symbolizer():
    """Symbolizer that resolves nothing."""
    return FakeSymbolizer()


@pytest.fixture
def fake_symbolizer():
    return FakeSymbolizer({
        0x08001234: _make_symbol("app_main", "src/app/main.c", 42),
        0x08005678: _make_symbol("HardFault_Handler", "src/fault.c", 17),
        0x0001C442: _make_symbol("GcodeSuite::process_parsed_command(bool)", "Marlin/src/gcode/gcode.cpp", 339),
        0x0001D000: _make_symbol("idle()", "Marlin/src/MarlinCore.cpp", 812),
    })


SAMPLE_DUMP = """\
Recv: ## HARD FAULT ##
Recv: R0   : 0x00000001
Recv: R1   : 0x20001000
Recv: LR   : 0x08001234
Recv: PC   : 0x08005678
Recv: CFSR : 0x00008200
Recv: BFAR : 0x40021000
Recv: #0 : unknown@0x0001C38C+182 PC:0x0001C442
Recv: #1 : idle@0x0001CF00+256 PC:0x0001D000
Recv: #2 : unknown@0x00000100+4 PC:0x00000104
"""


@pytest.fixture
def sample_dump():
    return SAMPLE_DUMP
