"""Tests for the cmfault CLI (parser, dispatch, commands)."""

from __future__ import annotations

import io
import json
import sys
from unittest.mock import patch

import pytest

import cmfault.cli as cli
from cmfault.cli.dispatch import main
from cmfault.cli.helpers import PROMPT, _read_fault_text
from cmfault.cli.parser import _build_parser, _preprocess_argv
from cmfault.errors import ImageNotFoundError, SymbolizerUnavailableError


# =============================================================================
# Parser Tests
# =============================================================================

class TestParser:
    def test_json_moved_to_front(self):
        assert _preprocess_argv(["analyze", "f.txt", "--json"]) == ["--json", "analyze", "f.txt"]

    def test_analyze_args(self):
        args = _build_parser().parse_args(
            ["analyze", "fault.txt", "--elf", "fw.elf", "--addr2line", "a2l", "--timeout", "3"]
        )
        assert args.cmd == "analyze"
        assert args.fault_file == "fault.txt"
        assert args.elf == "fw.elf"
        assert args.addr2line == "a2l"
        assert args.timeout == 3.0

    def test_analyze_fault_file_optional(self):
        args = _build_parser().parse_args(["analyze"])
        assert args.fault_file is None
        assert args.elf is None

    def test_decode_cfsr_hex(self):
        args = _build_parser().parse_args(["decode-cfsr", "0x00010000", "--bfar", "0x40000000"])
        assert args.cfsr == 0x00010000
        assert args.bfar == 0x40000000
        assert args.mmar is None

    @pytest.mark.parametrize("value", ["zzz", "0x100000000", "-1"])
    def test_decode_cfsr_rejects_bad_value(self, value):
        with pytest.raises(SystemExit):
            _build_parser().parse_args(["decode-cfsr", value])


class TestDispatch:
    def test_analyze_dispatch(self):
        with patch.object(cli, "cmd_analyze", return_value=0) as cmd:
            assert main(["analyze", "fault.txt", "--elf", "fw.elf", "--json"]) == 0
        cmd.assert_called_once_with(
            fault_file="fault.txt",
            elf="fw.elf",
            addr2line=None,
            timeout=None,
            json_mode=True,
        )

    def test_bad_cfsr_literal_exits_2(self):
        with pytest.raises(SystemExit) as exc:
            main(["decode-cfsr", "zzz"])
        assert exc.value.code == 2

    def test_empty_fault_text_exits_0(self, tmp_path, fake_symbolizer):
        dump = tmp_path / "fault.txt"
        dump.write_text("")
        with patch("cmfault.cli.analyze_cmd.Addr2LineSymbolizer", return_value=fake_symbolizer):
            assert main(["analyze", str(dump), "--elf", "fw.elf"]) == 0

    def test_decode_dispatch(self):
        with patch.object(cli, "cmd_decode_cfsr", return_value=0) as cmd:
            assert main(["decode-cfsr", "0x82", "--mmar", "0x20000000"]) == 0
        cmd.assert_called_once_with(cfsr=0x82, mmar=0x20000000, bfar=None, json_mode=False)


# =============================================================================
# Input Tests
# =============================================================================

class TestReadFaultText:
    def test_from_file(self, tmp_path):
        path = tmp_path / "fault.txt"
        path.write_text("CFSR : 0x1\n")
        assert _read_fault_text(str(path)) == "CFSR : 0x1\n"

    def test_interactive_stops_at_empty_line(self, capsys):
        stdin = io.StringIO("CFSR : 0x1\nLR : 0x2\n\nignored\n")
        assert _read_fault_text(None, stdin=stdin) == "CFSR : 0x1\nLR : 0x2"
        assert capsys.readouterr().out == PROMPT + "\n"

    def test_interactive_eof(self):
        assert _read_fault_text(None, stdin=io.StringIO("a\nb"), prompt=False) == "a\nb"

    def test_missing_file_falls_back_to_stdin(self, tmp_path, caplog):
        text = _read_fault_text(str(tmp_path / "nope.txt"), stdin=io.StringIO("x\n"), prompt=False)
        assert text == "x"
        assert "Fault file not found" in caplog.text


# =============================================================================
# analyze Command Tests
# =============================================================================

class TestCmdAnalyze:
    def _run(self, fake_symbolizer, fault_file, json_mode=False):
        with patch("cmfault.cli.analyze_cmd.Addr2LineSymbolizer", return_value=fake_symbolizer) as ctor:
            rc = cli.cmd_analyze(
                fault_file=fault_file,
                elf="fw.elf",
                addr2line="a2l",
                timeout=None,
                json_mode=json_mode,
            )
        return rc, ctor

    def test_text_output(self, tmp_path, capsys, sample_dump, fake_symbolizer):
        path = tmp_path / "fault.txt"
        path.write_text(sample_dump)

        rc, ctor = self._run(fake_symbolizer, str(path))

        assert rc == 0
        ctor.assert_called_once_with("fw.elf", addr2line="a2l", timeout_s=10.0)
        out = capsys.readouterr().out
        assert out.startswith("Register  Value")
        assert "\nBacktrace\n" in out
        assert "BFAR: 0x40021000" in out
        assert out.rstrip().endswith("done")
        assert "Failed to lookup" not in out

    def test_json_output(self, tmp_path, capsys, sample_dump, fake_symbolizer):
        path = tmp_path / "fault.txt"
        path.write_text(sample_dump)

        rc, _ = self._run(fake_symbolizer, str(path), json_mode=True)

        assert rc == 0
        data = json.loads(capsys.readouterr().out)
        assert data["cfsr"] == "0x00008200"
        assert [f["position"] for f in data["backtrace"]] == [0, 1, 2]
        assert data["diagnostics"] == ["Failed to lookup address: 104"]

    def test_missing_elf(self, capsys):
        with patch(
            "cmfault.cli.analyze_cmd.Addr2LineSymbolizer",
            side_effect=ImageNotFoundError("Elf file not found: fw.elf"),
        ):
            rc = cli.cmd_analyze(fault_file=None, elf="fw.elf", addr2line=None, timeout=None, json_mode=False)
        assert rc == 2
        assert capsys.readouterr().out == "ERROR: Elf file not found: fw.elf\n"

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX execute permission")
    def test_non_executable_addr2line_is_fatal(self, tmp_path, capsys):
        tool = tmp_path / "arm-none-eabi-addr2line"
        tool.write_text("#!/bin/sh\n")
        tool.chmod(0o644)
        dump = tmp_path / "fault.txt"
        dump.write_text("LR : 0x00000100\n#0 : foo@0x00000100+0 PC:0x00000100\n")

        with patch("cmfault.symbolizer.check_elf_image"):
            rc = cli.cmd_analyze(
                fault_file=str(dump), elf="fw.elf", addr2line=str(tool), timeout=None, json_mode=False,
            )

        assert rc == 2
        assert capsys.readouterr().out.startswith("ERROR: addr2line not found")

    def test_missing_addr2line_json(self, capsys):
        with patch(
            "cmfault.cli.analyze_cmd.Addr2LineSymbolizer",
            side_effect=SymbolizerUnavailableError("addr2line not found: a2l"),
        ):
            rc = cli.cmd_analyze(fault_file=None, elf="fw.elf", addr2line="a2l", timeout=None, json_mode=True)
        assert rc == 2
        assert json.loads(capsys.readouterr().out) == {"error": "addr2line not found: a2l"}

    def test_empty_input_gives_header_tables(self, tmp_path, capsys, fake_symbolizer):
        path = tmp_path / "fault.txt"
        path.write_text("")

        rc, _ = self._run(fake_symbolizer, str(path))

        assert rc == 0
        lines = capsys.readouterr().out.split("\n")
        assert lines[0] == "Register  Value  "
        assert lines[2] == "Backtrace"
        assert lines[3].startswith("#  Function  Address  PC  File:Line")


# =============================================================================
# decode-cfsr Command Tests
# =============================================================================

class TestCmdDecodeCfsr:
    def test_text(self, capsys):
        rc = cli.cmd_decode_cfsr(cfsr=0x00010000, mmar=None, bfar=None, json_mode=False)
        assert rc == 0
        out = capsys.readouterr().out
        assert "Usage Fault" in out
        assert "UNDEFINSTR" in out
        assert "Undefined instruction" in out

    def test_no_bits(self, capsys):
        cli.cmd_decode_cfsr(cfsr=0, mmar=None, bfar=None, json_mode=False)
        assert "No fault bits set" in capsys.readouterr().out

    def test_json(self, capsys):
        cli.cmd_decode_cfsr(cfsr=0x8200, mmar=None, bfar=0x40021000, json_mode=True)
        data = json.loads(capsys.readouterr().out)
        assert data["cfsr"] == "0x00008200"
        assert [f["name"] for f in data["faults"][0]["flags"]] == ["BFARVALID", "PRECISERR"]
        assert data["faults"][0]["flags"][0]["detail"] == "BFAR: 0x40021000"
