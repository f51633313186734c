import argparse

import pytest

from MachOInspector import cli
from MachOInspector.macho.macho_constants import *

from macho_builder import buildFat, buildSampleImage


@pytest.fixture
def samplePath(tmp_path):
	path = tmp_path / "sample"
	path.write_bytes(buildSampleImage())
	return path


@pytest.fixture
def fatPath(tmp_path):
	path = tmp_path / "universal"
	path.write_bytes(buildFat([
		(CPU_TYPE_ARM64, CPU_SUBTYPE_ARM64_ALL, buildSampleImage(cputype=CPU_TYPE_ARM64, cpusubtype=0)),
		(CPU_TYPE_X86_64, CPU_SUBTYPE_X86_64_ALL, buildSampleImage()),
	]))
	return path


class TestParseArch:

	def test_names(self):
		assert cli.parseArch("x86_64") == (CPU_TYPE_X86_64, CPU_SUBTYPE_X86_64_ALL)
		assert cli.parseArch("arm64") == (CPU_TYPE_ARM64, CPU_SUBTYPE_ARM64_ALL)

	def test_numeric_pair(self):
		assert cli.parseArch("0x0100000c:2") == (CPU_TYPE_ARM64, 2)

	@pytest.mark.parametrize("value", ["sparc", "7", "x:y"])
	def test_invalid(self, value):
		with pytest.raises(argparse.ArgumentTypeError):
			cli.parseArch(value)


class TestMain:

	def test_summary(self, samplePath, capsys):
		assert cli.main([str(samplePath), "-v", "0"]) == 0

		out = capsys.readouterr().out
		assert f"{samplePath}:" in out
		assert "64-bit" in out
		assert "x86_64" in out
		assert "MH_EXECUTE" in out
		assert "Symbols:        2" in out

	def test_listings(self, samplePath, capsys):
		assert cli.main([str(samplePath), "-v", "0", "-c", "-s", "--sections", "-l"]) == 0

		out = capsys.readouterr().out
		assert "LC_SEGMENT_64" in out
		assert "LC_SYMTAB" in out
		assert "__TEXT" in out
		assert "__text" in out
		assert "0x0000000100000f50" in out
		assert "_main" in out
		assert "_helper" in out

	def test_filter(self, samplePath, capsys):
		assert cli.main([str(samplePath), "-v", "0", "--filter", "HELP"]) == 0

		out = capsys.readouterr().out
		assert "Symbols (1)" in out
		assert "_helper" in out
		assert "_main" not in out

	def test_legacy_string_index(self, samplePath, capsys):
		assert cli.main([str(samplePath), "-v", "0", "-l", "--legacy-string-index"]) == 0

		out = capsys.readouterr().out
		assert "Symbols (1)" in out
		assert "_main" not in out

	def test_archs(self, fatPath, samplePath, capsys):
		assert cli.main([str(fatPath), "-v", "0", "--archs"]) == 0
		out = capsys.readouterr().out
		assert "2 architectures" in out
		assert "arm64" in out
		assert "x86_64" in out

		assert cli.main([str(samplePath), "-v", "0", "--archs"]) == 0
		assert "not a fat file" in capsys.readouterr().out

	def test_arch_selection(self, fatPath, capsys):
		assert cli.main([str(fatPath), "-v", "0", "--arch", "arm64"]) == 0

		out = capsys.readouterr().out
		assert "Slice:          arm64 at 0x1000" in out
		assert "CPU:            arm64" in out

	def test_failure_exit_code(self, tmp_path, capsys):
		missing = tmp_path / "missing"

		assert cli.main([str(missing), "-v", "0"]) == 1
		assert str(missing) in capsys.readouterr().err

	def test_batch(self, samplePath, tmp_path, capsys):
		broken = tmp_path / "broken"
		broken.write_bytes(b"\x7fELF" + b"\x00" * 60)

		assert cli.main([str(samplePath), str(broken), str(samplePath), "-v", "0"]) == 1

		captured = capsys.readouterr()
		assert captured.out.count(f"{samplePath}:") == 2
		assert f"{broken}: Unsupported Mach-O format" in captured.err
