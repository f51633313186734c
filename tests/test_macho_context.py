import logging

import pytest

from MachOInspector.errors import (
	HeaderTooSmall,
	InvalidHeader,
	LoadCommandOutOfBounds
)
from MachOInspector.file_context import FileContext
from MachOInspector.macho.macho_constants import *
from MachOInspector.macho.macho_context import MachOContext, parseHeader, parseMachO
from MachOInspector.macho.macho_structs import LoadCommands

from macho_builder import (
	buildImage,
	buildMachO,
	buildSampleImage,
	genericCommand,
	nlist,
	section,
	segmentCommand,
	symtabCommand,
	HELPER_VALUE,
	MAIN_VALUE,
	STRINGS
)


def _commandBoundaries(data: bytes, headerSize: int, ncmds: int):
	"""Offsets of every load command, plus the end of the last one."""

	fileCtx = FileContext(data)
	offsets = [headerSize]
	for _ in range(ncmds):
		offsets.append(offsets[-1] + fileCtx.readFormat("<II", offsets[-1])[1])
	return offsets


class TestHeader:

	def test_parse_64_bit_header(self):
		data = buildSampleImage(cputype=CPU_TYPE_ARM64, cpusubtype=CPU_SUBTYPE_ARM64E, filetype=MH_DYLIB)
		header = parseHeader(FileContext(data), True)

		assert header.magic == MH_MAGIC_64
		assert header.cpuType == CPU_TYPE_ARM64
		assert header.cpuName == "arm64"
		assert header.cpuSubtype == CPU_SUBTYPE_ARM64E
		assert header.fileType == MH_DYLIB
		assert header.fileTypeName == "MH_DYLIB"
		assert header.ncmds == 2
		assert header.flags == 0x200085

	def test_parse_32_bit_header(self):
		data = buildSampleImage(is64Bit=False, cputype=CPU_TYPE_I386)
		header = parseHeader(FileContext(data), False)

		assert header.magic == MH_MAGIC
		assert header.cpuType == CPU_TYPE_I386
		assert header.reserved == 0
		assert header.sizeofcmds == 56 + 68 + 24

	@pytest.mark.parametrize("is64Bit, size", [(True, 31), (False, 27)])
	def test_header_too_small(self, is64Bit, size):
		data = buildSampleImage(is64Bit=is64Bit)[:size]

		with pytest.raises(HeaderTooSmall):
			parseMachO(FileContext(data))

	def test_header_too_small_is_an_invalid_header(self):
		assert issubclass(HeaderTooSmall, InvalidHeader)


class TestLoadCommandWalker:

	def test_consumes_exactly_ncmds(self):
		data = buildImage(
			[segmentCommand("__PAGEZERO", vmaddr=0, filesize=0), segmentCommand("__TEXT")],
			[(1, MAIN_VALUE)],
			STRINGS,
			extraCommands=[
				genericCommand(LoadCommands.LC_UUID, b"\x11" * 16),
				genericCommand(LoadCommands.LC_DYSYMTAB, b"\x00" * 72),
				genericCommand(LoadCommands.LC_LOAD_DYLINKER, b"\x0c\x00\x00\x00/usr/lib/dyld\x00\x00\x00"),
				genericCommand(LoadCommands.LC_LOAD_DYLIB, b"\x00" * 16),
			]
		)
		machoCtx = MachOContext(FileContext(data), True)

		assert len(machoCtx.loadCommands) == machoCtx.header.ncmds == 7
		assert machoCtx.cursor == machoCtx.headerEnd + machoCtx.header.sizeofcmds
		assert [c.cmd for c in machoCtx.loadCommands] == [
			LoadCommands.LC_SEGMENT_64,
			LoadCommands.LC_SEGMENT_64,
			LoadCommands.LC_UUID,
			LoadCommands.LC_DYSYMTAB,
			LoadCommands.LC_LOAD_DYLINKER,
			LoadCommands.LC_LOAD_DYLIB,
			LoadCommands.LC_SYMTAB,
		]
		assert [s.segname for s in machoCtx.image.segments] == ["__PAGEZERO", "__TEXT"]

	def test_command_offsets_follow_cmdsize(self):
		data = buildSampleImage()
		machoCtx = MachOContext(FileContext(data), True)

		offsets = _commandBoundaries(data, 32, 2)
		assert [c.offset for c in machoCtx.loadCommands] == offsets[:-1]

	def test_get_load_command(self):
		machoCtx = MachOContext(FileContext(buildSampleImage()), True)

		symtab = machoCtx.getLoadCommand((LoadCommands.LC_SYMTAB,))
		assert symtab.cmdsize == 24
		assert len(machoCtx.getLoadCommand((LoadCommands.LC_SEGMENT_64,), multiple=True)) == 1
		assert machoCtx.getLoadCommand((LoadCommands.LC_UUID,)) is None

	def test_segment_of_the_other_width_is_skipped(self):
		data = buildMachO([
			segmentCommand("__TEXT32", is64Bit=False, vmaddr=0x1000),
			segmentCommand("__TEXT"),
		])
		image = MachOContext(FileContext(data), True).image

		assert [s.segname for s in image.segments] == ["__TEXT"]
		assert len(image.loadCommands) == 2

	def test_extra_symtab_is_ignored(self, caplog):
		headerSize = 32
		commands = [
			segmentCommand("__TEXT"),
			symtabCommand(0, 0, 0, 0),
			# a second LC_SYMTAB pointing nowhere
			symtabCommand(0xffffff, 1, 0xffffff, 1),
		]
		symoff = headerSize + 72 + 24 + 24
		stroff = symoff + 32
		commands[1] = symtabCommand(symoff, 2, stroff, len(STRINGS))
		trailing = nlist(1, MAIN_VALUE) + nlist(7, HELPER_VALUE) + STRINGS
		data = buildMachO(commands, trailing=trailing)

		with caplog.at_level(logging.WARNING, logger="MachOInspector"):
			machoCtx = MachOContext(FileContext(data), True)

		assert [s.name for s in machoCtx.image.symbolTable.symbols] == ["_main", "_helper"]
		assert len(machoCtx.getLoadCommand((LoadCommands.LC_SYMTAB,), multiple=True)) == 2
		assert "Ignoring extra LC_SYMTAB" in caplog.text

	@pytest.mark.parametrize("is64Bit", [True, False])
	def test_truncation_at_command_boundaries(self, is64Bit):
		data = buildSampleImage(is64Bit=is64Bit)
		headerSize = 32 if is64Bit else 28

		# every boundary before the end of the last command
		for boundary in _commandBoundaries(data, headerSize, 2)[:-1]:
			with pytest.raises(LoadCommandOutOfBounds):
				parseMachO(FileContext(data[:boundary]))

			# and a cut in the middle of the command
			with pytest.raises(LoadCommandOutOfBounds):
				parseMachO(FileContext(data[:boundary + 12]))

	def test_cmdsize_beyond_sizeofcmds(self):
		commands = [segmentCommand("__TEXT"), genericCommand(LoadCommands.LC_UUID, b"\x00" * 16)]
		data = buildMachO(commands, sizeofcmds=72 + 8, trailing=b"\x00" * 64)

		with pytest.raises(LoadCommandOutOfBounds):
			parseMachO(FileContext(data))

	def test_more_commands_than_sizeofcmds(self):
		data = buildMachO([segmentCommand("__TEXT")], ncmds=2, trailing=b"\x00" * 64)

		with pytest.raises(LoadCommandOutOfBounds):
			parseMachO(FileContext(data))

	@pytest.mark.parametrize("cmdsize", [0, 4])
	def test_cmdsize_too_small(self, cmdsize):
		command = b"\x1b\x00\x00\x00" + cmdsize.to_bytes(4, "little")
		data = buildMachO([command], sizeofcmds=64, trailing=b"\x00" * 64)

		with pytest.raises(LoadCommandOutOfBounds):
			parseMachO(FileContext(data))

	def test_short_sizeofcmds_is_logged(self, caplog):
		data = buildMachO([segmentCommand("__TEXT")], sizeofcmds=72 + 16, trailing=b"\x00" * 16)

		with caplog.at_level(logging.WARNING, logger="MachOInspector"):
			machoCtx = MachOContext(FileContext(data), True)

		assert machoCtx.cursor == 32 + 72
		assert "sizeofcmds" in caplog.text


class TestParseMachO:

	@pytest.mark.parametrize("is64Bit", [True, False])
	def test_sample_image(self, is64Bit):
		image = parseMachO(FileContext(buildSampleImage(is64Bit=is64Bit)))

		assert image.is64Bit == is64Bit
		assert image.arch is None
		assert len(image.segments) == 1
		assert len(image.sections) == 1
		assert image.sections[0].is64Bit == is64Bit
		assert [s.name for s in image.symbolTable.symbols] == ["_main", "_helper"]

	def test_image_outlives_buffer(self, tmp_path):
		path = tmp_path / "binary"
		path.write_bytes(buildSampleImage())

		with FileContext.fromPath(path) as fileCtx:
			image = parseMachO(fileCtx)

		assert fileCtx.closed
		assert image.segments[0].segname == "__TEXT"
		assert image.symbolTable.symbols[1].name == "_helper"

	def test_image_queries(self):
		data = buildMachO([
			segmentCommand("__TEXT", [
				section("__text", "__TEXT", 0x100000f50, 0x40, 0xf50),
				section("__stubs", "__TEXT", 0x100000f90, 0x10, 0xf90),
			]),
			segmentCommand("__DATA", [
				section("__data", "__DATA", 0x100004000, 0x8, 0x4000),
			], vmaddr=0x100004000),
		])
		image = parseMachO(FileContext(data))

		text = image.segmentNamed("__TEXT")
		data = image.segmentNamed("__DATA")
		assert image.segmentNamed("__LINKEDIT") is None
		assert [s.sectname for s in image.sectionsForSegment(text)] == ["__text", "__stubs"]
		assert [s.sectname for s in image.sectionsForSegment(data)] == ["__data"]
		assert text.containsAddr(0x100000f50)
		assert not text.containsAddr(0x100004000)
		assert not image.hasValidSymbols()
