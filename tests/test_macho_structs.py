import ctypes
import struct

import pytest

from MachOInspector.file_context import FileContext
from MachOInspector.macho import macho_structs
from MachOInspector.macho.macho_structs import LoadCommands, SkippedLoadCommands


@pytest.mark.parametrize(
	"structType",
	[
		macho_structs.mach_header,
		macho_structs.mach_header_64,
		macho_structs.load_command,
		macho_structs.segment_command,
		macho_structs.segment_command_64,
		macho_structs.section,
		macho_structs.section_64,
		macho_structs.dylib_command,
		macho_structs.dylinker_command,
		macho_structs.symtab_command,
		macho_structs.dysymtab_command,
		macho_structs.nlist,
		macho_structs.nlist_64,
		macho_structs.fat_header,
		macho_structs.fat_arch,
		macho_structs.fat_header_swapped,
		macho_structs.fat_arch_swapped,
	]
)
def test_declared_size_matches_layout(structType):
	assert ctypes.sizeof(structType) == structType.SIZE


def test_skipped_commands_have_structures():
	assert LoadCommands.LC_DYSYMTAB in SkippedLoadCommands
	assert LoadCommands.LC_SYMTAB not in SkippedLoadCommands
	assert LoadCommands.LC_SEGMENT_64 not in SkippedLoadCommands
	for cmd, structType in SkippedLoadCommands.items():
		assert structType.SIZE >= macho_structs.load_command.SIZE


def test_dylib_command_fields():
	data = struct.pack("<IIIIII", LoadCommands.LC_LOAD_DYLIB, 56, 24, 2, 0x10000, 0x10000)
	command = FileContext(data).readStruct(macho_structs.dylib_command, 0)

	assert command.cmd == LoadCommands.LC_LOAD_DYLIB
	assert command.dylib.name.offset == 24
	assert command.dylib.timestamp == 2
	assert command.dylib.current_version == 0x10000


def test_swapped_fat_arch_reads_big_endian():
	data = struct.pack(">iiIII", 0x01000007, 3, 0x1000, 0x2000, 12)
	arch = FileContext(data).readStruct(macho_structs.fat_arch_swapped, 0)

	assert arch.cputype == 0x01000007
	assert arch.cpusubtype == 3
	assert arch.offset == 0x1000
	assert arch.size == 0x2000
	assert arch.align == 12
