import logging
from enum import Enum
from typing import List

from MachOInspector.file_context import FileContext
from MachOInspector.errors import (
	LoadCommandOutOfBounds,
	SymbolTableOutOfBounds
)
from MachOInspector.macho.macho_image import (
	LoadCommand,
	Symbol,
	SymbolTable
)
from MachOInspector.macho.macho_structs import (
	symtab_command,
	nlist,
	nlist_64
)


class StringIndexing(Enum):
	"""How a symbol's n_strx selects its name.

	OFFSET treats n_strx as a byte offset into the string table, which is
	what the linker writes. ORDINAL selects the n-th non empty string
	instead, this only resolves names correctly when the strings are stored
	in symbol order, and exists for compatibility with older tools.
	"""

	OFFSET = "offset"
	ORDINAL = "ordinal"


def parseStringTable(fileCtx: FileContext, offset: int, size: int) -> List[str]:
	"""Split the string table into its strings.

	Runs of NUL bytes collapse, empty strings are never produced. Trailing
	bytes without a NUL terminator are not a string.

	Raises:
		SymbolTableOutOfBounds: The table extends beyond the buffer.
	"""

	if not fileCtx.contains(offset, size):
		raise SymbolTableOutOfBounds("String table extends beyond file size")

	data = fileCtx.getBytes(offset, size)
	return [
		string.decode("utf-8", errors="replace")
		for string in data.split(b"\x00")[:-1]
		if string
	]


def parseSymbolTable(
	fileCtx: FileContext,
	command: LoadCommand,
	is64Bit: bool,
	stringIndexing: StringIndexing = StringIndexing.OFFSET,
	logger: logging.Logger = None
) -> SymbolTable:
	"""Decode an LC_SYMTAB command, its string table and its symbols.

	Both tables are bounds checked before either is read. Symbols whose
	name cannot be resolved are dropped.

	Args:
		fileCtx: The image's data source.
		command: The LC_SYMTAB command.
		is64Bit: Whether the entries are nlist_64.
		stringIndexing: Optional; How n_strx is interpreted.
		logger: Optional; The logger to report progress to.

	Raises:
		LoadCommandOutOfBounds: cmdsize is too small for the command.
		SymbolTableOutOfBounds: Either table extends beyond the buffer.

	Returns:
		The symbol table.
	"""

	logger = logger or logging.getLogger("MachOInspector")

	if command.cmdsize < symtab_command.SIZE:
		raise LoadCommandOutOfBounds(
			f"LC_SYMTAB cmdsize {command.cmdsize} is smaller than {symtab_command.SIZE}"
		)

	symtab = fileCtx.readStruct(symtab_command, command.offset)
	logger.debug(
		f"Symbol table: nsyms={symtab.nsyms}, symoff={symtab.symoff:#x}, "
		f"stroff={symtab.stroff:#x}, strsize={symtab.strsize:#x}"
	)

	entryType = nlist_64 if is64Bit else nlist
	if (
		not fileCtx.contains(symtab.stroff, symtab.strsize)
		or not fileCtx.contains(symtab.symoff, symtab.nsyms * entryType.SIZE)
	):
		raise SymbolTableOutOfBounds(
			f"symoff={symtab.symoff:#x} nsyms={symtab.nsyms} "
			f"stroff={symtab.stroff:#x} strsize={symtab.strsize:#x} "
			f"in a {len(fileCtx):#x} byte file"
		)

	strings = parseStringTable(fileCtx, symtab.stroff, symtab.strsize)
	logger.debug(f"Parsed {len(strings)} strings from string table")

	symbols = []
	for i in range(symtab.nsyms):
		entry = fileCtx.readStruct(entryType, symtab.symoff + (i * entryType.SIZE))

		if stringIndexing == StringIndexing.ORDINAL:
			if entry.n_strx >= len(strings):
				logger.debug(f"Dropping symbol {i}, string index {entry.n_strx} out of range")
				continue
			name = strings[entry.n_strx]
		else:
			if entry.n_strx >= symtab.strsize:
				logger.debug(f"Dropping symbol {i}, string offset {entry.n_strx:#x} out of range")
				continue
			name = fileCtx.readString(
				symtab.stroff + entry.n_strx,
				end=symtab.stroff + symtab.strsize
			).decode("utf-8", errors="replace")

		symbols.append(Symbol(
			name=name,
			type=entry.n_type,
			section=entry.n_sect,
			desc=entry.n_desc,
			value=entry.n_value
		))
		pass

	logger.info(f"Parsed {len(symbols)} of {symtab.nsyms} symbols")
	return SymbolTable(symbols=tuple(symbols), stringTable=tuple(strings))
