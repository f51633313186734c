"""Immutable records produced by a parse.

All values are copied out of the buffer, so an image stays valid after
the file it was read from is closed.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from MachOInspector.macho.macho_constants import *


def decodeName(raw: bytes) -> str:
	"""Decode a fixed length, NUL padded name field.

	The field is not guaranteed to be NUL terminated, decoding stops at
	the first NUL or at the end of the field.
	"""

	return raw.split(b"\x00", 1)[0].decode("ascii", errors="replace")


def describeSymbolType(nType: int) -> str:
	"""Abbreviate a symbol's n_type bitfield.

	The flag abbreviations come first, then the basic type.
	For example an external defined symbol is "EXT SECT".
	"""

	description = ""
	if nType & N_STAB:
		description += "STAB "
	if nType & N_PEXT:
		description += "PEXT "
	if nType & N_EXT:
		description += "EXT "

	basicType = nType & N_TYPE
	if basicType == N_UNDF:
		description += "UNDF"
	elif basicType == N_ABS:
		description += "ABS"
	elif basicType == N_SECT:
		description += "SECT"
	elif basicType == N_PBUD:
		description += "PBUD"
	elif basicType == N_INDR:
		description += "INDR"
	else:
		description += "UNKNOWN"

	return description


@dataclass(frozen=True)
class MachHeader:
	magic: int
	cpuType: int
	cpuSubtype: int
	fileType: int
	ncmds: int
	sizeofcmds: int
	flags: int
	reserved: int = 0

	@property
	def cpuName(self) -> str:
		return CPU_TYPE_NAMES.get(self.cpuType, f"cpu({self.cpuType:#x})")

	@property
	def fileTypeName(self) -> str:
		return FILE_TYPE_NAMES.get(self.fileType, f"filetype({self.fileType:#x})")


@dataclass(frozen=True)
class FatArch:
	cpuType: int
	cpuSubtype: int
	offset: int 	# file offset to the slice
	size: int 		# size of the slice
	align: int 		# alignment as a power of 2

	@property
	def cpuName(self) -> str:
		return CPU_TYPE_NAMES.get(self.cpuType, f"cpu({self.cpuType:#x})")


@dataclass(frozen=True)
class LoadCommand:
	cmd: int
	cmdsize: int
	offset: int 	# offset of the command in the image


@dataclass(frozen=True)
class Segment:
	segname: str
	vmaddr: int
	vmsize: int
	fileoff: int
	filesize: int
	maxprot: int
	initprot: int
	nsects: int
	flags: int

	def containsAddr(self, address: int) -> bool:
		return self.vmaddr <= address < self.vmaddr + self.vmsize


@dataclass(frozen=True)
class Section:
	sectname: str
	segname: str
	addr: int
	size: int
	offset: int
	align: int
	reloff: int
	nreloc: int
	flags: int

	# whether this was a section_64
	is64Bit: bool


@dataclass(frozen=True)
class Symbol:
	name: str
	type: int
	section: int
	desc: int
	value: int

	@property
	def typeString(self) -> str:
		basicType = self.type & N_TYPE
		if basicType == N_UNDF:
			return "Undefined"
		elif basicType == N_ABS:
			return "Absolute"
		elif basicType == N_SECT:
			return "Defined"
		elif basicType == N_PBUD:
			return "Prebound"
		elif basicType == N_INDR:
			return "Indirect"
		return "Unknown"

	@property
	def isExternal(self) -> bool:
		return bool(self.type & N_EXT)

	@property
	def isPrivateExternal(self) -> bool:
		return bool(self.type & N_PEXT)

	@property
	def isStab(self) -> bool:
		return bool(self.type & N_STAB)


@dataclass(frozen=True)
class SymbolTable:
	symbols: Tuple[Symbol, ...]
	stringTable: Tuple[str, ...]


def symbolInfo(symbol: Symbol) -> str:
	"""Render a human readable description of a symbol.
	"""

	return (
		f"Symbol: {symbol.name}\n"
		f"Type: {describeSymbolType(symbol.type)}\n"
		f"Section: {symbol.section}\n"
		f"Value: 0x{symbol.value:x}"
	)


@dataclass(frozen=True)
class MachImage:
	is64Bit: bool
	header: MachHeader
	segments: Tuple[Segment, ...]
	sections: Tuple[Section, ...]
	symbolTable: Optional[SymbolTable]
	loadCommands: Tuple[LoadCommand, ...] = ()

	# The fat slice this image was read from, None for thin files.
	arch: Optional[FatArch] = None

	def hasValidSymbols(self) -> bool:
		"""Check if a non empty symbol table exists."""
		return self.symbolTable is not None and len(self.symbolTable.symbols) > 0

	def symbolInfo(self, symbol: Symbol) -> str:
		return symbolInfo(symbol)

	def segmentNamed(self, name: str) -> Optional[Segment]:
		for segment in self.segments:
			if segment.segname == name:
				return segment
		return None

	def sectionsForSegment(self, segment: Segment) -> Tuple[Section, ...]:
		"""Get the sections declared by a segment.

		Sections are stored flat, a segment owns the nsects sections that
		follow the ones owned by the segments before it.
		"""

		start = 0
		for seg in self.segments:
			if seg is segment:
				return self.sections[start:start + seg.nsects]
			start += seg.nsects

		raise ValueError(f"Segment {segment.segname!r} is not part of this image")
