"""Errors raised while loading and parsing Mach-O files.

Every error aborts the parse that raised it, a partially parsed image
is never returned.
"""


class MachOError(Exception):
	"""Base class for all loader errors."""

	description = "Mach-O error"

	def __init__(self, message: str = None) -> None:
		super().__init__(message or self.description)
		self.message = message or self.description
		pass

	def __str__(self) -> str:
		if self.message == self.description:
			return self.description
		return f"{self.description}: {self.message}"


class FileNotFound(MachOError):
	description = "File not found"


class MappingFailure(MachOError):
	description = "Error mapping file to memory"


class InvalidMachO(MachOError):
	description = "Invalid Mach-O file"


class UnsupportedFormat(MachOError):
	description = "Unsupported Mach-O format"


# The magic number is the only thing that decides the format
InvalidMagic = UnsupportedFormat


class WrongByteOrder(MachOError):
	description = "Binary has wrong byte order for this platform"


class InvalidHeader(MachOError):
	description = "Invalid Mach-O header"


class HeaderTooSmall(InvalidHeader):
	description = "File too small to contain the Mach-O header"


class LoadCommandOutOfBounds(MachOError):
	description = "Load command extends beyond its bounds"


class InvalidSegment(MachOError):
	description = "Invalid segment"


class InvalidSection(MachOError):
	description = "Invalid section"


class SymbolTableOutOfBounds(MachOError):
	description = "Invalid symbol table or string table offsets"


class InvalidSymbol(MachOError):
	description = "Invalid symbol"


class UnsupportedArchitecture(MachOError):
	description = "No architecture in the fat binary matches the target"


class FatBinaryMalformed(MachOError):
	description = "Malformed fat (universal) binary"
