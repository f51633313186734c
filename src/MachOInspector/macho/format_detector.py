from enum import Enum

from MachOInspector.file_context import FileContext
from MachOInspector.errors import InvalidMachO
from MachOInspector.macho.macho_constants import (
	MH_MAGIC,
	MH_CIGAM,
	MH_MAGIC_64,
	MH_CIGAM_64,
	FAT_MAGIC,
	FAT_CIGAM
)


class MachFormat(Enum):
	THIN_32 = "32-bit"
	THIN_64 = "64-bit"
	SWAPPED_32 = "32-bit (wrong byte order)"
	SWAPPED_64 = "64-bit (wrong byte order)"
	FAT = "fat"
	FAT_SWAPPED = "fat (swapped)"
	UNKNOWN = "unknown"


_MagicMap = {
	MH_MAGIC: MachFormat.THIN_32,
	MH_MAGIC_64: MachFormat.THIN_64,
	MH_CIGAM: MachFormat.SWAPPED_32,
	MH_CIGAM_64: MachFormat.SWAPPED_64,
	FAT_MAGIC: MachFormat.FAT,
	FAT_CIGAM: MachFormat.FAT_SWAPPED,
}


def readMagic(fileCtx: FileContext) -> int:
	"""Read the magic number in host order.

	Raises:
		InvalidMachO: The buffer is too small to hold a magic number.
	"""

	if len(fileCtx) < 4:
		raise InvalidMachO("File too small to contain magic number")

	return fileCtx.readFormat("<I", 0)[0]


def detectFormat(fileCtx: FileContext) -> MachFormat:
	"""Classify a buffer by its magic number.

	Args:
		fileCtx: The buffer to classify.

	Returns:
		The format, UNKNOWN if the magic is not recognised.
	"""

	return _MagicMap.get(readMagic(fileCtx), MachFormat.UNKNOWN)
