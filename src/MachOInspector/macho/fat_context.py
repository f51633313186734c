import logging
import platform
from typing import List, Optional, Tuple

from MachOInspector.file_context import FileContext
from MachOInspector.errors import (
	FatBinaryMalformed,
	UnsupportedArchitecture
)
from MachOInspector.macho.macho_image import FatArch
from MachOInspector.macho.macho_constants import *
from MachOInspector.macho.macho_structs import (
	fat_header,
	fat_arch,
	fat_header_swapped,
	fat_arch_swapped
)


Architecture = Tuple[int, int]


def hostArchitecture() -> Optional[Architecture]:
	"""Get the cpu type and subtype the host can execute.

	Returns:
		A (cputype, cpusubtype) pair, or None for hosts that
		do not run Mach-O code.
	"""

	machine = platform.machine().lower()
	if machine in ("x86_64", "amd64"):
		return (CPU_TYPE_X86_64, CPU_SUBTYPE_X86_64_ALL)
	elif machine in ("arm64", "aarch64"):
		return (CPU_TYPE_ARM64, CPU_SUBTYPE_ARM64_ALL)
	return None


def _machineSubtype(cpuSubtype: int) -> int:
	return cpuSubtype & 0xffffffff & ~CPU_SUBTYPE_MASK


def archMatches(arch: FatArch, target: Architecture) -> bool:
	cpuType, cpuSubtype = target
	if arch.cpuType != cpuType:
		return False

	# ignore the capability bits, like CPU_SUBTYPE_LIB64
	return _machineSubtype(arch.cpuSubtype) == _machineSubtype(cpuSubtype)


class FatContext(object):

	architectures: List[FatArch]

	def __init__(
		self,
		fileCtx: FileContext,
		swapped: bool,
		logger: logging.Logger = None
	) -> None:
		"""A wrapper around a fat (universal) container.

		Parses the fat header and the architecture table.

		Args:
			fileCtx: The container.
			swapped: If the table is stored in the opposite byte order.
			logger: Optional; The logger to report progress to.

		Raises:
			FatBinaryMalformed: The table or one of its slices does not fit
				in the container.
		"""

		super().__init__()

		self.fileCtx = fileCtx
		self.swapped = swapped
		self._logger = logger or logging.getLogger("MachOInspector")

		headerType = fat_header_swapped if swapped else fat_header
		archType = fat_arch_swapped if swapped else fat_arch

		if not fileCtx.contains(0, headerType.SIZE):
			raise FatBinaryMalformed("File too small to contain the fat header")

		self.header = fileCtx.readStruct(headerType, 0)
		narch = self.header.nfat_arch
		self._logger.info(f"Fat binary contains {narch} architectures")

		if not fileCtx.contains(headerType.SIZE, narch * archType.SIZE):
			raise FatBinaryMalformed(
				f"Architecture table of {narch} entries extends beyond the file"
			)

		self.architectures = []
		for i in range(narch):
			offset = headerType.SIZE + (i * archType.SIZE)
			arch = fileCtx.readStruct(archType, offset)

			if not fileCtx.contains(arch.offset, arch.size):
				raise FatBinaryMalformed(
					f"Architecture {i} at {arch.offset:#x} with size {arch.size:#x} "
					f"extends beyond the {len(fileCtx):#x} byte file"
				)

			self.architectures.append(FatArch(
				cpuType=arch.cputype,
				cpuSubtype=arch.cpusubtype,
				offset=arch.offset,
				size=arch.size,
				align=arch.align
			))
			pass
		pass

	def selectArch(self, target: Optional[Architecture] = None) -> FatArch:
		"""Find the slice for an architecture.

		Args:
			target: Optional; The (cputype, cpusubtype) to look for,
				defaults to the host's architecture.

		Raises:
			UnsupportedArchitecture: No slice matches the target.

		Returns:
			The first matching architecture.
		"""

		if target is None:
			target = hostArchitecture()
			if target is None:
				raise UnsupportedArchitecture(
					f"Host machine {platform.machine()!r} has no Mach-O architecture"
				)

		for arch in self.architectures:
			if archMatches(arch, target):
				self._logger.info(
					f"Selected {arch.cpuName} slice at {arch.offset:#x}, size {arch.size:#x}"
				)
				return arch

		raise UnsupportedArchitecture(
			f"cputype {target[0]:#x}, cpusubtype {target[1]:#x}"
		)

	def sliceFor(self, arch: FatArch) -> FileContext:
		"""Carve the bytes of a slice out of the container.
		"""

		return self.fileCtx.slice(arch.offset, arch.size)
