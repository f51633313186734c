import logging
from typing import Union, List, Optional, Tuple

from MachOInspector.file_context import FileContext
from MachOInspector.errors import (
	FatBinaryMalformed,
	HeaderTooSmall,
	LoadCommandOutOfBounds,
	UnsupportedFormat,
	WrongByteOrder
)
from MachOInspector.macho.format_detector import MachFormat, detectFormat, readMagic
from MachOInspector.macho.fat_context import Architecture, FatContext
from MachOInspector.macho.segment_context import parseSegment
from MachOInspector.macho.symbol_table import StringIndexing, parseSymbolTable
from MachOInspector.macho.macho_image import (
	FatArch,
	LoadCommand,
	MachHeader,
	MachImage,
	Section,
	Segment,
	SymbolTable
)
from MachOInspector.macho.macho_structs import (
	LoadCommands,
	SkippedLoadCommands,
	load_command,
	mach_header,
	mach_header_64
)


def parseHeader(fileCtx: FileContext, is64Bit: bool) -> MachHeader:
	"""Decode the mach header at the start of the buffer.

	Raises:
		HeaderTooSmall: The buffer is smaller than the header.
	"""

	headerType = mach_header_64 if is64Bit else mach_header
	if not fileCtx.contains(0, headerType.SIZE):
		raise HeaderTooSmall(
			f"{len(fileCtx)} bytes, the {'64' if is64Bit else '32'}-bit header "
			f"needs {headerType.SIZE}"
		)

	header = fileCtx.readStruct(headerType, 0)
	return MachHeader(
		magic=header.magic,
		cpuType=header.cputype,
		cpuSubtype=header.cpusubtype,
		fileType=header.filetype,
		ncmds=header.ncmds,
		sizeofcmds=header.sizeofcmds,
		flags=header.flags,
		reserved=header.reserved if is64Bit else 0
	)


class ImageBuilder(object):
	"""Accumulates the records found while walking the load commands.
	"""

	def __init__(self, is64Bit: bool, header: MachHeader) -> None:
		super().__init__()

		self.is64Bit = is64Bit
		self.header = header

		self.loadCommands: List[LoadCommand] = []
		self.segments: List[Segment] = []
		self.sections: List[Section] = []
		self.symbolTable: Optional[SymbolTable] = None
		pass

	def addLoadCommand(self, command: LoadCommand) -> None:
		self.loadCommands.append(command)

	def addSegment(self, segment: Segment, sections: List[Section]) -> None:
		self.segments.append(segment)
		self.sections.extend(sections)

	def setSymbolTable(self, symbolTable: SymbolTable) -> None:
		self.symbolTable = symbolTable

	def build(self, arch: FatArch = None) -> MachImage:
		return MachImage(
			is64Bit=self.is64Bit,
			header=self.header,
			segments=tuple(self.segments),
			sections=tuple(self.sections),
			symbolTable=self.symbolTable,
			loadCommands=tuple(self.loadCommands),
			arch=arch
		)


class MachOContext(object):

	header: MachHeader
	loadCommands: List[LoadCommand]

	def __init__(
		self,
		fileCtx: FileContext,
		is64Bit: bool,
		stringIndexing: StringIndexing = StringIndexing.OFFSET,
		logger: logging.Logger = None,
		arch: FatArch = None
	) -> None:
		"""A wrapper around a thin MachO file.

		Parses the header and walks the load commands.

		Args:
			fileCtx: The MachO file, starting with its header.
			is64Bit: Whether the file uses the 64-bit structures.
			stringIndexing: Optional; How symbol names are resolved.
			logger: Optional; The logger to report progress to.
			arch: Optional; The fat slice the file was read from.
		"""

		super().__init__()

		self.fileCtx = fileCtx
		self.is64Bit = is64Bit
		self.arch = arch

		self._stringIndexing = stringIndexing
		self._logger = logger or logging.getLogger("MachOInspector")

		self.header = parseHeader(fileCtx, is64Bit)
		self.headerEnd = (mach_header_64 if is64Bit else mach_header).SIZE

		self._logger.info(f"Number of load commands: {self.header.ncmds}")
		self._logger.info(f"Size of load commands: {self.header.sizeofcmds}")

		self._builder = ImageBuilder(is64Bit, self.header)
		self._parseLoadCommands()

		self.loadCommands = self._builder.loadCommands
		self.image = self._builder.build(arch)
		pass

	def getLoadCommand(
		self,
		cmdFilter: Tuple[LoadCommands],
		multiple: bool = False
	) -> Union[LoadCommand, List[LoadCommand]]:
		"""Retreive a load command with its command ID

		Args:
			filter: The command to filter by.
			multiple: Optional; To get multiple results instead of the first.

		Returns:
			If the command is not found, None is returned. If one was found it will
			return the first match. If multiple is set to True, it will return a list
			of matches.
		"""

		matches = []
		for loadCommand in self.loadCommands:
			if loadCommand.cmd in cmdFilter:
				if not multiple:
					return loadCommand
				else:
					matches.append(loadCommand)

		if len(matches) == 0:
			return None

		return matches

	def _parseLoadCommands(self) -> None:
		"""Walk exactly ncmds load commands.

		Every command is bounds checked against both the buffer and
		sizeofcmds before it is decoded, and the cursor always advances by
		cmdsize.
		"""

		file = self.fileCtx
		cmdsEnd = self.headerEnd + self.header.sizeofcmds
		limit = min(len(file), cmdsEnd)

		segmentCmd = LoadCommands.LC_SEGMENT_64 if self.is64Bit else LoadCommands.LC_SEGMENT

		cmdOff = self.headerEnd
		for i in range(self.header.ncmds):
			if cmdOff + load_command.SIZE > limit:
				raise LoadCommandOutOfBounds(
					f"Load command {i} at {cmdOff:#x} extends beyond "
					f"{'file size' if limit == len(file) else 'sizeofcmds'}"
				)

			cmd, cmdsize = file.readFormat("<II", cmdOff)
			if cmdsize < load_command.SIZE:
				raise LoadCommandOutOfBounds(
					f"Load command {i} at {cmdOff:#x} has an invalid cmdsize of {cmdsize}"
				)
			if cmdOff + cmdsize > limit:
				raise LoadCommandOutOfBounds(
					f"Load command {i} at {cmdOff:#x} with cmdsize {cmdsize} extends beyond "
					f"{'file size' if limit == len(file) else 'sizeofcmds'}"
				)

			command = LoadCommand(cmd=cmd, cmdsize=cmdsize, offset=cmdOff)
			self._builder.addLoadCommand(command)
			self._logger.debug(f"Processing load command {i}: type {cmd:#x}")

			if cmd == segmentCmd:
				segment, sections = parseSegment(file, command, self.is64Bit)
				self._builder.addSegment(segment, sections)
				pass

			elif cmd == LoadCommands.LC_SYMTAB:
				if self._builder.symbolTable is None:
					self._builder.setSymbolTable(parseSymbolTable(
						file,
						command,
						self.is64Bit,
						stringIndexing=self._stringIndexing,
						logger=self._logger
					))
				else:
					self._logger.warning(f"Ignoring extra LC_SYMTAB at {cmdOff:#x}")
				pass

			elif cmd in SkippedLoadCommands:
				self._logger.debug(f"Skipping {LoadCommands(cmd).name}, not decoded")
				pass

			else:
				self._logger.debug(f"Skipping load command type: {cmd:#x}")
				pass

			cmdOff += cmdsize
			pass

		if cmdOff != cmdsEnd:
			self._logger.warning(
				f"Load commands end at {cmdOff:#x}, sizeofcmds says {cmdsEnd:#x}"
			)

		self.cursor = cmdOff
		pass


def parseMachO(
	fileCtx: FileContext,
	target: Architecture = None,
	stringIndexing: StringIndexing = StringIndexing.OFFSET,
	logger: logging.Logger = None,
	_arch: FatArch = None
) -> MachImage:
	"""Parse a thin or fat MachO file.

	Args:
		fileCtx: The file's data.
		target: Optional; The (cputype, cpusubtype) to select from a fat
			file, defaults to the host's architecture.
		stringIndexing: Optional; How symbol names are resolved.
		logger: Optional; The logger to report progress to.

	Raises:
		MachOError: A subclass describing why the file could not be parsed.

	Returns:
		The parsed image.
	"""

	logger = logger or logging.getLogger("MachOInspector")

	fileFormat = detectFormat(fileCtx)
	logger.info(f"Magic number: {readMagic(fileCtx):#x} ({fileFormat.value})")

	if fileFormat in (MachFormat.THIN_32, MachFormat.THIN_64):
		machoCtx = MachOContext(
			fileCtx,
			fileFormat == MachFormat.THIN_64,
			stringIndexing=stringIndexing,
			logger=logger,
			arch=_arch
		)
		return machoCtx.image

	elif fileFormat in (MachFormat.SWAPPED_32, MachFormat.SWAPPED_64):
		raise WrongByteOrder(f"magic {readMagic(fileCtx):#x}")

	elif fileFormat in (MachFormat.FAT, MachFormat.FAT_SWAPPED):
		if _arch is not None:
			raise FatBinaryMalformed("Fat binary nested inside a fat binary slice")

		fatCtx = FatContext(
			fileCtx,
			fileFormat == MachFormat.FAT_SWAPPED,
			logger=logger
		)
		arch = fatCtx.selectArch(target)
		return parseMachO(
			fatCtx.sliceFor(arch),
			target=target,
			stringIndexing=stringIndexing,
			logger=logger,
			_arch=arch
		)

	else:
		raise UnsupportedFormat(f"Unsupported magic number: {readMagic(fileCtx):#x}")
