import logging
from typing import Optional

from MachOInspector.file_context import FileContext, Buffer
from MachOInspector.macho.fat_context import Architecture
from MachOInspector.macho.macho_context import parseMachO
from MachOInspector.macho.macho_image import MachImage, Symbol, SymbolTable, symbolInfo
from MachOInspector.macho.symbol_table import StringIndexing


class MachOLoader(object):
	"""Loads MachO files and keeps the last one that parsed.

	The loader owns the mapping of the file it is reading. The mapping is
	released as soon as a load finishes, whether it succeeded or not, so an
	image never depends on an open file. A failed load leaves the
	previously loaded image in place.
	"""

	image: Optional[MachImage]

	def __init__(
		self,
		target: Architecture = None,
		stringIndexing: StringIndexing = StringIndexing.OFFSET,
		logger: logging.Logger = None
	) -> None:
		super().__init__()

		self.target = target
		self.stringIndexing = stringIndexing
		self.logger = logger or logging.getLogger("MachOInspector")

		self.image = None
		self._fileCtx: Optional[FileContext] = None
		pass

	def __enter__(self) -> "MachOLoader":
		return self

	def __exit__(self, *exc) -> None:
		self.close()
		pass

	def __del__(self) -> None:
		self.close()
		pass

	def load(self, path) -> MachImage:
		"""Map and parse the file at the path.

		Raises:
			MachOError: The file could not be read or parsed.
		"""

		self.logger.info(f"Attempting to load file at path: {path}")
		return self._parse(FileContext.fromPath(path))

	def loadBytes(self, data: Buffer) -> MachImage:
		"""Parse a MachO file that is already in memory.

		The data still belongs to the caller, it is not closed.
		"""

		return self._parse(FileContext(data, owned=False))

	def _parse(self, fileCtx: FileContext) -> MachImage:
		self.close()
		self._fileCtx = fileCtx

		try:
			self.logger.info(f"File size: {len(fileCtx)} bytes")
			image = parseMachO(
				fileCtx,
				target=self.target,
				stringIndexing=self.stringIndexing,
				logger=self.logger
			)
		finally:
			self.close()

		self.image = image
		return image

	def close(self) -> None:
		"""Release the current file, if any. Safe to call more than once.
		"""

		fileCtx = getattr(self, "_fileCtx", None)
		if fileCtx is not None:
			self.logger.debug("Cleaning up resources")
			fileCtx.close()
			self._fileCtx = None
		pass

	def hasValidSymbols(self) -> bool:
		return self.image is not None and self.image.hasValidSymbols()

	def getSymbolTable(self) -> Optional[SymbolTable]:
		"""Get the symbol table, None if there are no symbols.
		"""

		if self.hasValidSymbols():
			return self.image.symbolTable
		return None

	def symbolInfo(self, symbol: Symbol) -> str:
		return symbolInfo(symbol)
