import mmap
import struct

from typing import (
	Any,
	Tuple,
	Type,
	TypeVar,
	BinaryIO,
	Optional,
	Union
)

from MachOInspector.errors import FileNotFound, MappingFailure


_StructT = TypeVar("_StructT")

Buffer = Union[bytes, bytearray, memoryview, mmap.mmap]


class FileContext:

	def __init__(
		self,
		data: Buffer,
		fileObject: BinaryIO = None,
		offset: int = 0,
		length: int = None,
		parent: "FileContext" = None,
		owned: bool = True
	) -> None:
		"""A read only view over the bytes of a file.

		A context either owns its data (a mapped file or an in memory buffer),
		or is a view into a range of its parent's data. Views share the
		parent's storage and never release it.

		Args:
			data: The backing storage.
			fileObject: Optional; The open file the data was mapped from,
				closed along with the mapping.
			offset: Optional; Where this view starts in the backing storage.
			length: Optional; The size of the view, defaults to the rest of
				the storage.
			parent: Optional; The context this is a view of.
			owned: Optional; Whether closing the context releases the data.
				Buffers lent by a caller stay open.
		"""

		if isinstance(data, memoryview):
			data = data.tobytes()

		self.file = data
		self.fileObject = fileObject
		self.parent = parent
		self.owned = owned

		self._base = offset
		self._length = (len(data) - offset) if length is None else length
		self._closed = False
		pass

	@classmethod
	def fromPath(cls, path) -> "FileContext":
		"""Open and map a file.

		Args:
			path: The path to the file.

		Raises:
			FileNotFound: The file could not be opened.
			MappingFailure: The file could not be mapped into memory.

		Returns:
			A context owning both the open file and its mapping.
		"""

		try:
			fileObject = open(path, mode="rb")
		except OSError as e:
			raise FileNotFound(f"{path}: {e.strerror}") from e

		try:
			data = mmap.mmap(fileObject.fileno(), 0, access=mmap.ACCESS_READ)
		except (OSError, ValueError) as e:
			fileObject.close()
			raise MappingFailure(f"{path}: {e}") from e

		return cls(data, fileObject=fileObject)

	def __len__(self) -> int:
		return self._length

	def __enter__(self) -> "FileContext":
		return self

	def __exit__(self, *exc) -> None:
		self.close()
		pass

	@property
	def closed(self) -> bool:
		return self._closed

	def contains(self, offset: int, length: int) -> bool:
		"""Check that a range lies inside this view.
		"""

		return offset >= 0 and length >= 0 and offset + length <= self._length

	def _checkRange(self, offset: int, length: int) -> None:
		if not self.contains(offset, length):
			raise ValueError(
				f"Read of {length} bytes at {offset:#x} is outside the "
				f"{self._length:#x} byte buffer"
			)

	def readFormat(self, format: str, offset: int) -> Tuple[Any, ...]:
		"""Read a formatted value at the offset.

		Args:
			format: the struct format to pass to struct.unpack.
			offset: the offset to read from, relative to this view.

		Return:
			The formated value.
		"""

		self._checkRange(offset, struct.calcsize(format))
		return struct.unpack_from(format, self.file, self._base + offset)

	def readStruct(self, structType: Type[_StructT], offset: int) -> _StructT:
		"""Copy a structure out of the buffer.

		Args:
			structType: A Structure subclass.
			offset: the offset to read from, relative to this view.

		Returns:
			The structure, with its _fileOff_ relative to this view.
		"""

		self._checkRange(offset, structType.SIZE)
		instance = structType(self.file, self._base + offset)
		instance._fileOff_ = offset
		return instance

	def readString(self, offset: int, end: int = None) -> Optional[bytes]:
		"""Read a null terminated c-string.

		Args:
			offset: the offset to the start of the string.
			end: Optional; the offset the string may not extend past,
				defaults to the end of the view.

		Returns:
			The string in bytes, without the null terminater. If no null
			byte is found before the end, the bytes up to the end are
			returned. None if the offset is outside the range.
		"""

		end = self._length if end is None else min(end, self._length)
		if offset < 0 or offset >= end:
			return None

		start = self._base + offset
		stop = self._base + end

		nullIndex = self.file.find(b"\x00", start, stop)
		if nullIndex == -1:
			nullIndex = stop

		return bytes(self.file[start:nullIndex])

	def getBytes(self, offset: int, length: int) -> bytes:
		"""Retrieve data from the datasource.

		Args:
			offset: The location to start at.
			length: How many bytes to read.

		Return:
			The data requested.
		"""

		self._checkRange(offset, length)
		start = self._base + offset
		return bytes(self.file[start:start + length])

	def slice(self, offset: int, length: int) -> "FileContext":
		"""Create a view of a range of this context.

		Args:
			offset: The start of the range, relative to this view.
			length: The size of the range.

		Returns:
			A new context sharing this context's storage.
		"""

		self._checkRange(offset, length)
		return type(self)(
			self.file,
			offset=self._base + offset,
			length=length,
			parent=self
		)

	def close(self) -> None:
		"""Release the mapping and the file.

		Safe to call more than once. Views only mark themselves as closed,
		the storage belongs to the root context.
		"""

		if self._closed:
			return
		self._closed = True

		if self.parent is not None or not self.owned:
			return

		if isinstance(self.file, mmap.mmap):
			self.file.close()
		if self.fileObject is not None:
			self.fileObject.close()
			self.fileObject = None
		pass

	pass
