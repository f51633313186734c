import ctypes
from typing import Any


def _copyFrom(cls, dataSource: bytes, offset: int) -> Any:
	# Always copy, the data source is treated as read only
	instance = cls.from_buffer_copy(dataSource, offset)
	instance._fileOff_ = offset
	return instance


class Structure(ctypes.LittleEndianStructure):
	"""
		A base class for all host order structures.
	"""

	_fileOff_: int

	def __new__(cls, dataSource: bytes = None, offset: int = 0) -> Any:
		if dataSource is not None:
			return _copyFrom(cls, dataSource, offset)
		else:
			return super().__new__(cls)

	def __init__(self, dataSource: bytes = None, offset: int = 0) -> None:
		pass

	def __len__(self) -> int:
		return ctypes.sizeof(self)


class SwappedStructure(ctypes.BigEndianStructure):
	"""
		A base class for structures stored in the opposite byte order.

		Only the fat header and its architecture table use this, thin
		Mach-O files in the wrong order are rejected instead.
	"""

	_fileOff_: int

	def __new__(cls, dataSource: bytes = None, offset: int = 0) -> Any:
		if dataSource is not None:
			return _copyFrom(cls, dataSource, offset)
		else:
			return super().__new__(cls)

	def __init__(self, dataSource: bytes = None, offset: int = 0) -> None:
		pass

	def __len__(self) -> int:
		return ctypes.sizeof(self)
