from MachOInspector.loader import MachOLoader
from MachOInspector.file_context import FileContext
from MachOInspector.errors import *
from MachOInspector.macho.macho_context import MachOContext, parseMachO
from MachOInspector.macho.macho_image import *
from MachOInspector.macho.symbol_table import StringIndexing

__all__ = [
	"MachOLoader",
	"FileContext",
	"MachOContext",
	"parseMachO",
	"StringIndexing",
	"MachImage",
	"MachHeader",
	"FatArch",
	"LoadCommand",
	"Segment",
	"Section",
	"Symbol",
	"SymbolTable",
	"describeSymbolType",
	"symbolInfo",
	"MachOError",
	"FileNotFound",
	"MappingFailure",
	"InvalidMachO",
	"UnsupportedFormat",
	"InvalidMagic",
	"WrongByteOrder",
	"InvalidHeader",
	"HeaderTooSmall",
	"LoadCommandOutOfBounds",
	"InvalidSegment",
	"InvalidSection",
	"SymbolTableOutOfBounds",
	"InvalidSymbol",
	"UnsupportedArchitecture",
	"FatBinaryMalformed",
]
