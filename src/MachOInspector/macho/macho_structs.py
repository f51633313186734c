from enum import IntEnum
from ctypes import (
	c_char,
	c_uint8,
	c_uint16,
	c_uint32,
	c_uint64,
	c_int32,
)

from MachOInspector.structure import Structure, SwappedStructure


class LoadCommands(IntEnum):
	"""An Enum for all the load commands.
	"""

	"""
		After MacOS X 10.1 when a new load command is added that is required to be
		understood by the dynamic linker for the image to execute properly the
		LC_REQ_DYLD bit will be or'ed into the load command constant.  If the dynamic
		linker sees such a load command it it does not understand will issue a
		"unknown load command required for execution" error and refuse to use the
		image.  Other load commands without this bit that are not understood will
		simply be ignored.
	"""
	LC_REQ_DYLD = 0x80000000

	# Constants for the cmd field of all load commands, the type
	LC_SEGMENT = 0x1 			# segment of this file to be mapped
	LC_SYMTAB = 0x2 			# link-edit stab symbol table info
	LC_SYMSEG = 0x3 			# link-edit gdb symbol table info (obsolete)
	LC_THREAD = 0x4 			# thread
	LC_UNIXTHREAD = 0x5 		# unix thread (includes a stack)
	LC_LOADFVMLIB = 0x6 		# load a specified fixed VM shared library
	LC_IDFVMLIB = 0x7 			# fixed VM shared library identification
	LC_IDENT = 0x8 				# object identification info (obsolete)
	LC_FVMFILE = 0x9 			# fixed VM file inclusion (internal use)
	LC_PREPAGE = 0xa 			# prepage command (internal use)
	LC_DYSYMTAB = 0xb 			# dynamic link-edit symbol table info
	LC_LOAD_DYLIB = 0xc 		# load a dynamically linked shared library
	LC_ID_DYLIB = 0xd 			# dynamically linked shared lib ident
	LC_LOAD_DYLINKER = 0xe 		# load a dynamic linker
	LC_ID_DYLINKER = 0xf 		# dynamic linker identification
	LC_PREBOUND_DYLIB = 0x10 	# modules prebound for a dynamically
								# 	linked shared library
	LC_ROUTINES = 0x11 			# image routines
	LC_SUB_FRAMEWORK = 0x12 	# sub framework
	LC_SUB_UMBRELLA = 0x13 		# sub umbrella
	LC_SUB_CLIENT = 0x14 		# sub client
	LC_SUB_LIBRARY = 0x15 		# sub library
	LC_TWOLEVEL_HINTS = 0x16 	# two-level namespace lookup hints
	LC_PREBIND_CKSUM = 0x17 	# prebind checksum

	"""
		load a dynamically linked shared library that is allowed to be missing
		(all symbols are weak imported).
	"""
	LC_LOAD_WEAK_DYLIB = (0x18 | LC_REQ_DYLD)

	LC_SEGMENT_64 = 0x19 							# 64-bit segment of this file to be
													# 	mapped
	LC_ROUTINES_64 = 0x1a 							# 64-bit image routines
	LC_UUID = 0x1b 									# the uuid
	LC_RPATH = (0x1c | LC_REQ_DYLD) 				# runpath additions
	LC_CODE_SIGNATURE = 0x1d 						# local of code signature
	LC_SEGMENT_SPLIT_INFO = 0x1e 					# local of info to split segments
	LC_REEXPORT_DYLIB = (0x1f | LC_REQ_DYLD) 		# load and re-export dylib
	LC_LAZY_LOAD_DYLIB = 0x20 						# delay load of dylib until first use
	LC_ENCRYPTION_INFO = 0x21 						# encrypted segment information
	LC_DYLD_INFO = 0x22								# compressed dyld information
	LC_DYLD_INFO_ONLY = (0x22 | LC_REQ_DYLD) 		# compressed dyld information only
	LC_LOAD_UPWARD_DYLIB = (0x23 | LC_REQ_DYLD) 	# load upward dylib
	LC_VERSION_MIN_MACOSX = 0x24 					# build for MacOSX min OS version
	LC_VERSION_MIN_IPHONEOS = 0x25 					# build for iPhoneOS min OS version
	LC_FUNCTION_STARTS = 0x26 						# compressed table of function start addresses
	LC_DYLD_ENVIRONMENT = 0x27 						# string for dyld to treat
													# 	like environment variable
	LC_MAIN = (0x28 | LC_REQ_DYLD) 					# replacement for LC_UNIXTHREAD
	LC_DATA_IN_CODE = 0x29 							# table of non-instructions in __text
	LC_SOURCE_VERSION = 0x2A 						# source version used to build binary
	LC_DYLIB_CODE_SIGN_DRS = 0x2B 					# Code signing DRs copied from linked dylibs
	LC_ENCRYPTION_INFO_64 = 0x2C 					# 64-bit encrypted segment information
	LC_LINKER_OPTION = 0x2D 						# linker options in MH_OBJECT files
	LC_LINKER_OPTIMIZATION_HINT = 0x2E 				# optimization hints in MH_OBJECT files
	LC_VERSION_MIN_TVOS = 0x2F 						# build for AppleTV min OS version
	LC_VERSION_MIN_WATCHOS = 0x30 					# build for Watch min OS version
	LC_NOTE = 0x31 									# arbitrary data included within a Mach-O file
	LC_BUILD_VERSION = 0x32 						# build for platform min OS version
	LC_DYLD_EXPORTS_TRIE = (0x33 | LC_REQ_DYLD) 	# used with linkedit_data_command, payload is trie
	LC_DYLD_CHAINED_FIXUPS = (0x34 | LC_REQ_DYLD) 	# used with linkedit_data_command
	LC_FILESET_ENTRY = (0x35 | LC_REQ_DYLD) 		# used with fileset_entry_command


class mach_header(Structure):

	SIZE = 28

	magic: int 			# mach magic number identifier
	cputype: int 		# cpu specifier
	cpusubtype: int 	# machine specifier
	filetype: int 		# type of file
	ncmds: int 			# number of load commands
	sizeofcmds: int 	# the size of all the load commands
	flags: int 			# flags

	_fields_ = [
		("magic", c_uint32),
		("cputype", c_int32),
		("cpusubtype", c_int32),
		("filetype", c_uint32),
		("ncmds", c_uint32),
		("sizeofcmds", c_uint32),
		("flags", c_uint32),
	]


class mach_header_64(Structure):

	SIZE = 32

	magic: int 			# mach magic number identifier
	cputype: int 		# cpu specifier
	cpusubtype: int 	# machine specifier
	filetype: int 		# type of file
	ncmds: int 			# number of load commands
	sizeofcmds: int 	# the size of all the load commands
	flags: int 			# flags
	reserved: int 		# reserved

	_fields_ = [
		("magic", c_uint32),
		("cputype", c_int32),
		("cpusubtype", c_int32),
		("filetype", c_uint32),
		("ncmds", c_uint32),
		("sizeofcmds", c_uint32),
		("flags", c_uint32),
		("reserved", c_uint32),
	]


class load_command(Structure):

	SIZE = 8

	cmd: int 		# type of load command
	cmdsize: int 	# total size of command in bytes

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
	]


class segment_command(Structure):
	"""
		The segment load command indicates that a part of this file is to be
		mapped into the task's address space.  The size of this segment in memory,
		vmsize, maybe equal to or larger than the amount to map from this file,
		filesize.  The file is mapped starting at fileoff to the beginning of
		the segment in memory, vmaddr.  The rest of the memory of the segment,
		if any, is allocated zero fill on demand.  The segment's maximum virtual
		memory protection and initial virtual memory protection are specified
		by the maxprot and initprot fields.  If the segment has sections then the
		section structures directly follow the segment command and their size is
		reflected in cmdsize.

		for 32-bit architectures
	"""

	SIZE = 56

	cmd: int 		# LC_SEGMENT
	cmdsize: int 	# includes sizeof section structs
	segname: bytes 	# segment name
	vmaddr: int 	# memory address of this segment
	vmsize: int 	# memory size of this segment
	fileoff: int 	# file offset of this segment
	filesize: int 	# amount to map from the file
	maxprot: int 	# maximum VM protection
	initprot: int 	# initial VM protection
	nsects: int 	# number of sections in segment
	flags: int 		# flags

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("segname", c_char * 16),
		("vmaddr", c_uint32),
		("vmsize", c_uint32),
		("fileoff", c_uint32),
		("filesize", c_uint32),
		("maxprot", c_int32),
		("initprot", c_int32),
		("nsects", c_uint32),
		("flags", c_uint32),
	]


class segment_command_64(Structure):
	"""
		The 64-bit segment load command indicates that a part of this file is to be
		mapped into a 64-bit task's address space.  If the 64-bit segment has
		sections then section_64 structures directly follow the 64-bit segment
		command and their size is reflected in cmdsize.

		for 64-bit architectures
	"""

	SIZE = 72

	cmd: int 		# LC_SEGMENT_64
	cmdsize: int 	# includes sizeof section_64 structs
	segname: bytes 	# segment name
	vmaddr: int 	# memory address of this segment
	vmsize: int 	# memory size of this segment
	fileoff: int 	# file offset of this segment
	filesize: int 	# amount to map from the file
	maxprot: int 	# maximum VM protection
	initprot: int 	# initial VM protection
	nsects: int 	# number of sections in segment
	flags: int 		# flags

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("segname", c_char * 16),
		("vmaddr", c_uint64),
		("vmsize", c_uint64),
		("fileoff", c_uint64),
		("filesize", c_uint64),
		("maxprot", c_int32),
		("initprot", c_int32),
		("nsects", c_uint32),
		("flags", c_uint32),
	]


class section(Structure):
	# for 32-bit architectures

	SIZE = 68

	sectname: bytes 	# name of this section
	segname: bytes 		# segment this section goes in
	addr: int 			# memory address of this section
	size: int 			# size in bytes of this section
	offset: int 		# file offset of this section
	align: int 			# section alignment (power of 2)
	reloff: int 		# file offset of relocation entries
	nreloc: int 		# number of relocation entries
	flags: int 			# flags (section type and attributes
	reserved1: int 		# reserved (for offset or index)
	reserved2: int 		# reserved (for count or sizeof)

	_fields_ = [
		("sectname", c_char * 16),
		("segname", c_char * 16),
		("addr", c_uint32),
		("size", c_uint32),
		("offset", c_uint32),
		("align", c_uint32),
		("reloff", c_uint32),
		("nreloc", c_uint32),
		("flags", c_uint32),
		("reserved1", c_uint32),
		("reserved2", c_uint32),
	]


class section_64(Structure):
	# for 64-bit architectures

	SIZE = 80

	sectname: bytes 	# name of this section
	segname: bytes 		# segment this section goes in
	addr: int 			# memory address of this section
	size: int 			# size in bytes of this section
	offset: int 		# file offset of this section
	align: int 			# section alignment (power of 2)
	reloff: int 		# file offset of relocation entries
	nreloc: int 		# number of relocation entries
	flags: int 			# flags (section type and attributes
	reserved1: int 		# reserved (for offset or index)
	reserved2: int 		# reserved (for count or sizeof)
	reserved3: int 		# reserved

	_fields_ = [
		("sectname", c_char * 16),
		("segname", c_char * 16),
		("addr", c_uint64),
		("size", c_uint64),
		("offset", c_uint32),
		("align", c_uint32),
		("reloff", c_uint32),
		("nreloc", c_uint32),
		("flags", c_uint32),
		("reserved1", c_uint32),
		("reserved2", c_uint32),
		("reserved3", c_uint32),
	]


class lc_str(Structure):
	offset: int 	# offset to the string

	_fields_ = [
		("offset", c_uint32),
	]


class Dylib(Structure):
	name: lc_str 				# library's path name
	timestamp: int 				# library's build time stamp
	current_version: int 		# library's current version number
	compatibility_version: int 	# library's compatibility vers number

	_fields_ = [
		("name", lc_str),
		("timestamp", c_uint32),
		("current_version", c_uint32),
		("compatibility_version", c_uint32),
	]


class dylib_command(Structure):

	SIZE = 24

	cmd: int 		# LC_ID_DYLIB, LC_LOAD_{,WEAK_}DYLIB,
					# 	LC_REEXPORT_DYLIB
	cmdsize: int 	# includes pathname string
	dylib: Dylib 	# the library identification

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("dylib", Dylib),
	]


class dylinker_command(Structure):

	SIZE = 12

	cmd: int 		# LC_ID_DYLINKER, LC_LOAD_DYLINKER or
					# 	LC_DYLD_ENVIRONMENT
	cmdsize: int 	# includes pathname string
	name: lc_str 	# dynamic linker's path name

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("name", lc_str),
	]


class symtab_command(Structure):

	SIZE = 24

	cmd: int 		# LC_SYMTAB
	cmdsize: int 	# sizeof(struct symtab_command)
	symoff: int 	# symbol table offset
	nsyms: int 		# number of symbol table entries
	stroff: int 	# string table offset
	strsize: int 	# string table size in bytes

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("symoff", c_uint32),
		("nsyms", c_uint32),
		("stroff", c_uint32),
		("strsize", c_uint32),
	]


class dysymtab_command(Structure):

	SIZE = 80

	cmd: int 				# LC_DYSYMTAB
	cmdsize: int 			# sizeof(struct dysymtab_command)

	ilocalsym: int 			# index to local symbols
	nlocalsym: int 			# number of local symbols

	iextdefsym: int 		# index to externally defined symbols
	nextdefsym: int 		# number of externally defined symbols

	iundefsym: int 			# index to undefined symbols
	nundefsym: int 			# number of undefined symbols

	tocoff: int 			# file offset to table of contents
	ntoc: int 				# number of entries in table of contents

	modtaboff: int 			# file offset to module table
	nmodtab: int 			# number of module table entries

	extrefsymoff: int 		# offset to referenced symbol table
	nextrefsyms: int 		# number of referenced symbol table entries

	indirectsymoff: int 	# file offset to the indirect symbol table
	nindirectsyms: int 		# number of indirect symbol table entries

	extreloff: int 			# offset to external relocation entries
	nextrel: int 			# number of external relocation entries

	locreloff: int 			# offset to local relocation entries
	nlocrel: int 			# number of local relocation entries

	_fields_ = [
		("cmd", c_uint32),
		("cmdsize", c_uint32),
		("ilocalsym", c_uint32),
		("nlocalsym", c_uint32),
		("iextdefsym", c_uint32),
		("nextdefsym", c_uint32),
		("iundefsym", c_uint32),
		("nundefsym", c_uint32),
		("tocoff", c_uint32),
		("ntoc", c_uint32),
		("modtaboff", c_uint32),
		("nmodtab", c_uint32),
		("extrefsymoff", c_uint32),
		("nextrefsyms", c_uint32),
		("indirectsymoff", c_uint32),
		("nindirectsyms", c_uint32),
		("extreloff", c_uint32),
		("nextrel", c_uint32),
		("locreloff", c_uint32),
		("nlocrel", c_uint32),
	]


class nlist(Structure):
	# for 32-bit architectures

	SIZE = 12

	n_strx: int 	# index into the string table
	n_type: int 	# type flag, see below
	n_sect: int 	# section number or NO_SECT
	n_desc: int 	# see <mach-o/stab.h>
	n_value: int 	# value of this symbol (or stab offset)

	_fields_ = [
		("n_strx", c_uint32),
		("n_type", c_uint8),
		("n_sect", c_uint8),
		("n_desc", c_uint16),
		("n_value", c_uint32),
	]


class nlist_64(Structure):

	SIZE = 16

	n_strx: int 	# index into the string table
	n_type: int 	# type flag, see below
	n_sect: int 	# section number or NO_SECT
	n_desc: int 	# see <mach-o/stab.h>
	n_value: int 	# value of this symbol (or stab offset)

	_fields_ = [
		("n_strx", c_uint32),
		("n_type", c_uint8),
		("n_sect", c_uint8),
		("n_desc", c_uint16),
		("n_value", c_uint64),
	]


"""
	The fat header and its architecture table are always written in big
	endian order on disk, FAT_CIGAM is what a little endian host reads. The
	host order variants exist for containers written in host order.
"""


class fat_header(Structure):

	SIZE = 8

	magic: int 		# FAT_MAGIC
	nfat_arch: int 	# number of structs that follow

	_fields_ = [
		("magic", c_uint32),
		("nfat_arch", c_uint32),
	]


class fat_arch(Structure):

	SIZE = 20

	cputype: int 		# cpu specifier (int)
	cpusubtype: int 	# machine specifier (int)
	offset: int 		# file offset to this object file
	size: int 			# size of this object file
	align: int 			# alignment as a power of 2

	_fields_ = [
		("cputype", c_int32),
		("cpusubtype", c_int32),
		("offset", c_uint32),
		("size", c_uint32),
		("align", c_uint32),
	]


class fat_header_swapped(SwappedStructure):

	SIZE = 8

	magic: int
	nfat_arch: int

	_fields_ = fat_header._fields_


class fat_arch_swapped(SwappedStructure):

	SIZE = 20

	cputype: int
	cpusubtype: int
	offset: int
	size: int
	align: int

	_fields_ = fat_arch._fields_


# Commands that are recognised but intentionally not decoded.
SkippedLoadCommands = {
	LoadCommands.LC_DYSYMTAB: dysymtab_command,
	LoadCommands.LC_LOAD_DYLINKER: dylinker_command,
	LoadCommands.LC_ID_DYLINKER: dylinker_command,
	LoadCommands.LC_LOAD_DYLIB: dylib_command,
	LoadCommands.LC_ID_DYLIB: dylib_command,
	LoadCommands.LC_LOAD_WEAK_DYLIB: dylib_command,
	LoadCommands.LC_REEXPORT_DYLIB: dylib_command,
	LoadCommands.LC_LAZY_LOAD_DYLIB: dylib_command,
	LoadCommands.LC_LOAD_UPWARD_DYLIB: dylib_command,
}
