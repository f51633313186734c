"""
	Mach-O constants, sourced from <mach-o/loader.h>, <mach-o/fat.h>,
	<mach-o/nlist.h> and <mach/machine.h>.
"""

# Magic numbers, as read in host (little endian) order
MH_MAGIC = 0xfeedface 		# the mach magic number
MH_CIGAM = 0xcefaedfe 		# NXSwapInt(MH_MAGIC)
MH_MAGIC_64 = 0xfeedfacf 	# the 64-bit mach magic number
MH_CIGAM_64 = 0xcffaedfe 	# NXSwapInt(MH_MAGIC_64)

FAT_MAGIC = 0xcafebabe
FAT_CIGAM = 0xbebafeca 		# NXSwapLong(FAT_MAGIC)


# Capability bits used in the definition of cpu_type.
CPU_ARCH_MASK = 0xff000000 		# mask for architecture bits
CPU_ARCH_ABI64 = 0x01000000 	# 64 bit ABI
CPU_ARCH_ABI64_32 = 0x02000000 	# ABI for 64-bit hardware with 32-bit types; LP32

CPU_TYPE_ANY = -1
CPU_TYPE_VAX = 1
CPU_TYPE_MC680x0 = 6
CPU_TYPE_X86 = 7
CPU_TYPE_I386 = CPU_TYPE_X86 	# compatibility
CPU_TYPE_X86_64 = (CPU_TYPE_X86 | CPU_ARCH_ABI64)
CPU_TYPE_MC98000 = 10
CPU_TYPE_HPPA = 11
CPU_TYPE_ARM = 12
CPU_TYPE_ARM64 = (CPU_TYPE_ARM | CPU_ARCH_ABI64)
CPU_TYPE_ARM64_32 = (CPU_TYPE_ARM | CPU_ARCH_ABI64_32)
CPU_TYPE_MC88000 = 13
CPU_TYPE_SPARC = 14
CPU_TYPE_I860 = 15
CPU_TYPE_POWERPC = 18
CPU_TYPE_POWERPC64 = (CPU_TYPE_POWERPC | CPU_ARCH_ABI64)

# Capability bits used in the definition of cpu_subtype.
CPU_SUBTYPE_MASK = 0xff000000 	# mask for feature flags
CPU_SUBTYPE_LIB64 = 0x80000000 	# 64 bit libraries

CPU_SUBTYPE_I386_ALL = 3
CPU_SUBTYPE_X86_64_ALL = 3
CPU_SUBTYPE_X86_64_H = 8 		# Haswell feature subset
CPU_SUBTYPE_ARM_ALL = 0
CPU_SUBTYPE_ARM_V7 = 9
CPU_SUBTYPE_ARM_V7S = 11
CPU_SUBTYPE_ARM64_ALL = 0
CPU_SUBTYPE_ARM64_V8 = 1
CPU_SUBTYPE_ARM64E = 2

CPU_TYPE_NAMES = {
	CPU_TYPE_VAX: "vax",
	CPU_TYPE_MC680x0: "mc680x0",
	CPU_TYPE_X86: "i386",
	CPU_TYPE_X86_64: "x86_64",
	CPU_TYPE_MC98000: "mc98000",
	CPU_TYPE_HPPA: "hppa",
	CPU_TYPE_ARM: "arm",
	CPU_TYPE_ARM64: "arm64",
	CPU_TYPE_ARM64_32: "arm64_32",
	CPU_TYPE_MC88000: "mc88000",
	CPU_TYPE_SPARC: "sparc",
	CPU_TYPE_I860: "i860",
	CPU_TYPE_POWERPC: "ppc",
	CPU_TYPE_POWERPC64: "ppc64",
}

# Architecture names accepted on the command line.
ARCH_BY_NAME = {
	"i386": (CPU_TYPE_I386, CPU_SUBTYPE_I386_ALL),
	"x86_64": (CPU_TYPE_X86_64, CPU_SUBTYPE_X86_64_ALL),
	"x86_64h": (CPU_TYPE_X86_64, CPU_SUBTYPE_X86_64_H),
	"armv7": (CPU_TYPE_ARM, CPU_SUBTYPE_ARM_V7),
	"armv7s": (CPU_TYPE_ARM, CPU_SUBTYPE_ARM_V7S),
	"arm64": (CPU_TYPE_ARM64, CPU_SUBTYPE_ARM64_ALL),
	"arm64e": (CPU_TYPE_ARM64, CPU_SUBTYPE_ARM64E),
}


# Constants for the filetype field of the mach_header
MH_OBJECT = 0x1 		# relocatable object file
MH_EXECUTE = 0x2 		# demand paged executable file
MH_FVMLIB = 0x3 		# fixed VM shared library file
MH_CORE = 0x4 			# core file
MH_PRELOAD = 0x5 		# preloaded executable file
MH_DYLIB = 0x6 			# dynamically bound shared library
MH_DYLINKER = 0x7 		# dynamic link editor
MH_BUNDLE = 0x8 		# dynamically bound bundle file
MH_DYLIB_STUB = 0x9 	# shared library stub for static linking only, no section contents
MH_DSYM = 0xa 			# companion file with only debug sections
MH_KEXT_BUNDLE = 0xb 	# x86_64 kexts
MH_FILESET = 0xc 		# set of mach-o's

FILE_TYPE_NAMES = {
	MH_OBJECT: "MH_OBJECT",
	MH_EXECUTE: "MH_EXECUTE",
	MH_FVMLIB: "MH_FVMLIB",
	MH_CORE: "MH_CORE",
	MH_PRELOAD: "MH_PRELOAD",
	MH_DYLIB: "MH_DYLIB",
	MH_DYLINKER: "MH_DYLINKER",
	MH_BUNDLE: "MH_BUNDLE",
	MH_DYLIB_STUB: "MH_DYLIB_STUB",
	MH_DSYM: "MH_DSYM",
	MH_KEXT_BUNDLE: "MH_KEXT_BUNDLE",
	MH_FILESET: "MH_FILESET",
}


"""
The n_type field really contains four fields:
	unsigned char N_STAB:3,
		N_PEXT:1,
		N_TYPE:3,
		N_EXT:1;
which are used via the following masks.
"""
N_STAB = 0xe0 	# if any of these bits set, a symbolic debugging entry
N_PEXT = 0x10 	# private external symbol bit
N_TYPE = 0x0e 	# mask for the type bits
N_EXT = 0x01 	# external symbol bit, set for external symbols


# Values for N_TYPE bits of the n_type field.
N_UNDF = 0x0 	# undefined, n_sect == NO_SECT
N_ABS = 0x2 	# absolute, n_sect == NO_SECT
N_SECT = 0xe 	# defined in section number n_sect
N_PBUD = 0xc 	# prebound undefined (defined in a dylib)
N_INDR = 0xa 	# indirect

NO_SECT = 0 	# symbol is not in any section
