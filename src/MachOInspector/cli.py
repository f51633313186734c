import argparse
import logging
import pathlib
import sys
from typing import List, Optional, Tuple

import progressbar

from MachOInspector.errors import MachOError
from MachOInspector.file_context import FileContext
from MachOInspector.loader import MachOLoader
from MachOInspector.macho.fat_context import FatContext
from MachOInspector.macho.format_detector import MachFormat, detectFormat
from MachOInspector.macho.macho_constants import ARCH_BY_NAME
from MachOInspector.macho.macho_image import MachImage, describeSymbolType
from MachOInspector.macho.macho_structs import LoadCommands
from MachOInspector.macho.symbol_table import StringIndexing


class _MachOInspectArgs(argparse.Namespace):

	paths: List[pathlib.Path]
	segments: bool
	sections: bool
	load_commands: bool
	list_symbols: bool
	filter: Optional[str]
	archs: bool
	arch: Optional[Tuple[int, int]]
	legacy_string_index: bool
	verbosity: int
	pass


def parseArch(value: str) -> Tuple[int, int]:
	"""Parse an architecture name, or a "cputype:cpusubtype" pair.
	"""

	if value in ARCH_BY_NAME:
		return ARCH_BY_NAME[value]

	try:
		cpuType, cpuSubtype = value.split(":")
		return (int(cpuType, 0), int(cpuSubtype, 0))
	except ValueError:
		raise argparse.ArgumentTypeError(
			f"unknown architecture {value!r}, use one of "
			f"{', '.join(ARCH_BY_NAME)} or cputype:cpusubtype"
		)


def _createArgParser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(description="Inspect the structure of Mach-O files.")  # noqa
	parser.add_argument(
		"paths",
		type=pathlib.Path,
		nargs="+",
		help="Paths to the Mach-O files to inspect."
	)
	parser.add_argument("-s", "--segments", action="store_true", help="List the segments.")  # noqa
	parser.add_argument("--sections", action="store_true", help="List the sections.")  # noqa
	parser.add_argument("-c", "--load-commands", action="store_true", help="List the load commands.")  # noqa
	parser.add_argument("-l", "--list-symbols", action="store_true", help="List the symbols.")  # noqa
	parser.add_argument("--filter", help="Filter out symbols when listing them.")  # noqa
	parser.add_argument("--archs", action="store_true", help="List the architectures of fat files.")  # noqa
	parser.add_argument(
		"--arch",
		type=parseArch,
		help="The architecture to select from fat files. By default the host's architecture is used."  # noqa
	)
	parser.add_argument(
		"--legacy-string-index",
		action="store_true",
		help="Resolve symbol names by their position in the string table instead of by offset."  # noqa
	)
	parser.add_argument(
		"-v", "--verbosity",
		choices=[0, 1, 2, 3],
		default=1,
		type=int,
		help="Increase verbosity, Option 1 is the default. | 0 = None | 1 = Critical Error and Warnings | 2 = 1 + Info | 3 = 2 + debug |"  # noqa
	)

	return parser


def _configureLogging(verbosity: int) -> logging.Logger:
	level = logging.WARNING  # default options

	if verbosity == 0:
		# Set the log level so high that it doesn't do anything
		level = 100
	elif verbosity == 2:
		level = logging.INFO
	elif verbosity == 3:
		level = logging.DEBUG

	logging.basicConfig(
		format="{asctime}:{msecs:03.0f} [{levelname:^9}] {filename}:{lineno:d} : {message}",  # noqa
		datefmt="%H:%M:%S",
		style="{",
		level=level
	)

	logger = logging.getLogger("MachOInspector")
	logger.setLevel(level)
	return logger


def formatSummary(path: pathlib.Path, image: MachImage) -> str:
	header = image.header
	lines = [
		f"{path}:",
		f"  Format:         {'64-bit' if image.is64Bit else '32-bit'}",
		f"  CPU:            {header.cpuName} (subtype {header.cpuSubtype & 0xffffff:#x})",
		f"  File type:      {header.fileTypeName}",
		f"  Flags:          {header.flags:#x}",
		f"  Load commands:  {header.ncmds} ({header.sizeofcmds} bytes)",
		f"  Segments:       {len(image.segments)}",
		f"  Sections:       {len(image.sections)}",
		f"  Symbols:        {len(image.symbolTable.symbols) if image.symbolTable else 0}",
	]
	if image.arch is not None:
		lines.insert(1, f"  Slice:          {image.arch.cpuName} at {image.arch.offset:#x}")
	return "\n".join(lines)


def formatLoadCommands(image: MachImage) -> str:
	lines = ["Load commands:"]
	for i, command in enumerate(image.loadCommands):
		try:
			name = LoadCommands(command.cmd).name
		except ValueError:
			name = f"{command.cmd:#x}"
		lines.append(f"{i:4} | {name:28} | {command.cmdsize:6} | {command.offset:#x}")
	return "\n".join(lines)


def formatSegments(image: MachImage) -> str:
	lines = [f"Segments:\n{'Name':16} | {'VM Address':18} | {'VM Size':10} | {'File Off':10} | {'File Size':10} | Sects"]  # noqa
	for seg in image.segments:
		lines.append(
			f"{seg.segname:16} | {seg.vmaddr:#018x} | {seg.vmsize:#010x} | "
			f"{seg.fileoff:#010x} | {seg.filesize:#010x} | {seg.nsects}"
		)
	return "\n".join(lines)


def formatSections(image: MachImage) -> str:
	lines = [f"Sections:\n{'Segment':16} | {'Section':16} | {'Address':18} | Size"]
	for sect in image.sections:
		addrWidth = 18 if sect.is64Bit else 10
		lines.append(
			f"{sect.segname:16} | {sect.sectname:16} | "
			f"{sect.addr:#0{addrWidth}x}{' ' * (18 - addrWidth)} | {sect.size}"
		)
	return "\n".join(lines)


def formatSymbols(image: MachImage, filterTerm: str = None) -> str:
	if not image.hasValidSymbols():
		return "No symbols found in the file"

	symbols = image.symbolTable.symbols
	if filterTerm:
		filterTerm = filterTerm.lower()
		symbols = [x for x in symbols if filterTerm in x.name.lower()]

	lines = [f"Symbols ({len(symbols)}):\n{'Value':18} | {'Type':16} | Sect | Name"]
	for symbol in symbols:
		lines.append(
			f"{symbol.value:#018x} | {describeSymbolType(symbol.type):16} | "
			f"{symbol.section:4} | {symbol.name}"
		)
	return "\n".join(lines)


def formatArchitectures(path: pathlib.Path) -> str:
	with FileContext.fromPath(path) as fileCtx:
		fileFormat = detectFormat(fileCtx)
		if fileFormat not in (MachFormat.FAT, MachFormat.FAT_SWAPPED):
			return f"{path}: not a fat file ({fileFormat.value})"

		fatCtx = FatContext(fileCtx, fileFormat == MachFormat.FAT_SWAPPED)
		lines = [f"{path}: {len(fatCtx.architectures)} architectures"]
		for arch in fatCtx.architectures:
			lines.append(
				f"  {arch.cpuName:10} subtype {arch.cpuSubtype & 0xffffff:#x} "
				f"offset {arch.offset:#x} size {arch.size:#x} align 2^{arch.align}"
			)
		return "\n".join(lines)


def inspectFile(
	loader: MachOLoader,
	path: pathlib.Path,
	args: _MachOInspectArgs
) -> str:
	"""Produce the report for one file.

	Raises:
		MachOError: The file could not be parsed.
	"""

	if args.archs:
		return formatArchitectures(path)

	image = loader.load(path)

	report = [formatSummary(path, image)]
	if args.load_commands:
		report.append(formatLoadCommands(image))
	if args.segments:
		report.append(formatSegments(image))
	if args.sections:
		report.append(formatSections(image))
	if args.list_symbols or args.filter:
		report.append(formatSymbols(image, args.filter))

	return "\n\n".join(report)


def main(argv: List[str] = None) -> int:
	argParser = _createArgParser()
	args = argParser.parse_args(argv, namespace=_MachOInspectArgs())

	logger = _configureLogging(args.verbosity)

	stringIndexing = StringIndexing.OFFSET
	if args.legacy_string_index:
		stringIndexing = StringIndexing.ORDINAL

	failures = 0
	with MachOLoader(target=args.arch, stringIndexing=stringIndexing, logger=logger) as loader:
		if len(args.paths) == 1:
			progressBar = None
		else:
			progressBar = progressbar.ProgressBar(
				max_value=len(args.paths),
				redirect_stdout=True
			)

		for index, path in enumerate(args.paths):
			try:
				print(inspectFile(loader, path, args))
			except MachOError as e:
				failures += 1
				print(f"{path}: {e}", file=sys.stderr)

			if progressBar is not None:
				progressBar.update(index + 1)
			pass

		if progressBar is not None:
			progressBar.finish()

	return 1 if failures else 0


if __name__ == "__main__":
	sys.exit(main())
