from typing import List, Tuple

from MachOInspector.file_context import FileContext
from MachOInspector.errors import InvalidSegment, InvalidSection
from MachOInspector.macho.macho_image import (
	LoadCommand,
	Segment,
	Section,
	decodeName
)
from MachOInspector.macho.macho_structs import (
	segment_command,
	segment_command_64,
	section,
	section_64
)


def parseSegment(
	fileCtx: FileContext,
	command: LoadCommand,
	is64Bit: bool
) -> Tuple[Segment, List[Section]]:
	"""Decode a segment command and the sections that follow it.

	The section structures directly follow the segment command and their
	size is included in cmdsize.

	Args:
		fileCtx: The image's data source.
		command: The LC_SEGMENT or LC_SEGMENT_64 command to decode. The
			walker has already checked that cmdsize fits in the image.
		is64Bit: Whether to use the 64-bit structures.

	Raises:
		InvalidSegment: cmdsize is too small for the segment structure.
		InvalidSection: cmdsize is too small for nsects section structures.

	Returns:
		The segment and its sections, in file order.
	"""

	segType = segment_command_64 if is64Bit else segment_command
	sectType = section_64 if is64Bit else section

	if command.cmdsize < segType.SIZE:
		raise InvalidSegment(
			f"cmdsize {command.cmdsize} at {command.offset:#x} is smaller than "
			f"the {segType.SIZE} byte segment command"
		)

	seg = fileCtx.readStruct(segType, command.offset)
	segname = decodeName(seg.segname)

	sectsSize = seg.nsects * sectType.SIZE
	if segType.SIZE + sectsSize > command.cmdsize:
		raise InvalidSection(
			f"{seg.nsects} sections of segment {segname!r} extend beyond "
			f"its cmdsize of {command.cmdsize}"
		)

	segment = Segment(
		segname=segname,
		vmaddr=seg.vmaddr,
		vmsize=seg.vmsize,
		fileoff=seg.fileoff,
		filesize=seg.filesize,
		maxprot=seg.maxprot,
		initprot=seg.initprot,
		nsects=seg.nsects,
		flags=seg.flags
	)

	sections = []
	sectsStart = command.offset + segType.SIZE
	for i in range(seg.nsects):
		sectOff = sectsStart + (i * sectType.SIZE)
		sect = fileCtx.readStruct(sectType, sectOff)

		sections.append(Section(
			sectname=decodeName(sect.sectname),
			segname=decodeName(sect.segname),
			addr=sect.addr,
			size=sect.size,
			offset=sect.offset,
			align=sect.align,
			reloff=sect.reloff,
			nreloc=sect.nreloc,
			flags=sect.flags,
			is64Bit=is64Bit
		))
		pass

	return segment, sections
