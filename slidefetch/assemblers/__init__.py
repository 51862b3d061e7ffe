"""
Artifact assemblers: combine normalized images into a ZIP, PDF, or PPTX.
"""

from pathlib import Path
from typing import List, Union

from slidefetch.assemblers.archive import ArchiveAssembler
from slidefetch.assemblers.base import BaseAssembler
from slidefetch.assemblers.pdf import PDFAssembler
from slidefetch.assemblers.pptx_assembler import PPTXAssembler
from slidefetch.errors import InvalidFormat
from slidefetch.models import FetchedImage, OutputFormat

ASSEMBLERS = {
    OutputFormat.JPG: ArchiveAssembler,
    OutputFormat.PNG: ArchiveAssembler,
    OutputFormat.ZIP: ArchiveAssembler,
    OutputFormat.PDF: PDFAssembler,
    OutputFormat.PPTX: PPTXAssembler,
}


def get_assembler(output_format: Union[OutputFormat, str]) -> BaseAssembler:
    """Assembler for ``output_format``; raises InvalidFormat if there is none."""
    try:
        fmt = OutputFormat(output_format)
    except ValueError:
        raise InvalidFormat(f"Invalid output format: {output_format}")
    return ASSEMBLERS[fmt]()


def assemble(
    images: List[FetchedImage], output_format: Union[OutputFormat, str], output_path: Path
) -> Path:
    return get_assembler(output_format).assemble(images, output_path)


__all__ = [
    "ArchiveAssembler",
    "BaseAssembler",
    "PDFAssembler",
    "PPTXAssembler",
    "assemble",
    "get_assembler",
]
