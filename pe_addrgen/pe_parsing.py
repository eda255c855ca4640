"""PE image access: sections and embedded product version."""
from __future__ import annotations

import struct
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

import pefile

from .constants import (
    DOS_MAGIC,
    PE_MAGIC,
    PE32_OPTIONAL_HEADER_MIN_SIZE,
    SECTION_HEADER_SIZE,
    VS_FIXEDFILEINFO_SIGNATURE,
)
from .exceptions import ImageOpenError, VersionInfoNotFoundError
from .logging_config import log_debug
from .models import BinaryImage, Section, Version


def pe_layout_problem(pe_data: bytes) -> str | None:
    """
    Describe why a PE file is structurally unusable.

    Checks the DOS and NT signatures and that every section's raw data
    lies inside the file.

    Args:
        pe_data: Raw PE file bytes

    Returns:
        Short description of the first problem found, or None if the
        layout looks complete
    """
    if len(pe_data) < 64 or pe_data[:2] != DOS_MAGIC:
        return "missing DOS header"

    e_lfanew = struct.unpack_from("<I", pe_data, 0x3C)[0]
    if e_lfanew + 24 > len(pe_data) or pe_data[e_lfanew:e_lfanew + 4] != PE_MAGIC:
        return "missing PE signature"

    coff_offset = e_lfanew + 4
    num_sections, = struct.unpack_from("<H", pe_data, coff_offset + 2)
    optional_header_size, = struct.unpack_from("<H", pe_data, coff_offset + 16)

    if optional_header_size < PE32_OPTIONAL_HEADER_MIN_SIZE:
        return f"optional header too small ({optional_header_size} bytes)"

    section_table_offset = coff_offset + 20 + optional_header_size
    if section_table_offset + SECTION_HEADER_SIZE * num_sections > len(pe_data):
        return "section table truncated"

    for i in range(num_sections):
        offset = section_table_offset + SECTION_HEADER_SIZE * i
        raw_size, raw_ptr = struct.unpack_from("<II", pe_data, offset + 16)
        if raw_ptr and raw_size and raw_ptr + raw_size > len(pe_data):
            name = pe_data[offset:offset + 8].rstrip(b"\x00").decode("latin-1")
            return f"section {name or i} runs past end of file"

    return None


def version_from_fixed_info(fixed: Any) -> Version:
    """
    Decode the product version from a VS_FIXEDFILEINFO structure.

    The patch component is the high word of ProductVersionLS; the low
    word (build) is not part of the version key.

    Raises:
        VersionInfoNotFoundError: If the structure signature is wrong
    """
    signature = getattr(fixed, "Signature", None)
    if signature != VS_FIXEDFILEINFO_SIGNATURE:
        raise VersionInfoNotFoundError(
            f"Bad VS_FIXEDFILEINFO signature: {signature!r}"
        )

    ms = fixed.ProductVersionMS
    ls = fixed.ProductVersionLS
    return Version(ms >> 16, ms & 0xFFFF, ls >> 16)


def _read_version(pe: pefile.PE, path: Path) -> Version:
    pe.parse_data_directories(
        directories=[pefile.DIRECTORY_ENTRY["IMAGE_DIRECTORY_ENTRY_RESOURCE"]]
    )

    # pefile keeps one entry per VS_VERSIONINFO resource
    fixed_infos = getattr(pe, "VS_FIXEDFILEINFO", None)
    if not fixed_infos:
        raise VersionInfoNotFoundError(f"No version resource in {path}")

    return version_from_fixed_info(fixed_infos[0])


def _read_sections(pe: pefile.PE) -> tuple[Section, ...]:
    sections = []
    for sh in pe.sections:
        name = sh.Name.rstrip(b"\x00").decode("latin-1")
        sections.append(Section(name=name, base=sh.VirtualAddress, data=sh.get_data()))
    return tuple(sections)


@contextmanager
def open_image(path: Path) -> Iterator[BinaryImage]:
    """
    Open a PE file as a BinaryImage for the duration of a ``with`` block.

    Args:
        path: Path to an existing PE file

    Yields:
        BinaryImage with sections in header order and the product version

    Raises:
        ImageOpenError: If the file cannot be read or parsed
        VersionInfoNotFoundError: If the file has no usable version resource
    """
    try:
        pe_data = Path(path).read_bytes()
    except OSError as e:
        raise ImageOpenError(f"Cannot read {path}: {e}") from e

    problem = pe_layout_problem(pe_data)
    if problem:
        raise ImageOpenError(f"Not a usable PE image: {path} ({problem})")

    try:
        pe = pefile.PE(data=pe_data, fast_load=True)
    except pefile.PEFormatError as e:
        raise ImageOpenError(f"Cannot parse {path}: {e}") from e

    try:
        version = _read_version(pe, path)
        sections = _read_sections(pe)
        log_debug(f"{path}: {len(sections)} sections, version {version}")
        yield BinaryImage(path=Path(path), sections=sections, version=version)
    finally:
        pe.close()
