"""Shared fixtures for pe-addrgen tests."""
from __future__ import annotations

import struct
from contextlib import contextmanager
from pathlib import Path

import pytest

from pe_addrgen.models import BinaryImage, Section, Version


def make_image(
    version: tuple[int, int, int],
    sections: list[tuple[int, bytes]],
    path: str = "fake.exe",
) -> BinaryImage:
    """Build an in-memory image from (base, data) pairs."""
    return BinaryImage(
        path=Path(path),
        sections=tuple(
            Section(name=f".s{i}", base=base, data=data)
            for i, (base, data) in enumerate(sections)
        ),
        version=Version(*version),
    )


def _version_resource(rva: int, version: tuple[int, int, int]) -> bytes:
    """RT_VERSION resource tree holding one VS_FIXEDFILEINFO, laid out at ``rva``."""
    major, minor, patch = version
    key = "VS_VERSION_INFO\0".encode("utf-16-le")
    fixed = struct.pack(
        "<13I",
        0xFEEF04BD, 0x10000,
        (major << 16) | minor, patch << 16,
        (major << 16) | minor, patch << 16,
        0x3F, 0, 0x4, 0x1, 0, 0, 0,
    )
    # Header and key take 38 bytes; the fixed info starts DWORD aligned
    info = struct.pack("<HHH", 6 + len(key) + 2 + len(fixed), len(fixed), 0)
    info += key + b"\x00\x00" + fixed

    def directory(entry_id: int, offset: int, leaf: bool = False) -> bytes:
        flag = 0 if leaf else 0x80000000
        return struct.pack("<IIHHHHII", 0, 0, 0, 0, 0, 1, entry_id, flag | offset)

    tree = (
        directory(16, 0x18)
        + directory(1, 0x30)
        + directory(0x409, 0x48, leaf=True)
        + struct.pack("<IIII", rva + 0x60, len(info), 0, 0)
    )
    return tree.ljust(0x60, b"\x00") + info


def build_pe(
    text: bytes = b"\x90" * 16,
    version: tuple[int, int, int] | None = None,
) -> bytes:
    """
    Build a minimal PE32 file with a .text section at RVA 0x1000.

    With ``version`` set, a .rsrc section at RVA 0x2000 carries a version
    resource; without it the image has no version information.
    """
    raw_size = 0x200
    text = text.ljust(raw_size, b"\x00")

    sections = [(b".text", 0x1000, text, 0x60000020)]
    rsrc_rva = 0x2000
    if version is not None:
        rsrc = _version_resource(rsrc_rva, version).ljust(raw_size, b"\x00")
        sections.append((b".rsrc", rsrc_rva, rsrc, 0x40000040))
    image_size = 0x1000 * (len(sections) + 1)

    dos = bytearray(0x40)
    dos[0:2] = b"MZ"
    struct.pack_into("<I", dos, 0x3C, 0x40)

    coff = struct.pack("<HHIIIHH", 0x14C, len(sections), 0, 0, 0, 0xE0, 0x0102)

    data_dirs = bytearray(16 * 8)
    if version is not None:
        struct.pack_into("<II", data_dirs, 2 * 8, rsrc_rva, raw_size)

    optional = struct.pack(
        "<HBB" + "I" * 9 + "H" * 6 + "I" * 4 + "HH" + "I" * 6,
        0x10B, 14, 0,
        raw_size, 0, 0, 0x1000, 0x1000, 0x2000, 0x400000, 0x1000, 0x200,
        6, 0, 0, 0, 6, 0,
        0, image_size, 0x200, 0,
        2, 0,
        0x100000, 0x1000, 0x100000, 0x1000, 0, 16,
    ) + bytes(data_dirs)

    headers = bytes(dos) + b"PE\0\0" + coff + optional
    body = b""
    for i, (name, rva, data, characteristics) in enumerate(sections):
        raw_ptr = 0x200 * (i + 1)
        headers += struct.pack(
            "<8sIIIIIIHHI",
            name, len(data), rva, raw_size, raw_ptr, 0, 0, 0, 0, characteristics,
        )
        body += data

    return headers.ljust(0x200, b"\x00") + body


class FakeOpener:
    """Opener that serves prepared images by file name and records open/close."""

    def __init__(self, images: dict[str, BinaryImage]):
        self.images = images
        self.events: list[tuple[str, str]] = []
        self.max_open = 0
        self._open = 0

    @contextmanager
    def __call__(self, path: Path):
        self.events.append(("open", path.name))
        self._open += 1
        self.max_open = max(self.max_open, self._open)
        try:
            yield self.images[path.name]
        finally:
            self._open -= 1
            self.events.append(("close", path.name))


@pytest.fixture
def touch(tmp_path):
    """Create empty candidate files and return their paths."""
    def _touch(*names: str) -> list[Path]:
        paths = []
        for name in names:
            p = tmp_path / name
            p.write_bytes(b"")
            paths.append(p)
        return paths
    return _touch
