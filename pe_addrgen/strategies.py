"""Signatures and their address resolution strategies."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .constants import DWORD_SIZE
from .exceptions import ResolutionError, SignatureDefinitionError
from .models import BinaryImage, Section
from .signatures import Needle, compile_needle, find_pattern


@dataclass(frozen=True)
class Direct:
    """Address of the match itself."""


@dataclass(frozen=True)
class Indirect:
    """Absolute u32 stored at ``read_offset`` from the match."""
    read_offset: int


@dataclass(frozen=True)
class IndirectTwice:
    """
    Displacement stored at ``offset_from_pattern`` from the match.

    The result is relative to the match position, like a RIP-relative
    operand: ``base + match + disp + offset_from_offset``.
    """
    offset_from_pattern: int
    offset_from_offset: int


Strategy = Direct | Indirect | IndirectTwice


def _check_offset(name: str, label: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise SignatureDefinitionError(
            f"Signature '{name}': {label} must be a non-negative integer, got {value!r}"
        )


@dataclass(frozen=True)
class Signature:
    """
    A named set of candidate patterns plus one resolution strategy.

    Patterns are compiled on construction so malformed text surfaces
    before any image is opened.
    """
    name: str
    patterns: tuple[str, ...]
    strategy: Strategy
    needles: tuple[Needle, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.patterns:
            raise SignatureDefinitionError(f"Signature '{self.name}' has no patterns")

        if isinstance(self.strategy, Indirect):
            _check_offset(self.name, "read_offset", self.strategy.read_offset)
        elif isinstance(self.strategy, IndirectTwice):
            _check_offset(self.name, "offset_from_pattern", self.strategy.offset_from_pattern)
            _check_offset(self.name, "offset_from_offset", self.strategy.offset_from_offset)
        elif not isinstance(self.strategy, Direct):
            raise SignatureDefinitionError(
                f"Signature '{self.name}': unknown strategy {self.strategy!r}"
            )

        needles = tuple(compile_needle(p) for p in self.patterns)
        object.__setattr__(self, "needles", needles)


def aob_direct(name: str, patterns: list[str] | tuple[str, ...]) -> Signature:
    """Signature resolving to the match address."""
    return Signature(name, tuple(patterns), Direct())


def aob_indirect(
    name: str,
    patterns: list[str] | tuple[str, ...],
    read_offset: int,
) -> Signature:
    """Signature resolving to a u32 read at an offset from the match."""
    return Signature(name, tuple(patterns), Indirect(read_offset))


def aob_indirect_twice(
    name: str,
    patterns: list[str] | tuple[str, ...],
    offset_from_pattern: int,
    offset_from_offset: int,
) -> Signature:
    """Signature resolving a match-relative displacement."""
    return Signature(
        name,
        tuple(patterns),
        IndirectTwice(offset_from_pattern, offset_from_offset),
    )


def _first_match(signature: Signature, image: BinaryImage) -> tuple[Section, int] | None:
    """First (section, offset) hit, trying patterns in order, then sections."""
    for needle in signature.needles:
        for section in image.sections:
            offset = find_pattern(section.data, needle)
            if offset is not None:
                return section, offset
    return None


def _read_u32(signature: Signature, image: BinaryImage, section: Section, offset: int) -> int:
    if offset + DWORD_SIZE > len(section.data):
        raise ResolutionError(
            f"Signature '{signature.name}': read at {section.name}+{offset:#x} "
            f"runs past end of section ({len(section.data):#x} bytes) in {image.path}"
        )
    return struct.unpack_from("<I", section.data, offset)[0]


def resolve(signature: Signature, image: BinaryImage) -> int | None:
    """
    Resolve a signature against an image.

    Args:
        signature: Signature to resolve
        image: Opened image

    Returns:
        Module-relative address, or None if no pattern matched

    Raises:
        ResolutionError: If an operand read falls outside the matched section
    """
    hit = _first_match(signature, image)
    if hit is None:
        return None

    section, offset = hit
    strategy = signature.strategy

    if isinstance(strategy, Direct):
        return section.base + offset

    if isinstance(strategy, Indirect):
        return _read_u32(signature, image, section, offset + strategy.read_offset)

    if isinstance(strategy, IndirectTwice):
        disp = _read_u32(signature, image, section, offset + strategy.offset_from_pattern)
        return section.base + offset + disp + strategy.offset_from_offset

    raise TypeError(f"Unknown strategy: {strategy!r}")
