"""Data models for pe-addrgen."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, order=True)
class Version:
    """Product version triple embedded in an image."""
    major: int
    minor: int
    patch: int

    def as_tuple(self) -> tuple[int, int, int]:
        """Convert to a plain (major, minor, patch) tuple."""
        return (self.major, self.minor, self.patch)

    @property
    def stem(self) -> str:
        """Identifier-safe form, e.g. ``1_02_5``."""
        return f"{self.major}_{self.minor:02}_{self.patch}"

    def __str__(self) -> str:
        return f"{self.major}.{self.minor:02}.{self.patch}"


@dataclass(frozen=True)
class Section:
    """One section of an image: base address and raw bytes."""
    name: str
    base: int
    data: bytes


@dataclass(frozen=True)
class BinaryImage:
    """Read-only view of an executable for the duration of one scan."""
    path: Path
    sections: tuple[Section, ...]
    version: Version


@dataclass(frozen=True)
class ResolvedAddress:
    """Result of resolving one signature against one image."""
    name: str
    address: int | None

    @property
    def found(self) -> bool:
        """Whether the signature matched."""
        return self.address is not None


@dataclass(frozen=True)
class VersionData:
    """Addresses recorded for one distinct version."""
    version: Version
    path: Path
    addresses: tuple[ResolvedAddress, ...]

    def address_of(self, name: str) -> int | None:
        """Look up the address recorded for a signature name."""
        for resolved in self.addresses:
            if resolved.name == name:
                return resolved.address
        return None
