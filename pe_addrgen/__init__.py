"""
pe-addrgen: Generate version-keyed address tables for PE images.

This package locates byte signatures (with wildcards) inside several
releases of the same executable, resolves each match to a module-relative
address, deduplicates builds by their embedded product version, and
renders the results as generated source code.

"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "pe-addrgen contributors"

from .exceptions import (
    PEAddrGenError,
    PatternError,
    SignatureDefinitionError,
    ImageOpenError,
    VersionInfoNotFoundError,
    ResolutionError,
    SignatureNotFoundError,
    InvalidFormatError,
)
from .models import Version, Section, BinaryImage, ResolvedAddress, VersionData
from .signatures import Needle, compile_needle, find_pattern
from .strategies import (
    Direct,
    Indirect,
    IndirectTwice,
    Signature,
    aob_direct,
    aob_indirect,
    aob_indirect_twice,
    resolve,
)
from .definitions import load_signatures, parse_signatures
from .pe_parsing import open_image
from .scanner import scan_versions, expand_candidates
from .formats import render, write_output

__all__ = [
    # Version
    "__version__",
    # Exceptions
    "PEAddrGenError",
    "PatternError",
    "SignatureDefinitionError",
    "ImageOpenError",
    "VersionInfoNotFoundError",
    "ResolutionError",
    "SignatureNotFoundError",
    "InvalidFormatError",
    # Models
    "Version",
    "Section",
    "BinaryImage",
    "ResolvedAddress",
    "VersionData",
    # Patterns
    "Needle",
    "compile_needle",
    "find_pattern",
    # Signatures
    "Direct",
    "Indirect",
    "IndirectTwice",
    "Signature",
    "aob_direct",
    "aob_indirect",
    "aob_indirect_twice",
    "resolve",
    "load_signatures",
    "parse_signatures",
    # Scanning
    "open_image",
    "scan_versions",
    "expand_candidates",
    # Output
    "render",
    "write_output",
]
