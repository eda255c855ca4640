"""Constants and configuration for pe-addrgen."""

from __future__ import annotations

# =============================================================================
# PE Format Constants
# =============================================================================

DOS_MAGIC = b"MZ"
PE_MAGIC = b"PE\0\0"

# Optional header magic values
PE32_MAGIC = 0x10B
PE32PLUS_MAGIC = 0x20B

# Minimum size for optional header to contain data directories
PE32_OPTIONAL_HEADER_MIN_SIZE = 96

# Section header size
SECTION_HEADER_SIZE = 40

# VS_FIXEDFILEINFO.Signature
VS_FIXEDFILEINFO_SIGNATURE = 0xFEEF04BD

# =============================================================================
# Pattern Matching
# =============================================================================

WILDCARD_TOKENS = frozenset({"?", "??"})

# Width of the stored operand read by the indirect strategies
DWORD_SIZE = 4

# =============================================================================
# Candidate Images
# =============================================================================

# Suffixes picked up when a directory is given as a candidate
IMAGE_SUFFIXES = (".exe", ".dll")

# =============================================================================
# Code Generation
# =============================================================================

FORMAT_PYTHON = "python"
FORMAT_RUST = "rust"
FORMAT_CHEADER = "cheader"
FORMAT_JSON = "json"

OUTPUT_FORMATS = (FORMAT_PYTHON, FORMAT_RUST, FORMAT_CHEADER, FORMAT_JSON)
DEFAULT_OUTPUT_FORMAT = FORMAT_PYTHON

GENERATED_BANNER = (
    "**********************************",
    "*** AUTOGENERATED, DO NOT EDIT ***",
    "**********************************",
)

# Names used in generated code
RECORD_TYPE_NAME = "BaseAddresses"
RECORD_CONST_PREFIX = "BASE_ADDRESSES"
VERSION_TYPE_NAME = "Version"
REBASE_METHOD_NAME = "with_module_base_addr"

# Field names the generated Rust and C code cannot use
RUST_RESERVED_WORDS = frozenset({
    "abstract", "as", "async", "await", "become", "box", "break", "const",
    "continue", "crate", "do", "dyn", "else", "enum", "extern", "false",
    "final", "fn", "for", "gen", "if", "impl", "in", "let", "loop", "macro",
    "match", "mod", "move", "mut", "override", "priv", "pub", "ref",
    "return", "self", "static", "struct", "super", "trait", "true", "try",
    "type", "typeof", "unsafe", "unsized", "use", "virtual", "where",
    "while", "yield",
})
C_RESERVED_WORDS = frozenset({
    "auto", "bool", "break", "case", "char", "const", "continue", "default",
    "do", "double", "else", "enum", "extern", "false", "float", "for",
    "goto", "if", "inline", "int", "long", "register", "restrict", "return",
    "short", "signed", "sizeof", "static", "struct", "switch", "true",
    "typedef", "union", "unsigned", "void", "volatile", "while",
})
