"""Rendering version address tables as generated source text."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from .constants import (
    FORMAT_CHEADER,
    FORMAT_JSON,
    FORMAT_PYTHON,
    FORMAT_RUST,
    GENERATED_BANNER,
    RECORD_CONST_PREFIX,
    RECORD_TYPE_NAME,
    REBASE_METHOD_NAME,
    VERSION_TYPE_NAME,
)
from .definitions import to_snake_case, validate_names
from .exceptions import InvalidFormatError
from .models import VersionData

# Absent addresses are emitted as 0 in every format and left at 0 by rebasing.
MISSING_ADDRESS = 0


def _fields(names: list[str]) -> list[str]:
    validate_names(names)
    return [to_snake_case(name) for name in names]


def _field_values(names: list[str], vd: VersionData) -> list[int | None]:
    return [vd.address_of(name) for name in names]


def _hex(value: int | None) -> str:
    return f"0x{MISSING_ADDRESS if value is None else value:x}"


def _sorted_tables(tables: list[VersionData]) -> list[VersionData]:
    return sorted(tables, key=lambda vd: vd.version)


# Python


def render_python(names: list[str], tables: list[VersionData]) -> str:
    """
    Render a Python module with a frozen dataclass and a Version enum.

    Layout:

        @dataclasses.dataclass(frozen=True)
        class BaseAddresses:
            world_chr_man: int
            def with_module_base_addr(self, base: int) -> BaseAddresses: ...

        BASE_ADDRESSES_1_02_5 = BaseAddresses(world_chr_man=0x3c4d5e, ...)

        class Version(enum.Enum):
            V1_02_5 = (1, 2, 5)
            from_triple() / as_triple() / base_addresses()
    """
    fields = _fields(names)
    tables = _sorted_tables(tables)
    rec = RECORD_TYPE_NAME
    ver = VERSION_TYPE_NAME
    # Enum value lookup raises TypeError on a memberless enum before 3.12
    by_triple = f"_{ver.upper()}S_BY_TRIPLE"

    lines: list[str] = []

    for banner in GENERATED_BANNER:
        lines.append(f"# {banner}\n")
    lines.append("import dataclasses\n")
    lines.append("import enum\n\n\n")

    lines.append("class UnrecognizedVersionError(RuntimeError):\n")
    lines.append('    """Version triple that was not profiled when this file was generated."""\n\n\n')

    lines.append("def _rebase(offset: int, base: int) -> int:\n")
    lines.append("    # Zero marks a signature that was not found\n")
    lines.append("    return offset + base if offset else 0\n\n\n")

    lines.append("@dataclasses.dataclass(frozen=True)\n")
    lines.append(f"class {rec}:\n")
    for name in fields:
        lines.append(f"    {name}: int\n")
    lines.append("\n")
    lines.append(f'    def {REBASE_METHOD_NAME}(self, base: int) -> "{rec}":\n')
    lines.append(f"        return {rec}(\n")
    for name in fields:
        lines.append(f"            {name}=_rebase(self.{name}, base),\n")
    lines.append("        )\n\n\n")

    for vd in tables:
        lines.append(f"{RECORD_CONST_PREFIX}_{vd.version.stem} = {rec}(\n")
        for name, value in zip(fields, _field_values(names, vd)):
            comment = "  # not found" if value is None else ""
            lines.append(f"    {name}={_hex(value)},{comment}\n")
        lines.append(")\n\n")
    if tables:
        lines.append("\n")

    lines.append(f"class {ver}(enum.Enum):\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(f"    V{vd.version.stem} = ({major}, {minor}, {patch})\n")
    if tables:
        lines.append("\n")
    lines.append("    @classmethod\n")
    lines.append(f'    def from_triple(cls, major: int, minor: int, patch: int) -> "{ver}":\n')
    lines.append(f"        version = {by_triple}.get((major, minor, patch))\n")
    lines.append("        if version is None:\n")
    lines.append("            raise UnrecognizedVersionError(\n")
    lines.append('                f"Unrecognized version {major}.{minor:02}.{patch}"\n')
    lines.append("            )\n")
    lines.append("        return version\n\n")
    lines.append("    def as_triple(self) -> tuple:\n")
    lines.append("        return self.value\n\n")
    lines.append(f"    def base_addresses(self) -> {rec}:\n")
    lines.append(f"        return _{RECORD_CONST_PREFIX}[self]\n\n\n")

    lines.append(f"_{RECORD_CONST_PREFIX} = {{\n")
    for vd in tables:
        stem = vd.version.stem
        lines.append(f"    {ver}.V{stem}: {RECORD_CONST_PREFIX}_{stem},\n")
    lines.append("}\n\n")

    lines.append(f"{by_triple} = {{\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(f"    ({major}, {minor}, {patch}): {ver}.V{vd.version.stem},\n")
    lines.append("}\n")

    return "".join(lines)


# Rust


def render_rust(names: list[str], tables: list[VersionData]) -> str:
    """
    Render Rust definitions: the BaseAddresses struct, the Version enum
    with its From conversions, and one const instance per version.
    """
    fields = _fields(names)
    tables = _sorted_tables(tables)
    rec = RECORD_TYPE_NAME
    ver = VERSION_TYPE_NAME

    lines: list[str] = []

    for banner in GENERATED_BANNER:
        lines.append(f"// {banner}\n")

    lines.append("#[derive(Debug)]\n")
    lines.append(f"pub struct {rec} {{\n")
    for name in fields:
        lines.append(f"    pub {name}: usize,\n")
    lines.append("}\n\n")

    lines.append(f"impl {rec} {{\n")
    lines.append(f"    pub fn {REBASE_METHOD_NAME}(self, base: usize) -> {rec} {{\n")
    lines.append(f"        {rec} {{\n")
    for name in fields:
        lines.append(
            f"            {name}: if self.{name} == 0 {{ 0 }} else {{ self.{name} + base }},\n"
        )
    lines.append("        }\n    }\n}\n\n")

    # pub enum Version
    lines.append("#[derive(Clone, Copy)]\n")
    lines.append(f"pub enum {ver} {{\n")
    for vd in tables:
        lines.append(f"    V{vd.version.stem},\n")
    lines.append("}\n\n")

    # impl From<(u32, u32, u32)> for Version
    lines.append(f"impl From<(u32, u32, u32)> for {ver} {{\n")
    lines.append("    fn from(v: (u32, u32, u32)) -> Self {\n")
    lines.append("        match v {\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(f"            ({major}, {minor}, {patch}) => {ver}::V{vd.version.stem},\n")
    lines.append("            (maj, min, patch) => {\n")
    lines.append('                log::error!("Unrecognized version {maj}.{min:02}.{patch}");\n')
    lines.append("                panic!()\n")
    lines.append("            }\n")
    lines.append("        }\n    }\n}\n\n")

    # impl From<Version> for (u32, u32, u32)
    lines.append(f"impl From<{ver}> for (u32, u32, u32) {{\n")
    lines.append(f"    fn from(v: {ver}) -> Self {{\n")
    lines.append("        match v {\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(f"            {ver}::V{vd.version.stem} => ({major}, {minor}, {patch}),\n")
    lines.append("        }\n    }\n}\n\n")

    # impl From<Version> for BaseAddresses
    lines.append(f"impl From<{ver}> for {rec} {{\n")
    lines.append(f"    fn from(v: {ver}) -> Self {{\n")
    lines.append("        match v {\n")
    for vd in tables:
        stem = vd.version.stem
        lines.append(f"            {ver}::V{stem} => {RECORD_CONST_PREFIX}_{stem},\n")
    lines.append("        }\n    }\n}\n\n")

    for vd in tables:
        lines.append(f"pub const {RECORD_CONST_PREFIX}_{vd.version.stem}: {rec} = {rec} {{\n")
        for name, value in zip(fields, _field_values(names, vd)):
            comment = " // not found" if value is None else ""
            lines.append(f"    {name}: {_hex(value)},{comment}\n")
        lines.append("};\n\n")

    return "".join(lines)


# C Header


def render_c_header(names: list[str], tables: list[VersionData]) -> str:
    """
    Render a self-contained C header.

    Layout:

        typedef struct { uintptr_t world_chr_man; ... } base_addresses_t;
        static inline base_addresses_t base_addresses_with_module_base_addr(...);
        static const base_addresses_t BASE_ADDRESSES_1_02_5 = { ... };
        typedef enum { VERSION_1_02_5, ..., VERSION_COUNT } version_t;
        version_from_triple() / version_to_triple() / version_base_addresses()
    """
    fields = _fields(names)
    tables = _sorted_tables(tables)

    rec_t = f"{to_snake_case(RECORD_TYPE_NAME)}_t"
    ver_t = f"{to_snake_case(VERSION_TYPE_NAME)}_t"
    ver_prefix = VERSION_TYPE_NAME.upper()
    guard = f"PE_ADDRGEN_{RECORD_CONST_PREFIX}_H"

    lines: list[str] = []

    for banner in GENERATED_BANNER:
        lines.append(f"/* {banner} */\n")
    lines.append(f"#ifndef {guard}\n")
    lines.append(f"#define {guard}\n\n")
    lines.append("#include <stdint.h>\n")
    lines.append("#include <stdio.h>\n")
    lines.append("#include <stdlib.h>\n\n")

    lines.append("typedef struct {\n")
    for name in fields:
        lines.append(f"    uintptr_t {name};\n")
    lines.append(f"}} {rec_t};\n\n")

    lines.append("/* Zero marks a signature that was not found. */\n")
    lines.append(f"static inline {rec_t} {to_snake_case(RECORD_TYPE_NAME)}_{REBASE_METHOD_NAME}(\n")
    lines.append(f"    {rec_t} self, uintptr_t base)\n")
    lines.append("{\n")
    lines.append(f"    {rec_t} out;\n")
    for name in fields:
        lines.append(f"    out.{name} = self.{name} ? self.{name} + base : 0;\n")
    lines.append("    return out;\n")
    lines.append("}\n\n")

    for vd in tables:
        lines.append(f"static const {rec_t} {RECORD_CONST_PREFIX}_{vd.version.stem} = {{\n")
        for name, value in zip(fields, _field_values(names, vd)):
            comment = " /* not found */" if value is None else ""
            lines.append(f"    .{name} = {_hex(value)},{comment}\n")
        lines.append("};\n\n")

    lines.append("typedef enum {\n")
    for vd in tables:
        lines.append(f"    {ver_prefix}_{vd.version.stem},\n")
    lines.append(f"    {ver_prefix}_COUNT\n")
    lines.append(f"}} {ver_t};\n\n")

    lines.append(f"static inline {ver_t} {to_snake_case(VERSION_TYPE_NAME)}_from_triple(\n")
    lines.append("    uint32_t major, uint32_t minor, uint32_t patch)\n")
    lines.append("{\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(
            f"    if (major == {major}u && minor == {minor}u && patch == {patch}u) "
            f"return {ver_prefix}_{vd.version.stem};\n"
        )
    lines.append('    fprintf(stderr, "Unrecognized version %u.%02u.%u\\n",\n')
    lines.append("            (unsigned)major, (unsigned)minor, (unsigned)patch);\n")
    lines.append("    abort();\n")
    lines.append("}\n\n")

    lines.append(f"static inline void {to_snake_case(VERSION_TYPE_NAME)}_to_triple(\n")
    lines.append(f"    {ver_t} v, uint32_t *major, uint32_t *minor, uint32_t *patch)\n")
    lines.append("{\n")
    lines.append("    switch (v) {\n")
    for vd in tables:
        major, minor, patch = vd.version.as_tuple()
        lines.append(
            f"    case {ver_prefix}_{vd.version.stem}: "
            f"*major = {major}u; *minor = {minor}u; *patch = {patch}u; return;\n"
        )
    lines.append("    default: abort();\n")
    lines.append("    }\n")
    lines.append("}\n\n")

    lines.append(
        f"static inline {rec_t} {to_snake_case(VERSION_TYPE_NAME)}_"
        f"{to_snake_case(RECORD_TYPE_NAME)}({ver_t} v)\n"
    )
    lines.append("{\n")
    lines.append("    switch (v) {\n")
    for vd in tables:
        stem = vd.version.stem
        lines.append(f"    case {ver_prefix}_{stem}: return {RECORD_CONST_PREFIX}_{stem};\n")
    lines.append("    default: abort();\n")
    lines.append("    }\n")
    lines.append("}\n\n")

    lines.append(f"#endif /* {guard} */\n")

    return "".join(lines)


# JSON Export


def render_json(names: list[str], tables: list[VersionData]) -> str:
    """Render names and address tables as JSON, sorted by version."""
    fields = _fields(names)
    tables = _sorted_tables(tables)

    data = {
        "signatures": fields,
        "versions": [],
    }

    for vd in tables:
        values = _field_values(names, vd)
        data["versions"].append({
            "version": str(vd.version),
            "major": vd.version.major,
            "minor": vd.version.minor,
            "patch": vd.version.patch,
            "addresses": {
                name: MISSING_ADDRESS if value is None else value
                for name, value in zip(fields, values)
            },
        })

    return json.dumps(data, indent=2) + "\n"


RENDERERS: dict[str, Callable[[list[str], list[VersionData]], str]] = {
    FORMAT_PYTHON: render_python,
    FORMAT_RUST: render_rust,
    FORMAT_CHEADER: render_c_header,
    FORMAT_JSON: render_json,
}


def render(output_format: str, names: list[str], tables: list[VersionData]) -> str:
    """
    Render address tables in the requested format.

    Args:
        output_format: One of the keys of RENDERERS
        names: Signature names in declaration order
        tables: Per-version address tables

    Returns:
        Generated text

    Raises:
        InvalidFormatError: If the format is unknown
    """
    renderer = RENDERERS.get(output_format)
    if renderer is None:
        raise InvalidFormatError(f"Unknown output format: {output_format!r}")
    return renderer(names, tables)


def write_output(output: Path, text: str) -> None:
    """Write generated text to a file."""
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
