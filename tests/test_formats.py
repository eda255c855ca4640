import importlib.util
import json
import sys
from pathlib import Path

import pytest

from pe_addrgen.exceptions import InvalidFormatError, SignatureDefinitionError
from pe_addrgen.formats import (
    render,
    render_c_header,
    render_json,
    render_python,
    render_rust,
    write_output,
)
from pe_addrgen.models import ResolvedAddress, Version, VersionData

NAMES = ["NopSlide", "WorldChrMan"]


def _vd(version, nop, world):
    return VersionData(
        Version(*version),
        Path("game.exe"),
        (ResolvedAddress("NopSlide", nop), ResolvedAddress("WorldChrMan", world)),
    )


TABLES = [
    _vd((1, 1, 5), 0x2040, None),
    _vd((1, 0, 0), 0x1020, 0x3C4D5E),
]


@pytest.fixture
def generated(tmp_path, monkeypatch):
    """Import rendered Python output as a module."""
    path = tmp_path / "base_addresses.py"
    path.write_text(render_python(NAMES, TABLES), encoding="utf-8")

    spec = importlib.util.spec_from_file_location("base_addresses", path)
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, "base_addresses", module)
    spec.loader.exec_module(module)
    return module


class TestPython:
    def test_constants_hold_raw_offsets(self, generated):
        assert generated.BASE_ADDRESSES_1_00_0.nop_slide == 0x1020
        assert generated.BASE_ADDRESSES_1_00_0.world_chr_man == 0x3C4D5E
        assert generated.BASE_ADDRESSES_1_01_5.world_chr_man == 0

    def test_rebase(self, generated):
        rebased = generated.BASE_ADDRESSES_1_01_5.with_module_base_addr(0x140000000)
        assert rebased.nop_slide == 0x140002040
        assert rebased.world_chr_man == 0

    def test_version_round_trip(self, generated):
        version = generated.Version.V1_01_5
        assert generated.Version.from_triple(*version.as_triple()) is version

    def test_unknown_triple_is_fatal(self, generated):
        with pytest.raises(generated.UnrecognizedVersionError):
            generated.Version.from_triple(9, 9, 9)

    def test_version_to_record(self, generated):
        assert generated.Version.V1_00_0.base_addresses() is generated.BASE_ADDRESSES_1_00_0

    def test_enum_order_ascending(self, generated):
        assert [v.as_triple() for v in generated.Version] == [(1, 0, 0), (1, 1, 5)]

    def test_field_order_follows_declaration(self):
        text = render_python(NAMES, TABLES)
        assert text.index("    nop_slide: int") < text.index("    world_chr_man: int")

    def test_not_found_comment(self):
        text = render_python(NAMES, TABLES)
        assert "    world_chr_man=0x0,  # not found\n" in text

    def test_no_versions(self, tmp_path, monkeypatch):
        path = tmp_path / "empty_addresses.py"
        path.write_text(render_python(NAMES, []), encoding="utf-8")
        spec = importlib.util.spec_from_file_location("empty_addresses", path)
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, "empty_addresses", module)
        spec.loader.exec_module(module)

        assert list(module.Version) == []
        with pytest.raises(module.UnrecognizedVersionError):
            module.Version.from_triple(1, 0, 0)


class TestRust:
    def test_layout(self):
        text = render_rust(NAMES, TABLES)

        assert text.startswith("// **********************************\n")
        assert "pub struct BaseAddresses {\n    pub nop_slide: usize,\n    pub world_chr_man: usize,\n}" in text
        assert "    pub fn with_module_base_addr(self, base: usize) -> BaseAddresses {\n" in text
        assert "            (1, 0, 0) => Version::V1_00_0,\n" in text
        assert "            Version::V1_01_5 => (1, 1, 5),\n" in text
        assert "            Version::V1_00_0 => BASE_ADDRESSES_1_00_0,\n" in text
        assert "panic!()" in text

    def test_instances(self):
        text = render_rust(NAMES, TABLES)

        assert (
            "pub const BASE_ADDRESSES_1_00_0: BaseAddresses = BaseAddresses {\n"
            "    nop_slide: 0x1020,\n"
            "    world_chr_man: 0x3c4d5e,\n"
            "};\n"
        ) in text
        assert "    world_chr_man: 0x0, // not found\n" in text
        assert text.index("BASE_ADDRESSES_1_00_0: BaseAddresses") < text.index(
            "BASE_ADDRESSES_1_01_5: BaseAddresses"
        )


class TestCHeader:
    def test_layout(self):
        text = render_c_header(NAMES, TABLES)

        assert "#ifndef PE_ADDRGEN_BASE_ADDRESSES_H\n" in text
        assert "    uintptr_t nop_slide;\n" in text
        assert "} base_addresses_t;\n" in text
        assert "    .nop_slide = 0x1020,\n" in text
        assert "    .world_chr_man = 0x0, /* not found */\n" in text
        assert "    VERSION_1_00_0,\n    VERSION_1_01_5,\n    VERSION_COUNT\n" in text
        assert "if (major == 1u && minor == 1u && patch == 5u) return VERSION_1_01_5;" in text
        assert "    case VERSION_1_00_0: return BASE_ADDRESSES_1_00_0;\n" in text
        assert "abort();" in text
        assert text.rstrip().endswith("#endif /* PE_ADDRGEN_BASE_ADDRESSES_H */")


class TestJson:
    def test_content(self):
        data = json.loads(render_json(NAMES, TABLES))

        assert data["signatures"] == ["nop_slide", "world_chr_man"]
        assert [v["version"] for v in data["versions"]] == ["1.00.0", "1.01.5"]
        assert data["versions"][1]["addresses"] == {"nop_slide": 0x2040, "world_chr_man": 0}


@pytest.mark.parametrize("fmt", ["python", "rust", "cheader", "json"])
def test_deterministic(fmt):
    assert render(fmt, NAMES, TABLES) == render(fmt, NAMES, list(reversed(TABLES)))


def test_unknown_format():
    with pytest.raises(InvalidFormatError):
        render("yaml", NAMES, TABLES)


def test_colliding_names_rejected():
    with pytest.raises(SignatureDefinitionError):
        render("python", ["WorldChrMan", "world_chr_man"], [])


@pytest.mark.parametrize("name", ["with_module_base_addr", "Type", "Switch"])
def test_reserved_field_names_rejected(name):
    with pytest.raises(SignatureDefinitionError):
        render("rust", ["NopSlide", name], [])


def test_nop_slide_scenario():
    tables = [VersionData(Version(1, 0, 0), Path("a.exe"), (ResolvedAddress("nop_slide", 0x1020),))]
    assert "    nop_slide=0x1020,\n" in render_python(["nop_slide"], tables)


def test_write_output_creates_parents(tmp_path):
    out = tmp_path / "gen" / "addresses.rs"
    write_output(out, "text\n")
    assert out.read_text(encoding="utf-8") == "text\n"
