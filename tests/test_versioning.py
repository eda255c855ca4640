import pytest

from pe_addrgen.models import Version
from pe_addrgen.versioning import parse_version, version_in_range


@pytest.mark.parametrize("text, expected", [
    ("1.02.5", Version(1, 2, 5)),
    ("1.2", Version(1, 2, 0)),
    ("2", Version(2, 0, 0)),
    (" 1.0.0 ", Version(1, 0, 0)),
])
def test_parse_version(text, expected):
    assert parse_version(text) == expected


@pytest.mark.parametrize("text", ["", "a.b", "1.2.3.4", "1.-2.0", "1..2"])
def test_parse_version_invalid(text):
    assert parse_version(text) is None


def test_version_ordering_and_display():
    assert Version(1, 0, 0) < Version(1, 1, 5) < Version(2, 0, 0)
    assert Version(1, 1, 5) == Version(1, 1, 5)
    assert str(Version(1, 2, 5)) == "1.02.5"
    assert Version(1, 2, 5).stem == "1_02_5"


def test_version_in_range():
    v = Version(1, 2, 0)
    assert version_in_range(v)
    assert version_in_range(v, Version(1, 2, 0), Version(1, 2, 0))
    assert not version_in_range(v, min_version=Version(1, 3, 0))
    assert not version_in_range(v, max_version=Version(1, 1, 9))
