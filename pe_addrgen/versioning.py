"""Version string parsing and filtering."""

from __future__ import annotations

from .models import Version


def parse_version(version_str: str) -> Version | None:
    """
    Parse a product version string.

    Accepts one to three dot-separated integers: "1", "1.02", "1.02.5".
    Missing components default to 0.

    Args:
        version_str: Version string to parse

    Returns:
        Version or None if invalid
    """
    parts = version_str.strip().split(".")
    if not 1 <= len(parts) <= 3:
        return None

    try:
        numbers = [int(p) for p in parts]
    except ValueError:
        return None

    if any(n < 0 for n in numbers):
        return None

    numbers += [0] * (3 - len(numbers))
    return Version(*numbers)


def version_in_range(
    version: Version,
    min_version: Version | None = None,
    max_version: Version | None = None,
) -> bool:
    """
    Check a version against inclusive bounds.

    Args:
        version: Version to test
        min_version: Minimum version (inclusive)
        max_version: Maximum version (inclusive)

    Returns:
        True if the version is within the bounds
    """
    if min_version and version < min_version:
        return False
    if max_version and version > max_version:
        return False
    return True
