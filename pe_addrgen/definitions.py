"""Loading signature definitions from JSON."""

from __future__ import annotations

import json
import keyword
import re
from pathlib import Path
from typing import Any

from .constants import C_RESERVED_WORDS, REBASE_METHOD_NAME, RUST_RESERVED_WORDS
from .exceptions import SignatureDefinitionError
from .strategies import (
    Signature,
    aob_direct,
    aob_indirect,
    aob_indirect_twice,
)

_IDENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RESERVED_FIELD_NAMES = RUST_RESERVED_WORDS | C_RESERVED_WORDS | {REBASE_METHOD_NAME}
_ACRONYM_RE = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_RE = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATOR_RE = re.compile(r"[^A-Za-z0-9]+")


def to_snake_case(name: str) -> str:
    """
    Convert a signature name to snake_case.

    Examples:
        >>> to_snake_case("WorldChrMan")
        'world_chr_man'
        >>> to_snake_case("CSMenuMan")
        'cs_menu_man'
        >>> to_snake_case("nop-slide")
        'nop_slide'
    """
    s = _ACRONYM_RE.sub(r"\1_\2", name)
    s = _CAMEL_RE.sub(r"\1_\2", s)
    s = _SEPARATOR_RE.sub("_", s)
    return s.strip("_").lower()


def validate_names(names: list[str]) -> None:
    """
    Check that signature names map to distinct, valid field names.

    A field name must be an identifier in every output format and must
    not shadow a member of the generated record type.

    Raises:
        SignatureDefinitionError: On an empty list, invalid, reserved or
            colliding names
    """
    if not names:
        raise SignatureDefinitionError("No signatures defined")

    seen: dict[str, str] = {}
    for name in names:
        field_name = to_snake_case(name)
        if not _IDENT_RE.match(field_name) or keyword.iskeyword(field_name):
            raise SignatureDefinitionError(
                f"Signature name '{name}' does not yield a valid identifier"
            )
        if field_name in _RESERVED_FIELD_NAMES:
            raise SignatureDefinitionError(
                f"Signature name '{name}' maps to reserved name '{field_name}'"
            )
        if field_name in seen:
            raise SignatureDefinitionError(
                f"Signatures '{seen[field_name]}' and '{name}' "
                f"both map to field '{field_name}'"
            )
        seen[field_name] = name


def _require_int(entry: dict[str, Any], key: str, name: str) -> int:
    if key not in entry:
        raise SignatureDefinitionError(f"Signature '{name}': missing '{key}'")
    return entry[key]


def _parse_entry(entry: Any, index: int) -> Signature:
    if not isinstance(entry, dict):
        raise SignatureDefinitionError(f"Entry {index} is not an object")

    name = entry.get("name")
    if not isinstance(name, str) or not name:
        raise SignatureDefinitionError(f"Entry {index} has no name")

    if "patterns" in entry:
        patterns = entry["patterns"]
    elif "pattern" in entry:
        patterns = [entry["pattern"]]
    else:
        raise SignatureDefinitionError(f"Signature '{name}': missing 'patterns'")

    if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
        raise SignatureDefinitionError(
            f"Signature '{name}': 'patterns' must be a list of strings"
        )

    strategy = entry.get("strategy", "direct")

    if strategy == "direct":
        return aob_direct(name, patterns)
    if strategy == "indirect":
        return aob_indirect(name, patterns, _require_int(entry, "read_offset", name))
    if strategy == "indirect_twice":
        return aob_indirect_twice(
            name,
            patterns,
            _require_int(entry, "offset_from_pattern", name),
            _require_int(entry, "offset_from_offset", name),
        )

    raise SignatureDefinitionError(f"Signature '{name}': unknown strategy {strategy!r}")


def parse_signatures(data: Any) -> list[Signature]:
    """
    Build signatures from a decoded definition document.

    Args:
        data: Dict with a "signatures" list

    Returns:
        Signatures in declaration order

    Raises:
        SignatureDefinitionError: If the document is malformed
        PatternError: If a pattern text is malformed
    """
    if not isinstance(data, dict) or not isinstance(data.get("signatures"), list):
        raise SignatureDefinitionError("Expected an object with a 'signatures' list")

    signatures = [_parse_entry(e, i) for i, e in enumerate(data["signatures"])]
    validate_names([s.name for s in signatures])
    return signatures


def load_signatures(path: Path) -> list[Signature]:
    """
    Load signature definitions from a JSON file.

    Args:
        path: Definition file path

    Returns:
        Signatures in declaration order
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise SignatureDefinitionError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SignatureDefinitionError(f"Invalid JSON in {path}: {e}") from e

    return parse_signatures(data)
