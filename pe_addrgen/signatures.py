"""Byte pattern compilation and matching."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .constants import WILDCARD_TOKENS
from .exceptions import PatternError

_HEX_BYTE_RE = re.compile(r"^[0-9A-Fa-f]{2}$")


@dataclass(frozen=True)
class Needle:
    """Compiled pattern: one slot per token, ``None`` for wildcards."""
    text: str
    slots: tuple[int | None, ...]

    def __len__(self) -> int:
        return len(self.slots)

    def literal_anchor(self) -> tuple[int, bytes]:
        """First run of consecutive literal bytes as (start, bytes)."""
        start = -1
        run = bytearray()
        for i, slot in enumerate(self.slots):
            if slot is None:
                if run:
                    break
                continue
            if start < 0:
                start = i
            run.append(slot)
        return start, bytes(run)


def compile_needle(text: str) -> Needle:
    """
    Compile IDA-style pattern text into a needle.

    Args:
        text: Whitespace-separated tokens, each two hex digits or ``?``/``??``

    Returns:
        Needle with one slot per token

    Raises:
        PatternError: If a token is malformed or the pattern is empty
    """
    tokens = text.split()
    if not tokens:
        raise PatternError(text)

    slots: list[int | None] = []
    for token in tokens:
        if token in WILDCARD_TOKENS:
            slots.append(None)
        elif _HEX_BYTE_RE.match(token):
            slots.append(int(token, 16))
        else:
            raise PatternError(text, token)

    return Needle(text=text, slots=tuple(slots))


def _matches_at(data: bytes, needle: Needle, pos: int) -> bool:
    for j, slot in enumerate(needle.slots):
        if slot is not None and data[pos + j] != slot:
            return False
    return True


def find_pattern(data: bytes, needle: Needle) -> int | None:
    """
    Find the lowest offset in data where the needle matches.

    Candidates are located with ``bytes.find`` on the needle's first literal
    run, then verified slot by slot.

    Args:
        data: Haystack bytes
        needle: Compiled needle

    Returns:
        Offset of the first match, or None
    """
    length = len(needle)
    last = len(data) - length

    if length == 0 or last < 0:
        return None

    anchor_idx, anchor = needle.literal_anchor()

    if anchor_idx < 0:
        # All wildcards - matches wherever it fits
        return 0

    pos = data.find(anchor, anchor_idx)
    while pos >= 0:
        start = pos - anchor_idx
        if start > last:
            break
        if _matches_at(data, needle, start):
            return start
        pos = data.find(anchor, pos + 1)

    return None
