"""Tokenizer for the marker-delimited response format.

The vision model is asked to wrap each part of its answer in literal
``--- <Section> Start ---`` / ``--- <Section> End ---`` lines. This module
turns that text into smaller units (sections, element blocks, ``key: value``
pairs, brace-object sub-keys) without interpreting them; the parser in
:mod:`avd.analysis.parser` gives them meaning.

Everything here is a pure function of its input and returns ``None`` (or an
empty container) instead of raising when the text doesn't match.
"""

from __future__ import annotations

import re

ELEMENT_START = "--- Element Start ---"
ELEMENT_END = "--- Element End ---"

_KEY_VALUE_RE = re.compile(r"^[-*\s]*\**([A-Za-z][A-Za-z0-9_ ]*?)\**\s*:\s*(.*)$")
_UNIT_RE = re.compile(r"(\d)\s*(px|pt|em|rem|%)$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"^-?\d+(\.\d+)?$")
_OUTER_QUOTES = "\"'`"


def section(text: str, name: str) -> str | None:
    """Return the trimmed body of the first ``name`` section, or None."""
    pattern = re.compile(
        rf"---\s*{re.escape(name)}\s+Start\s*---(.*?)---\s*{re.escape(name)}\s+End\s*---",
        re.DOTALL | re.IGNORECASE,
    )
    match = pattern.search(text)
    if not match:
        return None
    return match.group(1).strip()


def split_element_blocks(text: str) -> list[str]:
    """Split raw text into element blocks.

    Everything before the first start marker is discarded. Each block ends
    at its end marker when one is present, otherwise at the next start
    marker (or end of text).
    """
    blocks: list[str] = []
    for chunk in text.split(ELEMENT_START)[1:]:
        end = chunk.find(ELEMENT_END)
        blocks.append(chunk if end == -1 else chunk[:end])
    return blocks


def normalize_key(key: str) -> str:
    """``Text Content`` / ``text_content`` / ``textContent`` → ``textcontent``."""
    return re.sub(r"[\s_]+", "", key).lower()


def tokenize_block(block: str) -> dict[str, str]:
    """Tokenize an element block into normalized ``key -> raw value`` pairs.

    Stops at the first marker line. A value that opens a ``{`` without
    closing it on the same line is continued on the following lines until
    the brace closes. Later keys overwrite earlier ones. Lines that aren't
    ``key: value`` are ignored.
    """
    pairs: dict[str, str] = {}
    lines = block.splitlines()
    i = 0
    while i < len(lines):
        line = lines[i].strip()
        i += 1
        if not line:
            continue
        # Element end, or the start of the next section when the end is missing
        if line.startswith("---"):
            break
        match = _KEY_VALUE_RE.match(line)
        if not match:
            continue
        key, value = match.group(1), match.group(2).strip()
        if value.startswith("{") and "}" not in value:
            while i < len(lines) and "}" not in value:
                value += " " + lines[i].strip()
                i += 1
        pairs[normalize_key(key)] = value
    return pairs


def braced(value: str) -> str | None:
    """Return the text between the first ``{`` and the last ``}``."""
    start = value.find("{")
    end = value.rfind("}")
    if start == -1 or end <= start:
        return None
    return value[start + 1:end]


def clean_scalar(value: str | None) -> str | None:
    """Trim and drop surrounding quotes; the text is otherwise kept as written.

    Empty strings and the literal ``null`` (any case) become None.
    """
    if value is None:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _OUTER_QUOTES:
        value = value[1:-1].strip()
    if not value or value.lower() == "null":
        return None
    return value


def clean_value(value: str | None) -> str | None:
    """Like :func:`clean_scalar`, also dropping a leading ``~`` estimate marker."""
    value = clean_scalar(value)
    if value is None:
        return None
    return clean_scalar(value.lstrip("~"))


def subkey(inner: str, key: str) -> str | None:
    """Extract one ``key: value`` from the inside of a brace object.

    Accepts quoted (``"Inter, sans-serif"``) or bare (``16px``) values and
    quoted or bare keys. Returns the cleaned value or None.
    """
    pattern = re.compile(
        rf"""(?:^|[\s,{{])["']?{re.escape(key)}["']?\s*:\s*"""
        r"""(?:"([^"]*)"|'([^']*)'|([^,}]*))""",
        re.IGNORECASE,
    )
    match = pattern.search(inner)
    if not match:
        return None
    raw = next((g for g in match.groups() if g is not None), None)
    return clean_value(raw)


def coerce_number(value: str) -> int | float | str:
    """Coerce to int or float; otherwise return the string minus its unit.

    ``"16"`` → 16, ``"1.5"`` → 1.5, ``"12px"`` → 12, ``"auto"`` → ``"auto"``.
    """
    text = _UNIT_RE.sub(r"\1", value.strip())
    if not _NUMBER_RE.match(text):
        return text
    return float(text) if "." in text else int(text)


def split_list(value: str) -> list[str]:
    """Split a comma-separated list, keeping ``rgb(1, 2, 3)`` in one piece."""
    return re.split(r",(?![^()]*\))", value)
