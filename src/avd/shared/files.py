"""Line-range file reading and editing for the read_file / modify_file tools."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def _line_slice(lines: list[str], start_line: int, end_line: int) -> tuple[int, int]:
    """Convert a 1-indexed inclusive range to clamped slice bounds."""
    if end_line < start_line:
        raise ValueError(f"endLine ({end_line}) is before startLine ({start_line})")
    start = max(0, start_line - 1)
    end = min(len(lines), end_line)
    return start, end


def read_lines(path: str | Path, start_line: int, end_line: int) -> str:
    """Return lines ``start_line``..``end_line`` (1-indexed, inclusive)."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Not a file: {path}")
    lines = path.read_text(errors="replace").split("\n")
    start, end = _line_slice(lines, start_line, end_line)
    return "\n".join(lines[start:end])


def modify_lines(path: str | Path, start_line: int, end_line: int, content: str) -> str:
    """Replace lines ``start_line``..``end_line`` with ``content``."""
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Not a file: {path}")
    lines = path.read_text().split("\n")
    start, end = _line_slice(lines, start_line, end_line)
    lines[start:end] = content.split("\n")
    path.write_text("\n".join(lines))
    logger.info("Modified %s lines %d-%d", path, start_line, end_line)
    return f"Successfully modified {path} from line {start_line} to {end_line}"
