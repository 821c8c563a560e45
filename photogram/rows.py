from __future__ import annotations

from typing import Iterator

_QUOTE = '"'
_SEPARATOR = ","


def _unquote(cell: str) -> str:
    value = cell.strip()
    if value.startswith(_QUOTE):
        value = value[1:]
    if value.endswith(_QUOTE):
        value = value[:-1]
    return value.replace('""', '"')


def parse_line(line: str) -> list[str]:
    """
    Split one physical CSV line into fields.

    Separators inside quotes are kept as content; each field then loses one
    surrounding quote pair and has doubled quotes collapsed.
    """
    cells: list[str] = []
    current: list[str] = []
    within_quotes = False

    for ch in line:
        if ch == _QUOTE:
            within_quotes = not within_quotes
            current.append(ch)
        elif ch == _SEPARATOR and not within_quotes:
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
    cells.append("".join(current))

    return [_unquote(cell) for cell in cells]


def iter_lines(text: str) -> Iterator[str]:
    # Quoted fields spanning lines are not supported; every "\n" ends a row.
    lines = (text or "").split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    for line in lines:
        yield line[:-1] if line.endswith("\r") else line


def parse_rows(text: str) -> list[list[str]]:
    """Parse CSV text into rows; the first row is the header."""
    return [parse_line(line) for line in iter_lines(text)]
