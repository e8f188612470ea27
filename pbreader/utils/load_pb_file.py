"""
Low-level reader for the sectioned PB text format.

A file is a sequence of sections. Each section starts with a title line
(e.g. ``META``), followed by a header line of ``;``-separated field names and
by rows holding one value per field. There is no explicit end marker: a line
with a single token closes the current section and names the next one.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple

from ..errors import WrongFormat

logger = logging.getLogger(__name__)

FIELD_SPLITTER = re.compile(r"\s*;\s*")
LIST_SPLITTER = re.compile(r"\s*,\s*")


def split_fields(line: str) -> List[str]:
    return FIELD_SPLITTER.split(line.strip())


def split_list(cell: str) -> List[str]:
    """Split an inline list cell such as ``"2, 1 ,4"``; a blank cell is empty."""
    cell = cell.strip()
    if not cell:
        return []
    return LIST_SPLITTER.split(cell)


@dataclass(frozen=True)
class Section:
    fields: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...] = ()

    def __post_init__(self) -> None:
        fields = tuple(self.fields)
        rows = tuple(tuple(r) for r in self.rows)
        for i, row in enumerate(rows):
            if len(row) != len(fields):
                raise ValueError(
                    f"Row {i} has {len(row)} cells, header has {len(fields)} fields"
                )
        object.__setattr__(self, "fields", fields)
        object.__setattr__(self, "rows", rows)

    def __len__(self) -> int:
        return len(self.rows)

    def field_indexes(self, names: Sequence[str]) -> Tuple[List[int], bool]:
        """Return the column of each name (``-1`` if absent) and whether all were found.

        Positions follow the order of ``names``. When the header repeats a
        field name, its first occurrence wins.
        """
        first: Dict[str, int] = {}
        for i, field in enumerate(self.fields):
            first.setdefault(field, i)
        indexes = [first.get(name, -1) for name in names]
        return indexes, all(i >= 0 for i in indexes)

    def cell(self, row: int, name: str) -> Tuple[str, bool]:
        if row < 0 or row >= len(self.rows):
            return "", False
        indexes, ok = self.field_indexes([name])
        if not ok:
            return "", False
        return self.rows[row][indexes[0]], True


class Document(Mapping):
    """Read-only mapping from section title to ``Section``."""

    __slots__ = ("_sections",)

    def __init__(self, sections: Mapping[str, Section] | None = None):
        self._sections: Dict[str, Section] = dict(sections or {})

    def __getitem__(self, name: str) -> Section:
        return self._sections[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._sections)

    def __len__(self) -> int:
        return len(self._sections)

    def __repr__(self) -> str:
        return f"Document(sections={sorted(self._sections)!r})"


def _read_section(
    title: str, lines: Iterator[Tuple[int, str]]
) -> Tuple[Section, str]:
    """Read the header and rows following ``title``.

    Returns the section and the title of the next section ("" at end of input).
    """
    try:
        line_no, raw = next(lines)
    except StopIteration:
        raise WrongFormat(f"section {title!r} has no header") from None

    fields = split_fields(raw)
    if len(fields) == 1:
        raise WrongFormat(
            f"header of section {title!r} must declare at least two fields", line_no
        )

    rows: List[Tuple[str, ...]] = []
    for line_no, raw in lines:
        cells = split_fields(raw)
        if len(cells) == len(fields):
            rows.append(tuple(cells))
        elif len(cells) == 1:
            return Section(tuple(fields), tuple(rows)), cells[0]
        else:
            raise WrongFormat(
                f"expected {len(fields)} fields in section {title!r}, got {len(cells)}",
                line_no,
            )
    return Section(tuple(fields), tuple(rows)), ""


def read_document(lines: Iterable[str]) -> Document:
    """Parse PB text given line by line into a ``Document``.

    Raises ``WrongFormat`` on any structural violation; no partial result is
    returned.
    """
    sections: Dict[str, Section] = {}
    numbered = enumerate(lines, start=1)
    title = ""
    while True:
        # Blank lines between sections are skipped
        while not title:
            try:
                _, raw = next(numbered)
            except StopIteration:
                return Document(sections)
            title = raw.strip()

        section, next_title = _read_section(title, numbered)
        if title in sections:
            logger.debug("Section %s defined again, replacing previous one", title)
        logger.debug(
            "Read section %s: %d fields, %d rows",
            title,
            len(section.fields),
            len(section.rows),
        )
        sections[title] = section
        title = next_title


def split_lines(text: str) -> List[str]:
    """Split PB text on ``\\n`` or ``\\r\\n`` only.

    Other characters ``str.splitlines`` treats as line breaks (``\\x85``,
    ``\\u2028``, form feed...) stay inside their cell.
    """
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def read_document_text(text: str) -> Document:
    return read_document(split_lines(text))
