"""
Row views over the PROJECTS and VOTES sections.

A view is a (section, row index) pair: it never copies the row, so the
``Document`` it comes from must stay alive as long as the view is used.
"""

from __future__ import annotations

from typing import Dict, Optional

from .errors import InvariantViolation, MissingRequiredField, parse_int
from .utils.load_pb_file import Section


class RowView:
    __slots__ = ("_section", "_row")

    def __init__(self, section: Section, row: int):
        self._section = section
        self._row = row

    @property
    def section(self) -> Section:
        return self._section

    @property
    def row(self) -> int:
        return self._row

    def field(self, name: str) -> Optional[str]:
        value, found = self._section.cell(self._row, name)
        return value if found else None

    def must_field(self, name: str) -> str:
        """Like ``field`` but for fields guaranteed by validation."""
        value, found = self._section.cell(self._row, name)
        if not found:
            raise InvariantViolation.wrap(MissingRequiredField(name))
        return value

    def as_dict(self) -> Dict[str, str]:
        out: Dict[str, str] = {}
        if 0 <= self._row < len(self._section.rows):
            for name, value in zip(self._section.fields, self._section.rows[self._row]):
                out.setdefault(name, value)
        return out

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._section is other._section and self._row == other._row

    def __hash__(self) -> int:
        return hash((id(self._section), self._row))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(row={self._row})"


class Project(RowView):
    __slots__ = ()

    def id(self) -> str:
        return self.must_field("project_id")

    def cost(self) -> int:
        return parse_int("cost", self.must_field("cost"))


class Vote(RowView):
    __slots__ = ()

    def id(self) -> str:
        return self.must_field("voter_id")
