"""
Decoding of the ``vote`` cell for each vote type.

- approval: ``vote`` lists the approved projects, ``1,4,7``
- ordinal: ``vote`` lists projects from most to least preferred
- cumulative / scoring: ``vote`` lists projects and the parallel ``points``
  column lists what each of them received, ``1,4;10,5``
"""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple

from .errors import MalformedVote, MissingRequiredField, parse_int
from .models import Vote
from .utils.load_pb_file import Section, split_list


def _list_cell(section: Section, row: int, name: str) -> List[str]:
    value, found = section.cell(row, name)
    if not found:
        raise MissingRequiredField(name)
    return split_list(value)


def decode_approval(section: Section, row: int) -> FrozenSet[str]:
    return frozenset(_list_cell(section, row, "vote"))


def decode_ordinal(section: Section, row: int) -> Tuple[str, ...]:
    """Projects in the order given by the voter, duplicates included."""
    return tuple(_list_cell(section, row, "vote"))


def decode_points(section: Section, row: int) -> Dict[str, int]:
    projects = _list_cell(section, row, "vote")
    points = _list_cell(section, row, "points")
    if len(projects) != len(points):
        voter_id, _ = section.cell(row, "voter_id")
        raise MalformedVote(
            voter_id,
            f"{len(projects)} projects but {len(points)} points",
        )
    out: Dict[str, int] = {}
    for project_id, value in zip(projects, points):
        out[project_id] = out.get(project_id, 0) + parse_int("points", value)
    return out


class ApprovalVote(Vote):
    __slots__ = ("vote",)

    def __init__(self, section: Section, row: int):
        super().__init__(section, row)
        self.vote = decode_approval(section, row)


class OrdinalVote(Vote):
    __slots__ = ("vote",)

    def __init__(self, section: Section, row: int):
        super().__init__(section, row)
        self.vote = decode_ordinal(section, row)


class CumulativeVote(Vote):
    __slots__ = ("vote", "points")

    def __init__(self, section: Section, row: int):
        super().__init__(section, row)
        self.vote = decode_ordinal(section, row)
        self.points = decode_points(section, row)


class ScoringVote(Vote):
    __slots__ = ("vote", "points")

    def __init__(self, section: Section, row: int):
        super().__init__(section, row)
        self.vote = decode_ordinal(section, row)
        self.points = decode_points(section, row)
