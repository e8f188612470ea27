"""
Validated view of a participatory budgeting instance.

``PB`` wraps a parsed ``Document`` and checks, in this order, that:

1. the META, PROJECTS and VOTES sections exist;
2. META defines ``budget`` as an integer;
3. META defines ``num_projects``, ``num_votes``, ``vote_type`` and ``rule``,
   each of the required keys exactly once;
4. PROJECTS has ``project_id`` and ``cost`` columns;
5. VOTES has ``voter_id`` and ``vote`` columns.

The first failed check raises. Once built, an instance is read-only.
"""

from __future__ import annotations

import enum
import logging
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Type

from .errors import (
    DuplicatedMeta,
    InvalidInteger,
    InvariantViolation,
    MissingRequiredField,
    MissingRequiredMeta,
    MissingRequiredSection,
    parse_int,
)
from .models import Project, Vote
from .utils.load_pb_file import Document, Section
from .votes import ApprovalVote, CumulativeVote, OrdinalVote, ScoringVote

logger = logging.getLogger(__name__)

REQUIRED_SECTIONS = ("META", "PROJECTS", "VOTES")
REQUIRED_META = ("budget", "num_projects", "num_votes", "vote_type", "rule")
PROJECT_FIELDS = ("project_id", "cost")
VOTE_FIELDS = ("voter_id", "vote")


class VoteType(enum.Enum):
    APPROVAL = "approval"
    ORDINAL = "ordinal"
    CUMULATIVE = "cumulative"
    SCORING = "scoring"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, value: Optional[str]) -> "VoteType":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


class Rule(enum.Enum):
    GREEDY = "greedy"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, value: Optional[str]) -> "Rule":
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.UNKNOWN


VOTE_CLASSES: Dict[VoteType, Type[Vote]] = {
    VoteType.APPROVAL: ApprovalVote,
    VoteType.ORDINAL: OrdinalVote,
    VoteType.CUMULATIVE: CumulativeVote,
    VoteType.SCORING: ScoringVote,
}


def _meta_lookup(section: Section, key: str) -> Optional[str]:
    for row in section.rows:
        if row[0] == key:
            return row[1]
    return None


def _require_section(document: Document, name: str) -> Section:
    section = document.get(name)
    if section is None:
        raise MissingRequiredSection(name)
    return section


def _require_fields(section: Section, fields: Sequence[str]) -> List[int]:
    indexes, ok = section.field_indexes(fields)
    if not ok:
        missing = next(f for f, i in zip(fields, indexes) if i < 0)
        raise MissingRequiredField(missing)
    return indexes


class PB:
    __slots__ = (
        "_meta_section",
        "_projects_section",
        "_votes_section",
        "_budget",
        "_project_rows",
    )

    def __init__(self, document: Document):
        # Sections
        (
            self._meta_section,
            self._projects_section,
            self._votes_section,
        ) = [_require_section(document, name) for name in REQUIRED_SECTIONS]

        # Meta
        raw_budget = self.meta("budget")
        if raw_budget is None:
            raise MissingRequiredMeta("budget")
        self._budget = parse_int("budget", raw_budget)
        self._check_meta_keys(REQUIRED_META)

        # Fields
        id_index = _require_fields(self._projects_section, PROJECT_FIELDS)[0]
        _require_fields(self._votes_section, VOTE_FIELDS)

        # Projects
        self._project_rows: Dict[str, int] = {}
        for i, row in enumerate(self._projects_section.rows):
            project_id = row[id_index]
            if project_id in self._project_rows:
                logger.warning(
                    "Duplicated project_id %s: row %d replaces row %d",
                    project_id,
                    i,
                    self._project_rows[project_id],
                )
            self._project_rows[project_id] = i

    def _check_meta_keys(self, keys: Sequence[str]) -> None:
        seen = {key: False for key in keys}
        for row in self._meta_section.rows:
            key = row[0]
            if key not in seen:
                continue
            if seen[key]:
                raise DuplicatedMeta(key)
            seen[key] = True
        for key in keys:
            if not seen[key]:
                raise MissingRequiredMeta(key)

    # Meta

    def meta(self, key: str) -> Optional[str]:
        return _meta_lookup(self._meta_section, key)

    def meta_items(self) -> List[Tuple[str, str]]:
        return [(row[0], row[1]) for row in self._meta_section.rows]

    def must_meta(self, key: str) -> str:
        value = self.meta(key)
        if value is None:
            raise InvariantViolation.wrap(MissingRequiredMeta(key))
        return value

    def must_meta_int(self, key: str) -> int:
        return parse_int(key, self.must_meta(key))

    def meta_int(self, key: str, default: Optional[int]) -> Optional[int]:
        """Integer META value, or ``default`` when absent or not an integer."""
        value = self.meta(key)
        if value is None:
            return default
        try:
            return parse_int(key, value)
        except InvalidInteger:
            return default

    def num_projects(self) -> int:
        return self.must_meta_int("num_projects")

    def num_votes(self) -> int:
        return self.must_meta_int("num_votes")

    def budget(self) -> int:
        return self._budget

    def vote_type(self) -> VoteType:
        return VoteType.classify(self.must_meta("vote_type"))

    def rule(self) -> Rule:
        return Rule.classify(self.must_meta("rule"))

    # Projects

    def project_count(self) -> int:
        return len(self._projects_section.rows)

    def project(self, project_id: str) -> Optional[Project]:
        index = self._project_rows.get(project_id)
        if index is None:
            return None
        return Project(self._projects_section, index)

    def project_by_index(self, index: int) -> Project:
        if not 0 <= index < len(self._projects_section.rows):
            raise IndexError(f"project index out of range: {index}")
        return Project(self._projects_section, index)

    def projects(self) -> Iterator[Project]:
        for i in range(len(self._projects_section.rows)):
            yield Project(self._projects_section, i)

    # Votes

    def vote_count(self) -> int:
        return len(self._votes_section.rows)

    def vote(self, index: int) -> Vote:
        """The ``index``-th vote, decoded according to ``vote_type()``."""
        if not 0 <= index < len(self._votes_section.rows):
            raise IndexError(f"vote index out of range: {index}")
        cls = VOTE_CLASSES.get(self.vote_type(), Vote)
        return cls(self._votes_section, index)

    def votes(self) -> Iterator[Vote]:
        for i in range(len(self._votes_section.rows)):
            yield self.vote(i)

    def vote_rows(self) -> Iterator[Vote]:
        """Undecoded views of every VOTES row."""
        for i in range(len(self._votes_section.rows)):
            yield Vote(self._votes_section, i)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(projects={self.project_count()}, "
            f"votes={self.vote_count()}, budget={self._budget})"
        )


class OrdinalPB(PB):
    __slots__ = ()

    def min_length(self) -> int:
        return self.meta_int("min_length", 1)

    def max_length(self) -> int:
        value = self.meta_int("max_length", None)
        return self.num_projects() if value is None else value

    def scoring_fn(self) -> str:
        value = self.meta("scoring_fn")
        return "Borda" if value is None else value


def build_instance(document: Document) -> PB:
    """Build the instance class matching the META ``vote_type`` of ``document``."""
    meta = document.get("META")
    vote_type = VoteType.UNKNOWN
    if meta is not None:
        vote_type = VoteType.classify(_meta_lookup(meta, "vote_type"))
    if vote_type is VoteType.ORDINAL:
        return OrdinalPB(document)
    return PB(document)
