"""Reader for Pabulib participatory budgeting (.pb) files."""

from .errors import (
    DuplicatedMeta,
    InvalidInteger,
    InvariantViolation,
    MalformedVote,
    MissingRequiredField,
    MissingRequiredMeta,
    MissingRequiredSection,
    PBError,
    WrongFormat,
    describe_error,
)
from .instance import PB, OrdinalPB, Rule, VoteType, build_instance
from .models import Project, Vote
from .utils.load_pb_file import Document, Section, read_document, read_document_text
from .votes import (
    ApprovalVote,
    CumulativeVote,
    OrdinalVote,
    ScoringVote,
    decode_approval,
    decode_ordinal,
    decode_points,
)

__version__ = "0.1.0"
