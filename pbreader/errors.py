"""
Error types raised while reading and validating PB files.

Two categories are kept apart:

- ``PBError`` and its subclasses describe problems with the input itself
  (a malformed file, a missing section, a duplicated META key...). They are
  raised to the immediate caller, which is expected to report them.
- ``InvariantViolation`` signals that an already validated instance is used
  in a way its validation did not cover, e.g. a row lost its required cell or
  a numeric value cannot be parsed. ``InvalidInteger`` is the numeric flavour.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Optional

# ASCII digits with an optional sign. int() alone would also take "1_000"
INTEGER = re.compile(r"[+-]?[0-9]+")


class PBError(Exception):
    """Base class for recoverable input errors."""

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"error": type(self).__name__, "message": str(self)}
        out.update(self.details())
        return out


class WrongFormat(PBError):
    def __init__(self, reason: str, line: Optional[int] = None):
        self.reason = reason
        self.line = line
        where = f" (line {line})" if line is not None else ""
        super().__init__(f"Wrong format{where}: {reason}")

    def details(self) -> Dict[str, Any]:
        return {"line": self.line}


class MissingRequiredSection(PBError):
    def __init__(self, section: str):
        self.section = section
        super().__init__(f"Missing required section {section}")

    def details(self) -> Dict[str, Any]:
        return {"section": self.section}


class MissingRequiredMeta(PBError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Missing required meta key {key}")

    def details(self) -> Dict[str, Any]:
        return {"key": self.key}


class MissingRequiredField(PBError):
    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Missing required field {field}")

    def details(self) -> Dict[str, Any]:
        return {"field": self.field}


class DuplicatedMeta(PBError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate meta key {key}")

    def details(self) -> Dict[str, Any]:
        return {"key": self.key}


class MalformedVote(PBError):
    def __init__(self, voter_id: str, reason: str):
        self.voter_id = voter_id
        self.reason = reason
        super().__init__(f"Malformed vote of voter {voter_id}: {reason}")

    def details(self) -> Dict[str, Any]:
        return {"voter_id": self.voter_id}


class InvariantViolation(RuntimeError):
    """A validated instance was found in a state its validation excludes."""

    def __init__(self, message: str, cause: Optional[PBError] = None):
        self.cause = cause
        super().__init__(message)

    @classmethod
    def wrap(cls, cause: PBError) -> "InvariantViolation":
        exc = cls(f"Invariant violated: {cause}", cause)
        exc.__cause__ = cause
        return exc


class InvalidInteger(InvariantViolation, ValueError):
    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Value of {name} is not an integer: {value!r}")


def parse_int(name: str, value: str) -> int:
    """Parse ``value`` as a base-10 integer or raise ``InvalidInteger``."""
    if not isinstance(value, str) or INTEGER.fullmatch(value) is None:
        raise InvalidInteger(name, value)
    return int(value)


def describe_error(exc: BaseException) -> Dict[str, Any]:
    """Return a JSON-ready description of a parsing or validation error."""
    if isinstance(exc, PBError):
        return exc.to_dict()
    out: Dict[str, Any] = {"error": type(exc).__name__, "message": str(exc)}
    if isinstance(exc, InvalidInteger):
        out.update({"name": exc.name, "value": exc.value})
    elif isinstance(exc, InvariantViolation) and exc.cause is not None:
        out["cause"] = exc.cause.to_dict()
    return out
