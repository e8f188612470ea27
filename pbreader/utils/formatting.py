from __future__ import annotations

from typing import Optional

# Pabulib instances are mostly Polish; budgets read "1 000 000 PLN"
THOUSANDS_SEP = " "
NO_BALLOTS = "n/a (no non-empty ballots)"


def format_int(num: int, sep: str = THOUSANDS_SEP) -> str:
    return f"{num:_d}".replace("_", sep)


def format_budget(currency: str, amount: int) -> str:
    """Format a budget with grouped thousands and an optional currency."""
    formatted = format_int(amount)
    return f"{formatted} {currency}" if currency else formatted


def format_vote_length(avg: Optional[float], digits: int = 2) -> str:
    """Average projects per ballot, as printed by ``pb-inspect``."""
    if avg is None:
        return NO_BALLOTS
    return f"{avg:.{digits}f} projects"
