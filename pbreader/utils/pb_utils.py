from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..errors import WrongFormat
from ..instance import PB, OrdinalPB, build_instance
from .load_pb_file import Document, read_document, split_lines, split_list


def workspace_root() -> Path:
    return Path(__file__).resolve().parents[2]


def pb_folder() -> Path:
    # Allow overriding the PB files directory via env var.
    # If PB_FILES_DIR is relative, resolve it against the workspace root.
    env_val = os.environ.get("PB_FILES_DIR")
    if env_val:
        p = Path(env_val).expanduser()
        if not p.is_absolute():
            p = workspace_root() / p
        return p
    return workspace_root() / "pb_files"


def is_safe_filename(name: str) -> bool:
    # basic safety for path traversal and extension
    return (
        name.endswith(".pb")
        and ".." not in name
        and not name.startswith("/")
        and "/" not in name
        and "\\" not in name
    )


def read_file_lines(path: Path) -> List[str]:
    # utf-8-sig drops a leading BOM some exporters write
    try:
        text = path.read_bytes().decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise WrongFormat(f"file is not valid UTF-8 (byte {e.start})") from e
    return split_lines(text)


def load_document(path: Path) -> Document:
    return read_document(read_file_lines(path))


def load_instance(path: Path) -> PB:
    return build_instance(load_document(path))


def parse_comments_from_meta(pb: PB) -> List[str]:
    """Extract comments from META['comment'].

    Format: a single string possibly containing multiple segments marked with
    sequential markers like "#1:", "#2:", ...
    Returns a list of plain comment texts without trailing punctuation.
    """
    raw = (pb.meta("comment") or "").strip()
    if not raw:
        return []
    s = raw.replace("\n", " ")
    parts: List[str] = []
    expecting = 1
    while True:
        marker = f"#{expecting}:"
        start = s.find(marker)
        if start == -1:
            # No markers at all: the whole value is one comment
            if expecting == 1:
                txt = s.strip().strip(";.")
                if txt:
                    parts.append(txt)
            break
        start_text = start + len(marker)
        end = s.find(f"#{expecting + 1}:", start_text)
        chunk = s[start_text:] if end == -1 else s[start_text:end]
        txt = chunk.strip().strip(";.")
        if txt:
            parts.append(txt)
        expecting += 1
        if end == -1:
            break
    return parts


def compute_webpage_name(pb: PB) -> Tuple[str, str, str, str, str]:
    def get(*keys: str) -> str:
        for key in keys:
            value = pb.meta(key)
            if value is not None:
                return value.strip()
        return ""

    country = get("country")
    unit = get("unit", "city", "district")
    instance = get("instance", "year")
    subunit = get("subunit")
    webpage_name = "_".join(p for p in [country, unit, instance, subunit] if p)
    return webpage_name, country, unit, instance, subunit


def average_vote_length(pb: PB) -> Optional[float]:
    """Mean number of projects listed per non-empty ballot."""
    lengths: List[int] = []
    for vote in pb.vote_rows():
        # Only the 'vote' field counts; other columns (age, sex...) do not
        tokens = split_list(vote.field("vote") or "")
        if tokens:
            lengths.append(len(tokens))
    if not lengths:
        return None
    return sum(lengths) / len(lengths)


def summarize_instance(pb: PB, file_name: str = "") -> Dict[str, Any]:
    webpage_name, country, unit, instance, subunit = compute_webpage_name(pb)
    stem = file_name[: -len(".pb")] if file_name.endswith(".pb") else file_name
    title = (webpage_name or stem).replace("_", " ")

    summary: Dict[str, Any] = {
        "file_name": file_name,
        "title": title,
        "webpage_name": webpage_name,
        "country": country,
        "unit": unit,
        "instance": instance,
        "subunit": subunit,
        "description": pb.meta("description") or "",
        "currency": pb.meta("currency") or "",
        "comments": parse_comments_from_meta(pb),
        "num_projects": pb.num_projects(),
        "num_votes": pb.num_votes(),
        "project_rows": pb.project_count(),
        "vote_rows": pb.vote_count(),
        "budget": pb.budget(),
        "vote_type": pb.vote_type().value,
        "rule": pb.rule().value,
        "rule_raw": pb.meta("rule") or "",
        "vote_length": average_vote_length(pb),
    }
    if isinstance(pb, OrdinalPB):
        summary.update(
            {
                "min_length": pb.min_length(),
                "max_length": pb.max_length(),
                "scoring_fn": pb.scoring_fn(),
            }
        )
    return summary
