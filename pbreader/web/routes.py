from __future__ import annotations

import logging
from typing import Any, Dict, List

from flask import Blueprint, abort, jsonify, request

from ..config import max_upload_bytes
from ..errors import InvariantViolation, PBError, describe_error
from ..instance import PB, build_instance
from ..models import Vote
from ..services.pb_service import get_instance, list_instance_files
from ..utils.load_pb_file import read_document_text
from ..utils.pb_utils import is_safe_filename, summarize_instance
from ..utils.upload_security import is_allowed_extension, is_probably_text_bytes
from . import limiter

logger = logging.getLogger(__name__)

bp = Blueprint("pb", __name__, url_prefix="/api")

# Errors caused by the content of a PB file
CONTENT_ERRORS = (PBError, InvariantViolation)


def _content_error(exc: Exception):
    return jsonify({"ok": False, **describe_error(exc)}), 422


def _load(file_name: str) -> PB:
    if not is_safe_filename(file_name):
        abort(400, description="Invalid filename")
    try:
        return get_instance(file_name)
    except FileNotFoundError:
        abort(404, description=f"No such file: {file_name}")


def _vote_payload(vote: Vote) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"voter_id": vote.id(), "fields": vote.as_dict()}
    decoded = getattr(vote, "vote", None)
    if isinstance(decoded, frozenset):
        payload["vote"] = sorted(decoded)
    elif decoded is not None:
        payload["vote"] = list(decoded)
    points = getattr(vote, "points", None)
    if points is not None:
        payload["points"] = points
    return payload


@bp.get("/instances")
def api_instances():
    items: List[Dict[str, Any]] = []
    for file_name in list_instance_files():
        try:
            items.append({"ok": True, **summarize_instance(get_instance(file_name), file_name)})
        except CONTENT_ERRORS as e:
            logger.warning("Failed to load %s: %s", file_name, e)
            items.append({"ok": False, "file_name": file_name, **describe_error(e)})
    return jsonify({"ok": True, "instances": items})


@bp.get("/instances/<file_name>")
def api_instance(file_name: str):
    try:
        pb = _load(file_name)
        return jsonify({"ok": True, "instance": summarize_instance(pb, file_name)})
    except CONTENT_ERRORS as e:
        return _content_error(e)


@bp.get("/instances/<file_name>/projects")
def api_projects(file_name: str):
    try:
        pb = _load(file_name)
        projects = [
            {"id": p.id(), "cost": p.cost(), "fields": p.as_dict()}
            for p in pb.projects()
        ]
    except CONTENT_ERRORS as e:
        return _content_error(e)
    return jsonify({"ok": True, "projects": projects})


@bp.get("/instances/<file_name>/votes/<int:index>")
def api_vote(file_name: str, index: int):
    try:
        pb = _load(file_name)
        if index >= pb.vote_count():
            abort(404, description=f"No vote at index {index}")
        return jsonify({"ok": True, "vote": _vote_payload(pb.vote(index))})
    except CONTENT_ERRORS as e:
        return _content_error(e)


@bp.post("/check")
@limiter.limit("10/minute; 200/day")
def api_check():
    """Parse and validate an uploaded .pb file (no persistence)."""
    if "file" not in request.files:
        abort(400, description="No file part")
    f = request.files["file"]
    name = (f.filename or "").strip()
    if not name:
        abort(400, description="Empty filename")
    if not is_allowed_extension(name):
        abort(400, description="Only .pb files are allowed")

    max_bytes = max_upload_bytes()
    data = f.read(max_bytes + 1)
    if len(data) > max_bytes:
        abort(413)
    if not is_probably_text_bytes(data[:4096]):
        abort(400, description="File does not look like text")
    try:
        text = data.decode("utf-8-sig")
    except UnicodeDecodeError:
        abort(400, description="File is not valid UTF-8")

    try:
        pb = build_instance(read_document_text(text))
        summary = summarize_instance(pb, name)
    except CONTENT_ERRORS as e:
        return _content_error(e)
    return jsonify({"ok": True, "instance": summary})
