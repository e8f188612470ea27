from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Dict, List, Tuple

from ..instance import PB
from ..utils.pb_utils import is_safe_filename, load_instance, pb_folder

logger = logging.getLogger(__name__)

# file name -> (mtime_ns, instance); instances are read-only so sharing is safe
_INSTANCE_CACHE: Dict[str, Tuple[int, PB]] = {}
_CACHE_LOCK = threading.Lock()


def invalidate_caches() -> None:
    with _CACHE_LOCK:
        _INSTANCE_CACHE.clear()


def list_instance_files() -> List[str]:
    folder = pb_folder()
    if not folder.is_dir():
        return []
    return sorted(p.name for p in folder.glob("*.pb") if p.is_file())


def instance_path(file_name: str) -> Path:
    if not is_safe_filename(file_name):
        raise ValueError(f"Invalid file name: {file_name!r}")
    path = pb_folder() / file_name
    if not path.is_file():
        raise FileNotFoundError(str(path))
    return path


def get_instance(file_name: str) -> PB:
    """Load and validate a PB file from the PB folder, reusing cached results.

    Parse and validation errors propagate and are not cached.
    """
    path = instance_path(file_name)
    mtime = path.stat().st_mtime_ns
    with _CACHE_LOCK:
        cached = _INSTANCE_CACHE.get(file_name)
        if cached is not None and cached[0] == mtime:
            logger.debug("Cache hit for %s", file_name)
            return cached[1]

    logger.debug("Loading %s", path)
    pb = load_instance(path)
    with _CACHE_LOCK:
        _INSTANCE_CACHE[file_name] = (mtime, pb)
    return pb
