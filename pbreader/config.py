"""
Runtime configuration taken from environment variables.

A ``.env`` file in the working directory is honoured when python-dotenv is
installed (local development).
"""

from __future__ import annotations

import logging
import os
import secrets
from typing import Any, Iterable, Optional

import sentry_sdk

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def load_env() -> None:
    try:
        from dotenv import load_dotenv  # type: ignore

        load_dotenv()
    except ImportError:
        pass


def log_level() -> str:
    return os.environ.get("PB_LOG_LEVEL", "INFO").strip().upper() or "INFO"


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(level=(level or log_level()).upper(), format=LOG_FORMAT)


def max_upload_bytes() -> int:
    try:
        return int(os.environ.get("MAX_UPLOAD_MB", "10")) * 1024 * 1024
    except ValueError:
        return 10 * 1024 * 1024


def secret_key() -> str:
    # The API keeps no session state, so a per-process key is enough
    return os.environ.get("SECRET_KEY") or secrets.token_hex(16)


def limiter_storage_uri() -> str:
    return os.environ.get("LIMITER_STORAGE_URI", "memory://")


def _tag_event(event, hint):
    event.setdefault("tags", {}).update({"app": "pabulib-reader"})
    event.setdefault("server_name", os.environ.get("HOSTNAME", "localhost"))
    return event


def init_sentry(integrations: Iterable[Any] = ()) -> bool:
    """Initialise Sentry when SENTRY_DSN is set. Returns whether it was."""
    dsn = os.environ.get("SENTRY_DSN")
    if not dsn:
        return False
    sentry_sdk.init(
        dsn=dsn,
        integrations=list(integrations),
        traces_sample_rate=float(os.environ.get("SENTRY_TRACES_SAMPLE_RATE", "0.1")),
        environment=os.environ.get("SENTRY_ENVIRONMENT", "development"),
        release=os.environ.get("SENTRY_RELEASE"),
        before_send=_tag_event,
    )
    return True
