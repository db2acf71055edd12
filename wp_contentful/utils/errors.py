"""
Structured reporting of per-item outcomes and the migration error types.

The :mod:`wp_contentful.utils.errors` module centralizes the writing of log
entries for both failed and successful operations during the migration.
Each entry is appended to a JSON Lines file under ``reports/migration`` so
that the information can be reviewed or parsed after a run.

Two reporting functions are provided:

``report_error``
    Record an error that occurred for an item (asset, author, tag or post).
    An optional exception can be supplied and will be serialized to the log.

``report_ok``
    Record a successful step for an item.  Additional key/value information
    can be attached to the entry via the ``extra`` parameter.

The ``ERRORS`` dictionary maps error or event codes to human readable
messages.  Codes not present in the dictionary fall back to the code itself.

Stages return :class:`ItemResult` values for expected per-item failures
instead of raising; exceptions are reserved for conditions that stop a run.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from typing import Any, Dict, Generic, Mapping, Optional, TypeVar

from .logger import get_logger

logger = get_logger(__name__)

# Mapping of event codes used throughout the migration to descriptive messages.
ERRORS: Dict[str, str] = {
    "SOURCE_FETCH": "Failed to fetch WordPress collection",
    "CONTENT_CONVERSION": "Failed to convert post content to Rich Text",
    "ASSET_DOWNLOAD": "Failed to download source image",
    "ASSET_CREATE": "Failed to create Contentful asset",
    "ASSET_PUBLISH": "Failed to publish Contentful asset",
    "AUTHOR_CREATE": "Failed to create author entry",
    "TAG_CREATE": "Failed to create tag entry",
    "POST_CREATE": "Failed to create post entry",
    "POST_PUBLISH": "Could not publish post, left as draft",
    "ASSET_CREATED": "Asset created and processed",
    "ASSET_PUBLISHED": "Asset published",
    "AUTHOR_PUBLISHED": "Author published",
    "TAG_PUBLISHED": "Tag published",
    "DRAFT_CREATED": "Draft created successfully",
    "PUBLISHED": "Post published successfully",
}

REPORT_DIR = os.path.join("reports", "migration")
ERROR_LOG_NAME = "errors.jsonl"
OK_LOG_NAME = "success.jsonl"


class MigrationError(Exception):
    """Base class for conditions that stop a migration run."""


class SourceFetchError(MigrationError):
    """The WordPress posts collection could not be loaded."""


class ConfigError(MigrationError):
    """Required configuration values are missing or invalid."""


T = TypeVar("T")


@dataclass(frozen=True)
class ItemResult(Generic[T]):
    """Outcome of one remote operation: a value on success, a reason otherwise."""

    ok: bool
    value: Optional[T] = None
    code: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def success(cls, value: T, code: Optional[str] = None) -> "ItemResult[T]":
        return cls(ok=True, value=value, code=code)

    @classmethod
    def failure(cls, code: str, reason: str, value: Optional[T] = None) -> "ItemResult[T]":
        return cls(ok=False, value=value, code=code, reason=reason)


def _label(item: Mapping[str, Any]) -> str:
    for key in ("slug", "fileName", "name", "title"):
        if item.get(key):
            return str(item[key])
    return ""


def _write_jsonl(name: str, data: Dict[str, Any]) -> None:
    """Append ``data`` as a JSON object followed by a newline to the report ``name``."""
    os.makedirs(REPORT_DIR, exist_ok=True)
    with open(os.path.join(REPORT_DIR, name), "a", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False)
        f.write("\n")


def report_error(code: str, item: Mapping[str, Any], exc: Optional[BaseException] = None) -> None:
    """Log an error event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of error.  If ``code`` is present in
        :data:`ERRORS` its value will be used as the message.
    item:
        A mapping describing the item.  ``slug``, ``fileName``, ``name`` and
        ``title`` are copied to the log entry when present.
    exc:
        Optional exception instance that triggered the error.  The string
        representation of the exception will be included in the log entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message}
    for key in ("slug", "fileName", "name", "title"):
        if item.get(key) is not None:
            entry[key] = item[key]
    if exc is not None:
        entry["error"] = str(exc)
    logger.error("%s - %s", message, _label(item))
    _write_jsonl(ERROR_LOG_NAME, entry)


def report_ok(code: str, item: Mapping[str, Any], extra: Optional[Dict[str, Any]] = None) -> None:
    """Log a successful event for ``item``.

    Parameters
    ----------
    code:
        A key identifying the type of event.
    item:
        A mapping describing the item.
    extra:
        Optional dictionary of additional fields to merge into the log entry.
    """
    message = ERRORS.get(code, code)
    entry: Dict[str, Any] = {"code": code, "message": message}
    for key in ("slug", "fileName", "name", "title"):
        if item.get(key) is not None:
            entry[key] = item[key]
    if extra:
        entry.update(extra)
    logger.info("✓ %s - %s", message, _label(item))
    _write_jsonl(OK_LOG_NAME, entry)
