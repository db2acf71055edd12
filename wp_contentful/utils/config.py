"""
Configuration loading for the migration.

Configuration is supplied via a JSON file path or directly as a dictionary.
Values missing there are filled from environment variables (a ``.env`` file
in the working directory is loaded first) and finally from defaults::

    {
      "contentful": {"access_token": ..., "space_id": ..., "environment": "master"},
      "wordpress": {"endpoint": "https://example.com/wp-json/wp/v2/"},
      "migration": {"limit": 50, "dry_run": false}
    }
"""

from __future__ import annotations

import copy
import json
import os
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigError

CONFIG_FILE = os.path.join("config", "migration_config.json")
ENV_FILE = ".env"

DEFAULT_CONTENT_TYPES = {"post": "pageBlogPost", "author": "author", "tag": "tag"}
DEFAULT_THROTTLE = {"asset_rpm": 60, "entry_rpm": 120, "post_rpm": 12}


def _env_int(key: str) -> Optional[int]:
    raw = (os.getenv(key) or "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def normalize_limit(value: Any) -> Optional[int]:
    """Return the run limit; ``None``, ``0`` and negative values mean unlimited."""
    if value in (None, ""):
        return None
    limit = int(value)
    return limit if limit > 0 else None


def load_config(config: Optional[Dict[str, Any]] = None, *, config_file: Optional[str] = None) -> Dict[str, Any]:
    """Build the configuration dictionary used by every stage."""
    load_dotenv(ENV_FILE)

    if config_file and os.path.exists(config_file):
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    elif config is None:
        config = {}
    else:
        config = copy.deepcopy(config)

    # Ensure essential keys exist to prevent KeyErrors
    config.setdefault("contentful", {})
    ctf = config["contentful"]
    ctf.setdefault("access_token", os.getenv("CONTENTFUL_ACCESS_TOKEN", ""))
    ctf.setdefault("space_id", os.getenv("CONTENTFUL_SPACE_ID", ""))
    ctf.setdefault("environment", os.getenv("CONTENTFUL_ENVIRONMENT") or "master")
    ctf.setdefault("locale", os.getenv("CONTENTFUL_LOCALE") or "en-GB")
    ctf.setdefault("base_url", "https://api.contentful.com")
    ctf.setdefault("upload_url", "https://upload.contentful.com")
    ctf["content_types"] = {**DEFAULT_CONTENT_TYPES, **(ctf.get("content_types") or {})}

    config.setdefault("wordpress", {})
    wp = config["wordpress"]
    wp.setdefault("endpoint", os.getenv("WP_ENDPOINT", ""))
    wp.setdefault("per_page", 100)
    wp.setdefault("timeout", 30)

    config.setdefault("migration", {})
    migration = config["migration"]
    if "limit" not in migration:
        migration["limit"] = _env_int("MIGRATION_LIMIT")
    migration["limit"] = normalize_limit(migration["limit"])
    migration.setdefault("dry_run", False)
    migration.setdefault("snapshot_path", os.path.join("reports", "wpPosts.json"))
    migration.setdefault("temp_image_dir", "temp_images")
    migration["throttle"] = {**DEFAULT_THROTTLE, **(migration.get("throttle") or {})}

    return config


def validate_config(config: Dict[str, Any]) -> None:
    """Raise :class:`ConfigError` listing every missing required value."""
    errors: List[str] = []

    if not config["wordpress"].get("endpoint"):
        errors.append("wordpress.endpoint (WP_ENDPOINT) must be set")

    if not config["migration"].get("dry_run"):
        if not config["contentful"].get("access_token"):
            errors.append("contentful.access_token (CONTENTFUL_ACCESS_TOKEN) must be set")
        if not config["contentful"].get("space_id"):
            errors.append("contentful.space_id (CONTENTFUL_SPACE_ID) must be set")

    for key, rpm in config["migration"]["throttle"].items():
        if not isinstance(rpm, (int, float)) or rpm <= 0:
            errors.append(f"migration.throttle.{key} must be a positive number")

    if errors:
        raise ConfigError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))
