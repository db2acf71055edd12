"""
Contentful Management API helper functions for WordPress → Contentful migration.

This module implements low-level interactions with the Contentful
Management REST API (CMA).  Functions defined here create entries and
assets, upload binary files through the Upload API, trigger asset
processing, publish entries and assets, and list the assets already
published in an environment.  A simple rate limiter is included so the
orchestrator can space its calls below Contentful's rate limits.

There is no retry wrapper: every helper raises
``requests.HTTPError`` on a rejected call and the caller decides whether to
skip the item.

Usage example::

    from wp_contentful.migrators.contentful_migrator import (
        create_entry, publish_entry, list_published_assets
    )

    cfg = {"access_token": ..., "space_id": ..., "environment": "master",
           "base_url": "https://api.contentful.com"}
    entry = create_entry(cfg, "author", {"name": {"en-GB": "Jane"}})
    publish_entry(cfg, entry)
"""

from __future__ import annotations

import mimetypes
import os
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from wp_contentful.utils.logger import get_logger

logger = get_logger(__name__)

CMA_CONTENT_TYPE = "application/vnd.contentful.management.v1+json"
DEFAULT_TIMEOUT = 30
PAGE_SIZE = 100

###############################################################################
# Rate limiting
###############################################################################

class RateLimiter:
    """
    Simple time-based rate limiter.  Ensures that no more than ``rpm``
    calls are dispatched per minute.  The orchestrator keeps one limiter per
    stage (assets, entries, posts) so each throttle is configurable.
    """

    def __init__(self, rpm: float = 60) -> None:
        self.rpm = max(1e-6, float(rpm))
        self.interval = 60.0 / self.rpm
        self._last: Optional[float] = None

    def wait(self, time_fn: Callable[[], float] = time.monotonic, sleep_fn: Callable[[float], None] = time.sleep) -> None:
        now = time_fn()
        if self._last is not None:
            dt = now - self._last
            if dt < self.interval:
                sleep_fn(self.interval - dt)
        self._last = time_fn()


def contentful_headers(cfg: Dict[str, Any], **extra: str) -> Dict[str, str]:
    """
    Construct the default headers required for CMA requests.

    :param cfg: A configuration dictionary with the ``access_token``.
    :param extra: Additional headers, e.g. ``X-Contentful-Version``.
    :return: A dictionary of headers including Authorization.
    """
    headers = {
        "Authorization": f"Bearer {cfg['access_token']}",
        "Content-Type": CMA_CONTENT_TYPE,
    }
    headers.update(extra)
    return headers


def environment_url(cfg: Dict[str, Any]) -> str:
    return f"{cfg['base_url'].rstrip('/')}/spaces/{cfg['space_id']}/environments/{cfg['environment']}"


def error_details(exc: BaseException) -> str:
    """Best description of a failed call: the CMA error body when there is one."""
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            body = response.json()
        except ValueError:
            return response.text or str(exc)
        if isinstance(body, dict) and body.get("message"):
            details = body.get("details")
            return f"{body['message']} {details}" if details else body["message"]
        return response.text or str(exc)
    return str(exc)


def _version(resource: Dict[str, Any]) -> str:
    return str(resource["sys"]["version"])


###############################################################################
# Environment helpers
###############################################################################

def get_environment(cfg: Dict[str, Any]) -> Dict[str, Any]:
    resp = requests.get(environment_url(cfg), headers=contentful_headers(cfg), timeout=DEFAULT_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def get_content_type(cfg: Dict[str, Any], content_type_id: str) -> Dict[str, Any]:
    resp = requests.get(
        f"{environment_url(cfg)}/content_types/{content_type_id}",
        headers=contentful_headers(cfg),
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


###############################################################################
# Entry helpers
###############################################################################

def create_entry(cfg: Dict[str, Any], content_type_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    """
    Create a draft entry.

    :param cfg: Contentful configuration dictionary.
    :param content_type_id: Content type of the new entry, e.g. ``"author"``.
    :param fields: Localised field values (``{"name": {"en-GB": "Jane"}}``).
    :return: The entry as returned by Contentful.
    :raises requests.HTTPError: on failure.
    """
    resp = requests.post(
        f"{environment_url(cfg)}/entries",
        headers=contentful_headers(cfg, **{"X-Contentful-Content-Type": content_type_id}),
        json={"fields": fields},
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def publish_entry(cfg: Dict[str, Any], entry: Dict[str, Any]) -> Dict[str, Any]:
    """
    Publish the given version of an entry.

    :raises requests.HTTPError: on failure, e.g. when required fields are missing.
    """
    resp = requests.put(
        f"{environment_url(cfg)}/entries/{entry['sys']['id']}/published",
        headers=contentful_headers(cfg, **{"X-Contentful-Version": _version(entry)}),
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


###############################################################################
# Asset helpers
###############################################################################

def guess_content_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return mime or "image/jpeg"


def download_image(url: str, file_name: str, dest_dir: str, *, timeout: int = DEFAULT_TIMEOUT) -> str:
    """
    Download an image from a URL to ``dest_dir/file_name``.

    :return: Path of the downloaded file.
    :raises requests.RequestException: on network or HTTP errors.  A partly
        written file is removed first.
    """
    os.makedirs(dest_dir, exist_ok=True)
    filepath = os.path.join(dest_dir, file_name)
    try:
        with requests.get(url, stream=True, timeout=timeout) as resp:
            resp.raise_for_status()
            with open(filepath, "wb") as f:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        f.write(chunk)
    except (requests.RequestException, OSError):
        if os.path.exists(filepath):
            os.remove(filepath)
        raise
    return filepath


def create_upload(cfg: Dict[str, Any], data: bytes) -> str:
    """
    Send a binary file to the Upload API.

    :return: The upload id, to be linked from an asset's ``uploadFrom``.
    """
    resp = requests.post(
        f"{cfg['upload_url'].rstrip('/')}/spaces/{cfg['space_id']}/uploads",
        headers={**contentful_headers(cfg), "Content-Type": "application/octet-stream"},
        data=data,
        timeout=DEFAULT_TIMEOUT * 4,
    )
    resp.raise_for_status()
    return resp.json()["sys"]["id"]


def create_asset(cfg: Dict[str, Any], fields: Dict[str, Any]) -> Dict[str, Any]:
    resp = requests.post(
        f"{environment_url(cfg)}/assets",
        headers=contentful_headers(cfg),
        json={"fields": fields},
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def get_asset(cfg: Dict[str, Any], asset_id: str) -> Dict[str, Any]:
    resp = requests.get(f"{environment_url(cfg)}/assets/{asset_id}", headers=contentful_headers(cfg), timeout=DEFAULT_TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def process_asset(
    cfg: Dict[str, Any],
    asset: Dict[str, Any],
    locale: str,
    *,
    attempts: int = 10,
    delay: float = 1.0,
    sleep_fn: Callable[[float], None] = time.sleep,
) -> Dict[str, Any]:
    """
    Trigger processing of an asset file and wait until Contentful reports a
    processed ``url`` for it.

    :return: The latest version of the asset.  If processing did not finish
        within ``attempts`` polls the last fetched version is returned.
    """
    asset_id = asset["sys"]["id"]
    resp = requests.put(
        f"{environment_url(cfg)}/assets/{asset_id}/files/{locale}/process",
        headers=contentful_headers(cfg, **{"X-Contentful-Version": _version(asset)}),
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()

    latest = asset
    for _ in range(max(1, attempts)):
        sleep_fn(delay)
        latest = get_asset(cfg, asset_id)
        if ((latest.get("fields") or {}).get("file") or {}).get(locale, {}).get("url"):
            return latest
    logger.warning("⚠ Asset %s was not processed after %d checks", asset_id, attempts)
    return latest


def publish_asset(cfg: Dict[str, Any], asset: Dict[str, Any]) -> Dict[str, Any]:
    resp = requests.put(
        f"{environment_url(cfg)}/assets/{asset['sys']['id']}/published",
        headers=contentful_headers(cfg, **{"X-Contentful-Version": _version(asset)}),
        timeout=DEFAULT_TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()


def list_published_assets(cfg: Dict[str, Any], locale: str) -> List[Dict[str, str]]:
    """
    Lists all published assets of the environment.

    :return: ``[{"id", "url", "fileName"}]`` for assets that carry a file in
        ``locale``.
    """
    assets: List[Dict[str, str]] = []
    skip = 0
    while True:
        resp = requests.get(
            f"{environment_url(cfg)}/public/assets",
            headers=contentful_headers(cfg),
            params={"skip": skip, "limit": PAGE_SIZE},
            timeout=DEFAULT_TIMEOUT,
        )
        resp.raise_for_status()
        payload = resp.json()
        items = payload.get("items", [])
        for item in items:
            file_obj = ((item.get("fields") or {}).get("file") or {}).get(locale)
            if not file_obj:
                continue
            assets.append({"id": item["sys"]["id"], "url": file_obj.get("url", ""), "fileName": file_obj.get("fileName", "")})
        skip += len(items)
        if not items or skip >= payload.get("total", 0):
            break
    return assets
