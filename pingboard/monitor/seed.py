"""Seed file loader — registers endpoints listed in endpoints.yaml at startup.

Format:

    endpoints:
      - name: api
        url: https://api.example.com/health
      - name: web
        url: https://example.com
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from .models import Endpoint

logger = logging.getLogger(__name__)


def load_endpoints(path: Path) -> list[Endpoint]:
    """Parse the seed file. A missing or unreadable file yields no endpoints."""
    if not path.exists():
        logger.info("No endpoints file at %s, starting empty", path)
        return []

    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except Exception as e:
        logger.error("Failed to parse %s: %s", path, e)
        return []

    entries = raw.get("endpoints") if isinstance(raw, dict) else None
    endpoints = []
    for entry in entries or []:
        try:
            endpoints.append(_parse_endpoint(entry))
        except (TypeError, ValueError, KeyError) as e:
            logger.warning("Skipping malformed endpoint entry %r: %s", entry, e)

    logger.info("Loaded %d endpoints from %s", len(endpoints), path)
    return endpoints


def _parse_endpoint(raw: Any) -> Endpoint:
    if not isinstance(raw, dict):
        raise TypeError("expected a mapping with 'name' and 'url'")
    name = str(raw["name"]).strip()
    url = str(raw["url"]).strip()
    if not name:
        raise ValueError("'name' is empty")
    return Endpoint(name=name, url=url)
