"""Assistance-point catalog loading.

The catalog is a JSON array of ``{name, latitude, longitude}`` records.
It is read once at startup and never mutated; order is preserved because
the ranker uses it to break distance ties.
"""

from __future__ import annotations

import importlib.resources
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from shecurity.exceptions import CatalogError
from shecurity.models.assistance import AssistancePoint

_logger = logging.getLogger(__name__)

_PACKAGE_CATALOG = "data/assistance_points.json"


def parse_catalog(raw: Any) -> tuple[AssistancePoint, ...]:
    """Validate a decoded JSON document into an ordered catalog."""
    if not isinstance(raw, list):
        raise CatalogError(f"Catalog must be a JSON array, got {type(raw).__name__}")
    points: list[AssistancePoint] = []
    for index, item in enumerate(raw):
        try:
            points.append(AssistancePoint.model_validate(item))
        except ValidationError as exc:
            raise CatalogError(f"Invalid catalog entry #{index}: {exc}") from exc
    return tuple(points)


def load_catalog(path: Path | None = None) -> tuple[AssistancePoint, ...]:
    """Load the catalog from *path*, or the bundled dataset when ``None``.

    Raises
    ------
    CatalogError
        If the file is missing, not JSON, or holds invalid entries.
    """
    if path is not None:
        _logger.debug("Loading assistance catalog from %s", path)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CatalogError(f"Catalog file not found: {path}") from exc
    else:
        _logger.debug("Loading assistance catalog from package data")
        try:
            ref = importlib.resources.files("shecurity").joinpath(_PACKAGE_CATALOG)
            text = ref.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise CatalogError(f"{_PACKAGE_CATALOG} not found in package data") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog is not valid JSON: {exc}") from exc

    catalog = parse_catalog(raw)
    _logger.debug("Loaded %d assistance points", len(catalog))
    return catalog
