"""Utility helpers: logging, record loading, column extractors."""

from __future__ import annotations

import csv
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from hierclust.config import DEFAULTS


def setup_logging() -> logging.Logger:
    """Configure the root logger and return the ``hierclust`` logger.

    Safe to call multiple times: ``logging.basicConfig`` is a no-op if
    the root logger already has handlers.
    """
    logging.basicConfig(
        format="%(asctime)s %(levelname)-8s %(message)s",
        datefmt="%H:%M:%S",
        level=logging.INFO,
    )
    return logging.getLogger("hierclust")


def load_records(path: Path) -> list[dict[str, Any]]:
    """Read one record per row (CSV with header) or per object (JSON list)."""
    suffix = path.suffix.lower()
    if suffix not in DEFAULTS.record_extensions:
        raise ValueError(
            f"Unsupported input format '{suffix}', expected one of {DEFAULTS.record_extensions}"
        )
    if suffix == ".json":
        records = json.loads(path.read_text())
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise ValueError(f"{path} must contain a JSON list of objects")
        return records
    with path.open(newline="") as fh:
        return list(csv.DictReader(fh))


def column(name: str) -> Callable[[dict[str, Any]], float]:
    """Attribute extractor reading the numeric column *name* of a record."""

    def extract(record: dict[str, Any]) -> float:
        try:
            return float(record[name])
        except KeyError:
            raise ValueError(f"Record has no column '{name}': {record}") from None
        except (TypeError, ValueError):
            raise ValueError(f"Column '{name}' is not numeric: {record[name]!r}") from None

    extract.__name__ = f"column_{name}"
    return extract
