"""Output: write clustering manifest."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

logger = logging.getLogger("hierclust")


def output_manifest(
    groups: Sequence[Sequence[dict[str, Any]]],
    output_path: Path,
    *,
    source: Path,
    id_column: str,
    **params: Any,
) -> None:
    manifest = {
        "version": 1,
        "source": str(source),
        "total": sum(len(group) for group in groups),
        "params": params,
        "clusters": [
            {
                "cluster_id": cid,
                "count": len(group),
                "items": [record.get(id_column) for record in group],
            }
            for cid, group in enumerate(groups)
        ],
    }
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(manifest, indent=2) + "\n")
    logger.info("Manifest written → %s", output_path)
