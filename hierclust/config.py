"""Default configuration constants."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Defaults:
    # Clustering
    metric: str = "euclidean"
    linkage: str = "single"
    threshold: float = 10.0
    mode: str = "dendrogram"

    # Input columns read by the CLI
    id_column: str = "id"
    attribute_columns: tuple[str, ...] = ("x", "y")

    # Output
    manifest_filename: str = "clusters.json"

    # Input formats understood by the CLI
    record_extensions: tuple[str, ...] = (".csv", ".json")


DEFAULTS = Defaults()
