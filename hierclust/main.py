"""CLI entry point: cluster the records of a CSV or JSON file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from hierclust.clustering import cluster
from hierclust.config import DEFAULTS
from hierclust.linkage import VALID_LINKAGE_OPTIONS
from hierclust.metrics import VALID_METRIC_OPTIONS
from hierclust.output import output_manifest
from hierclust.params import VALID_MODE_OPTIONS, ClusterParams, ClusteringArgumentError
from hierclust.utils import column, load_records, setup_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="hierclust",
        description="Group records by agglomerative hierarchical clustering.",
    )
    p.add_argument("input", type=Path, help="CSV (with header) or JSON list of records")
    p.add_argument("--id-column", default=DEFAULTS.id_column, help="Column identifying a record")
    p.add_argument(
        "--attributes", default=",".join(DEFAULTS.attribute_columns),
        help="Comma-separated numeric columns forming the feature vector",
    )

    # Clustering
    p.add_argument("--metric", default=DEFAULTS.metric, choices=sorted(VALID_METRIC_OPTIONS))
    p.add_argument(
        "--linkage", default=DEFAULTS.linkage,
        choices=sorted(VALID_LINKAGE_OPTIONS),
        help="Cluster linkage: single (loose), complete (strict), average (balanced), centroid",
    )
    p.add_argument("--threshold", type=float, default=DEFAULTS.threshold)
    p.add_argument(
        "--mode", default=DEFAULTS.mode,
        choices=sorted(VALID_MODE_OPTIONS),
        help="dendrogram: one group per tree; clusters: split a single tree in two",
    )

    # Output
    p.add_argument(
        "--output", type=Path, default=None,
        help=f"Manifest path (default: {DEFAULTS.manifest_filename} next to the input)",
    )
    return p


def _build_params(args: argparse.Namespace) -> ClusterParams:
    """Convert parsed CLI arguments into validated ClusterParams."""
    names = [name.strip() for name in args.attributes.split(",") if name.strip()]
    try:
        return ClusterParams(
            metric=args.metric,
            linkage=args.linkage,
            threshold=float(args.threshold),
            mode=args.mode,
            attributes=[column(name) for name in names],
        )
    except ClusteringArgumentError as exc:
        raise SystemExit(f"Error: {exc}") from exc


def run(args: argparse.Namespace) -> None:
    log = setup_logging()
    params = _build_params(args)

    source = args.input.resolve()
    if not source.is_file():
        log.error("Input file does not exist: %s", source)
        sys.exit(1)

    try:
        records = load_records(source)
        log.info("Loaded %d records from %s", len(records), source)
        result = cluster(records, params)
    except ValueError as exc:
        # Covers ClusteringArgumentError, e.g. an empty input file
        log.error("%s", exc)
        sys.exit(1)

    output_path = args.output or source.with_name(DEFAULTS.manifest_filename)
    output_manifest(
        result.groups,
        output_path,
        source=source,
        id_column=args.id_column,
        attributes=args.attributes,
        **params.describe(),
    )

    log.info("Done! %d records → %d clusters", len(records), result.n_clusters)


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    run(args)
