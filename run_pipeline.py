from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from eras.analysis import run_analysis
from eras.config import load_config
from eras.errors import PipelineError
from eras.io import load_entities_csv, prepare_clusters_for_csv
from eras.report import build_summary, format_clusters, render_report

logger = logging.getLogger("eras")


def run_pipeline(args: argparse.Namespace) -> dict[str, Path]:
    config = load_config(
        env_file=args.env_file,
        num_clusters=args.clusters,
        max_iterations=args.max_iterations,
        seed=args.seed,
        edge_threshold=args.threshold,
        dedup_tolerance=args.dedup_tolerance,
    )

    entities = load_entities_csv(args.input)
    result = run_analysis(entities, config)

    if getattr(args, "print_clusters", False):
        print(format_clusters(result))

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    clusters_csv_path = output_dir / "clusters.csv"
    summary_json_path = output_dir / "summary_stats.json"
    report_html_path = output_dir / "report.html"

    prepare_clusters_for_csv(result).to_csv(clusters_csv_path, index=False)

    summary_stats = build_summary(result, config, n_entities=len(entities))
    summary_json_path.write_text(json.dumps(summary_stats, indent=2), encoding="utf-8")

    render_report(
        output_path=str(report_html_path),
        summary_stats=summary_stats,
        result=result,
    )
    logger.info(f"Wrote outputs to {output_dir}")

    return {
        "clusters_csv": clusters_csv_path,
        "summary_stats": summary_json_path,
        "report_html": report_html_path,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cluster songs by audio features and report the average year per cluster.")
    parser.add_argument("--input", default="example_songs.csv", help="Path to input songs CSV.")
    parser.add_argument("--output-dir", default="outputs", help="Directory for generated artifacts.")
    parser.add_argument("--clusters", type=int, default=None, help="Number of clusters (default: ERAS_NUM_CLUSTERS or 3).")
    parser.add_argument(
        "--max-iterations",
        type=int,
        default=None,
        help="Fixed number of k-means refinement rounds (default: ERAS_MAX_ITERATIONS or 100).",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for centroid initialization (default: ERAS_SEED or 42).")
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Minimum divergence for a graph edge (default: ERAS_EDGE_THRESHOLD or 0.75).",
    )
    parser.add_argument(
        "--dedup-tolerance",
        type=float,
        default=None,
        help="Divergence below which two songs in a cluster count as duplicates.",
    )
    parser.add_argument("--print-clusters", action="store_true", help="Print cluster members and average years.")
    parser.add_argument("--env-file", default=None, help="Optional path to .env file.")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    try:
        outputs = run_pipeline(args)
    except (PipelineError, FileNotFoundError) as exc:
        logger.error(f"Pipeline failed: {type(exc).__name__}: {exc}")
        raise SystemExit(f"{type(exc).__name__}: {exc}") from exc

    print("Pipeline completed successfully.")
    for name, path in outputs.items():
        print(f"- {name}: {path}")


if __name__ == "__main__":
    main()
