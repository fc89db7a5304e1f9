#!/usr/bin/env python
"""
Build a health report from an already-normalised task table.

The input must use the task column names (see health_monitor.config); this
script does no column mapping.

Usage:
    python scripts/build_health_report.py --input tasks.parquet
    python scripts/build_health_report.py --input tasks.csv --output report.json
"""
import argparse
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import pandas as pd
from health_monitor.data.schema import validate_schema, validate_task_data, SchemaValidationError
from health_monitor.exports import export_report_json
from health_monitor.logging_config import configure_logging, get_logger
from health_monitor.pipeline import build_health_report

logger = get_logger(__name__)


def load_task_table(path: Path) -> pd.DataFrame:
    """Load a normalised task table (parquet or csv)."""
    if path.suffix == ".parquet":
        return pd.read_parquet(path)
    return pd.read_csv(path)


def main():
    parser = argparse.ArgumentParser(description="Build a project health report")
    parser.add_argument("--input", type=str, required=True, help="Normalised task table (.parquet or .csv)")
    parser.add_argument("--output", type=str, default=None, help="Write the JSON report here")
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL")
    args = parser.parse_args()

    configure_logging(args.log_level)

    input_path = Path(args.input)
    if not input_path.exists():
        logger.error("Input not found: %s", input_path)
        sys.exit(1)

    df = load_task_table(input_path)

    try:
        schema = validate_schema(df, "tasks", strict=True)
    except SchemaValidationError as e:
        logger.error("%s", e)
        sys.exit(1)

    if schema["missing_optional"]:
        logger.warning("Missing optional columns (defaults used): %s", schema["missing_optional"])

    validation = validate_task_data(df)
    for warning in validation["warnings"]:
        logger.warning(warning)
    if not validation["valid"]:
        for error in validation["errors"]:
            logger.error(error)
        sys.exit(1)

    report = build_health_report(df)
    portfolio = report.portfolio

    print("=" * 60)
    print("Project Health Report")
    print("=" * 60)
    print(f"Projects: {portfolio.total_projects}")
    print(f"Tasks: {portfolio.total_tasks:,}")
    print(f"Forecast accuracy: {portfolio.avg_forecast_accuracy:.1f}%")
    print(f"Generic resources: {portfolio.generic_resource_pct:.1f}%")
    print(f"RAG: {portfolio.rag_distribution}")
    print()
    for pattern in report.patterns:
        print(f"[{pattern.severity.upper()}] {pattern.pattern_type}: {pattern.description}")
    for insight in report.insights:
        print(f"({insight.priority}) {insight.title}")

    if args.output:
        json_bytes, _ = export_report_json(report)
        Path(args.output).write_bytes(json_bytes)
        logger.info("Report written to %s", args.output)

    sys.exit(0)


if __name__ == "__main__":
    main()
