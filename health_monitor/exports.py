"""
Export utilities for metrics tables and health reports.
"""
import json
from dataclasses import asdict, is_dataclass
from datetime import datetime
from io import BytesIO
from typing import Any, Dict, Iterable, Optional

import pandas as pd

from health_monitor.pipeline import HealthReport


def metrics_to_frame(items: Iterable[Any]) -> pd.DataFrame:
    """Turn a list of metric dataclasses (or dicts) into a DataFrame, one row each."""
    rows = [asdict(item) if is_dataclass(item) else dict(item) for item in items]
    return pd.DataFrame(rows)


def report_to_dict(report: HealthReport) -> Dict[str, Any]:
    """Plain nested dict view of a HealthReport (JSON-ready)."""
    return asdict(report)


def format_export_filename(base_name: str, extension: str = "csv",
                           include_timestamp: bool = True) -> str:
    """Generate formatted export filename."""
    if include_timestamp:
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        return f"{base_name}_{timestamp}.{extension}"
    return f"{base_name}.{extension}"


def export_dataframe_csv(df: pd.DataFrame, filename: Optional[str] = None) -> tuple:
    """
    Export dataframe to CSV bytes.

    Returns: (csv_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("export", "csv")

    csv_bytes = df.to_csv(index=False).encode('utf-8')

    return csv_bytes, filename


def export_report_excel(report: HealthReport, filename: Optional[str] = None) -> tuple:
    """
    Export managers, projects, patterns and insights as Excel sheets.

    Empty tables are skipped.

    Returns: (excel_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("health_report", "xlsx")

    sheets = {
        "managers": metrics_to_frame(report.portfolio.manager_metrics),
        "projects": metrics_to_frame(report.projects),
        "patterns": metrics_to_frame(report.patterns),
        "insights": metrics_to_frame(report.insights),
    }
    for name in ("projects", "patterns"):
        sheet = sheets[name]
        for col in ("top_risks", "affected_managers"):
            if col in sheet.columns:
                sheet[col] = sheet[col].apply("; ".join)

    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        written = 0
        for name, sheet in sheets.items():
            if len(sheet) > 0:
                sheet.to_excel(writer, sheet_name=name, index=False)
                written += 1
        if written == 0:
            pd.DataFrame([{"total_tasks": report.portfolio.total_tasks}]).to_excel(
                writer, sheet_name="portfolio", index=False
            )

    return buffer.getvalue(), filename


def export_report_json(report: HealthReport, filename: Optional[str] = None) -> tuple:
    """
    Export a full HealthReport to JSON.

    Returns: (json_bytes, filename)
    """
    if filename is None:
        filename = format_export_filename("health_report", "json")

    json_bytes = json.dumps(report_to_dict(report), indent=2).encode('utf-8')

    return json_bytes, filename
