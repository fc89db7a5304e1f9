"""
Schema validation and column type normalisation for the task table.

The task table has one schema: REQUIRED_COLUMNS["tasks"] must be present,
the rest of TASK_COLUMNS are optional and filled with defaults by
ensure_column_types().
"""
import pandas as pd
from typing import List, Tuple, Dict

from health_monitor.config import (
    REQUIRED_COLUMNS,
    OPTIONAL_COLUMNS,
    TASK_COLUMNS,
    TEXT_COLUMNS,
    DATE_COLUMNS,
    NUMERIC_COLUMNS,
    BOOL_COLUMNS,
    STATUS_VALUES,
    RAG_VALUES,
    PROJECT_TYPES,
)


class SchemaValidationError(Exception):
    """Raised when required columns are missing."""
    pass


def validate_required_columns(df: pd.DataFrame, table_name: str) -> Tuple[bool, List[str]]:
    """
    Validate that required columns exist in dataframe.
    Returns (is_valid, missing_columns).
    """
    if table_name not in REQUIRED_COLUMNS:
        return True, []

    required = REQUIRED_COLUMNS[table_name]
    missing = [col for col in required if col not in df.columns]

    return len(missing) == 0, missing


def check_optional_columns(df: pd.DataFrame, table_name: str) -> List[str]:
    """
    Check which optional columns are missing.
    Returns list of missing optional columns.
    """
    if table_name not in OPTIONAL_COLUMNS:
        return []

    optional = OPTIONAL_COLUMNS[table_name]
    missing = [col for col in optional if col not in df.columns]

    return missing


def validate_schema(df: pd.DataFrame, table_name: str, strict: bool = True) -> Dict:
    """
    Full schema validation.

    Args:
        df: DataFrame to validate
        table_name: Name of table for column requirements lookup
        strict: If True, raise error on missing required columns

    Returns:
        Dict with validation results
    """
    is_valid, missing_required = validate_required_columns(df, table_name)
    missing_optional = check_optional_columns(df, table_name)

    result = {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "missing_optional": missing_optional,
        "total_columns": len(df.columns),
        "total_rows": len(df),
    }

    if strict and not is_valid:
        raise SchemaValidationError(
            f"Missing required columns in {table_name}: {missing_required}"
        )

    return result


FALSE_FLAG_LITERALS = ("", "false", "f", "no", "n", "0")


def _coerce_flag(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_FLAG_LITERALS
    if pd.isna(value):
        return False
    return bool(value)


def ensure_column_types(df: pd.DataFrame) -> pd.DataFrame:
    """
    Ensure consistent column types on a task table.

    Missing columns are added with their defaults. Dates become datetime64
    with NaT for unknown, numerics become float with 0 for missing, flags
    become bool (text such as "no" or "0" is False) and text becomes str.
    """
    df = df.copy()

    for col in TASK_COLUMNS:
        if col not in df.columns:
            df[col] = None

    for col in DATE_COLUMNS:
        df[col] = pd.to_datetime(df[col], errors="coerce")

    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").fillna(0).astype(float)

    for col in BOOL_COLUMNS:
        df[col] = df[col].map(_coerce_flag).astype(bool)

    for col in TEXT_COLUMNS:
        df[col] = df[col].where(df[col].notna(), "").astype(str)

    return df


def validate_task_data(df: pd.DataFrame) -> Dict:
    """
    Validate task rows against the record contract.

    Errors are per-row contract violations; warnings flag data that the
    metrics tolerate but that weakens them (duplicates, missing owners,
    missing planned dates).

    Returns:
        Dict with keys valid, errors, warnings, records_processed, records_valid
    """
    if len(df) == 0:
        return {
            "valid": False,
            "errors": ["No data to validate"],
            "warnings": [],
            "records_processed": 0,
            "records_valid": 0,
        }

    df = ensure_column_types(df).reset_index(drop=True)
    row_errors = [_validate_row(row, idx) for idx, row in df.iterrows()]
    errors = [msg for msgs in row_errors for msg in msgs]

    warnings = []
    task_ids = df.loc[df["task_id"] != "", "task_id"]
    duplicate_ids = task_ids[task_ids.duplicated()].unique().tolist()
    if duplicate_ids:
        warnings.append(f"Duplicate task IDs found: {', '.join(duplicate_ids)}")

    missing_manager = int((df["functional_manager"] == "").sum())
    if missing_manager > 0:
        warnings.append(f"{missing_manager} tasks missing functional manager")

    missing_resource = int((df["assigned_resource"] == "").sum())
    if missing_resource > 0:
        warnings.append(f"{missing_resource} tasks missing assigned resource")

    missing_dates = int((df["planned_start"].isna() | df["planned_end"].isna()).sum())
    if missing_dates > 0:
        warnings.append(f"{missing_dates} tasks missing planned dates")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "records_processed": len(df),
        "records_valid": sum(1 for msgs in row_errors if not msgs),
    }


def _validate_row(row: pd.Series, index: int) -> List[str]:
    label = f"Row {index + 1}"
    errors = []

    for col, name in (("task_id", "task_id"), ("task_name", "task_name"), ("project_name", "project_name")):
        if not row[col]:
            errors.append(f"{label}: Missing {name}")

    if row["type_of_project"] not in PROJECT_TYPES:
        errors.append(f"{label}: Invalid type_of_project (must be {', '.join(PROJECT_TYPES)})")
    if row["status"] not in STATUS_VALUES:
        errors.append(f"{label}: Invalid status (must be {', '.join(STATUS_VALUES)})")
    if row["project_health_rag"] not in RAG_VALUES:
        errors.append(f"{label}: Invalid project_health_rag (must be {', '.join(RAG_VALUES)})")

    for col, name in (
        ("planned_duration", "Planned duration"),
        ("actual_duration", "Actual duration"),
        ("planned_budget", "Planned budget"),
        ("total_spent", "Total spent"),
    ):
        if row[col] < 0:
            errors.append(f"{label}: {name} cannot be negative")

    if pd.notna(row["planned_start"]) and pd.notna(row["planned_end"]) and row["planned_start"] > row["planned_end"]:
        errors.append(f"{label}: Planned start date is after planned end date")
    if pd.notna(row["actual_start"]) and pd.notna(row["actual_end"]) and row["actual_start"] > row["actual_end"]:
        errors.append(f"{label}: Actual start date is after actual end date")

    return errors
