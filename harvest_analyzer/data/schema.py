"""
Schema validation for raw time entry exports.
"""
import pandas as pd
import streamlit as st
from typing import Dict, Iterable, List, Tuple

from harvest_analyzer.config import REQUIRED_COLUMNS


class IngestionError(Exception):
    """Raised when a time entry export cannot be ingested at all."""
    pass


class SchemaValidationError(IngestionError):
    """Raised when required columns are missing."""
    pass


def missing_required_columns(columns: Iterable[str]) -> List[str]:
    """Return required columns absent from ``columns``, in canonical order."""
    present = set(columns)
    return [col for col in REQUIRED_COLUMNS if col not in present]


def validate_required_columns(df: pd.DataFrame) -> Tuple[bool, List[str]]:
    """
    Validate that required columns exist in dataframe.
    Returns (is_valid, missing_columns).
    """
    missing = missing_required_columns(df.columns)
    return len(missing) == 0, missing


def validate_schema(df: pd.DataFrame, strict: bool = True) -> Dict:
    """
    Presence check for the export's required columns.

    Args:
        df: Raw export (string columns)
        strict: If True, raise SchemaValidationError on missing required columns

    Returns:
        Dict with validation results
    """
    is_valid, missing_required = validate_required_columns(df)
    extra_columns = [col for col in df.columns if col not in REQUIRED_COLUMNS]

    result = {
        "is_valid": is_valid,
        "missing_required": missing_required,
        "extra_columns": extra_columns,
        "total_columns": len(df.columns),
        "total_rows": len(df),
    }

    if strict and not is_valid:
        raise SchemaValidationError(
            f"Missing required columns in time entry export: {missing_required}"
        )

    return result


def display_validation_result(result: Dict):
    """Display validation result in Streamlit."""
    if result["is_valid"]:
        st.success(f"Export schema valid ({result['total_rows']:,} rows, {result['total_columns']} columns)")
    else:
        st.error(f"Export is missing required columns: {result['missing_required']}")
