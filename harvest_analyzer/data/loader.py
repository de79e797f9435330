"""
Export loading utilities with Streamlit caching.
"""
import io
import logging
from pathlib import Path
from typing import BinaryIO, Union

import pandas as pd
import streamlit as st

from harvest_analyzer.config import config
from harvest_analyzer.data.normalize import normalize_rows
from harvest_analyzer.data.schema import IngestionError

logger = logging.getLogger(__name__)


def read_export(source: Union[str, Path, bytes, BinaryIO]) -> pd.DataFrame:
    """
    Read a time entry CSV export, keeping every value as a string.

    Blank lines are skipped; empty cells become "".
    """
    if isinstance(source, bytes):
        source = io.BytesIO(source)

    try:
        return pd.read_csv(source, dtype=str, keep_default_na=False, skip_blank_lines=True)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        logger.error("Could not parse time entry export: %s", exc)
        raise IngestionError(f"Could not parse time entry export: {exc}") from exc


@st.cache_data(show_spinner=False)
def load_entries(file_bytes: bytes) -> pd.DataFrame:
    """Read and normalize an uploaded export. Cached on the file contents."""
    raw = read_export(file_bytes)
    entries = normalize_rows(raw, config)
    logger.info("Loaded %d entries from %d export rows", len(entries), len(raw))
    return entries
