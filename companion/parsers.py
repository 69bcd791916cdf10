"""CSV parsing for attendance and syllabus uploads."""

import logging
from typing import Optional

import numpy as np
import pandas as pd

from companion.errors import FormatError, SchemaError, NoDataError

log = logging.getLogger(__name__)

# Recognized names for the numeric column, matched case-insensitively
VALUE_COLUMNS = ('percentage', 'percent', 'value')


def find_value_column(header_line: str) -> Optional[int]:
    """
    Locate the numeric column in a CSV header row.

    Args:
        header_line: First line of the CSV file

    Returns:
        Index of the first recognized column, or None
    """
    headers = [h.strip() for h in header_line.lower().split(',')]
    for idx, name in enumerate(headers):
        if name in VALUE_COLUMNS:
            return idx
    return None


def extract_average(text: str) -> float:
    """
    Average the percentage column of a CSV upload.

    Rows that are too short or whose value is not a finite number are
    skipped and do not count toward the mean.

    Args:
        text: Full CSV text, header row first

    Returns:
        Unweighted mean of all parsed values

    Raises:
        FormatError: fewer than two lines
        SchemaError: no 'percentage', 'percent' or 'value' header
        NoDataError: no numeric value in the column
    """
    lines = text.strip().split('\n')
    if len(lines) < 2:
        raise FormatError('CSV file is empty or invalid')

    column_idx = find_value_column(lines[0])
    if column_idx is None:
        raise SchemaError('CSV must contain a "percentage", "percent", or "value" column')

    cells = []
    for line in lines[1:]:
        values = [v.strip() for v in line.split(',')]
        if len(values) > column_idx:
            cells.append(values[column_idx])

    # Tolerate values written like "85%"
    raw = pd.Series(cells, dtype=object).str.rstrip('%')
    parsed = pd.to_numeric(raw, errors='coerce').astype(float)
    parsed = parsed[np.isfinite(parsed)]

    if parsed.empty:
        raise NoDataError('No valid percentage values found in CSV')

    skipped = len(lines) - 1 - len(parsed)
    if skipped:
        log.debug("Skipped %d unparseable rows", skipped)

    return float(parsed.mean())


def decode_upload(file_bytes: bytes) -> str:
    """Decode uploaded file bytes as UTF-8 text, dropping a byte-order mark."""
    try:
        return file_bytes.decode('utf-8-sig')
    except UnicodeDecodeError as e:
        raise FormatError(f'CSV file is not valid UTF-8 text: {e.reason}') from e
