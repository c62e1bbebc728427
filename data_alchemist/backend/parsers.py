"""
CSV parsing and export helpers for the Data Alchemist application.

Uploaded client, worker and task files are read with pandas into lists
of row dictionaries.  Every cell is kept as a string so that the
validators see exactly what the user typed; blank lines are skipped,
short rows are padded with empty strings and a trailing extra field is
dropped.  Header names are kept verbatim, surrounding spaces included.  The reverse direction,
turning rows back into CSV text for download, is also handled here.
"""

from __future__ import annotations

import io
import logging
from typing import Any, Dict, List, Optional

import pandas as pd  # type: ignore

from .errors import CSVParseError

logger = logging.getLogger(__name__)

CSV_MIME_TYPES = {'text/csv', 'application/csv'}


def is_csv_upload(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Return True when an upload looks like a CSV file.

    A file is accepted if either its MIME type is a CSV type or its
    name ends with ``.csv``.  Browsers on some platforms report CSV
    files as ``application/vnd.ms-excel``, which is why the extension
    alone is enough.
    """
    mime = (content_type or '').split(';')[0].strip().lower()
    if mime in CSV_MIME_TYPES:
        return True
    return bool(filename) and filename.lower().endswith('.csv')


def parse_csv(file_obj: io.TextIOBase) -> List[Dict[str, Any]]:
    """Parse CSV text with a header row into a list of row dictionaries."""
    try:
        df = pd.read_csv(
            file_obj,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            # Trailing delimiters must not turn the first column into the index
            index_col=False,
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, ValueError) as e:
        raise CSVParseError(str(e)) from e
    # Ragged rows come back as NaN even with keep_default_na disabled
    df = df.fillna('')
    return df.to_dict(orient='records')


def parse_upload(content: bytes) -> List[Dict[str, Any]]:
    """Decode uploaded bytes and parse them as CSV.

    A UTF-8 byte order mark, as written by Excel, is stripped before
    parsing.
    """
    text = content.decode('utf-8-sig', errors='ignore')
    rows = parse_csv(io.StringIO(text))
    logger.info(f"Parsed {len(rows)} rows from uploaded CSV")
    return rows


def rows_to_csv(rows: List[Dict[str, Any]]) -> str:
    """Serialise rows to CSV text.

    The header is the union of all row keys in first-seen order; cells
    missing from a row are written as empty strings.
    """
    columns: List[str] = []
    for row in rows:
        for key in row:
            if key not in columns:
                columns.append(key)
    df = pd.DataFrame(rows, columns=columns)
    return df.to_csv(index=False)
