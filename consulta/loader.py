"""
loader.py - Local Spreadsheet Export Loader
============================================
This module loads a locally downloaded copy of the class spreadsheet, so a
lookup can run without reaching the published sheet.

Supported Input Formats:
------------------------
- Excel files: .xlsx
- Text exports: .csv, .tsv (tab vs. comma detected from the header line)

Every cell is read as a string. CPF and RA columns must never be converted
to numbers: pandas would drop leading zeros ("01234567890" -> 1234567890)
and the lookup would silently miss.

Unlike the sheet text parsed by consulta.matcher, files read here go through
pandas, so quoted cells containing the delimiter are handled correctly.
"""

from pathlib import Path
from typing import List, Tuple

import pandas as pd

from .matcher import detect_delimiter, match_rows


SUPPORTED_SUFFIXES = ('.csv', '.tsv', '.xlsx')


def _read_header_line(path: Path) -> str:
    with open(path, 'r', encoding='utf-8-sig') as fp:
        for line in fp:
            if line.strip():
                return line
    return ""


def load_table(filepath: str | Path) -> Tuple[List[str], List[List[str]]]:
    """
    Load a spreadsheet export as (header, rows) of strings.

    Args:
        filepath: Path to the .csv, .tsv or .xlsx file

    Returns:
        A tuple (header, rows). Cells are stripped strings; empty cells are "".
        Rows where every cell is blank are dropped.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file type is unsupported or the file is empty
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {filepath}")

    suffix = path.suffix.lower()

    # keep_default_na=False keeps empty cells as "" instead of NaN
    if suffix == '.xlsx':
        df = pd.read_excel(path, dtype=str, keep_default_na=False)
    elif suffix in ['.csv', '.tsv']:
        header_line = _read_header_line(path)
        if not header_line:
            raise ValueError(f"Input file is empty: {filepath}")
        df = pd.read_csv(
            path,
            sep=detect_delimiter(header_line),
            # Rows ending in a stray delimiter have one cell more than the
            # header; without this pandas turns column 0 into the index
            index_col=False,
            dtype=str,
            keep_default_na=False,
            encoding='utf-8-sig',
        )
    else:
        raise ValueError(
            f"Unsupported file type: {path.suffix}. "
            f"Only {', '.join(SUPPORTED_SUFFIXES)} files are supported."
        )

    header = [str(col).strip() for col in df.columns]
    rows = [
        [str(v).strip() for v in values]
        for values in df.itertuples(index=False, name=None)
    ]
    # Drop rows where every cell is blank (",,,,,," lines in text exports)
    rows = [row for row in rows if any(row)]
    return header, rows


def match_file(filepath: str | Path, search_key: str):
    """Load a local export and return the matching Record or NOT_FOUND."""
    header, rows = load_table(filepath)
    return match_rows(header, rows, search_key)
