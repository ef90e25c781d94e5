"""
matcher.py - Record Matcher
============================
Finds a student record in tabular text exported from the published sheet.

How it works:
-------------
1. Split the text into non-empty lines
2. Detect the delimiter from the header line (tab if present, else comma)
3. Map the seven record fields to columns (by header label, or by position)
4. Scan the data rows in order and return the first one whose CPF, reduced
   to digits, equals the search key

The delimiter detection is a heuristic: a cell containing the delimiter
breaks the row. Quoted fields are not supported here; local exports loaded
through consulta.loader are parsed by pandas instead.
"""

import logging
import re
from dataclasses import dataclass, fields
from typing import Dict, List, Sequence

from .cpf import normalize


logger = logging.getLogger(__name__)


# =============================================================================
# DATA MODEL
# =============================================================================

@dataclass(frozen=True)
class Record:
    """One student/course entry, as shown on the result panel."""

    cpf: str = ""
    campus: str = ""
    ra: str = ""
    nome_aluno: str = ""
    nome_disciplina: str = ""
    horario: str = ""
    local: str = ""


# Field names in the sheet's column order
RECORD_FIELDS = tuple(f.name for f in fields(Record))

# Positional fallback: column i holds RECORD_FIELDS[i]
POSITIONAL_COLUMNS = {name: i for i, name in enumerate(RECORD_FIELDS)}


class _NotFound:
    """Sentinel returned when no row matches the search key."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self):
        return False

    def __repr__(self):
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


@dataclass
class Table:
    delimiter: str
    header: List[str]
    rows: List[List[str]]


# =============================================================================
# PARSING
# =============================================================================

def split_lines(text: str) -> List[str]:
    """Split text into lines, dropping empty and whitespace-only ones."""
    return [line for line in (text or "").split("\n") if line.strip()]


def detect_delimiter(header_line: str) -> str:
    """Tab if the header line contains one, otherwise comma."""
    return "\t" if "\t" in header_line else ","


def split_row(line: str, delimiter: str) -> List[str]:
    return [cell.strip() for cell in line.split(delimiter)]


def parse_table(text: str) -> Table:
    """
    Parse delimited text into a Table.

    Raises:
        ValueError: If the text has no non-empty line (no header)
    """
    lines = split_lines(text)
    if not lines:
        raise ValueError("Table text is empty")

    delimiter = detect_delimiter(lines[0])
    header = split_row(lines[0], delimiter)
    rows = [split_row(line, delimiter) for line in lines[1:]]
    return Table(delimiter=delimiter, header=header, rows=rows)


def _label_key(label: str) -> str:
    # "Nome Aluno", "nome_aluno" and " NOME_ALUNO " all become "nomealuno"
    return re.sub(r"[\s_]+", "", str(label)).lower()


def column_map(header: Sequence[str]) -> Dict[str, int]:
    """
    Map each record field to a column index.

    Uses the header labels when they name all seven fields, so reordered
    columns still land in the right place. Otherwise falls back to the
    fixed positional order of the sheet.
    """
    by_label: Dict[str, int] = {}
    for i, label in enumerate(header):
        # First occurrence wins on duplicated labels
        by_label.setdefault(_label_key(label), i)

    mapped = {name: by_label.get(_label_key(name)) for name in RECORD_FIELDS}
    if all(index is not None for index in mapped.values()):
        return mapped

    logger.debug("Header does not name every field, using positional columns")
    return dict(POSITIONAL_COLUMNS)


def record_from_cells(cells: Sequence[str], columns: Dict[str, int]) -> Record:
    """Build a Record from row cells. Missing cells become empty strings."""
    values = {}
    for name, index in columns.items():
        values[name] = str(cells[index]).strip() if index < len(cells) else ""
    return Record(**values)


# =============================================================================
# MATCHING
# =============================================================================

def match_rows(header: Sequence[str], rows: Sequence[Sequence[str]], search_key: str):
    """
    Return the first row whose CPF matches search_key, as a Record.

    Args:
        header: Header labels (used only to pick the column mapping)
        rows: Data rows, header excluded
        search_key: CPF, masked or not

    Returns:
        Record, or NOT_FOUND if no row matches
    """
    columns = column_map(header)
    cpf_index = columns["cpf"]
    wanted = normalize(search_key)
    logger.debug(f"Searching CPF (digits only): {wanted}")

    for line_no, cells in enumerate(rows, start=1):
        row_cpf = normalize(cells[cpf_index]) if cpf_index < len(cells) else ""
        logger.debug(f"Row {line_no}: CPF = {row_cpf!r}")

        if row_cpf == wanted:
            logger.info(f"CPF found on row {line_no}")
            return record_from_cells(cells, columns)

    logger.info(f"CPF not found after checking {len(rows)} rows")
    return NOT_FOUND


def match(table_text: str, search_key: str):
    """
    Find the record for search_key in delimited table text.

    The first line is the header. Deterministic, first match wins,
    exact equality on the digits-only CPF.

    Returns:
        Record, or NOT_FOUND (also for empty text)
    """
    try:
        table = parse_table(table_text)
    except ValueError:
        logger.info("Empty table, nothing to search")
        return NOT_FOUND

    logger.debug(f"Total lines: {len(table.rows) + 1}")
    logger.debug(
        f"Detected delimiter: {'TAB' if table.delimiter == chr(9) else 'COMMA'}"
    )
    logger.debug(f"Headers: {table.header}")
    return match_rows(table.header, table.rows, search_key)
