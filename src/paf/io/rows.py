# ==================================================================================================
#                           Row tokenizing and validity filter
# ==================================================================================================
#
# Headband exports are CSV files with one header row followed by one record per
# sample. Only four fields matter to the analysis: the timestamp (field 0), the
# left/right raw amplitudes (fields 22 and 23) and the "device on" flag
# (field 37). Rows recorded while the headband was off are discarded here,
# before any timestamp or spectral work happens.

import logging
from typing import IO, List, Sequence, Union
from pathlib import Path

import pandas as pd

from paf.constants import VALIDITY_COLUMN, VALIDITY_FLAG_ON
from paf.errors import CsvFormatError

logger = logging.getLogger(__name__)

RawRow = Sequence[str]

# ==================================================================================================
# Core logic
# ==================================================================================================

def read_rows(source: Union[str, Path, IO[str], IO[bytes]]) -> List[List[str]]:
    """
    Tokenize a CSV file or stream into rows of string fields.

    Parameters
    ----------
    source
        Path or open (text or binary) file object. The header row is kept as
        the first returned row.

    Returns
    -------
    list[list[str]]
        Every record as a list of strings. Missing trailing fields are blank;
        fields beyond the header width are dropped.

    Notes
    -----
    All fields are read as strings so the validity flag keeps its literal
    value ("1", not 1.0) and timestamps keep their original text.

    Usage example
    -------------
        rows = read_rows(Path("recording.csv"))
        valid = filter_valid_rows(rows)
    """
    try:
        table = pd.read_csv(
            source,
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            # Rows wider than the header are kept; pandas drops the surplus
            # trailing fields, which lie past every column read downstream.
            engine="python",
            on_bad_lines=lambda fields: fields,
        )
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError as exc:
        raise CsvFormatError(f"Malformed CSV: {exc}") from exc

    return table.fillna("").values.tolist()


def filter_valid_rows(rows: Sequence[RawRow]) -> List[RawRow]:
    """
    Keep only data rows recorded with the headband on.

    Parameters
    ----------
    rows
        All tokenized rows, header included as the first row.

    Returns
    -------
    list
        Data rows with more than 37 fields whose field 37 is exactly "1",
        in original order.

    Raises
    ------
    CsvFormatError
        If the input holds at most a header row, or fewer than 2 rows survive.

    Usage example
    -------------
        valid = filter_valid_rows([header, row1, row2, row3])
    """
    if len(rows) <= 1:
        raise CsvFormatError("Empty CSV")

    valid = [
        row for row in rows[1:]
        if len(row) > VALIDITY_COLUMN and row[VALIDITY_COLUMN] == VALIDITY_FLAG_ON
    ]
    logger.debug("Validity filter kept %d of %d data rows", len(valid), len(rows) - 1)

    if len(valid) < 2:
        raise CsvFormatError("No valid segment.")
    return valid
