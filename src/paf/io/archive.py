# ==================================================================================================
#                               Recording archives
# ==================================================================================================
#
# Recordings are shared either as a bare CSV export or as a ZIP archive that
# contains one. For archives, the first entry whose name ends with ".csv" is
# the recording; other entries are ignored.

import io
import logging
import zipfile
from pathlib import Path
from typing import List

from paf.errors import CsvFormatError
from paf.io.rows import read_rows

logger = logging.getLogger(__name__)

CSV_SUFFIX: str = ".csv"
ZIP_SUFFIX: str = ".zip"


def _first_csv_entry(archive: zipfile.ZipFile) -> str:
    """Name of the first CSV member, in archive order."""
    for name in archive.namelist():
        if name.endswith(CSV_SUFFIX):
            return name
    raise CsvFormatError("No CSV found in ZIP.")


def read_recording_rows(path: Path) -> List[List[str]]:
    """
    Read the tokenized rows of a recording stored as CSV or inside a ZIP.

    Parameters
    ----------
    path
        A `.csv` file, or a `.zip` archive holding at least one `.csv` entry.

    Returns
    -------
    list[list[str]]
        Tokenized rows, header first.

    Raises
    ------
    CsvFormatError
        If the archive is unreadable or holds no CSV entry.

    Usage example
    -------------
        rows = read_recording_rows(Path("session.zip"))
        result = analyze(rows)
    """
    path = Path(path)
    if path.suffix.lower() != ZIP_SUFFIX:
        return read_rows(path)

    try:
        with zipfile.ZipFile(path) as archive:
            entry = _first_csv_entry(archive)
            logger.info("Reading %s from %s", entry, path)
            with archive.open(entry) as raw:
                return read_rows(io.TextIOWrapper(raw, encoding="utf-8"))
    except zipfile.BadZipFile as exc:
        raise CsvFormatError(f"Unable to open ZIP: {exc}") from exc
