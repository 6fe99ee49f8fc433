import io
import logging
import zipfile
from typing import Any, List

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from app.core.exceptions import WorkbookDecodeError

logger = logging.getLogger(__name__)

RawGrid = List[List[Any]]


def read_workbook(content: bytes) -> RawGrid:
    """Return the first sheet of an xlsx workbook as a list of rows.

    Empty cells come back as ``None``. Formulas are read as their cached values.
    """
    if not content:
        raise WorkbookDecodeError("Uploaded file is empty")

    try:
        # read_only avoids building cell objects for every cell of large sheets
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (zipfile.BadZipFile, InvalidFileException, KeyError, ValueError, OSError) as e:
        raise WorkbookDecodeError(f"Unable to read workbook: {str(e)}") from e

    try:
        if not wb.worksheets:
            raise WorkbookDecodeError("Workbook contains no sheets")
        ws = wb.worksheets[0]
        # Exporters often write a stale <dimension>; recompute it from the cells
        ws.reset_dimensions()
        grid = [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()

    logger.info(f"Read {len(grid)} rows from sheet '{ws.title}'")
    return grid
