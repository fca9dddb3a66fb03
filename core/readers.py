"""
File decoding for uploaded datasets.

Turns CSV and spreadsheet uploads into plain row records for the profiler.
"""

import io
import logging
from typing import Any, Dict, List

import pandas as pd

from core.dataset import records

logger = logging.getLogger(__name__)

CSV_EXTENSIONS = (".csv",)
EXCEL_ENGINES = {".xlsx": "openpyxl", ".xls": "xlrd"}


class FileDecodeError(ValueError):
    """Raised when an uploaded file cannot be turned into rows."""


def decode_file(filename: str, content: bytes) -> List[Dict[str, Any]]:
    """
    Decode an uploaded file into row records.

    Args:
        filename: Original file name; the extension selects the decoder
        content: Raw file bytes

    Returns:
        List of row dicts, header row as keys, missing cells as None

    Raises:
        FileDecodeError: Unsupported extension or unreadable content
    """
    name = (filename or "").lower()

    try:
        if name.endswith(CSV_EXTENSIONS):
            df = pd.read_csv(
                io.BytesIO(content),
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
            )
        elif name.endswith(tuple(EXCEL_ENGINES)):
            engine = EXCEL_ENGINES[name[name.rfind("."):]]
            df = pd.read_excel(io.BytesIO(content), sheet_name=0, engine=engine)
        else:
            raise FileDecodeError(
                f"Unsupported file type for '{filename}'. Use CSV or Excel."
            )
    except FileDecodeError:
        raise
    except pd.errors.EmptyDataError:
        return []
    except Exception as exc:
        logger.warning("Failed to decode %s: %s", filename, exc)
        raise FileDecodeError(f"Failed to parse file '{filename}': {exc}") from exc

    # spreadsheet headers such as years arrive as numbers
    df.columns = [str(c) for c in df.columns]
    logger.info("Decoded %s: %d rows x %d columns", filename, len(df), len(df.columns))
    return records(df)
