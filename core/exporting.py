"""Serialize datasets for download."""

import io
import json
from datetime import datetime
from typing import Any, Optional

import pandas as pd

from core.dataset import Dataset, dataset_columns

EXPORT_FORMATS = ("json", "xlsx")


def export_filename(base: str, fmt: str, when: Optional[datetime] = None) -> str:
    stamp = (when or datetime.now()).strftime("%Y-%m-%d")
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in base) or "data"
    return f"{safe}_{stamp}.{fmt}"


def to_json_bytes(dataset: Dataset) -> bytes:
    return json.dumps(list(dataset), indent=2, default=_json_default).encode("utf-8")


def to_excel_bytes(dataset: Dataset, sheet_name: str = "Data") -> bytes:
    """Write the rows to a single-sheet workbook."""
    df = pd.DataFrame(list(dataset), columns=dataset_columns(dataset))
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()


def export_dataset(dataset: Dataset, fmt: str) -> bytes:
    fmt = fmt.lower()
    if fmt == "json":
        return to_json_bytes(dataset)
    if fmt == "xlsx":
        return to_excel_bytes(dataset)
    raise ValueError(f"Unsupported export format '{fmt}'")


def _json_default(value: Any) -> Any:
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.isoformat()
    return str(value)
