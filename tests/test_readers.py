"""Tests for upload decoding and dataset export."""

import json
from datetime import datetime

import pandas as pd
import pytest

from core import readers
from core.exporting import export_dataset, export_filename, to_excel_bytes
from core.readers import FileDecodeError, decode_file


class TestDecodeFile:
    """Tests for CSV and Excel decoding."""

    def test_csv_rows_keep_text_and_blanks(self):
        rows = decode_file("data.csv", b"a,b\n1,x\n2,\n")
        assert rows == [{"a": "1", "b": "x"}, {"a": "2", "b": ""}]

    def test_csv_extension_is_case_insensitive(self):
        assert decode_file("DATA.CSV", b"a\n1\n") == [{"a": "1"}]

    def test_empty_csv(self):
        assert decode_file("empty.csv", b"") == []

    def test_unsupported_extension(self):
        with pytest.raises(FileDecodeError, match="Unsupported file type"):
            decode_file("notes.txt", b"hello")

    def test_corrupt_excel(self):
        with pytest.raises(FileDecodeError, match="Failed to parse"):
            decode_file("broken.xlsx", b"not a workbook")

    def test_excel_first_sheet(self):
        content = to_excel_bytes([{"name": "Pune", "count": 3}, {"name": "Surat", "count": 5}])
        rows = decode_file("upload.xlsx", content)

        assert [row["name"] for row in rows] == ["Pune", "Surat"]
        assert [row["count"] for row in rows] == [3, 5]

    def test_numeric_excel_headers_become_strings(self):
        content = to_excel_bytes([{"State": "Goa", 2011: 1458545}, {"State": "Kerala", 2011: 33406061}])
        rows = decode_file("census.xlsx", content)

        assert list(rows[0]) == ["State", "2011"]
        assert rows[1]["2011"] == 33406061

    def test_xls_uses_xlrd_engine(self, monkeypatch):
        calls = {}

        def fake_read_excel(buffer, sheet_name=0, engine=None):
            calls["engine"] = engine
            return pd.DataFrame({2011: [7], "State": ["Goa"]})

        monkeypatch.setattr(readers.pd, "read_excel", fake_read_excel)
        rows = decode_file("LEGACY.XLS", b"\xd0\xcf\x11\xe0")

        assert calls["engine"] == "xlrd"
        assert rows == [{"2011": 7, "State": "Goa"}]

    def test_xlsx_uses_openpyxl_engine(self, monkeypatch):
        calls = {}

        def fake_read_excel(buffer, sheet_name=0, engine=None):
            calls["engine"] = engine
            return pd.DataFrame({"a": [1]})

        monkeypatch.setattr(readers.pd, "read_excel", fake_read_excel)
        decode_file("book.xlsx", b"PK")
        assert calls["engine"] == "openpyxl"

    def test_xls_reader_is_installed(self):
        with pytest.raises(FileDecodeError) as excinfo:
            decode_file("broken.xls", b"not a workbook")
        assert "Install xlrd" not in str(excinfo.value)


class TestExport:
    """Tests for dataset export."""

    def test_json_export(self):
        payload = export_dataset([{"a": 1, "when": datetime(2024, 1, 5)}], "json")
        assert json.loads(payload) == [{"a": 1, "when": "2024-01-05T00:00:00"}]

    def test_unsupported_format(self):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_dataset([{"a": 1}], "parquet")

    def test_filename(self):
        name = export_filename("Census 2011", "xlsx", when=datetime(2024, 3, 1))
        assert name == "Census_2011_2024-03-01.xlsx"
