"""
Unit tests for data/loader.py

Run:
  pytest -q tests/test_loader.py
"""

from __future__ import annotations

import pandas as pd
import pytest
import requests

from conftest import HEADER, SAMPLE_LINES, sample_text
from turnout_dashboard.data import loader
from turnout_dashboard.data.loader import (
    RECORD_FIELDS,
    LoadError,
    coerce_types,
    load_table,
    parse_csv,
)


# ----------------------------- Parsing ----------------------------------

def test_load_yields_one_record_per_data_line(csv_path):
    table = load_table(str(csv_path))
    assert len(table) == len(SAMPLE_LINES)
    assert list(table.columns) == RECORD_FIELDS


def test_records_round_trip_against_source_lines(csv_path):
    table = load_table(str(csv_path))
    for idx, line in enumerate(SAMPLE_LINES):
        values = line.split(",")
        row = table.iloc[idx]
        for field, raw in zip(RECORD_FIELDS, values):
            if field in loader.INT_FIELDS:
                assert row[field] == int(raw)
            elif field in loader.FLOAT_FIELDS:
                assert row[field] == pytest.approx(float(raw))
            else:
                assert row[field] == raw


def test_column_types():
    table = coerce_types(parse_csv(sample_text()))
    assert str(table["year"].dtype) == "Int64"
    assert str(table["total_electors"].dtype) == "Int64"
    assert table["turnout"].dtype == "float64"
    assert table["priority_score"].dtype == "float64"
    assert pd.api.types.is_string_dtype(table["state_name"])


def test_headers_are_stripped():
    raw = parse_csv(" year , state_name ,ac_name\n2019,A,B\n")
    assert list(raw.columns) == ["year", "state_name", "ac_name"]


def test_quoted_field_with_delimiter_keeps_columns_aligned():
    text = "year,state_name,ac_name,turnout\n2019,\"Jammu, Kashmir\",Srinagar,38.5\n"
    table = coerce_types(parse_csv(text))
    assert table.loc[0, "state_name"] == "Jammu, Kashmir"
    assert table.loc[0, "ac_name"] == "Srinagar"
    assert table.loc[0, "turnout"] == pytest.approx(38.5)


def test_unknown_columns_stay_strings():
    table = coerce_types(parse_csv("year,region_code\n2019,007\n"))
    assert table.loc[0, "region_code"] == "007"


def test_integer_fields_truncate_fractions():
    table = coerce_types(parse_csv("year,total_electors,num_candidates\n2019,1200.9,-3.5\n"))
    assert table.loc[0, "total_electors"] == 1200
    assert table.loc[0, "num_candidates"] == -3


def test_overlong_line_is_truncated_to_header(tmp_path):
    lines = list(SAMPLE_LINES)
    lines[1] += ",junk"
    path = tmp_path / "overlong.csv"
    path.write_text(sample_text(lines), encoding="utf-8")
    table = load_table(str(path))
    assert len(table) == len(SAMPLE_LINES)
    assert list(table.columns) == RECORD_FIELDS
    assert table.loc[1, "ac_name"] == "Beta"
    assert table.loc[1, "priority_score"] == pytest.approx(0.2)
    assert table.attrs["diagnostics"]["truncated_lines"] == 1


def test_well_formed_file_reports_no_truncation(csv_path):
    assert load_table(str(csv_path)).attrs["diagnostics"]["truncated_lines"] == 0


# ----------------------------- Missing values ---------------------------

def test_unparseable_numbers_are_missing_by_default():
    table = coerce_types(parse_csv("year,turnout,total_electors\n2019,n/a,\n2014,55.5,100\n"))
    assert pd.isna(table.loc[0, "turnout"])
    assert pd.isna(table.loc[0, "total_electors"])
    assert table.loc[1, "turnout"] == pytest.approx(55.5)
    diagnostics = table.attrs["diagnostics"]
    assert diagnostics["coercion_failures"] == {"turnout": 1}
    assert diagnostics["missing_numeric"]["total_electors"] == 1


def test_zero_policy_fills_unparseable_numbers():
    table = coerce_types(
        parse_csv("year,turnout,total_electors\n2019,n/a,\n"),
        missing_numeric="zero",
    )
    assert table.loc[0, "turnout"] == 0.0
    assert table.loc[0, "total_electors"] == 0
    assert table.attrs["diagnostics"]["coercion_failures"] == {"turnout": 1}


def test_absent_columns_are_added():
    table = coerce_types(parse_csv("year,state_name,ac_name,turnout\n2019,A,B,50\n"))
    for col in RECORD_FIELDS:
        assert col in table.columns
    assert pd.isna(table.loc[0, "priority_score"])
    assert pd.isna(table.loc[0, "total_electors"])
    assert "priority_score" in table.attrs["diagnostics"]["missing_columns"]


def test_header_names_are_case_sensitive():
    table = coerce_types(parse_csv("Year,turnout\n2019,50\n"))
    assert table.loc[0, "Year"] == "2019"
    assert pd.isna(table.loc[0, "year"])


# ----------------------------- Failures ---------------------------------

@pytest.mark.parametrize("text", ["", "   \n  \n"])
def test_empty_payload_raises(tmp_path, text):
    path = tmp_path / "empty.csv"
    path.write_text(text, encoding="utf-8")
    with pytest.raises(LoadError, match="empty"):
        load_table(str(path))


def test_header_only_raises(tmp_path):
    path = tmp_path / "header.csv"
    path.write_text(HEADER + "\n", encoding="utf-8")
    with pytest.raises(LoadError, match="No data parsed"):
        load_table(str(path))


def test_missing_file_raises(tmp_path):
    with pytest.raises(LoadError, match="Could not read"):
        load_table(str(tmp_path / "nope.csv"))


def test_invalid_utf8_file_raises(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes(sample_text().encode("utf-8") + b"2019,State D,Caf\xff,1,1,50,1,2,40,0,50,1,0.1,0,0.1,0.1,0.1\n")
    with pytest.raises(LoadError, match="UTF-8"):
        load_table(str(path))


# ----------------------------- Remote sources ---------------------------

class _FakeResponse:
    def __init__(self, text: str, status_code: int = 200):
        self.text = text
        self.status_code = status_code

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


def test_url_source_is_fetched_with_requests(monkeypatch):
    calls = []

    def fake_get(url, *args, **kwargs):
        calls.append(url)
        return _FakeResponse(sample_text())

    monkeypatch.setattr(loader.requests, "get", fake_get)
    table = load_table("https://example.org/dataset/constituency_level.csv")
    assert calls == ["https://example.org/dataset/constituency_level.csv"]
    assert len(table) == len(SAMPLE_LINES)
    assert table.attrs["diagnostics"]["source"].startswith("https://")


def test_http_error_status_raises(monkeypatch):
    monkeypatch.setattr(loader.requests, "get", lambda url, *a, **k: _FakeResponse("", status_code=404))
    with pytest.raises(LoadError, match="404"):
        load_table("https://example.org/missing.csv")


def test_connection_error_raises(monkeypatch):
    def boom(url, *args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr(loader.requests, "get", boom)
    with pytest.raises(LoadError, match="refused"):
        load_table("http://localhost:9/data.csv")


def test_google_sheet_source(monkeypatch, tmp_path):
    creds_file = tmp_path / "creds.json"
    creds_file.write_text("{}", encoding="utf-8")
    rows = [HEADER.split(",")] + [line.split(",") for line in SAMPLE_LINES]

    class FakeWorksheet:
        def get_all_values(self):
            return rows

    class FakeSpreadsheet:
        def worksheet(self, name):
            assert name == "constituency_level"
            return FakeWorksheet()

    class FakeClient:
        def open_by_key(self, key):
            assert key == "sheet-123"
            return FakeSpreadsheet()

    monkeypatch.setattr(loader.Credentials, "from_service_account_file", lambda path, scopes: object())
    monkeypatch.setattr(loader.gspread, "authorize", lambda credentials: FakeClient())

    table = load_table(
        "unused.csv",
        spreadsheet_id="sheet-123",
        sheet_name="constituency_level",
        credentials_path=str(creds_file),
    )
    assert len(table) == len(SAMPLE_LINES)
    assert table.loc[1, "turnout"] == pytest.approx(80.0)
    assert str(table["year"].dtype) == "Int64"


def test_google_sheet_requires_credentials_file(tmp_path):
    with pytest.raises(LoadError, match="Service account file not found"):
        load_table(
            "unused.csv",
            spreadsheet_id="sheet-123",
            sheet_name="x",
            credentials_path=str(tmp_path / "missing.json"),
        )


def test_google_sheet_rejects_malformed_credentials(tmp_path):
    creds_file = tmp_path / "creds.json"
    creds_file.write_text("not json", encoding="utf-8")
    with pytest.raises(LoadError, match="Invalid service account file"):
        load_table(
            "unused.csv",
            spreadsheet_id="sheet-123",
            sheet_name="x",
            credentials_path=str(creds_file),
        )
