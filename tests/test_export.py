import pytest
import csv
import pandas as pd
import tempfile
from datetime import date
from pathlib import Path

from conftest import make_shift
from shift_calendar.reporting import ExportManager

WEEK = date(2024, 1, 10)


@pytest.fixture
def export_manager(data_manager):
    """ExportManager over a week with a few shifts."""
    alice = data_manager.get_employee_by_name("Alice")
    bob = data_manager.get_employee_by_name("Bob")
    data_manager.create_many([
        make_shift(None, alice.id, "2024-01-08", "09:00", "12:30"),
        make_shift(None, alice.id, "2024-01-10", "13:00", "17:00"),
        make_shift(None, bob.id, "2024-01-10", "09:00", "10:00"),
        make_shift(None, bob.id, "2024-01-16", "09:00", "10:00"),  # next week
    ])
    return ExportManager(data_manager)


@pytest.fixture
def output_dir():
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.mark.parametrize("format_type, suffix", [("pdf", ".pdf"), ("excel", ".xlsx"), ("csv", ".csv")])
def test_export_formats(export_manager, output_dir, format_type, suffix):
    output_path = output_dir / f"week{suffix}"
    assert export_manager.export_week(WEEK, format_type, str(output_path))
    assert output_path.exists() and output_path.stat().st_size > 0


def test_csv_contains_only_the_week(export_manager, output_dir):
    output_path = output_dir / "week.csv"
    export_manager.export_week(WEEK, "csv", str(output_path))
    with open(output_path, newline="", encoding="utf-8") as f:
        rows = list(csv.DictReader(f))

    assert [(r["Date"], r["Employee"], r["Start"], r["End"]) for r in rows] == [
        ("2024-01-08", "Alice", "09:00", "12:30"),
        ("2024-01-10", "Bob", "09:00", "10:00"),
        ("2024-01-10", "Alice", "13:00", "17:00"),
    ]
    assert rows[0]["Day"] == "Monday"


def test_excel_sheets(export_manager, output_dir):
    output_path = output_dir / "week.xlsx"
    export_manager.export_week(WEEK, "excel", str(output_path))

    sheets = pd.read_excel(output_path, sheet_name=None)
    assert set(sheets) == {"Schedule", "Hours", "Employees"}
    hours = dict(zip(sheets["Hours"]["Employee"], sheets["Hours"]["Hours"]))
    assert hours == {"Alice": 7.5, "Bob": 1.0}


def test_empty_week_still_exports(export_manager, output_dir):
    for format_type in ("pdf", "excel", "csv"):
        path = output_dir / export_manager.get_default_filename(date(2024, 3, 6), format_type)
        assert export_manager.export_week(date(2024, 3, 6), format_type, str(path))


def test_export_to_unwritable_path_returns_false(export_manager, output_dir):
    bad_path = output_dir / "missing" / "dir" / "week.csv"
    assert export_manager.export_week(WEEK, "csv", str(bad_path)) is False
    assert export_manager.export_week(WEEK, "pdf", str(output_dir / "missing" / "week.pdf")) is False


def test_unsupported_format_raises(export_manager, output_dir):
    with pytest.raises(ValueError):
        export_manager.export_week(WEEK, "docx", str(output_dir / "week.docx"))


def test_default_filename_uses_week_start(export_manager):
    name = export_manager.get_default_filename(WEEK, "excel")
    assert name.startswith("shift_schedule_week_2024-01-07_")
    assert name.endswith(".xlsx")


def test_batch_export(export_manager, output_dir):
    results = export_manager.batch_export(WEEK, str(output_dir / "exports"))
    assert results == {"pdf": True, "excel": True, "csv": True}
    assert len(list((output_dir / "exports").iterdir())) == 3
