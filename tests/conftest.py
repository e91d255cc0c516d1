import json
import sys
import tempfile
from pathlib import Path

import pytest

# Setup import path for src
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shift_calendar.data_manager import DataManager
from shift_calendar.data_models import Shift


def make_shift(shift_id, employee_id, day, start, end, hours=None):
    """Shift literal with hours derived from the times unless given"""
    if hours is None:
        start_h, start_m = map(int, start.split(":"))
        end_h, end_m = map(int, end.split(":"))
        hours = round(((end_h * 60 + end_m) - (start_h * 60 + start_m)) / 60, 2)
    return Shift(id=shift_id, employee_id=employee_id, date=day,
                 start_time=start, end_time=end, hours=hours)


@pytest.fixture
def data_manager():
    """Clean DataManager for each test - isolated temp directory."""
    with tempfile.TemporaryDirectory() as temp_dir:
        temp_path = Path(temp_dir) / "shift_calendar.json"
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump({}, f)
        dm = DataManager(str(temp_path))
        # Standard test employee set
        dm.add_employee("Alice", "Manager", "#e57373")
        dm.add_employee("Bob", "Cashier", "#64b5f6")
        dm.save_data()
        yield dm
