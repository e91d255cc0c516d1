"""
Data Manager for Shift Calendar

Handles file I/O, JSON persistence and the shift store operations used by the
calendar: employee lookup, shift create/update/delete and atomic batch
creation for week pastes.
"""

import copy
import json
import logging
import threading
import uuid
from datetime import date
from typing import Dict, List, Optional, Any
from pathlib import Path

from .data_models import Employee, Shift, DEFAULT_EMPLOYEE_COLOR, normalize_color
from .time_grid import GridConfig, format_date, parse_date, start_of_week, time_to_minutes

APP_VERSION = "1.0.0"


class DataManagerError(Exception):
    """Base class for shift store failures"""
    pass


class DataFileCorruptedError(DataManagerError):
    """The data file cannot be parsed and no usable backup exists"""
    pass


class DataSaveError(DataManagerError):
    """Writing the data file failed; the previous version was kept"""
    pass


class DataValidationError(DataManagerError):
    """The written file does not match what is in memory"""
    pass


class DataFileNotFoundError(DataValidationError):
    """The data file vanished between write and validation"""
    pass


class ShiftNotFoundError(DataManagerError):
    """Raised when a shift id does not exist in the store"""
    pass


class DataManager:
    """Manages data persistence and the shift store operations"""

    def __init__(self, data_file: str = "data/shift_calendar.json"):
        if data_file == "data/shift_calendar.json":
            # Default location sits beside the package
            data_file = Path(__file__).parent.parent / "data" / "shift_calendar.json"
        self.data_file = Path(data_file)
        self._lock = threading.RLock()
        self.data = self._load_or_create_data()

    def _read_file(self, path: Path) -> Dict[str, Any]:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)

    def _load_or_create_data(self) -> Dict[str, Any]:
        """Read the data file, falling back to the .bak copy, or start empty"""
        backup_file = self.data_file.with_suffix('.bak')

        if self.data_file.exists():
            try:
                return self._validate_and_migrate_data(self._read_file(self.data_file))
            except (json.JSONDecodeError, IOError) as e:
                logging.error(f"Cannot read {self.data_file}: {e}")
                if not backup_file.exists():
                    raise DataFileCorruptedError(f"{self.data_file} is unreadable and there is no backup: {e}")
                logging.info(f"Falling back to {backup_file}")
        elif backup_file.exists():
            logging.info(f"{self.data_file} missing, restoring {backup_file}")
        else:
            logging.info("No data file found, creating default data")
            return self._create_default_data()

        try:
            data = self._read_file(backup_file)
            backup_file.replace(self.data_file)
            logging.info("Successfully recovered data from backup")
            return self._validate_and_migrate_data(data)
        except (json.JSONDecodeError, IOError) as backup_e:
            logging.error(f"Backup {backup_file} is unreadable too: {backup_e}")
            logging.info("Creating default data due to corrupted files")
            return self._create_default_data()

    def _validate_and_migrate_data(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in missing sections and settings, repair employees, drop broken shifts"""
        default_data = self._create_default_data()

        # Sections and settings added in later versions
        for key in default_data:
            if key not in data:
                data[key] = default_data[key]
        for key, value in default_data["settings"].items():
            data["settings"].setdefault(key, value)

        # Older files stored employees without a display color
        for emp in data.get("employees", []):
            try:
                emp["color"] = normalize_color(str(emp.get("color", DEFAULT_EMPLOYEE_COLOR)))
            except ValueError:
                logging.warning(f"Employee {emp.get('name')} has an unusable color {emp.get('color')!r}")
                emp["color"] = DEFAULT_EMPLOYEE_COLOR
            if "role" not in emp:
                emp["role"] = "Other"

        # Drop shift records the calendar cannot place; pad the rest to YYYY-MM-DD and HH:mm
        valid_shifts = []
        for record in data.get("shifts", []):
            if not (record.get("id") and record.get("employeeId")):
                logging.warning(f"Discarding malformed shift record: {record}")
                continue
            try:
                record["date"] = format_date(parse_date(str(record.get("date", ""))))
                for key in ("startTime", "endTime"):
                    minutes = time_to_minutes(str(record.get(key, "")))
                    record[key] = f"{minutes // 60:02d}:{minutes % 60:02d}"
            except ValueError as e:
                logging.warning(f"Discarding shift record with bad date or time ({e}): {record}")
                continue
            valid_shifts.append(record)
        data["shifts"] = valid_shifts

        return data

    def _create_default_data(self) -> Dict[str, Any]:
        """Create default data structure"""
        return {
            "settings": {
                "appVersion": APP_VERSION,
                "lastViewedWeek": format_date(start_of_week(date.today())),
                "weekPastePolicy": "trusted",
                "grid": GridConfig().to_dict(),
                "dataFile": str(self.data_file)
            },
            "employees": [],
            "shifts": []
        }

    def _validate_saved_data(self) -> bool:
        """Re-read the written file and compare it with the in-memory state"""
        try:
            if not self.data_file.exists():
                raise DataFileNotFoundError(f"{self.data_file} missing right after save")

            saved_data = self._read_file(self.data_file)

            required_keys = ["settings", "employees", "shifts"]
            for key in required_keys:
                if key not in saved_data:
                    raise DataValidationError(f"Section {key!r} missing from written file")

            if saved_data.get("settings", {}).get("appVersion") != self.data.get("settings", {}).get("appVersion"):
                raise DataValidationError("Written appVersion differs from memory")

            if len(saved_data["shifts"]) != len(self.data["shifts"]):
                raise DataValidationError("Shift count mismatch in saved data")

            return True

        except (json.JSONDecodeError, IOError) as e:
            raise DataValidationError(f"Written file cannot be read back: {e}")

    def save_data(self) -> bool:
        """Write via a .tmp file, keeping the previous version as .bak"""
        temp_file = None
        backup_file = self.data_file.with_suffix('.bak')

        with self._lock:
            try:
                self.data_file.parent.mkdir(parents=True, exist_ok=True)

                # Previous version becomes the backup
                if self.data_file.exists():
                    self.data_file.replace(backup_file)

                temp_file = self.data_file.with_suffix('.tmp')
                with open(temp_file, 'w', encoding='utf-8') as f:
                    json.dump(self.data, f, indent=2, ensure_ascii=False)

                temp_file.replace(self.data_file)
                self._validate_saved_data()
                return True

            except DataValidationError as e:
                logging.error(f"Written file failed validation: {e}", exc_info=True)
                if backup_file.exists():
                    try:
                        backup_file.replace(self.data_file)
                    except OSError as restore_e:
                        logging.error(f"Could not put {backup_file} back: {restore_e}", exc_info=True)
                raise DataSaveError(f"Save rejected after validation: {e}")

            except (IOError, OSError) as e:
                logging.error(f"Writing {self.data_file} failed: {e}", exc_info=True)
                if backup_file.exists() and not self.data_file.exists():
                    try:
                        backup_file.replace(self.data_file)
                    except OSError as restore_e:
                        logging.error(f"Could not put {backup_file} back: {restore_e}", exc_info=True)
                raise DataSaveError(f"Could not write {self.data_file}: {e}")

            finally:
                if temp_file and temp_file.exists():
                    try:
                        temp_file.unlink()
                    except OSError as cleanup_e:
                        logging.error(f"Leftover {temp_file} not removed: {cleanup_e}", exc_info=True)

    def _commit(self, snapshot: List[Dict[str, Any]]):
        """Save, restoring the shift list to snapshot if the save fails"""
        try:
            self.save_data()
        except DataManagerError:
            self.data["shifts"] = snapshot
            raise

    # Employee Lookup
    def get_employees(self) -> List[Employee]:
        """Get list of employees, ordered by name"""
        employees = [Employee.from_dict(e) for e in self.data.get("employees", [])]
        return sorted(employees, key=lambda e: e.name.lower())

    def get_employee_by_id(self, emp_id: str) -> Optional[Employee]:
        for emp_data in self.data.get("employees", []):
            if emp_data["id"] == emp_id:
                return Employee.from_dict(emp_data)
        return None

    def get_employee_by_name(self, name: str) -> Optional[Employee]:
        for emp_data in self.data.get("employees", []):
            if emp_data["name"] == name:
                return Employee.from_dict(emp_data)
        return None

    def add_employee(self, name: str, role: str = "Other", color: str = DEFAULT_EMPLOYEE_COLOR) -> Employee:
        """Add an employee record (used to seed the local directory)"""
        employee = Employee(id=uuid.uuid4().hex, name=name, role=role, color=normalize_color(color))
        with self._lock:
            self.data.setdefault("employees", []).append(employee.to_dict())
        return employee

    # Shift Store
    def get_shifts(self) -> List[Shift]:
        with self._lock:
            return [Shift.from_dict(record) for record in self.data.get("shifts", [])]

    def get_shift(self, shift_id: str) -> Optional[Shift]:
        with self._lock:
            for record in self.data.get("shifts", []):
                if record["id"] == shift_id:
                    return Shift.from_dict(record)
        return None

    def get_shifts_for_week(self, day: date) -> List[Shift]:
        week_start = start_of_week(day)
        return [s for s in self.get_shifts()
                if start_of_week(parse_date(s.date)) == week_start]

    def create_shift(self, shift: Shift) -> str:
        """Store a new shift and return its assigned id"""
        with self._lock:
            snapshot = copy.deepcopy(self.data["shifts"])
            record = shift.to_record()
            record["id"] = uuid.uuid4().hex
            self.data["shifts"].append(record)
            self._commit(snapshot)
            logging.info(f"Created shift {record['id']} on {record['date']} {record['startTime']}-{record['endTime']}")
            return record["id"]

    def update_shift(self, shift_id: str, shift: Shift):
        with self._lock:
            snapshot = copy.deepcopy(self.data["shifts"])
            for record in self.data["shifts"]:
                if record["id"] == shift_id:
                    record.update(shift.to_record())
                    break
            else:
                raise ShiftNotFoundError(f"Shift {shift_id} does not exist")
            self._commit(snapshot)
            logging.info(f"Updated shift {shift_id}")

    def delete_shift(self, shift_id: str):
        with self._lock:
            snapshot = copy.deepcopy(self.data["shifts"])
            remaining = [r for r in self.data["shifts"] if r["id"] != shift_id]
            if len(remaining) == len(self.data["shifts"]):
                raise ShiftNotFoundError(f"Shift {shift_id} does not exist")
            self.data["shifts"] = remaining
            self._commit(snapshot)
            logging.info(f"Deleted shift {shift_id}")

    def create_many(self, shifts: List[Shift]) -> List[str]:
        """Create all shifts in one save; on failure none of them are kept"""
        with self._lock:
            snapshot = copy.deepcopy(self.data["shifts"])
            new_ids = []
            for shift in shifts:
                record = shift.to_record()
                record["id"] = uuid.uuid4().hex
                self.data["shifts"].append(record)
                new_ids.append(record["id"])
            self._commit(snapshot)
            logging.info(f"Created {len(new_ids)} shifts in one batch")
            return new_ids

    # Settings
    def get_setting(self, key: str, default=None):
        return self.data.get("settings", {}).get(key, default)

    def set_setting(self, key: str, value):
        with self._lock:
            self.data.setdefault("settings", {})[key] = value

    def get_grid_config(self) -> GridConfig:
        return GridConfig.from_settings(self.get_setting("grid", {}))
