"""
Main Entry Point for Shift Calendar

Parses the command line, configures logging, wires the store, the commit
coordinator and the exporter together, and runs the desktop window.
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from tkinter import messagebox

# Make the package importable when run as a script from the source tree
sys.path.insert(0, str(Path(__file__).parent.parent))

from shift_calendar.data_manager import DataManager, DataManagerError
from shift_calendar.data_models import DEFAULT_EMPLOYEE_COLOR, normalize_color
from shift_calendar.scheduler_logic import ShiftScheduler
from shift_calendar.ui import MainWindow
from shift_calendar.reporting import ExportManager

REQUIRED_MODULES = ["customtkinter", "pandas", "openpyxl", "reportlab"]
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_dir: str = "logs") -> logging.Logger:
    """Log to a dated file under log_dir and to stdout"""
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    log_file = log_path / f"shift_calendar_{datetime.now():%Y%m%d}.log"

    logging.basicConfig(
        level=logging.INFO,
        format=LOG_FORMAT,
        handlers=[logging.FileHandler(log_file, encoding="utf-8"), logging.StreamHandler(sys.stdout)]
    )
    return logging.getLogger("shift_calendar")


def check_dependencies():
    """Raise ImportError naming every third-party module that cannot be imported"""
    missing = []
    for name in REQUIRED_MODULES:
        try:
            __import__(name)
        except ImportError:
            missing.append(name)

    if missing:
        raise ImportError(
            f"Missing required dependencies: {', '.join(missing)}\n"
            "Install the project with: pip install -e ."
        )


def handle_exception(exc_type, exc_value, exc_traceback):
    """sys.excepthook: log anything uncaught and tell the user"""
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return

    logger = logging.getLogger("shift_calendar")
    logger.critical("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))
    try:
        messagebox.showerror("Shift Calendar", f"Unexpected error:\n\n{exc_type.__name__}: {exc_value}")
    except Exception as dialog_error:
        logger.debug(f"No error dialog shown: {dialog_error}")


def parse_employee_spec(spec: str):
    """Split "Name:Role:#color" into its parts, filling in defaults"""
    parts = [p.strip() for p in spec.split(":", 2)]
    name = parts[0]
    if not name:
        raise ValueError(f"Employee name missing in {spec!r}")
    role = parts[1] if len(parts) > 1 and parts[1] else "Other"
    color = normalize_color(parts[2]) if len(parts) > 2 and parts[2] else DEFAULT_EMPLOYEE_COLOR
    return name, role, color


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Staff shift calendar")
    parser.add_argument("--data-file", help="Path to the JSON data file")
    parser.add_argument("--staff", metavar="EMPLOYEE_ID",
                        help="Open a read-only view of one employee's shifts")
    parser.add_argument("--add-employee", metavar="NAME[:ROLE[:COLOR]]", action="append", default=[],
                        help="Add an employee to the directory before starting (repeatable)")
    parser.add_argument("--log-dir", default="logs", help="Directory for log files")
    return parser.parse_args(argv)


def default_data_file() -> Path:
    if getattr(sys, "frozen", False):
        # Bundled executable: keep data next to it
        return Path(sys.executable).parent / "data" / "shift_calendar.json"
    return Path(__file__).parent.parent / "data" / "shift_calendar.json"


class ShiftCalendarApp:
    """Owns the application's components for one run"""

    def __init__(self, data_file: str = None, staff_employee_id: str = None, new_employees=None):
        self.logger = logging.getLogger("shift_calendar.app")
        self.data_file = Path(data_file) if data_file else default_data_file()
        self.staff_employee_id = staff_employee_id
        self.new_employees = new_employees or []
        self.data_manager = None
        self.scheduler = None
        self.export_manager = None
        self.main_window = None

    def initialize(self) -> bool:
        """Build the store, coordinator and exporter; False when startup cannot continue"""
        try:
            check_dependencies()

            self.data_file.parent.mkdir(parents=True, exist_ok=True)
            self.data_manager = DataManager(str(self.data_file))
            self.logger.info(f"Using data file {self.data_file}")

            self.seed_employees()

            self.scheduler = ShiftScheduler(self.data_manager)
            self.logger.info(f"Week paste policy: {self.scheduler.replication.week_paste_policy.value}")
            self.export_manager = ExportManager(self.data_manager)

        except (ImportError, DataManagerError, OSError, ValueError) as e:
            self.logger.exception(f"Startup failed: {e}")
            return False

        if self.staff_employee_id and not self.data_manager.get_employee_by_id(self.staff_employee_id):
            self.logger.error(f"Unknown staff employee id: {self.staff_employee_id}")
            return False
        return True

    def seed_employees(self):
        """Add employees given on the command line that are not in the directory yet"""
        added = 0
        for spec in self.new_employees:
            name, role, color = parse_employee_spec(spec)
            if self.data_manager.get_employee_by_name(name):
                self.logger.info(f"Employee {name} already exists, skipping")
                continue
            self.data_manager.add_employee(name, role, color)
            added += 1
        if added:
            self.data_manager.save_data()
            self.logger.info(f"Added {added} employee(s) to the directory")
        elif not self.data_manager.get_employees():
            self.logger.warning("Employee directory is empty; use --add-employee to seed it")

    def run(self) -> bool:
        if not self.initialize():
            self._show_error(
                "Startup Error",
                "Shift Calendar could not start.\n\n"
                "Check that the dependencies are installed, that the data directory "
                "is writable, and see the log file for details."
            )
            return False

        try:
            mode = "read-only staff view" if self.staff_employee_id else "manager view"
            self.logger.info(f"Opening calendar ({mode})")
            self.main_window = MainWindow(
                data_manager=self.data_manager,
                scheduler=self.scheduler,
                staff_employee_id=self.staff_employee_id
            )
            self.main_window.export_manager = self.export_manager
            self.main_window.mainloop()
            self.logger.info("Calendar closed")
            return True

        except Exception as e:
            self.logger.exception(f"Calendar stopped with an error: {e}")
            self._show_error("Shift Calendar", f"{type(e).__name__}: {e}\n\nSee the log file for details.")
            return False

        finally:
            self.shutdown()

    def _show_error(self, title: str, message: str):
        try:
            messagebox.showerror(title, message)
        except Exception as e:
            self.logger.debug(f"No error dialog shown: {e}")

    def shutdown(self):
        """Flush settings such as the last viewed week to disk"""
        if self.data_manager is None:
            return
        try:
            self.data_manager.save_data()
        except DataManagerError as e:
            self.logger.error(f"Final save failed: {e}")


def main(argv=None):
    args = parse_args(argv)
    sys.excepthook = handle_exception

    logger = setup_logging(args.log_dir)
    logger.info("Starting Shift Calendar")

    app = ShiftCalendarApp(data_file=args.data_file, staff_employee_id=args.staff,
                           new_employees=args.add_employee)
    sys.exit(0 if app.run() else 1)


if __name__ == "__main__":
    main()
