"""
User Interface for Shift Calendar

CustomTkinter-based GUI with a weekly time-grid calendar supporting
drag-to-create, move and resize of shifts, a shift editor dialog,
copy/paste of shifts and weeks, and a weekly hours panel.
"""

import customtkinter as ctk
import tkinter as tk
from tkinter import messagebox, filedialog
from datetime import date, timedelta
from typing import Callable, Dict, List, Optional
import logging

from .data_manager import DataManager
from .data_models import Employee, Shift, normalize_color
from .drag_controller import DragInteractionController, hit_region
from .layout import ColumnPacker, month_grid
from .reporting import ExportManager
from .scheduler_logic import ShiftScheduler, SyncStatus
from .time_grid import (
    TimeGridMapper, format_12h, format_date, get_week_days, hour_label,
    hour_to_time_string, parse_date, snap_to_half_hour, start_of_week, week_range_label
)
from .validation import SchedulingError

logger = logging.getLogger(__name__)


# Configure CustomTkinter
ctk.set_appearance_mode("light")
ctk.set_default_color_theme("blue")

TIME_COLUMN_WIDTH = 40
TIME_OPTIONS = [hour_to_time_string(i / 2) for i in range(48)]


def text_color_for(background: str) -> str:
    """Black or white text depending on the background's luminance"""
    background = normalize_color(background)
    r = int(background[1:3], 16)
    g = int(background[3:5], 16)
    b = int(background[5:7], 16)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return "black" if luminance > 0.6 else "white"


class TkReleaseSource:
    """Global left-button release notifications for the whole application"""

    SEQUENCE = "<ButtonRelease-1>"

    def __init__(self, widget: tk.Misc):
        self.widget = widget

    def subscribe(self, handler: Callable[[], None]) -> Callable[[], None]:
        self.widget.bind_all(self.SEQUENCE, lambda event: handler())
        return lambda: self.widget.unbind_all(self.SEQUENCE)


class ShiftDialog(ctk.CTkToplevel):
    """Dialog for creating or editing a single shift"""

    def __init__(self, parent, scheduler: ShiftScheduler, employees: List[Employee],
                 editing_shift: Optional[Shift] = None, prefilled_date: Optional[str] = None,
                 prefilled_start: Optional[str] = None, prefilled_end: Optional[str] = None,
                 on_close: Callable = None):
        super().__init__(parent)
        self.scheduler = scheduler
        self.employees = employees
        self.editing_shift = editing_shift
        self.on_close = on_close
        self.employee_map = {emp.name: emp.id for emp in employees}

        self.title("Edit Assignment" if editing_shift else "New Assignment")
        self.geometry("380x340")
        self.transient(parent)
        self.grab_set()

        self._create_widgets()
        self._populate_fields(prefilled_date, prefilled_start, prefilled_end)

    def _create_widgets(self):
        main_frame = ctk.CTkFrame(self)
        main_frame.pack(fill="both", expand=True, padx=20, pady=20)

        ctk.CTkLabel(main_frame, text="Staff Member:").grid(row=0, column=0, sticky="w", pady=5)
        self.employee_var = ctk.StringVar()
        ctk.CTkOptionMenu(main_frame, variable=self.employee_var,
                          values=list(self.employee_map) or [""]).grid(row=0, column=1, sticky="ew", pady=5)

        ctk.CTkLabel(main_frame, text="Date:").grid(row=1, column=0, sticky="w", pady=5)
        self.date_var = ctk.StringVar()
        ctk.CTkEntry(main_frame, textvariable=self.date_var).grid(row=1, column=1, sticky="ew", pady=5)

        ctk.CTkLabel(main_frame, text="Start:").grid(row=2, column=0, sticky="w", pady=5)
        self.start_var = ctk.StringVar()
        ctk.CTkOptionMenu(main_frame, variable=self.start_var, values=TIME_OPTIONS).grid(
            row=2, column=1, sticky="ew", pady=5)

        ctk.CTkLabel(main_frame, text="End:").grid(row=3, column=0, sticky="w", pady=5)
        self.end_var = ctk.StringVar()
        ctk.CTkOptionMenu(main_frame, variable=self.end_var, values=TIME_OPTIONS).grid(
            row=3, column=1, sticky="ew", pady=5)

        self.error_label = ctk.CTkLabel(main_frame, text="", text_color="#b91c1c", wraplength=300)
        self.error_label.grid(row=4, column=0, columnspan=2, pady=5)

        button_frame = ctk.CTkFrame(main_frame, fg_color="transparent")
        button_frame.grid(row=5, column=0, columnspan=2, pady=10)

        ctk.CTkButton(button_frame, text="Save", width=70, command=self._save).pack(side="left", padx=4)
        if self.editing_shift:
            ctk.CTkButton(button_frame, text="Copy", width=70, command=self._copy).pack(side="left", padx=4)
            ctk.CTkButton(button_frame, text="Delete", width=70, fg_color="#dc3545",
                          command=self._delete).pack(side="left", padx=4)
        ctk.CTkButton(button_frame, text="Cancel", width=70, fg_color="gray",
                      command=self._cancel).pack(side="left", padx=4)

        main_frame.columnconfigure(1, weight=1)

    def _populate_fields(self, prefilled_date, prefilled_start, prefilled_end):
        if self.editing_shift:
            employee = next((e for e in self.employees if e.id == self.editing_shift.employee_id), None)
            self.employee_var.set(employee.name if employee else "")
            self.date_var.set(self.editing_shift.date)
            self.start_var.set(snap_to_half_hour(self.editing_shift.start_time))
            self.end_var.set(snap_to_half_hour(self.editing_shift.end_time))
        else:
            self.employee_var.set(self.employees[0].name if self.employees else "")
            self.date_var.set(prefilled_date or format_date(date.today()))
            self.start_var.set(snap_to_half_hour(prefilled_start or "09:00"))
            self.end_var.set(snap_to_half_hour(prefilled_end or "17:00"))

    def _save(self):
        self.error_label.configure(text="")
        shift = Shift(
            id=self.editing_shift.id if self.editing_shift else None,
            employee_id=self.employee_map.get(self.employee_var.get(), ""),
            date=self.date_var.get().strip(),
            start_time=self.start_var.get(),
            end_time=self.end_var.get()
        )
        try:
            self.scheduler.save_shift(shift)
        except SchedulingError as e:
            # Keep the form as entered so it can be corrected
            logger.info(f"Shift rejected: {e.message}")
            self.error_label.configure(text=e.message)
            return
        self._close()

    def _copy(self):
        self.scheduler.copy_shift(self.editing_shift)
        self._close()

    def _delete(self):
        if messagebox.askyesno("Delete Shift", "Delete this shift?", parent=self):
            self.scheduler.delete_shift(self.editing_shift.id)
            self._close()

    def _cancel(self):
        self._close()

    def _close(self):
        self.grab_release()
        self.destroy()
        if self.on_close:
            self.on_close()


class WeeklyCalendarView(ctk.CTkFrame):
    """Weekly time grid drawn on a canvas, driven by the drag controller"""

    def __init__(self, parent, main_window, read_only: bool = False):
        super().__init__(parent)
        self.main_window = main_window
        self.read_only = read_only
        self.mapper = TimeGridMapper(main_window.scheduler.grid_config)
        self.packer = ColumnPacker()
        self.controller = DragInteractionController(
            self.mapper,
            TkReleaseSource(self),
            on_add_shift=self._on_add_shift,
            on_save_shift=self._on_save_shift,
            read_only=read_only
        )
        self.week_days: List[date] = []
        self.shifts: List[Shift] = []
        self.block_bounds: Dict[str, tuple] = {}  # shift id -> (x0, y0, x1, y1)

        self._create_widgets()

    def _create_widgets(self):
        self.header_frame = ctk.CTkFrame(self, height=40)
        self.header_frame.pack(fill="x")

        self.canvas = tk.Canvas(self, background="white", highlightthickness=0)
        self.canvas.pack(fill="both", expand=True)

        self.canvas.bind("<ButtonPress-1>", self._on_press)
        self.canvas.bind("<B1-Motion>", self._on_motion)
        self.canvas.bind("<Double-Button-1>", self._on_double_click)
        self.canvas.bind("<Configure>", lambda event: self.redraw())
        self.main_window.bind("<Escape>", lambda event: self._cancel_drag())

    def set_week(self, week_day: date, shifts: List[Shift]):
        self.week_days = get_week_days(week_day)
        self.shifts = shifts
        self._build_header()
        self.redraw()

    def _build_header(self):
        for widget in self.header_frame.winfo_children():
            widget.destroy()

        ctk.CTkLabel(self.header_frame, text="", width=TIME_COLUMN_WIDTH).grid(row=0, column=0)
        has_template = self.main_window.scheduler.replication.has_shift_template
        for index, day in enumerate(self.week_days, start=1):
            cell = ctk.CTkFrame(self.header_frame, fg_color="transparent")
            cell.grid(row=0, column=index, sticky="ew")
            is_today = day == date.today()
            ctk.CTkLabel(cell, text=day.strftime("%a %d").upper(),
                         text_color="#2563eb" if is_today else None,
                         font=ctk.CTkFont(weight="bold")).pack(side="left", padx=4)
            if has_template and not self.read_only:
                date_str = format_date(day)
                ctk.CTkButton(cell, text="PASTE", width=50, height=22,
                              command=lambda d=date_str: self.main_window.on_paste_shift(d)).pack(side="right", padx=2)
            self.header_frame.columnconfigure(index, weight=1, uniform="day")

    # Geometry
    def _day_width(self) -> float:
        return max(1, (self.canvas.winfo_width() - TIME_COLUMN_WIDTH) / 7)

    def _day_at(self, x: float) -> Optional[str]:
        index = int((x - TIME_COLUMN_WIDTH) // self._day_width())
        if x < TIME_COLUMN_WIDTH or not 0 <= index < len(self.week_days):
            return None
        return format_date(self.week_days[index])

    def _shift_at(self, x: float, y: float) -> Optional[Shift]:
        for shift in self.controller.apply_preview(self.shifts):
            bounds = self.block_bounds.get(shift.id)
            if bounds and bounds[0] <= x <= bounds[2] and bounds[1] <= y <= bounds[3]:
                return shift
        return None

    # Pointer handling
    def _on_press(self, event):
        height = self.canvas.winfo_height()
        shift = self._shift_at(event.x, event.y)
        if shift is not None:
            x0, y0, x1, y1 = self.block_bounds[shift.id]
            kind = hit_region(event.y - y0, y1 - y0, self.mapper.config.handle_size)
            self.controller.pointer_down_on_shift(shift, kind, event.y, height)
        else:
            day = self._day_at(event.x)
            if day is not None:
                self.controller.pointer_down_on_grid(day, event.y, height)
        self.redraw()

    def _on_motion(self, event):
        if self.controller.is_active:
            self.controller.pointer_move(event.y, self.canvas.winfo_height())
            self.redraw()

    def _on_double_click(self, event):
        if self.read_only:
            return
        self.controller.cancel()
        shift = self._shift_at(event.x, event.y)
        if shift is not None:
            self.main_window.open_shift_dialog(editing_shift=shift)

    def _cancel_drag(self):
        self.controller.cancel()
        self.redraw()

    def _on_add_shift(self, day: str, start_time: str = None, end_time: str = None):
        # Let the release event finish before opening a modal dialog
        self.after(0, lambda: self.main_window.on_add_shift(day, start_time, end_time))
        self.after(0, self.redraw)

    def _on_save_shift(self, shift: Shift):
        self.after(0, lambda: self.main_window.on_save_shift(shift))
        self.after(0, self.redraw)

    # Drawing
    def redraw(self):
        canvas = self.canvas
        canvas.delete("all")
        self.block_bounds = {}
        width = canvas.winfo_width()
        height = canvas.winfo_height()
        if not self.week_days or height <= 1:
            return

        cfg = self.mapper.config
        day_width = self._day_width()

        for hour in range(cfg.start_hour, cfg.end_hour + 1):
            y = self.mapper.hour_to_pixel(hour, height)
            canvas.create_line(TIME_COLUMN_WIDTH, y, width, y, fill="#e5e7eb")
            canvas.create_text(TIME_COLUMN_WIDTH / 2, y, text=hour_label(hour), fill="#9ca3af",
                               font=("Helvetica", 8, "bold"))
        for index in range(8):
            x = TIME_COLUMN_WIDTH + index * day_width
            canvas.create_line(x, 0, x, height, fill="#9ca3af", width=2)

        selection = self.controller.selection_range()
        if selection and selection[2] > selection[1]:
            day, start, end = selection
            x0 = TIME_COLUMN_WIDTH + self._day_index(day) * day_width
            canvas.create_rectangle(x0 + 2, self.mapper.hour_to_pixel(start, height),
                                    x0 + day_width - 2, self.mapper.hour_to_pixel(end, height),
                                    fill="#bfdbfe", outline="#2563eb", width=2)
            canvas.create_text(x0 + day_width / 2, self.mapper.hour_to_pixel((start + end) / 2, height),
                               text=f"{format_12h(hour_to_time_string(start))} - {format_12h(hour_to_time_string(end))}",
                               fill="#1d4ed8", font=("Helvetica", 9, "bold"))

        visible = self.controller.apply_preview(self.shifts)
        for day_str, layout in self.packer.pack_week(visible, self.week_days).items():
            x_day = TIME_COLUMN_WIDTH + self._day_index(day_str) * day_width
            for placement in layout.placements(self.mapper):
                self._draw_shift(placement, x_day, day_width, height)

    def _day_index(self, day_str: str) -> int:
        return [format_date(d) for d in self.week_days].index(day_str)

    def _draw_shift(self, placement, x_day: float, day_width: float, height: float):
        shift = placement.shift
        employee = self.main_window.data_manager.get_employee_by_id(shift.employee_id)
        if employee is None:
            return

        usable = height - self.mapper.config.vertical_padding * 2
        x0 = x_day + placement.left_percent / 100 * day_width + 1
        x1 = x0 + placement.width_percent / 100 * day_width - 4
        y0 = self.mapper.config.vertical_padding + placement.top_percent / 100 * usable
        y1 = y0 + placement.height_percent / 100 * usable
        self.block_bounds[shift.id] = (x0, y0, x1, y1)

        active = self.controller.active_shift_id == shift.id
        self.canvas.create_rectangle(x0, y0, x1, y1, fill=employee.color,
                                     outline="#60a5fa" if active else "white", width=2 if active else 1)
        label = f"{employee.name}\n{format_12h(shift.start_time)} - {format_12h(shift.end_time)}\n{shift.hours}H"
        self.canvas.create_text(x0 + 4, y0 + 3, text=label, anchor="nw", width=max(10, x1 - x0 - 6),
                                fill=text_color_for(employee.color), font=("Helvetica", 8, "bold"))


class MonthOverview(ctk.CTkToplevel):
    """Month grid with shift counts and week copy/paste"""

    def __init__(self, parent, main_window, month_day: date):
        super().__init__(parent)
        self.main_window = main_window
        self.month_day = month_day.replace(day=1)
        self.title("Month Overview")
        self.geometry("760x520")
        self.transient(parent)
        self._create_widgets()

    def _create_widgets(self):
        for widget in self.winfo_children():
            widget.destroy()

        header = ctk.CTkFrame(self)
        header.pack(fill="x", padx=10, pady=10)
        ctk.CTkButton(header, text="<", width=30, command=lambda: self._shift_month(-1)).pack(side="left", padx=5)
        ctk.CTkLabel(header, text=self.month_day.strftime("%B %Y"),
                     font=ctk.CTkFont(size=18, weight="bold")).pack(side="left", expand=True)
        ctk.CTkButton(header, text=">", width=30, command=lambda: self._shift_month(1)).pack(side="left", padx=5)

        grid = ctk.CTkFrame(self)
        grid.pack(fill="both", expand=True, padx=10, pady=(0, 10))
        for i, name in enumerate(["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]):
            ctk.CTkLabel(grid, text=name, font=ctk.CTkFont(weight="bold")).grid(row=0, column=i, sticky="nsew")

        counts: Dict[str, int] = {}
        for shift in self.main_window.data_manager.get_shifts():
            counts[shift.date] = counts.get(shift.date, 0) + 1

        scheduler = self.main_window.scheduler
        read_only = self.main_window.read_only
        for row, week in enumerate(month_grid(self.month_day.year, self.month_day.month), start=1):
            for col, day in enumerate(week):
                count = counts.get(format_date(day), 0)
                text = f"{day.day}\n{count} shift(s)" if count else str(day.day)
                ctk.CTkButton(
                    grid, text=text, height=56,
                    fg_color="#3b82f6" if day.month == self.month_day.month else "#9ca3af",
                    command=lambda d=day: self._open_week(d)
                ).grid(row=row, column=col, padx=2, pady=2, sticky="nsew")
            if not read_only:
                actions = ctk.CTkFrame(grid, fg_color="transparent")
                actions.grid(row=row, column=7, padx=4)
                ctk.CTkButton(actions, text="Copy", width=60,
                              command=lambda d=week[0]: self._copy_week(d)).pack(pady=1)
                if scheduler.replication.has_week_template:
                    ctk.CTkButton(actions, text="Paste", width=60,
                                  command=lambda d=week[0]: self._paste_week(d)).pack(pady=1)

        for i in range(7):
            grid.columnconfigure(i, weight=1)

    def _shift_month(self, step: int):
        month = self.month_day.month - 1 + step
        self.month_day = date(self.month_day.year + month // 12, month % 12 + 1, 1)
        self._create_widgets()

    def _open_week(self, day: date):
        self.main_window.set_week(day)
        self.destroy()

    def _copy_week(self, week_start: date):
        self.main_window.on_copy_week(week_start)
        self._create_widgets()

    def _paste_week(self, week_start: date):
        self.main_window.on_paste_week(week_start)
        self._create_widgets()


class HoursPanel(ctk.CTkFrame):
    """Weekly hours per employee"""

    def __init__(self, parent, main_window):
        super().__init__(parent, width=220)
        self.main_window = main_window
        ctk.CTkLabel(self, text="Weekly Hours", font=ctk.CTkFont(size=16, weight="bold")).pack(pady=10)
        self.rows_frame = ctk.CTkFrame(self, fg_color="transparent")
        self.rows_frame.pack(fill="both", expand=True, padx=10)

    def update_hours(self, week_day: date, employees: List[Employee]):
        for widget in self.rows_frame.winfo_children():
            widget.destroy()
        totals = self.main_window.scheduler.get_weekly_hours(week_day)
        for employee in employees:
            row = ctk.CTkFrame(self.rows_frame, fg_color=employee.color)
            row.pack(fill="x", pady=2)
            ctk.CTkLabel(row, text=employee.name, text_color=text_color_for(employee.color)).pack(side="left", padx=6)
            ctk.CTkLabel(row, text=f"{totals.get(employee.id, 0):g}h",
                         text_color=text_color_for(employee.color)).pack(side="right", padx=6)


class MainWindow(ctk.CTk):
    """Main application window"""

    def __init__(self, data_manager: DataManager, scheduler: ShiftScheduler,
                 staff_employee_id: Optional[str] = None):
        super().__init__()

        self.title("Shift Calendar")
        self.geometry("1400x900")

        self.data_manager = data_manager
        self.scheduler = scheduler
        self.scheduler.on_sync_change = lambda status: self.after(0, self._on_sync_change, status)
        self.export_manager = None
        self.read_only = staff_employee_id is not None
        self.employee_filter = staff_employee_id or "all"
        self.dialog = None

        saved_week = data_manager.get_setting("lastViewedWeek")
        self.current_week = parse_date(saved_week) if saved_week else start_of_week(date.today())

        self._create_widgets()
        self.refresh()

    def _create_widgets(self):
        control_frame = ctk.CTkFrame(self, height=60)
        control_frame.pack(fill="x", padx=10, pady=10)
        control_frame.pack_propagate(False)

        ctk.CTkButton(control_frame, text="<", width=30, command=lambda: self._step_week(-1)).pack(side="left", padx=5)
        ctk.CTkButton(control_frame, text="Today", width=60,
                      command=lambda: self.set_week(date.today())).pack(side="left", padx=5)
        ctk.CTkButton(control_frame, text=">", width=30, command=lambda: self._step_week(1)).pack(side="left", padx=5)

        self.week_label = ctk.CTkLabel(control_frame, text="", font=ctk.CTkFont(size=18, weight="bold"))
        self.week_label.pack(side="left", padx=20)

        if not self.read_only:
            employees = self.data_manager.get_employees()
            self.employee_names = {"All Staff": "all"}
            self.employee_names.update({emp.name: emp.id for emp in employees})
            self.filter_var = ctk.StringVar(value="All Staff")
            ctk.CTkOptionMenu(control_frame, values=list(self.employee_names), variable=self.filter_var,
                              command=self._on_filter_change, width=150).pack(side="left", padx=10)

            ctk.CTkButton(control_frame, text="Copy Week", width=100,
                          command=lambda: self.on_copy_week(self.current_week)).pack(side="left", padx=5)
            ctk.CTkButton(control_frame, text="Paste Week", width=100,
                          command=lambda: self.on_paste_week(self.current_week)).pack(side="left", padx=5)
            ctk.CTkButton(control_frame, text="Clear Clipboard", width=120, fg_color="gray",
                          command=self._clear_clipboard).pack(side="left", padx=5)

        ctk.CTkButton(control_frame, text="Month", width=80,
                      command=lambda: MonthOverview(self, self, self.current_week)).pack(side="left", padx=5)
        ctk.CTkButton(control_frame, text="Export", width=80, command=self._export_schedule).pack(side="left", padx=5)

        content_frame = ctk.CTkFrame(self)
        content_frame.pack(fill="both", expand=True, padx=10, pady=(0, 10))

        self.calendar_view = WeeklyCalendarView(content_frame, self, read_only=self.read_only)
        self.calendar_view.pack(side="left", fill="both", expand=True, padx=(0, 5))

        self.hours_panel = HoursPanel(content_frame, self)
        self.hours_panel.pack(side="right", fill="y", padx=(5, 0))

        self.status_var = ctk.StringVar(value="Ready")
        ctk.CTkLabel(self, textvariable=self.status_var).pack(side="bottom", fill="x", padx=10, pady=5)

    # Navigation
    def set_week(self, day: date):
        self.current_week = start_of_week(day)
        self.data_manager.set_setting("lastViewedWeek", format_date(self.current_week))
        self.refresh()

    def _step_week(self, step: int):
        self.set_week(self.current_week + timedelta(days=7 * step))

    def _on_filter_change(self, value: str):
        self.employee_filter = self.employee_names.get(value, "all")
        self.refresh()

    def refresh(self):
        self.week_label.configure(text=week_range_label(self.current_week))
        shifts = self.scheduler.get_visible_shifts(self.current_week, self.employee_filter)
        self.calendar_view.set_week(self.current_week, shifts)
        employees = self.data_manager.get_employees()
        if self.employee_filter != "all":
            employees = [e for e in employees if e.id == self.employee_filter]
        self.hours_panel.update_hours(self.current_week, employees)

    # Calendar callbacks
    def open_shift_dialog(self, editing_shift: Optional[Shift] = None, day: Optional[str] = None,
                          start_time: Optional[str] = None, end_time: Optional[str] = None):
        if self.read_only:
            return
        self.dialog = ShiftDialog(self, self.scheduler, self.data_manager.get_employees(),
                                  editing_shift=editing_shift, prefilled_date=day,
                                  prefilled_start=start_time, prefilled_end=end_time,
                                  on_close=self.refresh)

    def on_add_shift(self, day: str, start_time: Optional[str] = None, end_time: Optional[str] = None):
        self.open_shift_dialog(day=day, start_time=start_time, end_time=end_time)

    def on_save_shift(self, shift: Shift):
        try:
            self.scheduler.save_shift(shift)
        except SchedulingError as e:
            messagebox.showerror("Shift Not Saved", e.message)
        self.refresh()

    def on_paste_shift(self, day: str):
        try:
            self.scheduler.paste_shift(day)
        except SchedulingError as e:
            messagebox.showerror("Paste Failed", e.message)

    def on_copy_week(self, week_start: date):
        self.scheduler.copy_week(week_start)
        self.status_var.set(f"Copied week of {week_range_label(week_start)}")

    def on_paste_week(self, week_start: date):
        replication = self.scheduler.replication
        if not replication.has_week_template:
            messagebox.showinfo("Paste Week", "Copy a week first.")
            return
        source = replication.week_template.week_start
        count = len(replication.source_week_shifts(self.data_manager.get_shifts()))
        if count and not messagebox.askyesno(
                "Paste Week",
                f"Paste {count} shifts from week of {source.strftime('%b %d')} "
                f"to week of {start_of_week(week_start).strftime('%b %d')}?"):
            return
        try:
            self.scheduler.paste_week(week_start)
        except SchedulingError as e:
            messagebox.showerror("Paste Week Failed", e.message)

    def _clear_clipboard(self):
        self.scheduler.clear_clipboard()
        self.status_var.set("Clipboard cleared")
        self.refresh()

    def _on_sync_change(self, status: SyncStatus):
        self.status_var.set(status.describe())
        if not status.syncing:
            self.refresh()

    def _export_schedule(self):
        """Export the current week"""
        if self.export_manager is None:
            self.export_manager = ExportManager(self.data_manager)

        file_path = filedialog.asksaveasfilename(
            defaultextension=".pdf",
            filetypes=[("PDF files", "*.pdf"), ("Excel files", "*.xlsx"), ("CSV files", "*.csv")],
            initialfile=self.export_manager.get_default_filename(self.current_week, "pdf")
        )
        if not file_path:
            return

        format_type = {"xlsx": "excel", "csv": "csv"}.get(file_path.rsplit(".", 1)[-1].lower(), "pdf")
        if self.export_manager.export_week(self.current_week, format_type, file_path):
            self.status_var.set(f"Exported to {file_path}")
            messagebox.showinfo("Export Complete", f"Schedule exported to:\n{file_path}")
        else:
            self.status_var.set("Export failed")
            messagebox.showerror("Export Failed", "Failed to export schedule. Check the log for details.")
