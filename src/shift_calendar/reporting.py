"""
Reporting and Export Module for Shift Calendar

Handles PDF, Excel, and CSV export of a week's shifts, with per-employee
hour totals.
"""

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from openpyxl.styles import PatternFill, Font
from datetime import datetime, date
from pathlib import Path
from typing import Dict, List
import logging

from .data_manager import DataManager
from .data_models import Shift
from .time_grid import format_12h, format_date, get_week_days, time_to_minutes, week_range_label


class ReportGenerator:
    """Renders one week of shifts as PDF, Excel or CSV"""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Title and compact cell styles for the week grid"""
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=18,
            spaceAfter=20,
            alignment=1  # Center alignment
        ))

        self.styles.add(ParagraphStyle(
            name='ShiftCell',
            parent=self.styles['Normal'],
            fontSize=7,
            leading=9
        ))

    def _employee_name(self, employee_id: str) -> str:
        employee = self.data_manager.get_employee_by_id(employee_id)
        return employee.name if employee else "Unknown"

    def _week_shifts(self, week_day: date) -> List[Shift]:
        shifts = self.data_manager.get_shifts_for_week(week_day)
        return sorted(shifts, key=lambda s: (s.date, time_to_minutes(s.start_time), self._employee_name(s.employee_id)))

    def _weekly_hours(self, shifts: List[Shift]) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for shift in shifts:
            totals[shift.employee_id] = round(totals.get(shift.employee_id, 0) + shift.hours, 2)
        return totals

    def export_week_pdf(self, week_day: date, output_path: str) -> bool:
        """Export one week as a printable grid of shifts per day"""
        try:
            doc = SimpleDocTemplate(
                output_path,
                pagesize=landscape(A4),
                rightMargin=0.5*inch,
                leftMargin=0.5*inch,
                topMargin=0.5*inch,
                bottomMargin=0.5*inch
            )

            shifts = self._week_shifts(week_day)
            story = [
                Paragraph(f"Shift Schedule - {week_range_label(week_day)}", self.styles['CustomTitle']),
                Spacer(1, 10),
                self._create_week_table(week_day, shifts),
                Spacer(1, 20),
                self._create_hours_table(shifts)
            ]

            doc.build(story)
            return True

        except Exception as e:
            logging.error(f"Week PDF export to {output_path} failed: {e}", exc_info=True)
            return False

    def _create_week_table(self, week_day: date, shifts: List[Shift]) -> Table:
        """One column per day, each cell listing that day's shifts"""
        days = get_week_days(week_day)
        header = [d.strftime("%a %d") for d in days]

        cells = []
        for day in days:
            date_str = format_date(day)
            lines = [
                f"<b>{self._employee_name(s.employee_id)}</b><br/>"
                f"{format_12h(s.start_time)} - {format_12h(s.end_time)} ({s.hours}h)"
                for s in shifts if s.date == date_str
            ]
            cells.append(Paragraph("<br/><br/>".join(lines) or "---", self.styles['ShiftCell']))

        table = Table([header, cells], colWidths=[1.5*inch]*7)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.grey),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, 0), 10),
            ('BOTTOMPADDING', (0, 0), (-1, 0), 8),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))

        return table

    def _create_hours_table(self, shifts: List[Shift]) -> Table:
        """Weekly hours per employee"""
        data = [['Employee', 'Shifts', 'Hours']]
        totals = self._weekly_hours(shifts)
        for employee_id, hours in sorted(totals.items(), key=lambda item: self._employee_name(item[0])):
            count = sum(1 for s in shifts if s.employee_id == employee_id)
            data.append([self._employee_name(employee_id), str(count), f"{hours:g}"])

        table = Table(data, colWidths=[2.5*inch, 1*inch, 1*inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (1, 0), (-1, -1), 'CENTER'),
            ('FONTSIZE', (0, 0), (-1, -1), 9),
            ('GRID', (0, 0), (-1, -1), 1, colors.black),
        ]))
        return table

    def export_week_excel(self, week_day: date, output_path: str) -> bool:
        """Export a week to Excel with schedule, hours and employee sheets"""
        try:
            shifts = self._week_shifts(week_day)

            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                self._create_schedule_dataframe(shifts).to_excel(writer, sheet_name='Schedule', index=False)
                self._create_hours_dataframe(shifts).to_excel(writer, sheet_name='Hours', index=False)
                self._create_employee_dataframe().to_excel(writer, sheet_name='Employees', index=False)
                self._format_excel_worksheets(writer)

            return True

        except Exception as e:
            logging.error(f"Week Excel export to {output_path} failed: {e}", exc_info=True)
            return False

    def _create_schedule_dataframe(self, shifts: List[Shift]) -> pd.DataFrame:
        columns = ['Date', 'Day', 'Employee', 'Start', 'End', 'Hours']
        data = []
        for shift in shifts:
            data.append({
                'Date': shift.date,
                'Day': datetime.strptime(shift.date, "%Y-%m-%d").strftime("%A"),
                'Employee': self._employee_name(shift.employee_id),
                'Start': shift.start_time,
                'End': shift.end_time,
                'Hours': shift.hours,
            })
        return pd.DataFrame(data, columns=columns)

    def _create_hours_dataframe(self, shifts: List[Shift]) -> pd.DataFrame:
        columns = ['Employee', 'Shifts', 'Hours']
        if not shifts:
            return pd.DataFrame(columns=columns)
        df = self._create_schedule_dataframe(shifts)
        summary = df.groupby('Employee').agg(Shifts=('Hours', 'size'), Hours=('Hours', 'sum')).reset_index()
        summary['Hours'] = summary['Hours'].round(2)
        return summary[columns]

    def _create_employee_dataframe(self) -> pd.DataFrame:
        data = []
        for emp in self.data_manager.get_employees():
            data.append({
                'ID': emp.id,
                'Name': emp.name,
                'Role': emp.role,
                'Color': emp.color
            })
        return pd.DataFrame(data, columns=['ID', 'Name', 'Role', 'Color'])

    def _format_excel_worksheets(self, writer):
        """Header styling and column widths for every sheet"""
        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_font = Font(color="FFFFFF", bold=True)

        for worksheet in writer.sheets.values():
            for cell in worksheet[1]:
                cell.fill = header_fill
                cell.font = header_font

            for column in worksheet.columns:
                max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
                worksheet.column_dimensions[column[0].column_letter].width = min(max_length + 2, 50)

    def export_week_csv(self, week_day: date, output_path: str) -> bool:
        """Export a week's shifts to CSV format"""
        try:
            self._create_schedule_dataframe(self._week_shifts(week_day)).to_csv(output_path, index=False)
            return True

        except Exception as e:
            logging.error(f"Week CSV export to {output_path} failed: {e}", exc_info=True)
            return False


class ExportManager:
    """Format dispatch and file naming for week exports"""

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.report_generator = ReportGenerator(data_manager)

    def export_week(self, week_day: date, format_type: str, output_path: str) -> bool:
        """Export the week containing week_day in the specified format"""
        if format_type.lower() == 'pdf':
            return self.report_generator.export_week_pdf(week_day, output_path)
        elif format_type.lower() == 'excel':
            return self.report_generator.export_week_excel(week_day, output_path)
        elif format_type.lower() == 'csv':
            return self.report_generator.export_week_csv(week_day, output_path)
        else:
            raise ValueError(f"Unsupported format: {format_type}")

    def get_default_filename(self, week_day: date, format_type: str) -> str:
        """Suggested file name: week start plus a timestamp"""
        extension = 'xlsx' if format_type.lower() == 'excel' else format_type.lower()
        week_start = get_week_days(week_day)[0]
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        return f"shift_schedule_week_{format_date(week_start)}_{timestamp}.{extension}"

    def batch_export(self, week_day: date, output_dir: str,
                     formats: List[str] = None) -> Dict[str, bool]:
        """Export the week in multiple formats"""
        if formats is None:
            formats = ['pdf', 'excel', 'csv']

        results = {}
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)

        for format_type in formats:
            file_path = output_path / self.get_default_filename(week_day, format_type)
            results[format_type] = self.export_week(week_day, format_type, str(file_path))

        return results
