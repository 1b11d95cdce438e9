"""
Advisory Excel Export Service.
Generates Excel workbooks for fertilizer plans and irrigation schedules.
"""
from io import BytesIO
from datetime import datetime
from typing import Any, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from agroadvisor.services.fertilizer_planner import FertilizerPlan, render_decision_path
from agroadvisor.services.irrigation_scheduler import IrrigationPlan

BRAND_GREEN = "15803D"
HEADER_BG = "DCFCE7"


class AdvisoryExcelService:
    """Service for generating advisory Excel reports."""

    def __init__(self):
        self.header_fill = PatternFill(start_color=BRAND_GREEN, end_color=BRAND_GREEN, fill_type="solid")
        self.header_font = Font(bold=True, color="FFFFFF", size=11)
        self.title_font = Font(bold=True, size=16, color=BRAND_GREEN)
        self.subtitle_font = Font(bold=True, size=12, color=BRAND_GREEN)
        self.light_fill = PatternFill(start_color=HEADER_BG, end_color=HEADER_BG, fill_type="solid")
        self.border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

    def _apply_header_style(self, ws, row_num: int, max_col: int):
        for col in range(1, max_col + 1):
            cell = ws.cell(row=row_num, column=col)
            cell.fill = self.header_fill
            cell.font = self.header_font
            cell.alignment = Alignment(horizontal='center', vertical='center', wrap_text=True)
            cell.border = self.border

    def _write_table(self, ws, start_row: int, headers, rows) -> int:
        """Write a header row plus striped body rows; returns the next free row."""
        for col, header in enumerate(headers, 1):
            ws.cell(row=start_row, column=col, value=header)
        self._apply_header_style(ws, start_row, len(headers))

        row = start_row + 1
        for values in rows:
            for col, value in enumerate(values, 1):
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = self.border
                if (row - start_row) % 2 == 0:
                    cell.fill = self.light_fill
            row += 1
        return row

    def _auto_adjust_columns(self, ws):
        for column in ws.columns:
            max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            column_letter = get_column_letter(column[0].column)
            ws.column_dimensions[column_letter].width = min(max(max_length + 2, 12), 50)

    def _title(self, ws, title: str) -> int:
        ws.cell(row=1, column=1, value=title).font = self.title_font
        ws.merge_cells('A1:E1')
        ws.cell(row=2, column=1, value=f"Generated: {datetime.now().strftime('%d/%m/%Y %H:%M')}").font = Font(italic=True)
        return 4

    @staticmethod
    def _save(wb: Workbook) -> BytesIO:
        buffer = BytesIO()
        wb.save(buffer)
        buffer.seek(0)
        return buffer

    def generate_fertilizer_plan_excel(self, plan: FertilizerPlan, farm_name: Optional[str] = None) -> BytesIO:
        """Workbook with Summary, Fertilizers and Schedule sheets."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Summary"
        row = self._title(ws, "FERTILIZER PLAN")

        info = [
            ("Farm:", farm_name or "N/A"),
            ("Crop:", plan.crop_type),
            ("Soil type:", plan.soil_type),
            ("Previous crop:", plan.previous_crop or "N/A"),
            ("Confidence (%):", plan.confidence),
            (f"Total cost ({plan.currency}):", plan.total_cost),
            ("Budget scaling applied:", "Yes" if plan.budget_applied else "No"),
            ("Decision path:", render_decision_path(plan)),
        ]
        for label, value in info:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)
            row += 1
        self._auto_adjust_columns(ws)

        ws_lines = wb.create_sheet("Fertilizers")
        ws_lines.cell(row=1, column=1, value="RECOMMENDED FERTILIZERS").font = self.subtitle_font
        next_row = self._write_table(
            ws_lines, 3,
            ["Fertilizer", "Amount", "Unit", "Method", "Timing", "Priority", "Reason", "Expected Benefit"],
            [
                (line.fertilizer_type, line.amount, line.unit, line.application_method,
                 line.timing.value, line.priority, line.reason, line.expected_benefit)
                for line in plan.fertilizers
            ],
        )
        if not plan.fertilizers:
            ws_lines.cell(row=next_row, column=1, value="No amendments required")
        self._auto_adjust_columns(ws_lines)

        ws_schedule = wb.create_sheet("Schedule")
        ws_schedule.cell(row=1, column=1, value="APPLICATION SCHEDULE").font = self.subtitle_font
        self._write_table(
            ws_schedule, 3,
            ["Date", "Fertilizer", "Amount (kg)", "Method", "Notes"],
            [
                (entry.date.isoformat(), entry.fertilizer, entry.amount, entry.method, entry.notes)
                for entry in plan.schedule
            ],
        )
        self._auto_adjust_columns(ws_schedule)

        return self._save(wb)

    def generate_irrigation_excel(self, plan: IrrigationPlan, crop_type: str, soil_type: str, area: Any) -> BytesIO:
        """Workbook with a Summary sheet and the 7-day Schedule."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Summary"
        row = self._title(ws, "IRRIGATION SCHEDULE")

        for label, value in [
            ("Crop:", crop_type),
            ("Soil type:", soil_type),
            ("Area (ha):", area),
            ("Total water usage:", plan.water_usage),
            ("Efficiency (%):", plan.efficiency),
        ]:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            ws.cell(row=row, column=2, value=value)
            row += 1

        if plan.recommendations:
            row += 1
            ws.cell(row=row, column=1, value="RECOMMENDATIONS").font = self.subtitle_font
            row += 1
            for text in plan.recommendations:
                ws.cell(row=row, column=1, value=f"• {text}")
                row += 1
        self._auto_adjust_columns(ws)

        ws_schedule = wb.create_sheet("Schedule")
        self._write_table(
            ws_schedule, 1,
            ["Date", "Amount", "Duration", "Reason", "Priority"],
            [
                (s.date.isoformat(), s.amount, s.duration, s.reason, s.priority)
                for s in plan.schedule
            ],
        )
        self._auto_adjust_columns(ws_schedule)

        return self._save(wb)


advisory_excel_service = AdvisoryExcelService()
