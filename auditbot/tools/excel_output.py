"""
Action Report Excel Generator

Writes filtered audit actions to a styled Excel workbook:
- "Actions" sheet: title, generation date, filter description, header row,
  alternating row colours, auto-fit widths
- "Summary" sheet: action counts per status with a bar chart
"""
import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import openpyxl
from openpyxl.chart import BarChart, Reference
from openpyxl.styles import Font, PatternFill, Border, Side, Alignment
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

COLUMN_TITLES = {
    "key": "Action Key",
    "description": "Description",
    "status": "Status",
    "risk_level": "Risk Level",
    "audit_name": "Audit",
    "audit_lead": "Audit Lead",
    "responsible_email": "Responsible",
    "c_level": "C-Level",
    "audit_year": "Audit Year",
    "due_date": "Due Date",
}

RISK_COLORS = {
    "Critical": "C00000",
    "High": "ED942D",
    "Medium": "FFD966",
    "Low": "70AD47",
}


@dataclass
class ReportStyle:
    """Colours and fonts of the report."""
    header_bg: str = "132E57"      # Navy header
    alt_row_bg: str = "F2F2F2"     # Alternating rows
    bar_color: str = "1E8496"      # Teal
    font_family: str = "Arial Narrow"
    title_size: int = 14
    body_size: int = 11
    small_size: int = 10


@dataclass
class ExcelOutput:
    """Container for Excel output."""
    file_path: str
    sheet_count: int
    chart_count: int
    row_count: int


class ExcelGenerator:
    """
    Generate action report workbooks.
    """

    def __init__(self, output_dir: str = ".outputs", style: ReportStyle = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.style = style or ReportStyle()

        self._setup_styles()

    def _setup_styles(self):
        """Create reusable styles."""
        self.header_fill = PatternFill(
            start_color=self.style.header_bg,
            end_color=self.style.header_bg,
            fill_type="solid"
        )
        self.data_font = Font(name=self.style.font_family, size=self.style.body_size)
        self.data_font_bold = Font(name=self.style.font_family, size=self.style.body_size, bold=True)
        self.alt_row_fill = PatternFill(
            start_color=self.style.alt_row_bg,
            end_color=self.style.alt_row_bg,
            fill_type="solid"
        )
        self.cell_border = Border(bottom=Side(style='thin', color='808080'))

    def _banner(self, ws, row: int, width: int, text: str, size: int, bold: bool = False):
        if width > 1:
            ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=width)
        cell = ws.cell(row=row, column=1, value=text)
        cell.font = Font(name=self.style.font_family, size=size, bold=bold, color="FFFFFF")
        cell.fill = self.header_fill
        cell.alignment = Alignment(horizontal='center', vertical='center')
        return cell

    def create_action_report(
        self,
        data: List[Dict[str, Any]],
        title: str = "Audit Actions Report",
        columns: List[str] = None,
        filter_description: Optional[str] = None,
        include_summary: bool = True,
    ) -> ExcelOutput:
        """
        Create an action report workbook.

        Args:
            data: Action rows keyed by logical column name
            title: Report title
            columns: Logical columns to include (default: all columns of the first row)
            filter_description: Human-readable filters shown under the title
            include_summary: Whether to add the per-status summary sheet

        Returns:
            ExcelOutput with file path and metadata
        """
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Actions"

        if columns is None:
            columns = list(data[0].keys()) if data else list(COLUMN_TITLES)
        headers = [COLUMN_TITLES.get(c, c) for c in columns]

        self._banner(ws, 1, len(columns), title, self.style.title_size, bold=True)
        ws.row_dimensions[1].height = 30
        self._banner(ws, 2, len(columns), f"Generated: {datetime.now().strftime('%B %d, %Y')}", self.style.small_size)
        if filter_description:
            self._banner(ws, 3, len(columns), f"Filters: {filter_description}", self.style.small_size)

        header_row = 5
        for col_idx, header in enumerate(headers, 1):
            cell = ws.cell(row=header_row, column=col_idx, value=header)
            cell.font = self.data_font_bold
            cell.border = self.cell_border
            cell.alignment = Alignment(horizontal='center')
        ws.freeze_panes = ws.cell(row=header_row + 1, column=1)

        for row_idx, row_data in enumerate(data, header_row + 1):
            for col_idx, col_name in enumerate(columns, 1):
                value = _cell_value(row_data.get(col_name, ""))
                cell = ws.cell(row=row_idx, column=col_idx, value=value)
                cell.font = self.data_font

                if col_name == "risk_level" and value in RISK_COLORS:
                    cell.font = Font(
                        name=self.style.font_family,
                        size=self.style.body_size,
                        bold=True,
                        color=RISK_COLORS[value],
                    )

                if row_idx % 2 == 0:
                    cell.fill = self.alt_row_fill

        # Auto-fit columns
        for col_idx, (col_name, header) in enumerate(zip(columns, headers), 1):
            max_length = max(
                len(str(header)),
                max((len(str(_cell_value(row.get(col_name, "")))) for row in data), default=0)
            )
            ws.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, 50)

        chart_count = 0
        sheet_count = 1
        if include_summary and data:
            self._add_status_summary(wb, data)
            sheet_count += 1
            chart_count += 1

        safe_title = "".join(c if c.isalnum() else "_" for c in title)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        file_path = self.output_dir / f"{safe_title}_{timestamp}.xlsx"
        wb.save(file_path)
        logger.info(f"Wrote {len(data)} actions to {file_path}")

        return ExcelOutput(
            file_path=str(file_path),
            sheet_count=sheet_count,
            chart_count=chart_count,
            row_count=len(data),
        )

    def _add_status_summary(self, wb, data: List[Dict[str, Any]]):
        """Add a sheet with action counts per status and a bar chart."""
        ws = wb.create_sheet("Summary")
        counts = Counter(str(_cell_value(row.get("status", "")) or "Unknown") for row in data)

        for col_idx, header in enumerate(("Status", "Actions"), 1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = self.data_font_bold
            cell.border = self.cell_border

        for row_idx, (status, count) in enumerate(sorted(counts.items()), 2):
            ws.cell(row=row_idx, column=1, value=status).font = self.data_font
            ws.cell(row=row_idx, column=2, value=count).font = self.data_font
        ws.column_dimensions["A"].width = max(len(s) for s in counts) + 4

        chart = BarChart()
        chart.type = "col"
        chart.style = 10
        chart.title = "Actions by Status"
        chart.width = 15
        chart.height = 7.5

        last_row = len(counts) + 1
        values = Reference(ws, min_col=2, min_row=2, max_row=last_row)
        categories = Reference(ws, min_col=1, min_row=2, max_row=last_row)
        chart.add_data(values, titles_from_data=False)
        chart.set_categories(categories)
        if chart.series:
            chart.series[0].graphicalProperties.solidFill = self.style.bar_color

        ws.add_chart(chart, "D2")


def _cell_value(value: Any) -> Any:
    """Blank out pandas missing values."""
    if value is None:
        return ""
    if isinstance(value, float) and value != value:
        return ""
    return value


def get_excel_generator(output_dir: str = ".outputs") -> ExcelGenerator:
    """Get Excel generator instance."""
    return ExcelGenerator(output_dir)
