"""
CSV and Excel renderings of a sales report.
"""
import csv
import io
import logging
from typing import Any, Dict

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

# (report key, section title, [(column key, header)])
SECTIONS = [
    ("daily_sales", "Daily Sales", [("date", "Date"), ("orders", "Orders"), ("revenue", "Revenue"), ("avg", "Average")]),
    ("top_items", "Top Items", [("name", "Item"), ("quantity", "Quantity"), ("revenue", "Revenue")]),
    ("payment_methods", "Payment Methods", [("method", "Method"), ("count", "Orders"), ("amount", "Amount")]),
    ("order_types", "Order Types", [("type", "Type"), ("count", "Orders"), ("amount", "Amount")]),
]

SUMMARY_ROWS = [
    ("total_revenue", "Total Revenue"),
    ("total_orders", "Total Orders"),
    ("avg_order_value", "Average Order Value"),
    ("total_customers", "Customers"),
]


class ExportService:
    """Service for exporting sales reports to files."""

    @classmethod
    def export_to_csv(cls, report_data: Dict[str, Any]) -> bytes:
        output = io.StringIO()
        writer = csv.writer(output)
        try:
            writer.writerow(["Sales Report", str(report_data["start"]), str(report_data["end"])])
            writer.writerow([])

            writer.writerow(["Summary"])
            for key, label in SUMMARY_ROWS:
                writer.writerow([label, str(report_data["summary"][key])])
            writer.writerow([])

            for key, title, columns in SECTIONS:
                writer.writerow([title])
                writer.writerow([header for _, header in columns])
                for row in report_data[key]:
                    writer.writerow([str(row[column]) for column, _ in columns])
                writer.writerow([])

            return output.getvalue().encode("utf-8")
        finally:
            output.close()

    @classmethod
    def export_to_xlsx(cls, report_data: Dict[str, Any]) -> bytes:
        wb = Workbook()
        ws = wb.active
        ws.title = "Sales Report"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center")

        row = 1
        ws.cell(row=row, column=1, value=f"Sales Report {report_data['start']} to {report_data['end']}").font = Font(
            bold=True, size=14
        )
        row += 2

        ws.cell(row=row, column=1, value="Summary").font = Font(bold=True, size=12)
        row += 1
        for key, label in SUMMARY_ROWS:
            ws.cell(row=row, column=1, value=label)
            ws.cell(row=row, column=2, value=float(report_data["summary"][key]))
            row += 1
        row += 1

        for key, title, columns in SECTIONS:
            ws.cell(row=row, column=1, value=title).font = Font(bold=True, size=12)
            row += 1
            for col, (_, header) in enumerate(columns, 1):
                cell = ws.cell(row=row, column=col, value=header)
                cell.font = header_font
                cell.fill = header_fill
                cell.alignment = header_alignment
            row += 1
            for item in report_data[key]:
                for col, (column, _) in enumerate(columns, 1):
                    ws.cell(row=row, column=col, value=cls._cell_value(item[column]))
                row += 1
            row += 1

        for index, column in enumerate(ws.columns, 1):
            width = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
            ws.column_dimensions[get_column_letter(index)].width = min(width + 2, 50)

        output = io.BytesIO()
        wb.save(output)
        logger.info(f"Exported sales report {report_data['start']}..{report_data['end']} to xlsx")
        return output.getvalue()

    @staticmethod
    def _cell_value(value):
        # openpyxl writes numbers and dates natively; Decimal goes in as float
        if hasattr(value, "quantize"):
            return float(value)
        return value
