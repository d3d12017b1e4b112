"""Employee export: CSV, XLSX and PDF with the display labels as headers."""

import csv
import io
from typing import Any, Dict, List, Sequence
from xml.sax.saxutils import escape

import openpyxl
from openpyxl.styles import Font, Alignment
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from hr_backend.models.employee import Employee, FIELD_LABELS
from hr_backend.services.audit_service import normalize_value

HEADERS = ["ID"] + list(FIELD_LABELS.values())

# Summary columns of the PDF report; the full record does not fit a page.
PDF_FIELDS = (
    "registration_number", "full_name", "position", "department",
    "institutional_email", "cpf", "functional_status",
)


def _cell(field: str, value: Any) -> Any:
    if field == "has_children":
        return "Sim" if value else "Não"
    return normalize_value(value)


def employee_rows(employees: Sequence[Employee]) -> List[Dict[str, Any]]:
    """Map employees to ``{label: value}`` rows."""
    rows = []
    for employee in employees:
        row = {"ID": employee.id}
        for field, label in FIELD_LABELS.items():
            row[label] = _cell(field, getattr(employee, field))
        rows.append(row)
    return rows


def to_csv(employees: Sequence[Employee]) -> bytes:
    """UTF-8 CSV with BOM so spreadsheet tools detect the encoding."""
    buffer = io.StringIO()
    writer = csv.DictWriter(buffer, fieldnames=HEADERS)
    writer.writeheader()
    writer.writerows(employee_rows(employees))
    return buffer.getvalue().encode("utf-8-sig")


def to_xlsx(employees: Sequence[Employee]) -> bytes:
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Funcionários"

    ws.append(HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = Alignment(horizontal="center")

    for row in employee_rows(employees):
        ws.append([row[header] for header in HEADERS])

    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def to_pdf(employees: Sequence[Employee]) -> bytes:
    """A4 landscape report: title, record count and one summary row per employee."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), title="Relatório de Funcionários")
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"]
    cell_style.fontSize = 8
    cell_style.leading = 10

    story = [
        Paragraph("Relatório de Funcionários", styles["Heading1"]),
        Paragraph(f"Total: {len(employees)}", styles["Normal"]),
        Spacer(1, 12),
    ]

    table_data = [[FIELD_LABELS[field] for field in PDF_FIELDS]]
    for employee in employees:
        table_data.append([
            Paragraph(escape(normalize_value(getattr(employee, field)) or ""), cell_style)
            for field in PDF_FIELDS
        ])

    table = Table(table_data, repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 8),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.append(table)

    doc.build(story)
    return buffer.getvalue()
