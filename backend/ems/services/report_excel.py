"""Generate attendance report workbooks (Summary + Attendance Details sheets)."""
import io
from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill

from ems.models.attendance import AttendanceStatus

EXCEL_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# Row background per status
STATUS_FILLS = {
    AttendanceStatus.PRESENT.value: "C6EFCE",
    AttendanceStatus.LATE.value: "FFEB9C",
    AttendanceStatus.ABSENT.value: "FFC7CE",
    AttendanceStatus.LEAVE.value: "D9E1F2",
}
DEFAULT_FILL = "FFFFFF"
HEADER_FILL = "4F81BD"

DETAIL_COLUMNS = [
    ("#", 5),
    ("Employee ID", 15),
    ("Employee Name", 25),
    ("Date", 15),
    ("Clock In", 15),
    ("Clock Out", 15),
    ("Status", 15),
    ("Working Hours", 15),
    ("Late", 10),
    ("Notes", 30),
]
HOURS_COLUMN = 8


def _solid(hex_color):
    return PatternFill(start_color=hex_color, end_color=hex_color, fill_type="solid")


def _fmt_time(t):
    return t.strftime("%H:%M:%S") if t else "N/A"


def _summary_sheet(ws, report_data):
    summary = report_data["summary"]

    ws.merge_cells("A1:D1")
    ws["A1"] = report_data["title"]
    ws["A1"].font = Font(size=16, bold=True)
    ws["A1"].alignment = Alignment(horizontal="center")

    ws["A2"] = "Generated"
    ws["A2"].font = Font(bold=True)
    ws["B2"] = report_data["generated_at"].strftime("%Y-%m-%d %H:%M:%S")

    rows = [
        ("Total Employees", summary["total_employees"]),
        ("Present", summary["total_present"]),
        ("Absent", summary["total_absent"]),
        ("Late", summary["total_late"]),
        ("Leave", summary["total_leave"]),
        ("Average Working Hours", summary["average_working_hours"]),
        ("Start Date", summary["date_range"]["start"][:10]),
        ("End Date", summary["date_range"]["end"][:10]),
    ]
    for label, value in rows:
        ws.append([label, value])
        ws.cell(row=ws.max_row, column=1).font = Font(bold=True)
    ws.cell(row=ws.max_row - 2, column=2).number_format = "0.00"

    ws.column_dimensions["A"].width = 25
    ws.column_dimensions["B"].width = 20


def _details_sheet(ws, attendances):
    ws.append([name for name, _ in DETAIL_COLUMNS])
    for idx, (_, width) in enumerate(DETAIL_COLUMNS, start=1):
        cell = ws.cell(row=1, column=idx)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = _solid(HEADER_FILL)
        cell.alignment = Alignment(horizontal="center")
        ws.column_dimensions[cell.column_letter].width = width
    ws.freeze_panes = "A2"

    for i, attendance in enumerate(attendances, start=1):
        employee = attendance.employee
        ws.append([
            i,
            employee.employee_identifier or "N/A",
            f"{employee.first_name} {employee.last_name}",
            attendance.date.isoformat(),
            _fmt_time(attendance.clock_in),
            _fmt_time(attendance.clock_out),
            attendance.status,
            attendance.working_hours,
            "Yes" if attendance.is_late else "No",
            attendance.notes or "",
        ])
        fill = _solid(STATUS_FILLS.get(attendance.status, DEFAULT_FILL))
        row = ws.max_row
        for col in range(1, len(DETAIL_COLUMNS) + 1):
            ws.cell(row=row, column=col).fill = fill
        ws.cell(row=row, column=HOURS_COLUMN).number_format = "0.00"


def render_attendance_excel(report_data: dict) -> bytes:
    wb = Workbook()
    wb.properties.creator = "Employee Management System"

    summary_ws = wb.active
    summary_ws.title = "Summary"
    _summary_sheet(summary_ws, report_data)

    details_ws = wb.create_sheet("Attendance Details")
    _details_sheet(details_ws, report_data["attendances"])

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()
