"""Generate attendance report PDFs."""
import io
from html import escape
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer, HRFlowable
)
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_RIGHT

from ems.models.attendance import AttendanceStatus

PDF_MIME_TYPE = "application/pdf"
FOOTER_TEXT = "Employee Management System - Confidential"
HEADER_BLUE = colors.HexColor('#2980b9')

STATUS_COLORS = {
    AttendanceStatus.PRESENT.value: colors.HexColor('#15803d'),
    AttendanceStatus.LATE.value: colors.HexColor('#b45309'),
    AttendanceStatus.ABSENT.value: colors.HexColor('#dc2626'),
    AttendanceStatus.LEAVE.value: colors.HexColor('#1d4ed8'),
}


def _draw_footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 8)
    canvas.setFillColor(colors.grey)
    width, _ = doc.pagesize
    canvas.drawString(doc.leftMargin, 0.35 * inch, FOOTER_TEXT)
    canvas.drawRightString(width - doc.rightMargin, 0.35 * inch, f"Page {doc.page}")
    canvas.restoreState()


def _fmt_time(t):
    return t.strftime('%H:%M:%S') if t else 'N/A'


def render_attendance_pdf(report_data: dict) -> bytes:
    """Landscape A4 report: header, summary block, detail table, page footer."""
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=0.5 * inch,
        leftMargin=0.5 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.6 * inch,
        title=report_data["title"],
    )

    styles = getSampleStyleSheet()
    styles.add(ParagraphStyle(
        name='ReportTitle',
        parent=styles['Heading1'],
        fontSize=18,
        textColor=colors.HexColor('#1e293b'),
        spaceAfter=2,
    ))
    styles.add(ParagraphStyle(
        name='Generated',
        parent=styles['Normal'],
        fontSize=9,
        textColor=colors.HexColor('#64748b'),
        spaceAfter=4,
    ))
    styles.add(ParagraphStyle(
        name='SectionHeader',
        parent=styles['Heading3'],
        fontSize=12,
        textColor=colors.HexColor('#1e293b'),
        spaceBefore=8,
        spaceAfter=4,
    ))
    styles.add(ParagraphStyle(
        name='TableCell',
        parent=styles['Normal'],
        fontSize=8,
        leading=10,
    ))
    styles.add(ParagraphStyle(
        name='TableCellRight',
        parent=styles['Normal'],
        fontSize=8,
        leading=10,
        alignment=TA_RIGHT,
    ))

    story = []
    summary = report_data["summary"]

    # ── Header ────────────────────────────────────────────────────
    story.append(Paragraph(escape(report_data["title"], quote=False), styles['ReportTitle']))
    story.append(Paragraph(
        f"Generated: {report_data['generated_at'].strftime('%Y-%m-%d %H:%M:%S')}",
        styles['Generated'],
    ))
    story.append(HRFlowable(width="100%", thickness=1, color=HEADER_BLUE))
    story.append(Spacer(1, 8))

    # ── Summary ───────────────────────────────────────────────────
    story.append(Paragraph("Summary", styles['SectionHeader']))
    date_range = summary["date_range"]
    sum_rows = [
        ["Total Employees", str(summary["total_employees"]),
         "Average Working Hours", f"{summary['average_working_hours']:.2f}"],
        ["Present", str(summary["total_present"]), "Absent", str(summary["total_absent"])],
        ["Late", str(summary["total_late"]), "Leave", str(summary["total_leave"])],
        ["Date Range", f"{date_range['start'][:10]} to {date_range['end'][:10]}", "", ""],
    ]
    sum_table = Table(sum_rows, colWidths=[1.8 * inch, 2.2 * inch, 1.8 * inch, 1.2 * inch])
    sum_table.setStyle(TableStyle([
        ('FONTSIZE', (0, 0), (-1, -1), 9),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (2, 0), (2, -1), 'Helvetica-Bold'),
        ('TEXTCOLOR', (0, 0), (0, -1), colors.HexColor('#475569')),
        ('TEXTCOLOR', (2, 0), (2, -1), colors.HexColor('#475569')),
        ('ALIGN', (3, 0), (3, -1), 'RIGHT'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#e2e8f0')),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f8fafc')),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 4),
        ('TOPPADDING', (0, 0), (-1, -1), 4),
    ]))
    story.append(sum_table)
    story.append(Spacer(1, 14))

    # ── Attendance Detail ─────────────────────────────────────────
    attendances = report_data["attendances"]
    story.append(Paragraph(f"Attendance Details ({len(attendances)} records)", styles['SectionHeader']))

    header = ["#", "Emp ID", "Employee", "Date", "Clock In", "Clock Out", "Status", "Hours", "Late"]
    table_data = [header]
    style_cmds = [
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_BLUE),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('ALIGN', (7, 0), (7, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.25, colors.HexColor('#cbd5e1')),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
    ]

    for i, attendance in enumerate(attendances, start=1):
        employee = attendance.employee
        table_data.append([
            str(i),
            employee.employee_identifier or 'N/A',
            Paragraph(escape(f"{employee.first_name} {employee.last_name}", quote=False), styles['TableCell']),
            attendance.date.strftime('%a %b %d %Y'),
            _fmt_time(attendance.clock_in),
            _fmt_time(attendance.clock_out),
            attendance.status.upper(),
            f"{attendance.working_hours:.2f}",
            "Yes" if attendance.is_late else "No",
        ])
        color = STATUS_COLORS.get(attendance.status)
        if color is not None:
            style_cmds.append(('TEXTCOLOR', (6, i), (6, i), color))
        if i % 2 == 0:
            style_cmds.append(('BACKGROUND', (0, i), (-1, i), colors.HexColor('#f8fafc')))

    col_widths = [0.4 * inch, 1.0 * inch, 2.4 * inch, 1.4 * inch, 0.9 * inch,
                  0.9 * inch, 0.9 * inch, 0.7 * inch, 0.5 * inch]
    # repeatRows keeps the header on every page the table flows onto
    detail_table = Table(table_data, colWidths=col_widths, repeatRows=1)
    detail_table.setStyle(TableStyle(style_cmds))
    story.append(detail_table)

    doc.build(story, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
    return buffer.getvalue()
