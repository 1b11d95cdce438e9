"""
Advisory PDF Report Service.
Generates a PDF report for a fertilizer plan.
"""
import io
from datetime import datetime
from typing import Optional
import logging

from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from agroadvisor.services.fertilizer_planner import FertilizerPlan, render_decision_path
from agroadvisor.services.pdf_branding import (
    BRAND_GREEN,
    PDFBrandingContext,
    draw_professional_footer,
    draw_professional_letterhead,
)

logger = logging.getLogger(__name__)

PRIMARY_COLOR = HexColor(BRAND_GREEN)
TEXT_COLOR = HexColor("#374151")
LIGHT_BG = HexColor("#f0fdf4")
GRID_COLOR = HexColor("#d1d5db")

CURRENCY_SYMBOLS = {
    "INR": "Rs. ",
    "USD": "$",
    "EUR": "€",
    "MXN": "$",
}


def get_currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, currency + " ")


def _table_style(header: bool = True) -> TableStyle:
    commands = [
        ('TEXTCOLOR', (0, 0), (-1, -1), TEXT_COLOR),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
        ('PADDING', (0, 0), (-1, -1), 4),
    ]
    if header:
        commands += [
            ('BACKGROUND', (0, 0), (-1, 0), PRIMARY_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), HexColor("#ffffff")),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [HexColor("#ffffff"), LIGHT_BG]),
        ]
    else:
        commands += [
            ('BACKGROUND', (0, 0), (0, -1), LIGHT_BG),
            ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ]
    return TableStyle(commands)


def create_fertilizer_plan_pdf(plan: FertilizerPlan, farm_name: Optional[str] = None) -> bytes:
    """Render the plan summary, fertilizer table, schedule and decision path."""
    buffer = io.BytesIO()
    branding = PDFBrandingContext()

    def header_footer(canvas, doc):
        draw_professional_letterhead(canvas, doc, branding, report_title="FERTILIZER PLAN")
        draw_professional_footer(canvas, doc, branding)

    doc = SimpleDocTemplate(
        buffer,
        pagesize=letter,
        rightMargin=0.6*inch,
        leftMargin=0.6*inch,
        topMargin=1.2*inch,
        bottomMargin=0.7*inch
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'PlanTitle',
        parent=styles['Title'],
        fontSize=16,
        textColor=PRIMARY_COLOR,
        spaceAfter=6,
        alignment=TA_CENTER
    )
    heading_style = ParagraphStyle(
        'PlanHeading',
        parent=styles['Heading2'],
        fontSize=11,
        textColor=PRIMARY_COLOR,
        spaceBefore=8,
        spaceAfter=4
    )
    body_style = ParagraphStyle(
        'PlanBody',
        parent=styles['Normal'],
        fontSize=8,
        textColor=TEXT_COLOR,
        spaceAfter=3
    )

    symbol = get_currency_symbol(plan.currency)
    story = [Paragraph("FERTILIZER PROGRAM", title_style), Spacer(1, 4)]

    summary = [
        ["Farm:", farm_name or "N/A", "Date:", datetime.now().strftime("%d/%m/%Y")],
        ["Crop:", plan.crop_type, "Soil:", plan.soil_type],
        ["Confidence:", f"{plan.confidence}%", "Total cost:", f"{symbol}{plan.total_cost:,.2f}"],
    ]
    summary_table = Table(summary, colWidths=[0.9*inch, 2.5*inch, 0.9*inch, 2.5*inch])
    summary_table.setStyle(_table_style(header=False))
    story.append(summary_table)

    if plan.budget_applied:
        story.append(Spacer(1, 4))
        story.append(Paragraph(
            "<b>Note:</b> amounts were scaled down proportionally to fit the budget.", body_style
        ))

    story.append(Paragraph("Recommended fertilizers", heading_style))
    if plan.fertilizers:
        rows = [["Fertilizer", "Amount", "Method", "Timing", "Priority", "Reason"]]
        for line in plan.fertilizers:
            rows.append([
                line.fertilizer_type,
                f"{line.amount:g} {line.unit}",
                line.application_method.replace("_", " "),
                line.timing.value.replace("_", " "),
                line.priority,
                Paragraph(line.reason, body_style),
            ])
        table = Table(rows, colWidths=[0.9*inch, 0.8*inch, 1.1*inch, 1.0*inch, 0.7*inch, 2.3*inch])
        table.setStyle(_table_style())
        story.append(table)
    else:
        story.append(Paragraph("Soil test is within range; no amendments required.", body_style))

    if plan.schedule:
        story.append(Paragraph("Application schedule", heading_style))
        rows = [["Date", "Fertilizer", "Amount (kg)", "Method", "Notes"]]
        for entry in plan.schedule:
            rows.append([
                entry.date.strftime("%d/%m/%Y"),
                entry.fertilizer,
                f"{entry.amount:g}",
                entry.method.replace("_", " "),
                Paragraph(entry.notes, body_style),
            ])
        table = Table(rows, colWidths=[0.9*inch, 0.9*inch, 0.9*inch, 1.1*inch, 3.0*inch])
        table.setStyle(_table_style())
        story.append(table)

    story.append(Paragraph("Decision path", heading_style))
    # Base-14 fonts have no arrow glyph
    story.append(Paragraph(render_decision_path(plan).replace("→", "&gt;"), body_style))

    doc.build(story, onFirstPage=header_footer, onLaterPages=header_footer)
    logger.info(f"Fertilizer plan PDF generated for {plan.crop_type} ({len(plan.fertilizers)} lines)")
    return buffer.getvalue()
