"""Letterhead and footer drawing for advisory PDF reports."""
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from reportlab.lib.colors import HexColor
from reportlab.lib.units import inch

from agroadvisor import config

BRAND_GREEN = "#15803d"


@dataclass
class PDFBrandingContext:
    company_name: str = config.COMPANY_NAME
    company_tagline: Optional[str] = "Agronomic advisory"
    company_email: Optional[str] = None


def draw_professional_letterhead(canvas, doc, branding: PDFBrandingContext, report_title: str,
                                 folio: Optional[str] = None, module_color=None) -> None:
    """Coloured band with company name, report title and folio."""
    color = module_color or HexColor(BRAND_GREEN)
    width, height = doc.pagesize

    canvas.saveState()
    canvas.setFillColor(color)
    canvas.rect(0, height - 0.9 * inch, width, 0.9 * inch, stroke=0, fill=1)

    canvas.setFillColor(HexColor("#ffffff"))
    canvas.setFont("Helvetica-Bold", 14)
    canvas.drawString(doc.leftMargin, height - 0.45 * inch, branding.company_name)
    if branding.company_tagline:
        canvas.setFont("Helvetica", 8)
        canvas.drawString(doc.leftMargin, height - 0.65 * inch, branding.company_tagline)

    canvas.setFont("Helvetica-Bold", 10)
    canvas.drawRightString(width - doc.rightMargin, height - 0.45 * inch, report_title)
    if folio:
        canvas.setFont("Helvetica", 8)
        canvas.drawRightString(width - doc.rightMargin, height - 0.65 * inch, folio)
    canvas.restoreState()


def draw_professional_footer(canvas, doc, branding: PDFBrandingContext) -> None:
    """Page number and generation timestamp."""
    width, _ = doc.pagesize
    canvas.saveState()
    canvas.setFont("Helvetica", 7)
    canvas.setFillColor(HexColor("#6b7280"))
    contact = f" · {branding.company_email}" if branding.company_email else ""
    canvas.drawString(
        doc.leftMargin, 0.4 * inch,
        f"{branding.company_name}{contact} · {datetime.now().strftime('%d/%m/%Y %H:%M')}"
    )
    canvas.drawRightString(width - doc.rightMargin, 0.4 * inch, f"Page {doc.page}")
    canvas.restoreState()
