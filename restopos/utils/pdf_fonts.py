"""Helpers for configuring Unicode-capable fonts in ReportLab PDFs."""

from __future__ import annotations

import logging
from pathlib import Path

logger = logging.getLogger(__name__)

_FALLBACK_WARNING_EMITTED = False

FONT_NAME = "RestoposUnicode"

FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf",
    "/usr/share/fonts/truetype/noto/NotoSans-Regular.ttf",
    "/System/Library/Fonts/Supplemental/Arial Unicode.ttf",
    r"C:\\Windows\\Fonts\\arial.ttf",
)


def find_unicode_ttf() -> str | None:
    """Return the first installed TTF able to render currency symbols such as the rupee sign."""
    for candidate in FONT_CANDIDATES:
        if Path(candidate).exists():
            return candidate
    return None


def register_pdf_font() -> str:
    """Register a Unicode font for ReportLab and return the font name to use."""
    global _FALLBACK_WARNING_EMITTED

    font_path = find_unicode_ttf()
    if font_path:
        from reportlab.pdfbase import pdfmetrics
        from reportlab.pdfbase.ttfonts import TTFont

        if FONT_NAME not in set(pdfmetrics.getRegisteredFontNames()):
            pdfmetrics.registerFont(TTFont(FONT_NAME, font_path))
        return FONT_NAME

    if not _FALLBACK_WARNING_EMITTED:
        logger.warning("[BILLS] No Unicode TTF font found; currency symbols may render incorrectly.")
        _FALLBACK_WARNING_EMITTED = True
    return "Helvetica"
