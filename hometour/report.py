from __future__ import annotations

import logging
from typing import List, Mapping, Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from PIL import ImageOps

from .config import LOGO_PATH
from .pdfstyle import (
    BASE_TEXT_COLOR,
    BORDER_COLOR,
    FOOTER_LINE,
    MUTED_COLOR,
    PILL_COLOR,
    REPORT_TITLE,
    Fonts,
    load_image,
    new_document,
    output_bytes,
    sanitize_for_pdf,
    setup_fonts,
)
from .scoring import format_score, rating_value
from .survey import CHECKLIST_FIELDS, RATING_FIELDS, REPORT_SECTIONS, ReportSection

logger = logging.getLogger(__name__)

PAGE_MARGIN = 10
PHOTOS_PER_ROW = 3
ROWS_PER_PAGE = 4
MAX_PHOTOS_PER_PAGE = PHOTOS_PER_ROW * ROWS_PER_PAGE
# Pages a section may use for its fields and photos together.
MAX_PAGES_PER_SECTION = 2
PHOTO_GAP = 2
PHOTO_ASPECT = 3 / 4


def chunk_photos(photos: Sequence[str], size: int = MAX_PHOTOS_PER_PAGE) -> List[List[str]]:
    return [list(photos[index : index + size]) for index in range(0, len(photos), size)]


def section_photo_pages(record: Mapping[str, object], section: ReportSection) -> List[List[str]]:
    if not section.photos_key:
        return []
    photos = record.get(section.photos_key)
    if not isinstance(photos, (list, tuple)):
        return []
    return chunk_photos(photos)[:MAX_PAGES_PER_SECTION]


def is_answered(field: str, value: object) -> bool:
    if value is None:
        return False
    if field in RATING_FIELDS:
        return rating_value(value) is not None
    if isinstance(value, (list, tuple, str)):
        return len(value) > 0
    return True


def format_value(value: object) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(item) for item in value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ReportRenderer:
    def __init__(self, record: Mapping[str, object], summary: str, overall_score: float | str | None):
        self.record = record
        self.summary = summary or ""
        self.overall_score = overall_score
        self.pdf: FPDF = new_document()
        self.pdf.set_margins(PAGE_MARGIN, PAGE_MARGIN, PAGE_MARGIN)
        self.pdf.set_auto_page_break(auto=True, margin=PAGE_MARGIN)
        self.fonts: Fonts = setup_fonts(self.pdf)
        self.section_start = 1

    def text(self, value: str) -> str:
        return sanitize_for_pdf(value, self.fonts)

    def render(self) -> bytes:
        self.render_cover()
        for section in REPORT_SECTIONS:
            self.render_section(section)
        return output_bytes(self.pdf)

    def meta_row(self, label: str, value: str) -> None:
        pdf = self.pdf
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 9)
        pdf.set_text_color(*MUTED_COLOR)
        pdf.cell(0, 5, self.text(label), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 11)
        pdf.set_text_color(*BASE_TEXT_COLOR)
        pdf.multi_cell(0, 6, self.text(value), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(1)

    def render_cover(self) -> None:
        pdf = self.pdf
        pdf.add_page()
        if LOGO_PATH.exists():
            try:
                pdf.image(str(LOGO_PATH), w=34)
                pdf.ln(3)
            except (OSError, ValueError, RuntimeError):
                logger.warning("Logo at %s could not be embedded", LOGO_PATH)

        pdf.set_text_color(*BASE_TEXT_COLOR)
        pdf.set_font(self.fonts.bold_family, self.fonts.bold_style, 16)
        pdf.cell(0, 10, self.text(REPORT_TITLE), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.ln(2)

        self.meta_row("Address", str(self.record.get("address") or ""))
        self.meta_row("Date", str(self.record.get("date") or ""))
        self.meta_row("Recipient", str(self.record.get("email") or ""))

        pdf.ln(4)
        pdf.set_font(self.fonts.bold_family, self.fonts.bold_style, 13)
        pdf.cell(0, 8, "Summary", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 11)
        pdf.multi_cell(0, 6, self.text(self.summary), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        if self.overall_score not in (None, ""):
            score = self.overall_score
            if isinstance(score, (int, float)):
                score = format_score(float(score))
            pdf.ln(2)
            pdf.cell(0, 6, self.text(f"Overall score: {score}/5"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

        pdf.ln(4)
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 9)
        pdf.set_text_color(*MUTED_COLOR)
        pdf.cell(0, 5, self.text(FOOTER_LINE), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*BASE_TEXT_COLOR)

    def render_section(self, section: ReportSection) -> None:
        pdf = self.pdf
        pdf.add_page()
        self.section_start = pdf.page
        pdf.set_text_color(*BASE_TEXT_COLOR)
        pdf.set_font(self.fonts.bold_family, self.fonts.bold_style, 13)
        pdf.cell(0, 8, self.text(section.key), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        self.rule()

        for field, label in section.fields:
            value = self.record.get(field)
            if not is_answered(field, value):
                continue
            if field in CHECKLIST_FIELDS and isinstance(value, (list, tuple)):
                if not self.make_room(self.pill_row_height(value)):
                    logger.warning("No room left in %s for %s", section.key, field)
                    continue
                self.pill_row(label, value)
            else:
                text = format_value(value)
                if not self.make_room(self.meta_row_height(text)):
                    logger.warning("No room left in %s for %s", section.key, field)
                    continue
                self.meta_row(label, text)

        pages = section_photo_pages(self.record, section)
        if pages:
            self.photo_grid(pages, section.key)

    def spare_pages(self) -> int:
        return MAX_PAGES_PER_SECTION - (self.pdf.page - self.section_start + 1)

    def make_room(self, height: float) -> bool:
        """Start the section's next page if ``height`` won't fit; False once the section is full."""
        if not self.pdf.will_page_break(height):
            return True
        if self.spare_pages() <= 0:
            return False
        self.pdf.add_page()
        return True

    def meta_row_height(self, value: str) -> float:
        pdf = self.pdf
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 11)
        lines = pdf.multi_cell(0, 6, self.text(value), dry_run=True, output="LINES")
        return 5 + 6 * len(lines) + 1

    def pill_row_height(self, items: Sequence[object]) -> float:
        pdf = self.pdf
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 10)
        x = pdf.l_margin
        rows = 1
        for item in items:
            width = pdf.get_string_width(self.text(str(item))) + 4
            if x + width > pdf.w - pdf.r_margin:
                rows += 1
                x = pdf.l_margin
            x += width + 2
        return 5 + 7 * (rows - 1) + 8

    def rule(self) -> None:
        pdf = self.pdf
        pdf.set_draw_color(*BORDER_COLOR)
        y = pdf.get_y() + 1
        pdf.line(pdf.l_margin, y, pdf.w - pdf.r_margin, y)
        pdf.set_y(y + 3)

    def pill_row(self, label: str, items: Sequence[object]) -> None:
        pdf = self.pdf
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 9)
        pdf.set_text_color(*MUTED_COLOR)
        pdf.cell(0, 5, self.text(label), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*BASE_TEXT_COLOR)
        pdf.set_fill_color(*PILL_COLOR)
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 10)
        right_edge = pdf.w - pdf.r_margin
        for item in items:
            text = self.text(str(item))
            width = pdf.get_string_width(text) + 4
            if pdf.get_x() + width > right_edge:
                pdf.ln(7)
            pdf.cell(width, 6, text, fill=True)
            pdf.set_x(pdf.get_x() + 2)
        pdf.ln(8)

    def photo_grid(self, pages: Sequence[Sequence[str]], section_key: str) -> None:
        """Lay photos out three to a row, twelve to a page, within the section's pages.

        Rows that no longer fit once the section has used its pages are left out.
        """
        pdf = self.pdf
        usable_width = pdf.w - pdf.l_margin - pdf.r_margin
        width = (usable_width - PHOTO_GAP * (PHOTOS_PER_ROW - 1)) / PHOTOS_PER_ROW
        height = width * PHOTO_ASPECT

        if not self.make_room(8 + height):
            logger.warning("No room left in %s for its photos", section_key)
            return
        pdf.ln(2)
        pdf.set_font(self.fonts.regular_family, self.fonts.regular_style, 9)
        pdf.set_text_color(*MUTED_COLOR)
        pdf.cell(0, 5, "Photos", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*BASE_TEXT_COLOR)

        photos = [photo for page in pages for photo in page]
        column = 0
        on_page = 0
        y = pdf.get_y() + 1
        for index, photo in enumerate(photos):
            try:
                image = ImageOps.fit(load_image(photo), (640, 480))
            except (OSError, ValueError) as exc:
                logger.warning("Skipping unreadable photo: %s", exc)
                continue
            if column == 0 and (on_page >= MAX_PHOTOS_PER_PAGE or y + height > pdf.h - pdf.b_margin):
                if self.spare_pages() <= 0:
                    logger.warning("Leaving out %d photos of %s", len(photos) - index, section_key)
                    break
                pdf.add_page()
                y = pdf.t_margin
                on_page = 0
            x = pdf.l_margin + column * (width + PHOTO_GAP)
            pdf.image(image, x=x, y=y, w=width, h=height)
            on_page += 1
            column += 1
            if column == PHOTOS_PER_ROW:
                column = 0
                y += height + PHOTO_GAP
        if column:
            y += height + PHOTO_GAP
        pdf.set_y(min(y, pdf.h - pdf.b_margin))


def render_report_pdf(
    record: Mapping[str, object], summary: str, overall_score: float | str | None = None
) -> bytes:
    return ReportRenderer(record, summary, overall_score).render()
