from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from io import BytesIO

from fpdf import FPDF
from PIL import Image

from .config import FONT_DIR

PDF_FONT_FAMILY = "NotoSans"
PDF_FONT_REGULAR_PATH = FONT_DIR / "NotoSans-Regular.ttf"
PDF_FONT_BOLD_PATH = FONT_DIR / "NotoSans-Bold.ttf"

BASE_TEXT_COLOR = (17, 24, 39)
MUTED_COLOR = (107, 114, 128)
BORDER_COLOR = (229, 231, 235)
PILL_COLOR = (243, 244, 246)

REPORT_TITLE = "Home Tour Notes"
REPORT_AUTHOR = "Walter"
FOOTER_LINE = "Generated by Walter - clean notes, no fluff."


@dataclass(frozen=True)
class Fonts:
    regular_family: str = "Helvetica"
    regular_style: str = ""
    bold_family: str = "Helvetica"
    bold_style: str = "B"

    @property
    def unicode(self) -> bool:
        return self.regular_family == PDF_FONT_FAMILY


def setup_fonts(pdf: FPDF) -> Fonts:
    try:
        if not PDF_FONT_REGULAR_PATH.exists():
            return Fonts()
        pdf.add_font(PDF_FONT_FAMILY, "", str(PDF_FONT_REGULAR_PATH))
        if PDF_FONT_BOLD_PATH.exists():
            pdf.add_font(PDF_FONT_FAMILY, "B", str(PDF_FONT_BOLD_PATH))
            return Fonts(PDF_FONT_FAMILY, "", PDF_FONT_FAMILY, "B")
        return Fonts(PDF_FONT_FAMILY, "", PDF_FONT_FAMILY, "")
    except RuntimeError:
        return Fonts()


def sanitize_for_pdf(text: str, fonts: Fonts | None = None) -> str:
    replacements = {
        "★": "*",
        "’": "'",
        "‘": "'",
        "“": '"',
        "”": '"',
        "–": "-",
        "—": "-",
        "…": "...",
        "€": "EUR",
        "•": "-",
        "™": "TM",
        "️": "",
    }
    for src, dest in replacements.items():
        text = text.replace(src, dest)
    if fonts is None or not fonts.unicode:
        # Core fonts only cover latin-1.
        text = text.encode("latin-1", "replace").decode("latin-1")
    return text


def decode_data_uri(value: str) -> bytes:
    if not isinstance(value, str):
        raise ValueError("photo is not a string")
    payload = value.split(",", 1)[1] if value.startswith("data:") and "," in value else value
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError(f"invalid base64 image payload: {exc}") from exc


def load_image(value: str) -> Image.Image:
    image = Image.open(BytesIO(decode_data_uri(value)))
    image.load()
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")
    return image


def new_document() -> FPDF:
    pdf = FPDF(orientation="P", unit="mm", format="A4")
    pdf.set_title(REPORT_TITLE)
    pdf.set_author(REPORT_AUTHOR)
    return pdf


def output_bytes(pdf: FPDF) -> bytes:
    buffer = BytesIO()
    pdf.output(buffer)
    return buffer.getvalue()
