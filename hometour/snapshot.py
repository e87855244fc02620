"""Screenshot-style PDF renderer.

Every survey step is brought into view through the navigator, captured as an
image and packed onto A4 pages, the way a browser would print the live steps.
"""
from __future__ import annotations

import asyncio
import base64
import logging
from io import BytesIO
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from fpdf import FPDF
from PIL import Image, ImageDraw, ImageFont, ImageOps

from .navigation import PRINT_STEPS, WizardNavigator
from .pdfstyle import (
    BASE_TEXT_COLOR,
    BORDER_COLOR,
    MUTED_COLOR,
    REPORT_TITLE,
    load_image,
    new_document,
    output_bytes,
)
from .report import format_value, is_answered
from .results import PdfArtifact, StepResult
from .survey import PHOTO_FIELDS, STEP_TITLES, report_filename, section_for_step

logger = logging.getLogger(__name__)

MAX_PHOTOS_PER_SECTION = 24
PHOTO_MAX_WIDTH = 1600
PHOTO_QUALITY = 80

CARD_WIDTH = 794
CARD_SCALE = 2
THUMB_SIZE = (160, 120)

PAGE_WIDTH_MM = 210
PAGE_HEIGHT_MM = 297
PAGE_MARGIN_MM = 10
CAPTURE_GAP_MM = 4
CAPTURE_QUALITY = 90

Capture = Callable[[int, Mapping[str, object]], Union[Image.Image, bytes, None]]


def compress_photo(src: str, max_width: int = PHOTO_MAX_WIDTH, quality: int = PHOTO_QUALITY) -> str:
    try:
        image = load_image(src)
    except (OSError, ValueError):
        return src
    if image.width > max_width:
        ratio = max_width / image.width
        image = image.resize((max_width, round(image.height * ratio)))
    buffer = BytesIO()
    image.convert("RGB").save(buffer, format="JPEG", quality=quality)
    return "data:image/jpeg;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def prepare_print_record(record: Mapping[str, object]) -> Dict[str, object]:
    print_record = dict(record)
    for key in PHOTO_FIELDS:
        photos = record.get(key)
        if not isinstance(photos, (list, tuple)):
            continue
        print_record[key] = [compress_photo(photo) for photo in photos[:MAX_PHOTOS_PER_SECTION]]
    return print_record


class CardRasterizer:
    """Draws a step as a white card: title, label/value rows, photo thumbnails."""

    def __init__(self, width: int = CARD_WIDTH, scale: int = CARD_SCALE) -> None:
        self.scale = scale
        self.width = width * scale
        self.padding = 24 * scale
        self.title_font = ImageFont.load_default(size=18 * scale)
        self.label_font = ImageFont.load_default(size=11 * scale)
        self.value_font = ImageFont.load_default(size=12 * scale)

    def __call__(self, step: int, record: Mapping[str, object]) -> Optional[Image.Image]:
        if step == 1:
            rows = [
                ("Address", str(record.get("address") or "")),
                ("Date", str(record.get("date") or "")),
                ("Recipient", str(record.get("email") or "")),
            ]
            return self.draw_card(STEP_TITLES[step], rows, [])

        section = section_for_step(step)
        if section is None:
            return None
        rows = [
            (label, format_value(record.get(field)))
            for field, label in section.fields
            if is_answered(field, record.get(field))
        ]
        photos: Sequence[str] = []
        if section.photos_key:
            photos = record.get(section.photos_key) or []  # type: ignore[assignment]
        return self.draw_card(section.key, rows, photos)

    def cover(self, record: Mapping[str, object], summary: str) -> Image.Image:
        rows = [
            ("Address", str(record.get("address") or "")),
            ("Date", str(record.get("date") or "")),
            ("Recipient", str(record.get("email") or "")),
        ]
        if summary:
            rows.append(("Summary", summary))
        return self.draw_card(REPORT_TITLE, rows, [])

    def wrap(self, draw: ImageDraw.ImageDraw, text: str, font) -> List[str]:
        max_width = self.width - 2 * self.padding
        lines: List[str] = []
        for paragraph in text.splitlines() or [""]:
            line = ""
            for word in paragraph.split(" "):
                candidate = f"{line} {word}" if line else word
                if line and draw.textlength(candidate, font=font) > max_width:
                    lines.append(line)
                    line = word
                else:
                    line = candidate
            lines.append(line)
        return lines

    def draw_card(self, title: str, rows: Sequence[Tuple[str, str]], photos: Sequence[str]) -> Image.Image:
        s = self.scale
        thumb_w, thumb_h = THUMB_SIZE[0] * s, THUMB_SIZE[1] * s
        per_row = max(1, (self.width - 2 * self.padding) // (thumb_w + 6 * s))
        thumbs: List[Image.Image] = []
        for photo in photos:
            try:
                thumbs.append(ImageOps.fit(load_image(photo), (thumb_w, thumb_h)))
            except (OSError, ValueError) as exc:
                logger.warning("Skipping unreadable photo in snapshot: %s", exc)

        measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))
        wrapped = [(label, self.wrap(measure, value, self.value_font)) for label, value in rows]
        line_height = 16 * s
        height = self.padding * 2 + 28 * s
        for _label, lines in wrapped:
            height += line_height + len(lines) * line_height + 6 * s
        if thumbs:
            rows_of_thumbs = -(-len(thumbs) // per_row)
            height += line_height + rows_of_thumbs * (thumb_h + 6 * s)

        card = Image.new("RGB", (self.width, height), "white")
        draw = ImageDraw.Draw(card)
        draw.rounded_rectangle(
            (0, 0, self.width - 1, height - 1), radius=8 * s, outline=BORDER_COLOR, width=s
        )
        x = self.padding
        y = self.padding
        draw.text((x, y), title, font=self.title_font, fill=BASE_TEXT_COLOR)
        y += 28 * s
        for label, lines in wrapped:
            draw.text((x, y), label, font=self.label_font, fill=MUTED_COLOR)
            y += line_height
            for line in lines:
                draw.text((x, y), line, font=self.value_font, fill=BASE_TEXT_COLOR)
                y += line_height
            y += 6 * s
        if thumbs:
            draw.text((x, y), "Photos", font=self.label_font, fill=MUTED_COLOR)
            y += line_height
            for index, thumb in enumerate(thumbs):
                column, row = index % per_row, index // per_row
                card.paste(thumb, (x + column * (thumb_w + 6 * s), y + row * (thumb_h + 6 * s)))
        return card


class PagePacker:
    """Stacks captured images down A4 pages, starting a new page when one does not fit."""

    def __init__(self, pdf: FPDF) -> None:
        self.pdf = pdf
        self.usable_width = PAGE_WIDTH_MM - PAGE_MARGIN_MM * 2
        self.usable_height = PAGE_HEIGHT_MM - PAGE_MARGIN_MM * 2
        self.y = PAGE_MARGIN_MM
        self.pages = 0

    def add(self, image: Image.Image) -> None:
        px_w, px_h = image.size
        mm_w = self.usable_width
        mm_h = px_h / px_w * mm_w
        if mm_h > self.usable_height:
            mm_h = self.usable_height
            mm_w = px_w / px_h * mm_h
            if mm_w > self.usable_width:
                mm_w = self.usable_width
                mm_h = px_h / px_w * mm_w
        if self.pages == 0 or self.y + mm_h > PAGE_HEIGHT_MM - PAGE_MARGIN_MM:
            self.pdf.add_page()
            self.pages += 1
            self.y = PAGE_MARGIN_MM

        buffer = BytesIO()
        image.convert("RGB").save(buffer, format="JPEG", quality=CAPTURE_QUALITY)
        buffer.seek(0)
        self.pdf.image(buffer, x=PAGE_MARGIN_MM, y=self.y, w=mm_w, h=mm_h)
        self.y += mm_h + CAPTURE_GAP_MM


def _as_image(captured: Union[Image.Image, bytes]) -> Image.Image:
    if isinstance(captured, Image.Image):
        return captured
    image = Image.open(BytesIO(captured))
    image.load()
    return image


class SnapshotRenderer:
    def __init__(
        self,
        navigator: WizardNavigator,
        capture: Capture | None = None,
        step_timeout: float | None = 10.0,
    ) -> None:
        self.navigator = navigator
        self.rasterizer = CardRasterizer()
        self.capture: Capture = capture or self.rasterizer
        self.step_timeout = step_timeout

    async def render(self, record: Mapping[str, object], summary: str) -> StepResult[PdfArtifact]:
        filename = report_filename(record.get("address"), record.get("date"))  # type: ignore[arg-type]
        previous = self.navigator.current()
        try:
            print_record = await asyncio.to_thread(prepare_print_record, record)
            pdf = new_document()
            packer = PagePacker(pdf)
            packer.add(self.rasterizer.cover(print_record, summary))

            for step in PRINT_STEPS:
                self.navigator.go_to(step)
                # Let the step settle before it is captured.
                await asyncio.sleep(0)
                captured = await asyncio.wait_for(
                    asyncio.to_thread(self.capture, step, print_record), self.step_timeout
                )
                if captured is None:
                    continue
                packer.add(_as_image(captured))

            data = output_bytes(pdf)
        except Exception as exc:
            logger.warning("Snapshot PDF failed, falling back to server rendering: %r", exc)
            return StepResult.failure(f"snapshot render failed: {exc!r}")
        finally:
            self.navigator.go_to(previous)

        if not data:
            return StepResult.failure("snapshot render produced no output")
        return StepResult.success(PdfArtifact.from_bytes(data, filename))
