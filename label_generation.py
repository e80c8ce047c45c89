"""PDF rendering for Avery 5168 box labels."""

from __future__ import annotations

import logging
import math
from io import BytesIO
from typing import Optional, Sequence

import fitz
from reportlab.pdfgen import canvas

from avery5168.common import (
    CALIBRATION_LIMIT,
    DOCUMENT_AUTHOR,
    DOCUMENT_CREATOR,
    DOCUMENT_SUBJECT,
    DOCUMENT_TITLE,
    PAGE_SIZE,
)
from avery5168.geometry import (
    calculate_page_count,
    chunk_into_pages,
    label_geometry,
    validate_layout,
)
from avery5168.label import draw_label
from label_data import prepare_label_data
from label_errors import CalibrationError, InvalidLabelInputError
from label_types import Calibration, LabelBox, LabelData

logger = logging.getLogger(__name__)

__all__ = [
    "generate_label_pdf",
    "render_label_pdf",
    "render_page_png",
    "validate_boxes",
    "validate_calibration",
    "write_label_pdf",
]


def validate_boxes(boxes: Sequence[LabelBox]) -> None:
    """Reject an empty batch or a box without an id."""

    if not boxes:
        raise InvalidLabelInputError("At least one box is required", context="boxes")
    for index, box in enumerate(boxes):
        if not isinstance(box.id, str) or not box.id.strip():
            raise InvalidLabelInputError(
                f"Box at position {index} has no id",
                context=f"boxes[{index}]",
            )


def validate_calibration(calibration: Optional[Calibration]) -> Calibration:
    """Return ``calibration`` (or the zero offset) if both axes are in range."""

    if calibration is None:
        return Calibration()

    for axis in ("x", "y"):
        value = getattr(calibration, axis)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise CalibrationError(f"Calibration {axis} must be a number")
        if not math.isfinite(value) or abs(value) > CALIBRATION_LIMIT:
            raise CalibrationError(
                f"Calibration {axis} of {value:g}pt is outside "
                f"-{CALIBRATION_LIMIT:g}..{CALIBRATION_LIMIT:g}pt"
            )
    return calibration


def render_label_pdf(
    labels: Sequence[LabelData],
    calibration: Optional[Calibration] = None,
    draw_outline: bool = False,
) -> bytes:
    """Lay out ``labels`` four per sheet and return the PDF bytes.

    The calibration offset is added to every label position as given.
    """

    validate_layout()

    buffer = BytesIO()
    canvas_obj = canvas.Canvas(buffer, pagesize=PAGE_SIZE, invariant=1)
    canvas_obj.setTitle(DOCUMENT_TITLE)
    canvas_obj.setAuthor(DOCUMENT_AUTHOR)
    canvas_obj.setSubject(DOCUMENT_SUBJECT)
    canvas_obj.setCreator(DOCUMENT_CREATOR)

    for page_index, page_labels in enumerate(chunk_into_pages(labels)):
        for slot_index, label in enumerate(page_labels):
            geometry = label_geometry(slot_index, calibration, page_index)
            draw_label(canvas_obj, label, geometry, outline=draw_outline)
        canvas_obj.showPage()

    canvas_obj.save()
    return buffer.getvalue()


def generate_label_pdf(
    boxes: Sequence[LabelBox],
    calibration: Optional[Calibration] = None,
    base_url: Optional[str] = None,
    draw_outline: bool = False,
) -> bytes:
    """Return a print-ready Avery 5168 PDF with one label per box."""

    validate_boxes(boxes)
    offset = validate_calibration(calibration)

    labels = prepare_label_data(boxes, base_url)
    pdf_bytes = render_label_pdf(labels, offset, draw_outline)
    logger.info(
        "Rendered %d label(s) on %d page(s)",
        len(labels),
        calculate_page_count(len(labels)),
    )
    return pdf_bytes


def write_label_pdf(
    output_path: str,
    boxes: Sequence[LabelBox],
    calibration: Optional[Calibration] = None,
    base_url: Optional[str] = None,
    draw_outline: bool = False,
) -> str:
    """Render labels to ``output_path`` and return a summary message."""

    pdf_bytes = generate_label_pdf(boxes, calibration, base_url, draw_outline)
    with open(output_path, "wb") as handle:
        handle.write(pdf_bytes)
    pages = calculate_page_count(len(boxes))
    return f"Wrote {len(boxes)} label(s) on {pages} page(s) to {output_path}"


def render_page_png(pdf_bytes: bytes, page: int = 0, dpi: int = 150) -> bytes:
    """Rasterize one page of a label PDF for on-screen preview."""

    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        if not 0 <= page < doc.page_count:
            raise ValueError(f"Page {page} outside 0..{doc.page_count - 1}")
        pix = doc.load_page(page).get_pixmap(dpi=dpi)
        return pix.tobytes("png")
