"""Tri-zone rendering of a single Avery 5168 label.

Top to bottom: header with the formatted box id, the vector QR code on a
white square, and a void zone left blank for handwritten notes.
"""

from __future__ import annotations

from reportlab.lib.colors import HexColor, black, white
from reportlab.pdfgen import canvas

from label_types import LabelData, LabelGeometry
from qr_vector import parse_qr_path
from .common import HEADER_PADDING, TYPOGRAPHY, ZONES
from .utils import center_baseline, shrink_fit, spaced_string_width

_MIN_HEADER_FONT = 8.0


def draw_label(
    canvas_obj: canvas.Canvas,
    label: LabelData,
    geometry: LabelGeometry,
    outline: bool = False,
) -> None:
    header_bottom = geometry.top - ZONES.header
    qr_zone_bottom = header_bottom - ZONES.qr_body

    _draw_header(canvas_obj, label.display_id, geometry, header_bottom)
    _draw_qr(canvas_obj, label, geometry, header_bottom, qr_zone_bottom)

    if outline:
        _draw_outline(canvas_obj, geometry)


def _draw_header(
    canvas_obj: canvas.Canvas,
    display_id: str,
    geometry: LabelGeometry,
    zone_bottom: float,
) -> None:
    text = display_id.upper()
    if not text:
        return

    font_name = TYPOGRAPHY.header_font_name
    char_space = TYPOGRAPHY.header_letter_spacing
    font_size = shrink_fit(
        text,
        geometry.width - 2 * HEADER_PADDING,
        max_font=TYPOGRAPHY.header_font_size,
        min_font=_MIN_HEADER_FONT,
        font_name=font_name,
        char_space=char_space,
    )
    text_width = spaced_string_width(text, font_name, font_size, char_space)
    x = geometry.left + (geometry.width - text_width) / 2.0
    baseline = center_baseline(font_name, font_size, geometry.top, zone_bottom)

    text_obj = canvas_obj.beginText(x, baseline)
    text_obj.setFont(font_name, font_size)
    text_obj.setCharSpace(char_space)
    text_obj.setFillColor(HexColor(TYPOGRAPHY.header_color))
    text_obj.textOut(text)
    canvas_obj.drawText(text_obj)


def _draw_qr(
    canvas_obj: canvas.Canvas,
    label: LabelData,
    geometry: LabelGeometry,
    zone_top: float,
    zone_bottom: float,
) -> None:
    size = label.qr_size
    left = geometry.left + (geometry.width - size) / 2.0
    top = zone_top - ((zone_top - zone_bottom) - size) / 2.0

    canvas_obj.saveState()
    canvas_obj.setFillColor(white)
    canvas_obj.rect(left, top - size, size, size, stroke=0, fill=1)

    # SVG path coordinates grow downward from the QR's top-left corner.
    canvas_obj.translate(left, top)
    canvas_obj.scale(1, -1)
    path = canvas_obj.beginPath()
    for x, y, width, height in parse_qr_path(label.qr_path):
        path.rect(x, y, width, height)
    canvas_obj.setFillColor(black)
    canvas_obj.drawPath(path, stroke=0, fill=1)
    canvas_obj.restoreState()


def _draw_outline(canvas_obj: canvas.Canvas, geometry: LabelGeometry) -> None:
    canvas_obj.saveState()
    canvas_obj.setLineWidth(0.5)
    canvas_obj.rect(geometry.left, geometry.bottom, geometry.width, geometry.height)
    canvas_obj.restoreState()
