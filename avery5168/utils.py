"""Text fitting helpers for label header rendering."""

from __future__ import annotations

from reportlab.pdfbase.pdfmetrics import getAscent, stringWidth


def spaced_string_width(
    text: str,
    font_name: str,
    font_size: float,
    char_space: float = 0.0,
) -> float:
    """Return the drawn width of ``text`` with ``char_space`` between glyphs.

    The spacing after the last glyph is not counted.
    """

    if not text:
        return 0.0
    width = stringWidth(text, font_name, font_size)
    return width + char_space * (len(text) - 1)


def shrink_fit(
    text: str,
    max_width_pt: float,
    max_font: float,
    min_font: float,
    font_name: str,
    char_space: float = 0.0,
    step: float = 0.5,
) -> float:
    """Return the largest font size that fits within ``max_width_pt``."""

    size = max_font
    step = max(step, 0.25)
    while (
        size >= min_font
        and spaced_string_width(text, font_name, size, char_space) > max_width_pt
    ):
        size -= step
    return max(size, min_font)


def center_baseline(
    font_name: str,
    font_size: float,
    area_top: float,
    area_bottom: float,
) -> float:
    """Return a baseline that vertically centers one line inside the area.

    Uppercase text has no descenders, so the cap block (ascent) is what
    gets centered.
    """

    if area_top <= area_bottom:
        return area_bottom

    ascent = getAscent(font_name) / 1000.0 * font_size
    area_height = area_top - area_bottom
    offset = max((area_height - ascent) / 2.0, 0.0)
    return area_bottom + offset
