"""Unit conversion, slot placement and pagination for Avery 5168 sheets."""

from __future__ import annotations

import math
import re
from typing import Iterator, List, Optional, Sequence, Tuple, TypeVar

from label_errors import LabelConfigurationError
from label_types import Calibration, LabelGeometry, LabelPosition
from .common import (
    DEFAULT_BASE_URL,
    GRID,
    GUTTERS,
    LABEL,
    MARGINS,
    QR_CODE,
    SHEET,
    SLOTS,
    ZONES,
    Dimensions,
    Grid,
    Gutters,
    Margins,
    Zones,
)

T = TypeVar("T")

POINTS_PER_INCH = 72.0
POINTS_PER_MM = 2.834645669

_BOX_PREFIX_RE = re.compile(r"^box[_-]", re.IGNORECASE)
_UPPER_BOX_PREFIX_RE = re.compile(r"^BOX[_-]")
_UUID_RE = re.compile(
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
    re.IGNORECASE,
)
_MAX_DISPLAY_ID = 12
_UUID_DISPLAY_ID = 8


def inches_to_points(inches: float) -> float:
    return inches * POINTS_PER_INCH


def points_to_inches(points: float) -> float:
    return points / POINTS_PER_INCH


def mm_to_points(mm: float) -> float:
    return mm * POINTS_PER_MM


def points_to_mm(points: float) -> float:
    return points / POINTS_PER_MM


def get_label_position(index: int) -> Tuple[float, float]:
    """Return the top-left corner ``(x, y)`` of slot ``index`` in points.

    Coordinates are measured from the top-left corner of the sheet, slots
    run row-major (0 top-left, 1 top-right, 2 bottom-left, 3 bottom-right).
    """

    if not 0 <= index < SLOTS:
        raise ValueError(f"Label slot index {index} outside 0..{SLOTS - 1}")

    column = index % GRID.columns
    row = index // GRID.columns
    x = MARGINS.left_pt + column * (LABEL.width_pt + GUTTERS.horizontal_pt)
    y = MARGINS.top_pt + row * (LABEL.height_pt + GUTTERS.vertical_pt)
    return x, y


def _build_positions() -> Tuple[LabelPosition, ...]:
    positions = []
    for index in range(SLOTS):
        x, y = get_label_position(index)
        positions.append(
            LabelPosition(
                x=x,
                y=y,
                column=index % GRID.columns,
                row=index // GRID.columns,
                index=index,
            )
        )
    return tuple(positions)


LABEL_POSITIONS: Tuple[LabelPosition, ...] = _build_positions()


def label_geometry(
    slot_index: int,
    calibration: Optional[Calibration] = None,
    page_index: int = 0,
) -> LabelGeometry:
    """Return the PDF-space box (origin bottom-left) for a slot.

    The calibration offset is added as given; range checks happen before
    rendering starts.
    """

    position = LABEL_POSITIONS[slot_index]
    offset = calibration or Calibration()

    left = position.x + offset.x
    top = SHEET.height_pt - (position.y + offset.y)
    return LabelGeometry(
        left=left,
        bottom=top - LABEL.height_pt,
        right=left + LABEL.width_pt,
        top=top,
        page_index=page_index,
        slot_index=slot_index,
    )


def calculate_page_count(label_count: int) -> int:
    """Return the number of sheets needed for ``label_count`` labels."""

    if label_count <= 0:
        return 0
    return math.ceil(label_count / SLOTS)


def chunk_into_pages(items: Sequence[T]) -> List[List[T]]:
    """Split ``items`` into consecutive sheets of at most four labels."""

    return [list(items[i:i + SLOTS]) for i in range(0, len(items), SLOTS)]


def paginate(items: Sequence[T]) -> Iterator[Tuple[int, int, T]]:
    """Yield ``(page_index, slot_index, item)`` in input order."""

    for index, item in enumerate(items):
        yield index // SLOTS, index % SLOTS, item


def format_box_id(box_id: str) -> str:
    """Normalize a raw box identifier into the short printed form.

    ``box_``/``box-`` prefixes are dropped, UUIDs keep their first eight
    hex digits, anything else is cut to twelve characters. Always
    uppercase.
    """

    formatted = _BOX_PREFIX_RE.sub("", box_id, count=1)
    formatted = _UPPER_BOX_PREFIX_RE.sub("", formatted, count=1)

    if _UUID_RE.fullmatch(formatted):
        formatted = formatted[:_UUID_DISPLAY_ID]

    if len(formatted) > _MAX_DISPLAY_ID:
        formatted = formatted[:_MAX_DISPLAY_ID]

    return formatted.upper()


def generate_box_url(box_id: str, base_url: Optional[str] = None) -> str:
    """Return the box page URL encoded into the QR code."""

    base = base_url or DEFAULT_BASE_URL
    return f"{base}/box/{box_id}"


def validate_layout(
    sheet: Dimensions = SHEET,
    label: Dimensions = LABEL,
    margins: Margins = MARGINS,
    gutters: Gutters = GUTTERS,
    grid: Grid = GRID,
    zones: Zones = ZONES,
    qr_size: float = QR_CODE.size,
) -> None:
    """Raise ``LabelConfigurationError`` if the constants cannot print cleanly."""

    if not math.isclose(zones.total, label.height_pt):
        raise LabelConfigurationError(
            f"Label zones sum to {zones.total:g}pt but the label is "
            f"{label.height_pt:g}pt tall"
        )
    if min(zones.header, zones.qr_body, zones.void) < 0:
        raise LabelConfigurationError("Label zone heights must not be negative")
    if qr_size > zones.qr_body or qr_size > label.width_pt:
        raise LabelConfigurationError(
            f"QR code size {qr_size:g}pt does not fit the "
            f"{label.width_pt:g}x{zones.qr_body:g}pt QR zone"
        )

    used_width = (
        margins.left_pt
        + grid.columns * label.width_pt
        + (grid.columns - 1) * gutters.horizontal_pt
        + margins.right_pt
    )
    used_height = (
        margins.top_pt
        + grid.rows * label.height_pt
        + (grid.rows - 1) * gutters.vertical_pt
        + margins.bottom_pt
    )
    if used_width > sheet.width_pt + 1e-6 or used_height > sheet.height_pt + 1e-6:
        raise LabelConfigurationError(
            f"Label grid needs {used_width:g}x{used_height:g}pt but the sheet "
            f"is {sheet.width_pt:g}x{sheet.height_pt:g}pt"
        )
