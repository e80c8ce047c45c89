"""Avery 5168 sheet geometry: constants and pure layout helpers."""

from .common import (
    CALIBRATION_LIMIT,
    DEFAULT_BASE_URL,
    GRID,
    GUTTERS,
    LABEL,
    MARGINS,
    PAGE_SIZE,
    QR_CODE,
    SHEET,
    SLOTS,
    TYPOGRAPHY,
    ZONES,
)
from .geometry import (
    LABEL_POSITIONS,
    calculate_page_count,
    chunk_into_pages,
    format_box_id,
    generate_box_url,
    get_label_position,
    inches_to_points,
    label_geometry,
    mm_to_points,
    paginate,
    points_to_inches,
    points_to_mm,
    validate_layout,
)

__all__ = [
    "CALIBRATION_LIMIT",
    "DEFAULT_BASE_URL",
    "GRID",
    "GUTTERS",
    "LABEL",
    "LABEL_POSITIONS",
    "MARGINS",
    "PAGE_SIZE",
    "QR_CODE",
    "SHEET",
    "SLOTS",
    "TYPOGRAPHY",
    "ZONES",
    "calculate_page_count",
    "chunk_into_pages",
    "format_box_id",
    "generate_box_url",
    "get_label_position",
    "inches_to_points",
    "label_geometry",
    "mm_to_points",
    "paginate",
    "points_to_inches",
    "points_to_mm",
    "validate_layout",
]
