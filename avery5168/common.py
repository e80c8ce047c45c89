"""Shared constants for the Avery 5168 label sheet.

Avery 5168: 4 shipping labels (3.5" x 5.0") per US Letter sheet, 2x2 grid.
Every measurement is kept in inches with a point twin derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass

from reportlab.lib.units import inch


@dataclass(frozen=True)
class Dimensions:
    width: float
    height: float

    @property
    def width_pt(self) -> float:
        return self.width * inch

    @property
    def height_pt(self) -> float:
        return self.height * inch


@dataclass(frozen=True)
class Margins:
    top: float
    bottom: float
    left: float
    right: float

    @property
    def top_pt(self) -> float:
        return self.top * inch

    @property
    def bottom_pt(self) -> float:
        return self.bottom * inch

    @property
    def left_pt(self) -> float:
        return self.left * inch

    @property
    def right_pt(self) -> float:
        return self.right * inch


@dataclass(frozen=True)
class Gutters:
    horizontal: float
    vertical: float

    @property
    def horizontal_pt(self) -> float:
        return self.horizontal * inch

    @property
    def vertical_pt(self) -> float:
        return self.vertical * inch


@dataclass(frozen=True)
class Grid:
    columns: int
    rows: int

    @property
    def labels_per_sheet(self) -> int:
        return self.columns * self.rows


@dataclass(frozen=True)
class Zones:
    """Vertical subdivision of one label, top to bottom, in points."""

    header: float
    qr_body: float
    void: float

    @property
    def total(self) -> float:
        return self.header + self.qr_body + self.void


@dataclass(frozen=True)
class QRCodeSettings:
    size: float
    quiet_zone: float
    error_correction: str
    max_modules: int


@dataclass(frozen=True)
class Typography:
    header_font_name: str
    header_font_size: float
    header_letter_spacing: float
    header_color: str


SHEET = Dimensions(width=8.5, height=11.0)
LABEL = Dimensions(width=3.5, height=5.0)
MARGINS = Margins(top=0.5, bottom=0.5, left=0.5, right=0.5)
GUTTERS = Gutters(horizontal=0.5, vertical=0.0)
GRID = Grid(columns=2, rows=2)

PAGE_SIZE = (SHEET.width_pt, SHEET.height_pt)
SLOTS = GRID.labels_per_sheet

# 1.0" header, 3.0" QR body, 1.0" void for handwriting.
ZONES = Zones(header=72.0, qr_body=216.0, void=72.0)

QR_CODE = QRCodeSettings(
    size=216.0,
    quiet_zone=18.0,
    error_correction="M",
    max_modules=40,
)

TYPOGRAPHY = Typography(
    header_font_name="Courier-Bold",
    header_font_size=18.0,
    header_letter_spacing=4.0,
    header_color="#000000",
)

HEADER_PADDING = 8.0

DEFAULT_BASE_URL = "https://oubx.vercel.app"

DOCUMENT_TITLE = "BoxTrack Labels"
DOCUMENT_AUTHOR = "BoxTrack"
DOCUMENT_SUBJECT = "Box Labels - Avery 5168 Format"
DOCUMENT_CREATOR = "BoxTrack Label Generator"

# Printer calibration may shift labels by at most 0.5" on either axis.
CALIBRATION_LIMIT = 0.5 * inch
