from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class LabelBox:
    """Box record supplied by the caller for one label."""

    id: str
    name: Optional[str] = None


@dataclass(frozen=True)
class Calibration:
    """Printer offset in points applied to every label on every page."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class QRCodeData:
    path: str
    module_count: int
    module_size: float
    size: float


@dataclass(frozen=True)
class LabelData:
    """One box paired with its QR vector path and printable identifier."""

    box: LabelBox
    qr_path: str
    qr_size: float
    display_id: str


@dataclass(frozen=True)
class LabelPosition:
    x: float
    y: float
    column: int
    row: int
    index: int


@dataclass(frozen=True)
class LabelGeometry:
    left: float
    bottom: float
    right: float
    top: float

    page_index: int = 0
    slot_index: int = 0

    @property
    def width(self) -> float:
        return max(self.right - self.left, 0.0)

    @property
    def height(self) -> float:
        return max(self.top - self.bottom, 0.0)


@dataclass(frozen=True)
class QRVersionEstimate:
    version: int
    modules: int
