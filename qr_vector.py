"""Vector QR code generation for label PDFs.

The QR symbol itself (version fit, Reed-Solomon, masking) comes from the
``qrcode`` library. This module turns its module matrix into a compact SVG
path by merging each row's adjacent dark modules into one rectangle.
"""

from __future__ import annotations

import base64
import logging
import re
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Sequence, Tuple

import qrcode
from qrcode.constants import (
    ERROR_CORRECT_H,
    ERROR_CORRECT_L,
    ERROR_CORRECT_M,
    ERROR_CORRECT_Q,
)
from qrcode.exceptions import DataOverflowError

from avery5168.common import QR_CODE
from label_errors import QREncodingError
from label_types import QRCodeData, QRVersionEstimate

logger = logging.getLogger(__name__)

ERROR_CORRECTION_LEVELS: Dict[str, int] = {
    "L": ERROR_CORRECT_L,
    "M": ERROR_CORRECT_M,
    "Q": ERROR_CORRECT_Q,
    "H": ERROR_CORRECT_H,
}

# Alphanumeric capacity per version (1-10) for each error correction level.
_CAPACITY_TABLE: Dict[str, Tuple[int, ...]] = {
    "L": (25, 47, 77, 114, 154, 195, 224, 279, 335, 395),
    "M": (20, 38, 61, 90, 122, 154, 178, 221, 262, 311),
    "Q": (16, 29, 47, 67, 87, 108, 125, 157, 189, 221),
    "H": (10, 20, 35, 50, 64, 84, 93, 122, 143, 174),
}

_RECT_RE = re.compile(
    r"M(-?[\d.]+),(-?[\d.]+)h(-?[\d.]+)v(-?[\d.]+)h(-?[\d.]+)z"
)

Rect = Tuple[float, float, float, float]


def _error_correction_constant(level: str) -> int:
    try:
        return ERROR_CORRECTION_LEVELS[level.upper()]
    except KeyError:
        available = ", ".join(ERROR_CORRECTION_LEVELS)
        raise ValueError(
            f"Unknown error correction level '{level}'. Available: {available}"
        ) from None


def encode_to_module_matrix(
    content: str,
    error_correction: str = QR_CODE.error_correction,
) -> List[List[bool]]:
    """Return the square QR module grid for ``content``; ``True`` is dark.

    The grid carries no quiet zone.
    """

    qr = qrcode.QRCode(
        error_correction=_error_correction_constant(error_correction),
        border=0,
    )
    qr.add_data(content)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as exc:
        # qrcode 8 overflows to version 41 and raises ValueError
        raise QREncodingError(
            f"Content of {len(content)} characters does not fit any QR version "
            f"at error correction '{error_correction}'"
        ) from exc

    matrix = [[bool(cell) for cell in row] for row in qr.get_matrix()]
    logger.debug(
        "Encoded %d characters into a %dx%d QR (version %s)",
        len(content),
        len(matrix),
        len(matrix),
        qr.version,
    )
    return matrix


def _format_number(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


def generate_optimized_path(modules: Sequence[Sequence[bool]], size: float) -> str:
    """Run-length encode ``modules`` into one SVG path scaled to ``size``.

    Each horizontal run of dark modules becomes a single closed rectangle
    ``M x,y h w v h h -w z``. Run edges are rounded to two decimals and the
    width/height are taken from the rounded edges, so neighbouring runs
    and rows still tile exactly.
    """

    module_count = len(modules)
    if module_count == 0:
        return ""
    module_size = size / module_count
    commands: List[str] = []

    for row in range(module_count):
        top = round(row * module_size, 2)
        height = round(round((row + 1) * module_size, 2) - top, 2)
        run_start: Optional[int] = None

        # One column past the end closes a run that touches the right edge.
        for col in range(module_count + 1):
            is_dark = col < module_count and bool(modules[row][col])

            if is_dark and run_start is None:
                run_start = col
            elif not is_dark and run_start is not None:
                left = round(run_start * module_size, 2)
                width = round(round(col * module_size, 2) - left, 2)
                commands.append(
                    f"M{_format_number(left)},{_format_number(top)}"
                    f"h{_format_number(width)}v{_format_number(height)}"
                    f"h{_format_number(-width)}z"
                )
                run_start = None

    return "".join(commands)


def parse_qr_path(path: str) -> List[Rect]:
    """Return the ``(x, y, width, height)`` rectangles encoded in ``path``."""

    rects: List[Rect] = []
    for match in _RECT_RE.finditer(path):
        x, y, width, height, _ = (float(value) for value in match.groups())
        rects.append((x, y, width, height))
    return rects


def generate_qr_path(
    content: str,
    size: float = QR_CODE.size,
    error_correction: str = QR_CODE.error_correction,
) -> QRCodeData:
    """Encode ``content`` and return its vector path at ``size`` points."""

    modules = encode_to_module_matrix(content, error_correction)
    module_count = len(modules)
    return QRCodeData(
        path=generate_optimized_path(modules, size),
        module_count=module_count,
        module_size=size / module_count,
        size=size,
    )


def generate_qr_svg(
    content: str,
    size: float = QR_CODE.size,
    error_correction: str = QR_CODE.error_correction,
) -> str:
    """Return a standalone SVG document with a white background and the QR path."""

    path = generate_qr_path(content, size, error_correction).path
    dim = _format_number(size)
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{dim}" height="{dim}" '
        f'viewBox="0 0 {dim} {dim}">\n'
        f'  <rect width="{dim}" height="{dim}" fill="white"/>\n'
        f'  <path d="{path}" fill="black"/>\n'
        f"</svg>"
    )


def generate_qr_data_url(
    content: str,
    size: float = QR_CODE.size,
    error_correction: str = QR_CODE.error_correction,
) -> str:
    svg = generate_qr_svg(content, size, error_correction)
    encoded = base64.b64encode(svg.encode("utf-8")).decode("ascii")
    return f"data:image/svg+xml;base64,{encoded}"


def generate_qr_data_urls(
    contents: Sequence[str],
    size: float = QR_CODE.size,
    error_correction: str = QR_CODE.error_correction,
    max_workers: Optional[int] = None,
) -> List[str]:
    """Generate data URLs for ``contents`` concurrently, preserving order."""

    if not contents:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(
            executor.map(
                lambda content: generate_qr_data_url(content, size, error_correction),
                contents,
            )
        )


def estimate_qr_version(
    content: str,
    error_correction: str = "M",
) -> QRVersionEstimate:
    """Estimate the QR version needed for ``content`` from its length.

    Uses the alphanumeric capacity of versions 1-10; longer content is
    reported as version 10.
    """

    capacities = _CAPACITY_TABLE.get(error_correction.upper())
    if capacities is None:
        available = ", ".join(_CAPACITY_TABLE)
        raise ValueError(
            f"Unknown error correction level '{error_correction}'. Available: {available}"
        )

    length = len(content)
    for version, capacity in enumerate(capacities, start=1):
        if length <= capacity:
            return QRVersionEstimate(version=version, modules=17 + version * 4)
    return QRVersionEstimate(version=10, modules=57)
