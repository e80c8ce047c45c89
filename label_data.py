"""LabelData preparation: one QR vector path per box."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence

from avery5168.common import QR_CODE
from avery5168.geometry import format_box_id, generate_box_url
from label_errors import QREncodingError
from label_types import LabelBox, LabelData
from qr_vector import generate_qr_path

logger = logging.getLogger(__name__)

__all__ = [
    "box_to_label_data",
    "prepare_label_data",
]


def box_to_label_data(box: LabelBox, base_url: Optional[str] = None) -> LabelData:
    url = generate_box_url(box.id, base_url)
    try:
        qr_data = generate_qr_path(url, QR_CODE.size, QR_CODE.error_correction)
    except QREncodingError as exc:
        raise QREncodingError(
            f"Cannot encode QR code for box '{box.id}': {exc.message}",
            context=box.id,
        ) from exc

    return LabelData(
        box=box,
        qr_path=qr_data.path,
        qr_size=qr_data.size,
        display_id=format_box_id(box.id),
    )


def prepare_label_data(
    boxes: Sequence[LabelBox],
    base_url: Optional[str] = None,
    *,
    max_workers: Optional[int] = None,
) -> List[LabelData]:
    """Build label data for ``boxes`` concurrently, keeping input order.

    Any box that fails to encode fails the whole batch.
    """

    if not boxes:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        labels = list(
            executor.map(lambda box: box_to_label_data(box, base_url), boxes)
        )

    logger.debug("Prepared %d label(s)", len(labels))
    return labels
