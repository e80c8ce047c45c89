import math
import unittest
from dataclasses import replace
from unittest.mock import Mock, patch

import fitz

from avery5168 import ZONES, validate_layout
from label_errors import (
    CalibrationError,
    InvalidLabelInputError,
    LabelConfigurationError,
)
from label_generation import (
    generate_label_pdf,
    render_label_pdf,
    render_page_png,
    validate_calibration,
)
from label_data import prepare_label_data
from label_types import Calibration, LabelBox

WHITE = (1.0, 1.0, 1.0)


def _boxes(count: int) -> list[LabelBox]:
    return [LabelBox(id=f"b{index + 1}") for index in range(count)]


def _white_rects(pdf_bytes: bytes) -> list[list[fitz.Rect]]:
    """Return the QR background squares per page, in drawing order."""

    pages = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        for page in doc:
            pages.append(
                [
                    drawing["rect"]
                    for drawing in page.get_drawings()
                    if drawing.get("fill") == WHITE
                ]
            )
    return pages


class GenerateLabelPdfTests(unittest.TestCase):
    def test_five_boxes_make_two_pages(self) -> None:
        pdf_bytes = generate_label_pdf(_boxes(5))
        self.assertTrue(pdf_bytes.startswith(b"%PDF"))
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            self.assertEqual(doc.page_count, 2)
            first = "".join(doc.load_page(0).get_text().split())
            second = "".join(doc.load_page(1).get_text().split())
            self.assertEqual(doc.load_page(0).rect.width, 612)
            self.assertEqual(doc.load_page(0).rect.height, 792)
        for box_id in ("B1", "B2", "B3", "B4"):
            self.assertIn(box_id, first)
        self.assertNotIn("B5", first)
        self.assertIn("B5", second)

    def test_labels_per_page(self) -> None:
        pages = _white_rects(generate_label_pdf(_boxes(5)))
        self.assertEqual([len(page) for page in pages], [4, 1])

    def test_qr_background_matches_grid(self) -> None:
        rects = _white_rects(generate_label_pdf(_boxes(4)))[0]
        # QR square sits under the 72pt header, centered in the 252pt label.
        expected = [(54, 108), (342, 108), (54, 468), (342, 468)]
        for rect, (x0, y0) in zip(rects, expected):
            self.assertAlmostEqual(rect.x0, x0, places=2)
            self.assertAlmostEqual(rect.y0, y0, places=2)
            self.assertAlmostEqual(rect.width, 216, places=2)
            self.assertAlmostEqual(rect.height, 216, places=2)

    def test_calibration_shifts_every_label(self) -> None:
        boxes = _boxes(6)
        base = _white_rects(generate_label_pdf(boxes))
        shifted = _white_rects(generate_label_pdf(boxes, Calibration(x=10, y=-5)))
        self.assertEqual([len(page) for page in base], [len(page) for page in shifted])
        for base_page, shifted_page in zip(base, shifted):
            for before, after in zip(base_page, shifted_page):
                self.assertAlmostEqual(after.x0 - before.x0, 10, places=2)
                self.assertAlmostEqual(after.y0 - before.y0, -5, places=2)

    def test_document_metadata(self) -> None:
        with fitz.open(stream=generate_label_pdf(_boxes(1)), filetype="pdf") as doc:
            self.assertEqual(doc.metadata["title"], "BoxTrack Labels")
            self.assertEqual(doc.metadata["author"], "BoxTrack")
            self.assertEqual(doc.metadata["subject"], "Box Labels - Avery 5168 Format")

    def test_output_is_repeatable(self) -> None:
        boxes = _boxes(3)
        self.assertEqual(generate_label_pdf(boxes), generate_label_pdf(boxes))

    def test_empty_batch_rejected(self) -> None:
        with self.assertRaises(InvalidLabelInputError) as ctx:
            generate_label_pdf([])
        self.assertEqual(ctx.exception.context, "boxes")

    def test_empty_id_rejected(self) -> None:
        with self.assertRaises(InvalidLabelInputError) as ctx:
            generate_label_pdf([LabelBox(id="ok"), LabelBox(id="  ")])
        self.assertEqual(ctx.exception.context, "boxes[1]")

    def test_out_of_range_calibration_rejected(self) -> None:
        with self.assertRaises(CalibrationError) as ctx:
            generate_label_pdf(_boxes(1), Calibration(x=40, y=0))
        self.assertEqual(ctx.exception.context, "calibration")

    def test_broken_layout_fails_fast(self) -> None:
        bad_zones = replace(ZONES, header=100.0)
        with patch(
            "label_generation.validate_layout",
            lambda: validate_layout(zones=bad_zones),
        ):
            with self.assertRaises(LabelConfigurationError):
                generate_label_pdf(_boxes(1))


class RenderLabelPdfTests(unittest.TestCase):
    @patch("label_generation.draw_label")
    def test_slots_are_row_major_per_page(self, mock_draw: Mock) -> None:
        labels = prepare_label_data(_boxes(6))
        render_label_pdf(labels)

        calls = mock_draw.call_args_list
        self.assertEqual(len(calls), 6)
        drawn = [call.args[1] for call in calls]
        self.assertEqual(drawn, labels)
        geometries = [call.args[2] for call in calls]
        self.assertEqual(
            [(g.page_index, g.slot_index) for g in geometries],
            [(0, 0), (0, 1), (0, 2), (0, 3), (1, 0), (1, 1)],
        )
        self.assertEqual(
            [(g.left, g.top) for g in geometries[:4]],
            [(36, 756), (324, 756), (36, 396), (324, 396)],
        )

    @patch("label_generation.draw_label")
    def test_calibration_added_without_revalidation(self, mock_draw: Mock) -> None:
        labels = prepare_label_data(_boxes(1))
        render_label_pdf(labels, Calibration(x=50, y=50))
        geometry = mock_draw.call_args.args[2]
        self.assertEqual((geometry.left, geometry.top), (86, 706))


class CalibrationValidationTests(unittest.TestCase):
    def test_default_is_zero(self) -> None:
        self.assertEqual(validate_calibration(None), Calibration(0, 0))

    def test_bounds_are_inclusive(self) -> None:
        calibration = Calibration(x=-36, y=36)
        self.assertIs(validate_calibration(calibration), calibration)

    def test_rejects_out_of_range_and_non_finite(self) -> None:
        for calibration in (
            Calibration(x=36.5, y=0),
            Calibration(x=0, y=-37),
            Calibration(x=math.nan, y=0),
            Calibration(x=0, y=math.inf),
        ):
            with self.assertRaises(CalibrationError):
                validate_calibration(calibration)


class RenderPagePngTests(unittest.TestCase):
    def test_renders_png(self) -> None:
        png = render_page_png(generate_label_pdf(_boxes(1)), dpi=36)
        self.assertTrue(png.startswith(b"\x89PNG"))

    def test_rejects_missing_page(self) -> None:
        with self.assertRaises(ValueError):
            render_page_png(generate_label_pdf(_boxes(1)), page=1)


if __name__ == "__main__":
    unittest.main()
