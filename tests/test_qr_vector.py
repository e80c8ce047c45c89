import base64
import unittest

from label_errors import QREncodingError
from qr_vector import (
    encode_to_module_matrix,
    estimate_qr_version,
    generate_optimized_path,
    generate_qr_data_url,
    generate_qr_data_urls,
    generate_qr_path,
    generate_qr_svg,
    parse_qr_path,
)


def _rebuild_matrix(path: str, module_count: int, size: float) -> list[list[bool]]:
    module_size = size / module_count
    matrix = [[False] * module_count for _ in range(module_count)]
    for x, y, width, _ in parse_qr_path(path):
        row = round(y / module_size)
        start = round(x / module_size)
        end = round((x + width) / module_size)
        for col in range(start, end):
            matrix[row][col] = True
    return matrix


class ModuleMatrixTests(unittest.TestCase):
    def test_matrix_is_square_boolean_grid(self) -> None:
        matrix = encode_to_module_matrix("https://example.com/box/abc123")
        self.assertGreaterEqual(len(matrix), 21)
        for row in matrix:
            self.assertEqual(len(row), len(matrix))
            self.assertTrue(all(isinstance(cell, bool) for cell in row))

    def test_matrix_has_finder_pattern(self) -> None:
        matrix = encode_to_module_matrix("test")
        self.assertEqual(len(matrix), 21)
        self.assertTrue(all(matrix[0][0:7]))
        self.assertFalse(matrix[0][7])

    def test_matrix_is_deterministic(self) -> None:
        self.assertEqual(
            encode_to_module_matrix("box-1", "Q"),
            encode_to_module_matrix("box-1", "Q"),
        )

    def test_higher_error_correction_needs_more_modules(self) -> None:
        content = "https://oubx.vercel.app/box/a1b2c3d4-e5f6-7890-abcd-ef1234567890"
        low = encode_to_module_matrix(content, "L")
        high = encode_to_module_matrix(content, "H")
        self.assertGreater(len(high), len(low))

    def test_unknown_level_rejected(self) -> None:
        with self.assertRaises(ValueError):
            encode_to_module_matrix("test", "X")

    def test_overflow_raises_encoding_error(self) -> None:
        with self.assertRaises(QREncodingError):
            encode_to_module_matrix("x" * 3000, "M")


class OptimizedPathTests(unittest.TestCase):
    def test_merges_horizontal_runs(self) -> None:
        modules = [
            [True, True],
            [False, True],
        ]
        self.assertEqual(
            generate_optimized_path(modules, 10),
            "M0,0h10v5h-10zM5,5h5v5h-5z",
        )

    def test_split_runs_in_one_row(self) -> None:
        modules = [
            [True, False, True, True],
            [False, False, False, False],
            [False, False, False, False],
            [False, False, False, False],
        ]
        self.assertEqual(
            generate_optimized_path(modules, 8),
            "M0,0h2v2h-2zM4,0h4v2h-4z",
        )

    def test_empty_matrix(self) -> None:
        self.assertEqual(generate_optimized_path([], 100), "")
        self.assertEqual(generate_optimized_path([[False]], 100), "")

    def test_rows_tile_after_rounding(self) -> None:
        modules = [[True] * 3 for _ in range(3)]
        self.assertEqual(
            generate_optimized_path(modules, 10),
            "M0,0h10v3.33h-10zM0,3.33h10v3.34h-10zM0,6.67h10v3.33h-10z",
        )

    def test_parse_round_trip(self) -> None:
        path = "M0,0h10v5h-10zM5.5,5h4.25v5h-4.25z"
        self.assertEqual(
            parse_qr_path(path),
            [(0.0, 0.0, 10.0, 5.0), (5.5, 5.0, 4.25, 5.0)],
        )


class GenerateQRPathTests(unittest.TestCase):
    def test_returns_requested_size(self) -> None:
        result = generate_qr_path("https://example.com", 216)
        self.assertEqual(result.size, 216)

    def test_module_count_and_size(self) -> None:
        result = generate_qr_path("https://example.com", 100)
        self.assertGreater(result.module_count, 0)
        self.assertGreater(result.module_size, 0)
        self.assertAlmostEqual(result.module_count * result.module_size, result.size)

    def test_path_uses_rect_commands(self) -> None:
        path = generate_qr_path("test", 100).path
        for command in ("M", "h", "v", "z"):
            self.assertIn(command, path)

    def test_distinct_content_gives_distinct_paths(self) -> None:
        self.assertNotEqual(
            generate_qr_path("content1", 100).path,
            generate_qr_path("content2", 100).path,
        )

    def test_fewer_rects_than_dark_modules(self) -> None:
        content = "https://oubx.vercel.app/box/kitchen-utensils"
        matrix = encode_to_module_matrix(content)
        dark_modules = sum(cell for row in matrix for cell in row)
        rects = parse_qr_path(generate_qr_path(content).path)
        self.assertLess(len(rects), dark_modules)

    def test_path_reproduces_module_matrix(self) -> None:
        for content, size in (
            ("test", 100),
            ("https://oubx.vercel.app/box/abc123", 216),
            ("https://oubx.vercel.app/box/a1b2c3d4-e5f6-7890-abcd-ef1234567890", 216),
        ):
            matrix = encode_to_module_matrix(content)
            result = generate_qr_path(content, size)
            self.assertEqual(
                _rebuild_matrix(result.path, result.module_count, size),
                matrix,
            )


class SvgTests(unittest.TestCase):
    def test_svg_markup(self) -> None:
        svg = generate_qr_svg("test", 150)
        self.assertIn("<svg", svg)
        self.assertIn("</svg>", svg)
        self.assertIn('xmlns="http://www.w3.org/2000/svg"', svg)
        self.assertIn('width="150"', svg)
        self.assertIn('height="150"', svg)
        self.assertIn('viewBox="0 0 150 150"', svg)
        self.assertIn('fill="white"', svg)
        self.assertIn('<path d="M', svg)
        self.assertIn('fill="black"', svg)

    def test_data_url_decodes_to_svg(self) -> None:
        data_url = generate_qr_data_url("test", 100)
        prefix = "data:image/svg+xml;base64,"
        self.assertTrue(data_url.startswith(prefix))
        decoded = base64.b64decode(data_url[len(prefix):]).decode("utf-8")
        self.assertEqual(decoded, generate_qr_svg("test", 100))

    def test_data_urls_preserve_order(self) -> None:
        contents = ["test1", "test2", "test3"]
        urls = generate_qr_data_urls(contents, 100)
        self.assertEqual(urls, [generate_qr_data_url(c, 100) for c in contents])
        self.assertEqual(len(set(urls)), 3)

    def test_data_urls_empty(self) -> None:
        self.assertEqual(generate_qr_data_urls([], 100), [])


class EstimateVersionTests(unittest.TestCase):
    def test_short_content_is_version_one(self) -> None:
        estimate = estimate_qr_version("test", "M")
        self.assertEqual(estimate.version, 1)
        self.assertEqual(estimate.modules, 21)

    def test_longer_content_needs_higher_version(self) -> None:
        content = "https://example.com/very/long/url/path/that/requires/more/capacity"
        estimate = estimate_qr_version(content, "M")
        self.assertGreater(estimate.version, 1)
        self.assertEqual(estimate.modules, 17 + estimate.version * 4)

    def test_capacity_boundaries(self) -> None:
        self.assertEqual(estimate_qr_version("a" * 20, "M").version, 1)
        self.assertEqual(estimate_qr_version("a" * 21, "M").version, 2)
        self.assertEqual(estimate_qr_version("a" * 10, "H").version, 1)
        self.assertEqual(estimate_qr_version("a" * 11, "H").version, 2)

    def test_very_long_content_caps_at_version_ten(self) -> None:
        estimate = estimate_qr_version("a" * 1000, "L")
        self.assertEqual((estimate.version, estimate.modules), (10, 57))

    def test_unknown_level_rejected(self) -> None:
        with self.assertRaises(ValueError):
            estimate_qr_version("test", "Z")


if __name__ == "__main__":
    unittest.main()
