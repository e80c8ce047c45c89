#!/usr/bin/env python3
"""Generate Avery 5168 box label sheets from the command line."""

from __future__ import annotations

import argparse
import json
import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence

from dotenv import load_dotenv

from avery5168.common import CALIBRATION_LIMIT, DEFAULT_BASE_URL
from box_api import BoxApiManager
from label_errors import LabelGenerationError
from label_generation import write_label_pdf
from label_types import Calibration, LabelBox

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "boxtrack-labels.pdf"


def _box_from_json(entry: Any) -> LabelBox:
    if isinstance(entry, str):
        return LabelBox(id=entry.strip())
    if isinstance(entry, dict):
        name = entry.get("name")
        return LabelBox(
            id=str(entry.get("id") or "").strip(),
            name=str(name).strip() if name else None,
        )
    raise SystemExit(f"Unsupported box entry in input file: {entry!r}")


def read_boxes_file(path: Path) -> List[LabelBox]:
    """Read boxes from a JSON list or a text file with one ``id[,name]`` per line."""

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SystemExit(f"Cannot read input file '{path}': {exc}") from exc

    if path.suffix.lower() == ".json":
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SystemExit(f"Invalid JSON in '{path}': {exc}") from exc
        if isinstance(payload, dict):
            payload = payload.get("boxes", [])
        if not isinstance(payload, list):
            raise SystemExit(f"Expected a list of boxes in '{path}'")
        return [_box_from_json(entry) for entry in payload]

    boxes: List[LabelBox] = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        box_id, _, name = line.partition(",")
        boxes.append(LabelBox(id=box_id.strip(), name=name.strip() or None))
    return boxes


def _calibration_value(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"'{raw}' is not a number") from exc
    if abs(value) > CALIBRATION_LIMIT:
        raise argparse.ArgumentTypeError(
            f"calibration must be between -{CALIBRATION_LIMIT:g} and "
            f"{CALIBRATION_LIMIT:g} points"
        )
    return value


def collect_boxes(args: argparse.Namespace) -> List[LabelBox]:
    boxes = [LabelBox(id=box_id) for box_id in args.ids]
    if args.input:
        boxes.extend(read_boxes_file(Path(args.input)))

    if args.from_api:
        api_manager = BoxApiManager(base_url=args.api_url, api_key=args.api_key)
        try:
            boxes.extend(api_manager.list_boxes(args.name_pattern))
        finally:
            api_manager.close()
    return boxes


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="BoxTrack boxes -> Avery 5168 label PDF (4 per sheet)"
    )
    parser.add_argument(
        "ids",
        nargs="*",
        help="Box ids to print, in order.",
    )
    parser.add_argument(
        "-i", "--input",
        help="JSON list of boxes or a text file with one 'id[,name]' per line.",
    )
    parser.add_argument(
        "--from-api",
        action="store_true",
        help="Append every box returned by the box API.",
    )
    parser.add_argument(
        "-n", "--name-pattern",
        help="Case-insensitive regex filter on box names (with --from-api).",
    )
    parser.add_argument(
        "-o", "--output",
        default=DEFAULT_OUTPUT,
        help=f"Output PDF path (default: {DEFAULT_OUTPUT}).",
    )
    parser.add_argument(
        "-x", "--calibration-x",
        type=_calibration_value,
        default=0.0,
        help="Horizontal printer offset in points (-36..36).",
    )
    parser.add_argument(
        "-y", "--calibration-y",
        type=_calibration_value,
        default=0.0,
        help="Vertical printer offset in points (-36..36, positive moves down).",
    )
    parser.add_argument(
        "--base-url",
        default=os.getenv("BOXTRACK_BASE_URL") or DEFAULT_BASE_URL,
        help=(
            "Base URL encoded into QR codes (defaults to BOXTRACK_BASE_URL "
            "from the environment/.env)."
        ),
    )
    parser.add_argument(
        "--api-url",
        default=os.getenv("BOXTRACK_API_URL"),
        help="Box API URL (defaults to BOXTRACK_API_URL from the environment/.env).",
    )
    parser.add_argument(
        "--api-key",
        default=os.getenv("BOXTRACK_API_KEY"),
        help="Box API key (defaults to BOXTRACK_API_KEY from the environment/.env).",
    )
    parser.add_argument(
        "-d", "--draw-outline",
        action="store_true",
        help="Draw outline around every label",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for generating the label PDF."""

    load_dotenv()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        boxes = collect_boxes(args)
    except RuntimeError as exc:
        raise SystemExit(str(exc)) from exc

    if not boxes:
        print("No boxes given; no output generated.")
        return 1

    calibration = Calibration(x=args.calibration_x, y=args.calibration_y)
    try:
        message = write_label_pdf(
            args.output,
            boxes,
            calibration=calibration,
            base_url=args.base_url,
            draw_outline=args.draw_outline,
        )
    except LabelGenerationError as exc:
        logger.error("Label generation failed (%s): %s", exc.context, exc.message)
        return 2

    print(message)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
