"""HTTP API for BoxTrack label generation."""

from __future__ import annotations

import argparse
import logging
import math
import os
from datetime import date
from io import BytesIO
from typing import Any, List, Optional

from dotenv import load_dotenv
from flask import Flask, Response, jsonify, request, send_file

from avery5168.common import CALIBRATION_LIMIT, DEFAULT_BASE_URL
from avery5168.geometry import calculate_page_count, generate_box_url
from box_api import BoxApiError, BoxApiManager
from label_errors import LabelGenerationError, QREncodingError
from label_generation import generate_label_pdf, render_page_png
from label_types import Calibration, LabelBox
from qr_vector import generate_qr_svg

logger = logging.getLogger(__name__)

__all__ = ["create_app", "create_app_from_env", "run_web_app"]

MAX_BOXES_PER_REQUEST = 100


class RequestValidationError(ValueError):
    """The request body or query does not describe a valid label request."""


def _parse_box(entry: Any, index: int) -> LabelBox:
    if not isinstance(entry, dict):
        raise RequestValidationError(f"Box at position {index} must be an object")
    box_id = entry.get("id")
    if not isinstance(box_id, str) or not box_id:
        raise RequestValidationError("Box ID is required")
    name = entry.get("name")
    if name is not None and not isinstance(name, str):
        raise RequestValidationError(f"Box name at position {index} must be a string")
    return LabelBox(id=box_id, name=name)


def _parse_boxes(payload: Any) -> List[LabelBox]:
    if not isinstance(payload, list):
        raise RequestValidationError("boxes must be a list")
    if not payload:
        raise RequestValidationError("At least one box is required")
    if len(payload) > MAX_BOXES_PER_REQUEST:
        raise RequestValidationError(
            f"At most {MAX_BOXES_PER_REQUEST} boxes can be printed per request"
        )
    return [_parse_box(entry, index) for index, entry in enumerate(payload)]


def _parse_axis(payload: dict[str, Any], axis: str) -> float:
    value = payload.get(axis, 0)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RequestValidationError(f"Calibration {axis} must be a number")
    if not math.isfinite(value) or abs(value) > CALIBRATION_LIMIT:
        raise RequestValidationError(
            f"Calibration {axis} must be between -{CALIBRATION_LIMIT:g} "
            f"and {CALIBRATION_LIMIT:g}"
        )
    return float(value)


def _parse_calibration(payload: Any) -> Optional[Calibration]:
    if payload is None:
        return None
    if not isinstance(payload, dict):
        raise RequestValidationError("calibration must be an object")
    return Calibration(x=_parse_axis(payload, "x"), y=_parse_axis(payload, "y"))


def _error(message: str, status: int) -> tuple[Response, int]:
    return jsonify({"error": message}), status


def create_app(
    base_url: Optional[str] = None,
    api_manager: Optional[BoxApiManager] = None,
) -> Flask:
    """Create the Flask app; ``api_manager`` enables box name lookups."""

    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.getenv("FLASK_SECRET_KEY", "boxtrack-labels-api")

    qr_base_url = (base_url or DEFAULT_BASE_URL).rstrip("/")

    def _with_names(boxes: List[LabelBox]) -> List[LabelBox]:
        if api_manager is None:
            return boxes
        try:
            return api_manager.fill_box_names(boxes)
        except BoxApiError as exc:
            logger.warning("Box name lookup failed, using submitted names: %s", exc)
            return boxes

    def _label_error(exc: LabelGenerationError) -> tuple[Response, int]:
        logger.warning("Label generation rejected (%s): %s", exc.context, exc.message)
        status = 422 if isinstance(exc, QREncodingError) else 400
        return _error(exc.message, status)

    @app.route("/api/labels", methods=["POST"])
    # pyright: ignore[reportUnusedFunction]
    def labels_generate() -> Response | tuple[Response, int]:
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            return _error("Invalid input", 400)

        try:
            boxes = _parse_boxes(body.get("boxes"))
            calibration = _parse_calibration(body.get("calibration"))
        except RequestValidationError as exc:
            return _error(str(exc), 400)

        if body.get("fetchDetails"):
            boxes = _with_names(boxes)

        try:
            pdf_bytes = generate_label_pdf(boxes, calibration, qr_base_url)
        except LabelGenerationError as exc:
            return _label_error(exc)
        except Exception:
            logger.exception("Unexpected error in POST /api/labels")
            return _error("An unexpected error occurred", 500)

        label_count = len(boxes)
        response = send_file(
            BytesIO(pdf_bytes),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=f"boxtrack-labels-{date.today().isoformat()}.pdf",
        )
        response.headers["X-Label-Count"] = str(label_count)
        response.headers["X-Page-Count"] = str(calculate_page_count(label_count))
        return response

    @app.route("/api/labels", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def labels_preview() -> Response | tuple[Response, int]:
        box_id = request.args.get("boxId", "")
        if not box_id:
            return _error("Box ID is required", 400)
        output_format = request.args.get("format", "pdf").lower()
        if output_format not in {"pdf", "png"}:
            return _error(f"Unsupported preview format '{output_format}'", 400)

        boxes = _with_names([LabelBox(id=box_id)])
        try:
            pdf_bytes = generate_label_pdf(boxes, base_url=qr_base_url)
            if output_format == "png":
                payload, mimetype, suffix = render_page_png(pdf_bytes), "image/png", "png"
            else:
                payload, mimetype, suffix = pdf_bytes, "application/pdf", "pdf"
        except LabelGenerationError as exc:
            return _label_error(exc)
        except Exception:
            logger.exception("Unexpected error in GET /api/labels")
            return _error("An unexpected error occurred", 500)

        response = send_file(
            BytesIO(payload),
            mimetype=mimetype,
            as_attachment=False,
            download_name=f"label-{box_id}.{suffix}",
        )
        response.headers["X-Label-Count"] = "1"
        response.headers["X-Page-Count"] = "1"
        return response

    @app.route("/api/qr/<box_id>", methods=["GET"])
    # pyright: ignore[reportUnusedFunction]
    def box_qr(box_id: str) -> Response | tuple[Response, int]:
        try:
            svg = generate_qr_svg(generate_box_url(box_id, qr_base_url))
        except LabelGenerationError as exc:
            return _label_error(exc)

        response = Response(svg, mimetype="image/svg+xml")
        response.headers["Cache-Control"] = "public, max-age=31536000, immutable"
        return response

    return app


def create_app_from_env() -> Flask:
    """Create the Flask app using BOXTRACK_* environment variables."""
    load_dotenv()
    api_url = os.getenv("BOXTRACK_API_URL", "")
    api_key = os.getenv("BOXTRACK_API_KEY", "")
    api_manager = (
        BoxApiManager(base_url=api_url, api_key=api_key)
        if api_url and api_key
        else None
    )
    return create_app(
        base_url=os.getenv("BOXTRACK_BASE_URL") or None,
        api_manager=api_manager,
    )


def run_web_app(app: Flask, host: str, port: int) -> None:
    """Serve the label API with the Flask development server."""

    use_reloader_env = os.getenv("USE_RELOADER")
    use_reloader = (
        str(use_reloader_env).lower() in {"1", "true", "yes", "on"}
        if use_reloader_env is not None
        else False
    )
    app.run(host=host, port=port, debug=False, use_reloader=use_reloader)


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for the label API server."""
    parser = argparse.ArgumentParser(
        description="BoxTrack label generator HTTP API"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host/IP for the API (default: 127.0.0.1).",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=4000,
        help="Port for the API (default: 4000).",
    )

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    run_web_app(create_app_from_env(), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
