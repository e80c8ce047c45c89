"""Box lookup against the hosted BoxTrack database REST endpoint."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx

from label_types import LabelBox

logger = logging.getLogger(__name__)

# Default timeout (in seconds) for box API requests.
DEFAULT_TIMEOUT = 30

BOXES_ENDPOINT = "/rest/v1/boxes"


class BoxApiError(RuntimeError):
    """The box API could not be reached or answered with an error."""


@dataclass
class BoxApiManager:
    """Read-only access to the ``boxes`` table for label generation."""

    base_url: str
    api_key: str
    timeout: int = DEFAULT_TIMEOUT
    transport: Optional[httpx.BaseTransport] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        base_clean = (self.base_url or "").rstrip("/")
        if not base_clean:
            raise RuntimeError("Box API base URL is required.")
        if not self.api_key:
            raise RuntimeError("Box API key is required.")

        self.base_url = base_clean
        self._client = httpx.Client(
            base_url=base_clean,
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/json",
            },
            timeout=self.timeout,
            transport=self.transport,
        )

    def close(self) -> None:
        self._client.close()

    def list_boxes(self, name_pattern: Optional[str] = None) -> List[LabelBox]:
        """Return all live boxes, newest first, optionally filtered by name regex."""

        rows = self._get_rows(
            {
                "select": "id,label",
                "deleted_at": "is.null",
                "order": "created_at.desc",
            }
        )
        boxes = [self._to_label_box(row) for row in rows if row.get("id")]

        if not name_pattern:
            return boxes

        try:
            name_re = re.compile(name_pattern, re.IGNORECASE)
        except re.error as exc:
            raise SystemExit(
                f"Invalid --name-pattern regex '{name_pattern}': {exc}"
            ) from exc
        return [box for box in boxes if name_re.search(box.name or "")]

    def get_box_names(self, box_ids: Sequence[str]) -> Dict[str, str]:
        """Map each known, non-deleted box id to its label text."""

        ids = [box_id for box_id in dict.fromkeys(box_ids) if box_id]
        if not ids:
            return {}

        rows = self._get_rows(
            {
                "select": "id,label",
                "id": f"in.({','.join(self._quote(box_id) for box_id in ids)})",
                "deleted_at": "is.null",
            }
        )
        names: Dict[str, str] = {}
        for row in rows:
            box_id = self._as_str(row.get("id"))
            label = self._as_str(row.get("label")).strip()
            if box_id and label:
                names[box_id] = label
        return names

    def fill_box_names(self, boxes: Sequence[LabelBox]) -> List[LabelBox]:
        """Replace box names with stored labels, keeping submitted names as fallback."""

        names = self.get_box_names([box.id for box in boxes])
        return [
            LabelBox(id=box.id, name=names.get(box.id) or box.name)
            for box in boxes
        ]

    def _get_rows(self, params: Dict[str, str]) -> List[Dict[str, Any]]:
        try:
            response = self._client.get(BOXES_ENDPOINT, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise BoxApiError(
                f"Box API request failed with status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise BoxApiError(f"Box API request failed: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise BoxApiError("Box API returned a non-JSON response") from exc
        if not isinstance(payload, list):
            raise BoxApiError("Box API returned an unexpected payload")
        logger.debug("Box API returned %d row(s)", len(payload))
        return [row for row in payload if isinstance(row, dict)]

    def _to_label_box(self, row: Dict[str, Any]) -> LabelBox:
        name = self._as_str(row.get("label")).strip()
        return LabelBox(id=self._as_str(row.get("id")), name=name or None)

    @staticmethod
    def _quote(value: str) -> str:
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'

    @staticmethod
    def _as_str(value: Any) -> str:
        if value is None:
            return ""
        return str(value)
