"""Error types raised while generating label documents."""

from __future__ import annotations


class LabelGenerationError(Exception):
    """Base class for label failures.

    ``context`` names what failed (a box id, ``"calibration"``,
    ``"configuration"`` or ``"boxes"``) so callers can log and report it
    without inspecting the message.
    """

    def __init__(self, message: str, context: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.context = context


class InvalidLabelInputError(LabelGenerationError):
    """The box list is empty or a box has no id."""


class CalibrationError(LabelGenerationError):
    """A calibration axis is outside the supported offset range."""

    def __init__(self, message: str) -> None:
        super().__init__(message, context="calibration")


class QREncodingError(LabelGenerationError):
    """The QR payload for a box does not fit any QR version."""


class LabelConfigurationError(LabelGenerationError):
    """The label geometry constants contradict each other."""

    def __init__(self, message: str) -> None:
        super().__init__(message, context="configuration")


__all__ = [
    "CalibrationError",
    "InvalidLabelInputError",
    "LabelConfigurationError",
    "LabelGenerationError",
    "QREncodingError",
]
