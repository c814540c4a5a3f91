"""
Error kinds raised by the ImageEdit core.

Every failure is scoped to the current operation: callers catch these,
report a single message and keep the last valid image untouched.
"""

from typing import Optional


class ImageEditError(Exception):
    """Base class for all ImageEdit errors."""


class NotReadyError(ImageEditError, ValueError):
    """Geometry requested before the image's display metrics are known."""


class NoSelectionError(ImageEditError, ValueError):
    """Crop requested without a non-degenerate selection."""


class EmptySourceError(ImageEditError, ValueError):
    """Image has a zero natural width or height."""


class DecodeFailureError(ImageEditError, IOError):
    """Image or document bytes could not be decoded."""

    def __init__(self, message: str, name: Optional[str] = None):
        if name:
            message = f"{name}: {message}"
        super().__init__(message)
        self.name = name


class BatchAbortedError(ImageEditError, RuntimeError):
    """A sequential batch or merge stopped before processing every item."""

    def __init__(self, message: str, completed: int = 0, total: int = 0):
        super().__init__(f"{message} ({completed}/{total} completed)")
        self.completed = completed
        self.total = total
