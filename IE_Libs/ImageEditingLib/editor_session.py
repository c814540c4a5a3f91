"""
Editor session: owner of the single-image editing state.

The session holds the current ImageSource, the FilterState, the measured
display size and the active selection. Non-destructive edits replace the
FilterState; destructive edits (crop, fill, border) bake the current state
into a new ImageSource, then reset the filters and clear the selection.
Every operation computes its result before touching session state, so a
failure leaves the last valid image in place.

Example:
    >>> session = EditorSession()
    >>> session.load(Path("photo.jpg").read_bytes(), name="photo.jpg")
    >>> session.set_display_size(400, 300)
    >>> session.set_filter("brightness", 120)
    >>> session.rotate()
    >>> session.select(SelectionRect(10, 10, 200, 100))
    >>> session.crop()
    >>> png_bytes = session.export_image()
"""

import logging
from typing import Any, Optional

from IE_Libs.constants import (
    DEFAULT_BORDER_COLOR,
    DEFAULT_BORDER_WIDTH,
    DEFAULT_FILL_COLOR,
    ROTATE_STEP_DEGREES,
)
from IE_Libs.errors import NoSelectionError, NotReadyError
from IE_Libs.ExportLib.image_codec import (
    DocumentPage,
    EncodeOptions,
    decode_image,
    encode_document,
    encode_surface,
)
from IE_Libs.ImageEditingLib.coordinate_mapper import to_natural
from IE_Libs.ImageEditingLib.image_models import (
    ColorLike,
    FilterState,
    ImageSource,
    NaturalRect,
    SelectionRect,
)
from IE_Libs.ImageEditingLib.selection_ops import border_surface, crop_surface, fill_surface
from IE_Libs.ImageEditingLib.surface import Surface
from IE_Libs.ImageEditingLib.transform_pipeline import apply_transform_pipeline

logger = logging.getLogger(__name__)

FLIP_FIELDS = {
    "horizontal": "flip_horizontal",
    "vertical": "flip_vertical",
}


class EditorSession:
    """Single-image editing state and its operations."""

    def __init__(self) -> None:
        self.source: Optional[ImageSource] = None
        self.filters = FilterState()
        self.selection = SelectionRect()

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, data: bytes, name: Optional[str] = None) -> ImageSource:
        """Decode bytes and start a fresh edit."""
        return self.load_source(decode_image(data, name=name))

    def load_source(self, source: ImageSource) -> ImageSource:
        """Replace the image; filters and selection reset."""
        self.source = source
        self.filters = FilterState()
        self.selection = SelectionRect()
        logger.info(f"Loaded {source.name or 'image'} {source.natural_size}")
        return source

    def clear(self) -> None:
        self.source = None
        self.filters = FilterState()
        self.selection = SelectionRect()

    @property
    def has_image(self) -> bool:
        return self.source is not None

    def _require_source(self) -> ImageSource:
        if self.source is None:
            raise NotReadyError("No image loaded")
        return self.source

    def set_display_size(self, width: float, height: float) -> None:
        """Record the size the image is displayed at."""
        self.source = self._require_source().with_display_size(width, height)

    # ------------------------------------------------------------------
    # Non-destructive edits
    # ------------------------------------------------------------------

    def set_filter(self, name: str, value: Any) -> FilterState:
        if name not in FilterState.__dataclass_fields__:
            raise ValueError(f"Unknown filter field: {name}")
        self.filters = self.filters.with_changes(**{name: value})
        return self.filters

    def set_filters(self, filters: FilterState) -> FilterState:
        self.filters = filters
        return self.filters

    def rotate(self, angle: float = ROTATE_STEP_DEGREES) -> FilterState:
        """Add to the rotation; wraps modulo 360."""
        return self.set_filter("rotate", self.filters.rotate + angle)

    def zoom(self, delta: float) -> FilterState:
        """Add to the scale; clamped at the minimum scale."""
        return self.set_filter("scale", self.filters.scale + delta)

    def flip(self, direction: str) -> FilterState:
        """Toggle a 'horizontal' or 'vertical' flip."""
        field_name = FLIP_FIELDS.get(str(direction).lower())
        if field_name is None:
            raise ValueError(f"Invalid flip direction: {direction}. Must be 'horizontal' or 'vertical'")
        return self.set_filter(field_name, not getattr(self.filters, field_name))

    def reset_filters(self) -> FilterState:
        self.filters = FilterState()
        return self.filters

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, rect: SelectionRect) -> None:
        self.selection = rect

    def unselect(self) -> None:
        self.selection = SelectionRect()

    def _selection_in(self, source: ImageSource, surface: Surface) -> Optional[NaturalRect]:
        if not self.selection.is_active:
            return None
        return to_natural(self.selection, source, surface.size)

    # ------------------------------------------------------------------
    # Rendering and destructive edits
    # ------------------------------------------------------------------

    def render_full(self) -> Surface:
        """The whole transformed image, ignoring the selection."""
        return apply_transform_pipeline(self._require_source(), self.filters)

    def render(self) -> Surface:
        """The transformed image, cropped to the selection when one is active."""
        source = self._require_source()
        surface = apply_transform_pipeline(source, self.filters)
        rect = self._selection_in(source, surface)
        if rect is not None:
            surface = crop_surface(surface, rect)
        return surface

    def _bake(self, surface: Surface) -> ImageSource:
        previous = self._require_source()
        self.source = ImageSource(image=surface.image, name=previous.name)
        self.filters = FilterState()
        self.selection = SelectionRect()
        return self.source

    def crop(self) -> ImageSource:
        """
        Crop to the selection and bake the current filters.

        Raises:
            NoSelectionError: If there is no active selection
            NotReadyError: If the display size is unknown
        """
        if not self.selection.is_active:
            raise NoSelectionError("Crop requires an active selection")
        surface = self.render()
        logger.info(f"Cropped to {surface.size}")
        return self._bake(surface)

    def fill(self, color: ColorLike = DEFAULT_FILL_COLOR) -> ImageSource:
        """Fill the selection (or the whole image) and bake the current filters."""
        source = self._require_source()
        surface = apply_transform_pipeline(source, self.filters)
        fill_surface(surface, self._selection_in(source, surface), color)
        return self._bake(surface)

    def border(
        self,
        color: ColorLike = DEFAULT_BORDER_COLOR,
        width: float = DEFAULT_BORDER_WIDTH,
    ) -> ImageSource:
        """Outline the selection (or the whole image) and bake the current filters."""
        source = self._require_source()
        surface = apply_transform_pipeline(source, self.filters)
        border_surface(surface, self._selection_in(source, surface), color, width)
        return self._bake(surface)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def export_image(self, options: Optional[EncodeOptions] = None) -> bytes:
        return encode_surface(self.render(), options)

    def export_document(self) -> bytes:
        """Single-page PDF sized to the rendered image."""
        return encode_document([DocumentPage(self.render().image)])
