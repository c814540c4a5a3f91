"""
Tests for the transform pipeline.

Covers the rotated bounding box, quarter-turn and flip orientation, the
affine path for arbitrary angles and scales, and filter-before-geometry
ordering.
"""

import pytest

from IE_Libs.errors import EmptySourceError
from IE_Libs.ImageEditingLib.image_models import FilterState, ImageSource, new_blank_source
from IE_Libs.ImageEditingLib.transform_pipeline import (
    apply_transform_pipeline,
    build_transform_matrix,
    rotated_bounding_box,
)

from conftest import BLUE, GREEN, RED, WHITE


class TestRotatedBoundingBox:
    """Tests for rotated_bounding_box function."""

    @pytest.mark.parametrize("rotate,expected", [
        (0, (1000, 500)),
        (90, (500, 1000)),
        (180, (1000, 500)),
        (270, (500, 1000)),
    ])
    def test_quarter_turns(self, rotate, expected):
        assert rotated_bounding_box(1000, 500, rotate) == expected

    @pytest.mark.parametrize("rotate", [0, 90, 180, 270])
    @pytest.mark.parametrize("size", [(1, 1), (37, 91), (640, 480)])
    def test_contains_rotated_source(self, rotate, size):
        width, height = size
        box_width, box_height = rotated_bounding_box(width, height, rotate)

        if rotate % 180 == 0:
            assert (box_width, box_height) == (width, height)
        else:
            assert (box_width, box_height) == (height, width)

    def test_diagonal_rounds_up(self):
        # 100 * (cos 45 + sin 45) = 141.42...
        assert rotated_bounding_box(100, 100, 45) == (142, 142)

    def test_scale_above_one_grows_box(self):
        assert rotated_bounding_box(100, 50, 0, scale=2.0) == (200, 100)

    def test_scale_below_one_keeps_natural_box(self):
        assert rotated_bounding_box(100, 50, 90, scale=0.5) == (50, 100)


class TestBuildTransformMatrix:
    """Tests for build_transform_matrix function."""

    def test_identity_maps_center_to_center(self):
        matrix = build_transform_matrix((10, 20), (10, 20), FilterState())
        x, y, _ = matrix @ [5.0, 10.0, 1.0]
        assert (x, y) == pytest.approx((5.0, 10.0))

    def test_quarter_turn_maps_top_left_corner(self):
        # 10x20 source, 90 degrees clockwise into a 20x10 surface.
        matrix = build_transform_matrix((10, 20), (20, 10), FilterState(rotate=90))
        x, y, _ = matrix @ [0.0, 0.0, 1.0]
        assert (x, y) == pytest.approx((20.0, 0.0))

    def test_flip_after_scale_keeps_magnitude(self):
        matrix = build_transform_matrix(
            (10, 10), (20, 20), FilterState(scale=2, flip_horizontal=True)
        )
        x, _, _ = matrix @ [0.0, 5.0, 1.0]
        assert x == pytest.approx(20.0)


class TestApplyTransformPipeline:
    """Tests for apply_transform_pipeline function."""

    def test_identity_copies_source(self, quadrant_image):
        source = ImageSource.from_image(quadrant_image)

        surface = apply_transform_pipeline(source, FilterState())

        assert surface.size == (2, 2)
        assert surface.image.getpixel((1, 0)) == GREEN
        assert surface.image is not source.image

    def test_rotate_90_is_clockwise(self, quadrant_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(quadrant_image), FilterState(rotate=90)
        )

        assert surface.image.getpixel((0, 0)) == BLUE
        assert surface.image.getpixel((1, 0)) == RED
        assert surface.image.getpixel((1, 1)) == GREEN
        assert surface.image.getpixel((0, 1)) == WHITE

    def test_rotate_90_resizes_surface(self, make_image):
        source = ImageSource.from_image(make_image(1000, 500))
        surface = apply_transform_pipeline(source, FilterState(rotate=90))
        assert surface.size == (500, 1000)

    def test_flip_horizontal(self, quadrant_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(quadrant_image), FilterState(flip_horizontal=True)
        )
        assert surface.image.getpixel((0, 0)) == GREEN
        assert surface.image.getpixel((0, 1)) == WHITE

    def test_flip_vertical(self, quadrant_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(quadrant_image), FilterState(flip_vertical=True)
        )
        assert surface.image.getpixel((0, 0)) == BLUE

    def test_flip_then_rotate(self, quadrant_image):
        # Mirror first (green top-left), then turn clockwise.
        surface = apply_transform_pipeline(
            ImageSource.from_image(quadrant_image),
            FilterState(rotate=90, flip_horizontal=True),
        )
        assert surface.image.getpixel((0, 0)) == WHITE
        assert surface.image.getpixel((1, 0)) == GREEN

    def test_arbitrary_angle_leaves_transparent_corners(self, make_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(make_image(100, 100)), FilterState(rotate=45)
        )

        assert surface.size == (142, 142)
        assert surface.image.getpixel((0, 0))[3] == 0
        assert surface.image.getpixel((71, 71)) == RED

    def test_scale_up_grows_surface(self, make_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(make_image(100, 50)), FilterState(scale=2)
        )

        assert surface.size == (200, 100)
        assert surface.image.getpixel((100, 50)) == RED

    def test_scale_down_leaves_margin(self, make_image):
        surface = apply_transform_pipeline(
            ImageSource.from_image(make_image(100, 50)), FilterState(scale=0.5)
        )

        assert surface.size == (100, 50)
        assert surface.image.getpixel((2, 2))[3] == 0
        assert surface.image.getpixel((50, 25)) == RED

    def test_filters_applied_with_geometry(self, make_image):
        source = ImageSource.from_image(make_image(4, 2, (200, 100, 50, 255)))

        surface = apply_transform_pipeline(source, FilterState(brightness=50, rotate=90))

        assert surface.size == (2, 4)
        assert surface.image.getpixel((1, 1)) == (100, 50, 25, 255)

    def test_source_not_modified(self, make_image):
        image = make_image(4, 4, (200, 100, 50, 255))
        apply_transform_pipeline(ImageSource.from_image(image), FilterState(brightness=50))
        assert image.getpixel((0, 0)) == (200, 100, 50, 255)

    def test_empty_source(self):
        with pytest.raises(EmptySourceError):
            apply_transform_pipeline(new_blank_source(0, 10), FilterState())
