"""
Tests for the adjustment filter chain.

Each colour stage is checked against the CSS filter function it mirrors,
plus chain construction, validation and the blur tail.
"""

import pytest
from PIL import Image

from IE_Libs.ImageEditingLib.adjustment_filters import (
    apply_filter_chain,
    apply_filters,
    build_filter_chain,
    describe_filter_chain,
)
from IE_Libs.ImageEditingLib.image_models import FilterState


def pixel_after(color, chain):
    image = Image.new("RGBA", (3, 3), color)
    return apply_filter_chain(image, chain).getpixel((1, 1))


class TestBuildFilterChain:
    """Tests for build_filter_chain function."""

    def test_identity_is_empty(self):
        assert build_filter_chain(FilterState()) == []

    def test_geometry_is_not_part_of_chain(self):
        assert build_filter_chain(FilterState(rotate=90, scale=2, flip_horizontal=True)) == []

    def test_fixed_order(self):
        filters = FilterState(blur=2, sepia=40, brightness=120, hue_rotate=30)

        chain = build_filter_chain(filters)

        assert [name for name, _ in chain] == ["brightness", "sepia", "hue_rotate", "blur"]
        assert chain[0] == ("brightness", 120.0)


class TestColourStages:
    """Tests for the individual colour stages."""

    def test_brightness_scales_channels(self):
        assert pixel_after((200, 100, 50, 255), [("brightness", 50)]) == (100, 50, 25, 255)

    def test_brightness_clips(self):
        assert pixel_after((200, 100, 50, 255), [("brightness", 200)])[0] == 255

    def test_contrast_pushes_away_from_mid_gray(self):
        assert pixel_after((255, 0, 255, 255), [("contrast", 200)]) == (255, 0, 255, 255)
        assert pixel_after((255, 0, 255, 255), [("contrast", 0)])[:3] == (128, 128, 128)

    def test_full_grayscale_uses_luma_weights(self):
        assert pixel_after((255, 0, 0, 255), [("grayscale", 100)]) == (54, 54, 54, 255)

    def test_full_sepia_on_white(self):
        assert pixel_after((255, 255, 255, 255), [("sepia", 100)]) == (255, 255, 239, 255)

    def test_zero_saturation_is_gray(self):
        r, g, b, _ = pixel_after((255, 0, 0, 255), [("saturate", 0)])
        assert r == g == b

    def test_hue_rotate_full_turn_is_identity(self):
        r, g, b, _ = pixel_after((200, 40, 90, 255), [("hue_rotate", 360)])
        assert abs(r - 200) <= 1 and abs(g - 40) <= 1 and abs(b - 90) <= 1

    def test_alpha_is_preserved(self):
        assert pixel_after((200, 100, 50, 77), [("brightness", 50)])[3] == 77

    def test_input_not_modified(self):
        image = Image.new("RGBA", (2, 2), (200, 100, 50, 255))
        apply_filter_chain(image, [("brightness", 50)])
        assert image.getpixel((0, 0)) == (200, 100, 50, 255)


class TestBlurStage:
    """Tests for the blur tail stage."""

    def test_blur_softens_edges(self):
        image = Image.new("RGBA", (20, 20), (0, 0, 0, 255))
        image.paste((255, 255, 255, 255), (10, 0, 20, 20))

        blurred = apply_filter_chain(image, [("blur", 3)])

        assert 0 < blurred.getpixel((10, 10))[0] < 255
        assert 0 < blurred.getpixel((9, 10))[0] < 255

    def test_apply_filters_uses_filter_state(self):
        image = Image.new("RGBA", (2, 2), (200, 100, 50, 255))
        result = apply_filters(image, FilterState(brightness=50))
        assert result.getpixel((0, 0)) == (100, 50, 25, 255)


class TestChainValidation:
    """Tests for chain validation."""

    def test_unknown_stage(self):
        with pytest.raises(ValueError, match="Unknown adjustment stage"):
            pixel_after((0, 0, 0, 255), [("sharpen", 10)])

    def test_out_of_order_stage(self):
        with pytest.raises(ValueError, match="out of order"):
            pixel_after((0, 0, 0, 255), [("sepia", 10), ("brightness", 50)])

    def test_repeated_stage(self):
        with pytest.raises(ValueError):
            pixel_after((0, 0, 0, 255), [("blur", 1), ("blur", 1)])

    def test_negative_value(self):
        with pytest.raises(ValueError):
            pixel_after((0, 0, 0, 255), [("blur", -1)])

    def test_rejects_non_image(self):
        with pytest.raises(TypeError):
            apply_filter_chain("image", [])


def test_describe_filter_chain():
    chain = [("brightness", 120.0), ("hue_rotate", 90.0), ("blur", 2.5)]
    assert describe_filter_chain(chain) == "brightness(120%) hue-rotate(90deg) blur(2.5px)"
    assert describe_filter_chain([]) == "none"
