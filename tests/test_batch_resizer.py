"""
Tests for the batch resizer.

Tests cover:
- ResizeSettings validation and serialization
- Target size computation for each mode
- Per-item resizing and output naming
- Batch runs: progress, error policies, cancellation, archive output
"""

import io
import zipfile

import pytest
from PIL import Image

from IE_Libs.BatchLib.batch_resizer import (
    BatchItem,
    ResizeSettings,
    build_resized_archive,
    compute_target_size,
    output_name,
    resize_batch,
    resize_item,
)
from IE_Libs.errors import BatchAbortedError, EmptySourceError
from IE_Libs.task_runner import CancellationToken


class TestResizeSettings:
    """Tests for ResizeSettings dataclass."""

    def test_defaults(self):
        settings = ResizeSettings()

        assert settings.mode == "percentage"
        assert settings.maintain_aspect_ratio is True
        assert settings.output_format == "JPEG"

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="Unknown resize mode"):
            ResizeSettings(mode="stretch")

    def test_fixed_requires_positive_size(self):
        with pytest.raises(ValueError):
            ResizeSettings(mode="fixed", width=0, height=10)

    def test_percentage_must_be_positive(self):
        with pytest.raises(ValueError):
            ResizeSettings(mode="percentage", percentage=0)

    def test_quality_validated(self):
        with pytest.raises(ValueError):
            ResizeSettings(quality=2)

    def test_from_dict(self):
        settings = ResizeSettings.from_dict({"mode": "FIXED", "width": 10, "height": 20, "other": 1})

        assert settings.mode == "fixed"
        assert settings.to_dict()["height"] == 20


class TestComputeTargetSize:
    """Tests for compute_target_size function."""

    def test_fit_within_box(self):
        settings = ResizeSettings(mode="fixed", width=100, height=100)
        assert compute_target_size((400, 200), settings) == (100, 50)

    def test_exact_size_ignores_aspect(self):
        settings = ResizeSettings(mode="fixed", width=100, height=100, maintain_aspect_ratio=False)
        assert compute_target_size((400, 200), settings) == (100, 100)

    def test_percentage(self):
        settings = ResizeSettings(mode="percentage", percentage=50)
        assert compute_target_size((400, 200), settings) == (200, 100)

    @pytest.mark.parametrize("natural", [(400, 200), (37, 91), (1000, 1), (64, 64)])
    @pytest.mark.parametrize("target", [(100, 100), (50, 300), (333, 20)])
    def test_fit_never_exceeds_target(self, natural, target):
        settings = ResizeSettings(mode="fixed", width=target[0], height=target[1])

        width, height = compute_target_size(natural, settings)

        assert width <= target[0] and height <= target[1]
        assert width == target[0] or height == target[1]

    def test_tiny_results_are_at_least_one_pixel(self):
        settings = ResizeSettings(mode="percentage", percentage=1)
        assert compute_target_size((10, 10), settings) == (1, 1)

    def test_empty_image(self):
        with pytest.raises(EmptySourceError):
            compute_target_size((0, 10), ResizeSettings())


class TestResizeItem:
    """Tests for resize_item and output_name."""

    def test_resize_item(self, make_png):
        item = BatchItem(source_bytes=make_png(400, 200), display_name="photo.png")

        surface = resize_item(item, ResizeSettings(mode="fixed", width=100, height=100))

        assert surface.size == (100, 50)
        assert item.natural_dimensions == (400, 200)
        assert surface.image.getpixel((50, 25)) == (255, 0, 0, 255)

    def test_output_name_uses_format_extension(self):
        item = BatchItem(source_bytes=b"", display_name="holiday.photo.png")

        assert output_name(item, ResizeSettings()) == "resized_images/resized_holiday.photo.jpg"
        assert output_name(item, ResizeSettings(output_format="PNG")) == "resized_images/resized_holiday.photo.png"

    def test_output_name_strips_directories(self):
        item = BatchItem(source_bytes=b"", display_name="C:\\pics\\cat.jpeg")
        assert output_name(item, ResizeSettings()) == "resized_images/resized_cat.jpg"


class TestResizeBatch:
    """Tests for resize_batch and build_resized_archive."""

    def test_progress_and_results(self, make_png):
        items = [
            BatchItem(make_png(400, 200), "a.png"),
            BatchItem(make_png(100, 100), "b.png"),
        ]
        calls = []

        result = resize_batch(
            items,
            ResizeSettings(mode="percentage", percentage=50),
            progress=lambda done, total: calls.append((done, total)),
        )

        assert calls == [(1, 2), (2, 2)]
        names = [name for name, _ in result.results]
        assert names == ["resized_images/resized_a.jpg", "resized_images/resized_b.jpg"]
        first = Image.open(io.BytesIO(result.results[0][1]))
        assert first.format == "JPEG"
        assert first.size == (200, 100)

    def test_empty_batch(self):
        with pytest.raises(ValueError):
            resize_batch([], ResizeSettings())

    def test_bad_item_aborts(self, make_png):
        items = [BatchItem(make_png(10, 10), "ok.png"), BatchItem(b"garbage", "bad.png")]

        with pytest.raises(BatchAbortedError, match="bad.png"):
            resize_batch(items, ResizeSettings())

    def test_oversized_item_aborts(self, make_png, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)

        with pytest.raises(BatchAbortedError, match="huge.png"):
            resize_batch([BatchItem(make_png(100, 100), "huge.png")], ResizeSettings())

    def test_bad_item_skipped(self, make_png):
        items = [BatchItem(b"garbage", "bad.png"), BatchItem(make_png(10, 10), "ok.png")]

        result = resize_batch(items, ResizeSettings(), error_policy="skip")

        assert [name for name, _ in result.results] == ["resized_images/resized_ok.jpg"]
        assert result.failures[0].name == "bad.png"

    def test_cancelled_before_start(self, make_png):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(BatchAbortedError):
            resize_batch([BatchItem(make_png(10, 10), "a.png")], ResizeSettings(), cancel_token=token)

    def test_archive(self, make_png):
        items = [
            BatchItem(make_png(400, 200), "a.png"),
            BatchItem(make_png(40, 20), "a.jpg"),
        ]

        data = build_resized_archive(items, ResizeSettings(mode="fixed", width=100, height=100))

        with zipfile.ZipFile(io.BytesIO(data)) as archive:
            assert archive.namelist() == [
                "resized_images/resized_a.jpg",
                "resized_images/resized_a_1.jpg",
            ]
            resized = Image.open(io.BytesIO(archive.read("resized_images/resized_a_1.jpg")))
            assert resized.size == (100, 50)

    def test_archive_with_every_item_skipped(self):
        with pytest.raises(EmptySourceError):
            build_resized_archive([BatchItem(b"garbage", "bad.png")], ResizeSettings(), error_policy="skip")
