"""
Tests for image discovery and optimization.
"""

import pytest
from PIL import Image

from showmatch.images import (
    CARD_SIZE,
    ImageProcessingError,
    list_image_files,
    optimize_image,
    used_image_names,
)


class TestListImageFiles:
    """Test source directory listing."""

    def test_filters_and_sorts(self, source_images):
        assert list_image_files(source_images) == ["bluey.jpg", "magic-school-bus.webp", "peppa-pig.png"]

    def test_extension_case_insensitive(self, tmp_path, image_factory):
        image_factory(tmp_path / "BLUEY.JPG")
        image_factory(tmp_path / "Peppa.Jpeg")
        assert list_image_files(tmp_path) == ["BLUEY.JPG", "Peppa.Jpeg"]

    def test_skips_directories(self, tmp_path):
        (tmp_path / "folder.jpg").mkdir()
        assert list_image_files(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        assert list_image_files(tmp_path / "missing") == []

    def test_used_image_names(self, tmp_path, image_factory):
        image_factory(tmp_path / "bluey.jpg")
        image_factory(tmp_path / "peppa-pig.jpg")
        assert used_image_names(tmp_path) == {"bluey", "peppa-pig"}
        assert used_image_names(tmp_path / "missing") == set()


class TestOptimizeImage:
    """Test resize and re-encode."""

    def test_cover_fit_to_card_size(self, tmp_path, image_factory):
        src = image_factory(tmp_path / "wide.png", size=(1200, 500))
        dest = optimize_image(src, tmp_path / "out" / "wide.jpg")

        assert dest.exists()
        with Image.open(dest) as img:
            assert img.size == CARD_SIZE
            assert img.format == "JPEG"

    def test_converts_transparent_png(self, tmp_path):
        src = tmp_path / "alpha.png"
        Image.new("RGBA", (200, 300), (255, 0, 0, 128)).save(src)

        dest = optimize_image(src, tmp_path / "alpha.jpg", size=(100, 150))

        with Image.open(dest) as img:
            assert img.size == (100, 150)
            assert img.mode == "RGB"

    def test_corrupt_source(self, tmp_path):
        src = tmp_path / "broken.jpg"
        src.write_text("not really a jpeg")

        with pytest.raises(ImageProcessingError, match="broken.jpg"):
            optimize_image(src, tmp_path / "out.jpg")

    def test_missing_source(self, tmp_path):
        with pytest.raises(ImageProcessingError):
            optimize_image(tmp_path / "missing.jpg", tmp_path / "out.jpg")

    def test_error_is_value_error(self):
        assert issubclass(ImageProcessingError, ValueError)
