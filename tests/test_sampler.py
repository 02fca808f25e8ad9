"""Tests for image decoding and sampling (in-memory Pillow images)."""

from pathlib import Path

import pytest
from PIL import Image

from pixel_bead.core.palette import Palette
from pixel_bead.errors import ImageDecodeError
from pixel_bead.sample.sampler import (
    SourceImage,
    derive_height,
    flatten_on_white,
    open_image,
    quantize_image,
    sample,
)

RED = "#FF0000"
BLUE = "#0000FF"
WHITE = "#FFFFFF"


class TestOpenImage:
    """Tests for open_image."""

    def test_from_pillow_image(self, split_image: Image.Image) -> None:
        source = open_image(split_image)
        assert (source.width, source.height) == (20, 10)
        assert source.aspect == 0.5
        assert source.image is not split_image

    def test_from_bytes(self, png_bytes: bytes) -> None:
        source = open_image(png_bytes)
        assert (source.width, source.height) == (20, 10)
        assert source.path is None

    def test_from_path(self, tmp_path: Path, split_image: Image.Image) -> None:
        path = tmp_path / "split.png"
        split_image.save(path)
        source = open_image(path)
        assert source.path == path
        assert open_image(str(path)).width == 20

    def test_source_image_passthrough(self, split_image: Image.Image) -> None:
        source = open_image(split_image)
        assert open_image(source) is source

    def test_garbage_bytes(self) -> None:
        with pytest.raises(ImageDecodeError):
            open_image(b"definitely not an image")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageDecodeError):
            open_image(tmp_path / "missing.png")

    def test_decompression_bomb(self, png_bytes: bytes, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
        with pytest.raises(ImageDecodeError):
            open_image(png_bytes)


class TestSample:
    """Tests for sampling at board size."""

    def test_box_sampling_of_halves(self, split_image: Image.Image) -> None:
        raw = sample(SourceImage(split_image), 10, 5)
        assert raw.size == (10, 5)
        for row in raw.rows:
            assert row == (RED,) * 5 + (BLUE,) * 5

    def test_transparent_becomes_white(self) -> None:
        img = Image.new("RGBA", (8, 8), (0, 0, 0, 0))
        assert set(sample(SourceImage(img), 5, 5).colors()) == {WHITE}

    def test_flatten_on_white(self) -> None:
        img = Image.new("RGBA", (2, 1), (0, 0, 0, 0))
        img.putpixel((1, 0), (255, 0, 0, 255))
        flat = flatten_on_white(img)
        assert flat.mode == "RGB"
        assert flat.getpixel((0, 0)) == (255, 255, 255)
        assert flat.getpixel((1, 0)) == (255, 0, 0)

    def test_palette_mode_image(self) -> None:
        img = Image.new("P", (10, 10))
        img.putpalette([0, 0, 255] * 256)
        assert sample(SourceImage(img), 5, 5)[0, 0] == BLUE

    def test_unknown_filter(self, split_image: Image.Image) -> None:
        with pytest.raises(ValueError):
            sample(SourceImage(split_image), 5, 5, resample="sharpest")

    def test_deterministic(self, split_image: Image.Image) -> None:
        source = SourceImage(split_image)
        assert sample(source, 7, 6, "lanczos") == sample(source, 7, 6, "lanczos")


class TestQuantizeImage:
    """Tests for quantize_image and derive_height."""

    def test_only_palette_colors(self, split_image: Image.Image) -> None:
        palette = Palette.default()
        grid = quantize_image(SourceImage(split_image), 12, 9, palette, "bilinear")
        assert grid.size == (12, 9)
        assert set(grid.colors()) <= set(palette.colors)

    def test_exact_palette_match(self, split_image: Image.Image, rgb_palette: Palette) -> None:
        grid = quantize_image(SourceImage(split_image), 10, 5, rgb_palette)
        assert grid.rows[0] == (RED,) * 5 + (BLUE,) * 5

    @pytest.mark.parametrize("width,expected", [(10, 5), (15, 8), (30, 15), (100, 50), (6, 5)])
    def test_derive_height(self, split_image: Image.Image, width: int, expected: int) -> None:
        assert derive_height(SourceImage(split_image), width) == expected

    def test_derive_height_clamps_tall_images(self) -> None:
        tall = SourceImage(Image.new("RGB", (10, 100)))
        assert derive_height(tall, 20) == 100
