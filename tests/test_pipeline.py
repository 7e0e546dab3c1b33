import pytest

from thermal_printer.core.errors import InvalidImage
from thermal_printer.printing.models import PrintOptions, RawImage
from thermal_printer.printing.pipeline import (
    apply_contrast,
    apply_gamma,
    contrast_factor,
    process,
    scaled_height,
)


def test_contrast_zero_is_exact_identity():
    assert contrast_factor(0) == 1.0
    values = [0.0, 1.5, 64.0, 127.999, 128.0, 200.25, 255.0]
    assert apply_contrast(values, 0) == values


def test_contrast_clamps_to_byte_range():
    out = apply_contrast([250.0, 5.0], 100)
    assert out == [255.0, 0.0]


def test_gamma_above_one_lightens_midtones():
    (mid,) = apply_gamma([128.0], 2.0)
    assert mid == pytest.approx(255 * (128 / 255) ** 0.5)
    assert mid > 128
    assert apply_gamma([0.0, 255.0], 2.8) == [0.0, 255.0]


@pytest.mark.parametrize(
    "size,target,expected",
    [((640, 480), 384, 288), ((10, 5), 384, 192), ((3, 1), 2, 1), ((1000, 1), 384, 1), ((1, 1), 384, 384)],
)
def test_scaled_height_keeps_aspect_ratio(size, target, expected):
    assert scaled_height(size[0], size[1], target) == expected


def test_process_resizes_to_printer_width():
    img = RawImage(width=10, height=5, pixels=bytes([200]) * 50, mode="L")
    gray = process(img, PrintOptions())
    assert (gray.width, gray.height) == (384, 192)
    assert len(gray.values) == 384 * 192


def test_process_same_width_keeps_pixels():
    pixels = bytes([0, 64, 128, 255])
    img = RawImage(width=4, height=1, pixels=pixels, mode="L")
    gray = process(img, PrintOptions(width=4, contrast=0, gamma=1.0))
    assert gray.values == pytest.approx([0.0, 64.0, 128.0, 255.0])


def test_rgb_uses_luma_weights():
    img = RawImage(width=1, height=1, pixels=bytes([255, 0, 0]), mode="RGB")
    gray = process(img, PrintOptions(width=1, contrast=0, gamma=1.0))
    assert gray.values[0] == pytest.approx(0.299 * 255)

    img = RawImage(width=1, height=1, pixels=bytes([10, 20, 30]), mode="RGB")
    gray = process(img, PrintOptions(width=1, contrast=0, gamma=1.0))
    assert gray.values[0] == pytest.approx(0.299 * 10 + 0.587 * 20 + 0.114 * 30)


def test_transparent_rgba_prints_as_paper():
    img = RawImage(width=2, height=1, pixels=bytes([0, 0, 0, 0, 0, 0, 0, 255]), mode="RGBA")
    gray = process(img, PrintOptions(width=2, contrast=0, gamma=1.0))
    assert gray.values[0] == pytest.approx(255.0)
    assert gray.values[1] == pytest.approx(0.0)


@pytest.mark.parametrize(
    "image",
    [
        RawImage(width=0, height=10, pixels=b"\x00" * 10),
        RawImage(width=10, height=0, pixels=b"\x00" * 10),
        RawImage(width=-1, height=1, pixels=b"\x00"),
        RawImage(width=2, height=2, pixels=b""),
        RawImage(width=2, height=2, pixels=b"\x00\x00\x00"),
        RawImage(width=1, height=1, pixels=b"\x00\x00", mode="RGB"),
        RawImage(width=1, height=1, pixels=b"\x00", mode="CMYK"),
    ],
)
def test_invalid_images_fail_fast(image):
    with pytest.raises(InvalidImage):
        process(image, PrintOptions())
