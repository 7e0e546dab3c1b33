import pytest
from PIL import Image

from thermal_printer.core.errors import InvalidImage, InvalidOption, ThermalPrinterError
from thermal_printer.printing.models import (
    BitMatrix,
    FeedBlock,
    PrintOptions,
    QrCodeBlock,
    RawImage,
    SeparatorBlock,
    TextBlock,
    parse_block,
    parse_blocks,
    parse_options,
)


def test_print_option_defaults():
    opts = PrintOptions()
    assert (opts.contrast, opts.gamma, opts.width, opts.resample) == (30, 2.8, 384, "box")


@pytest.mark.parametrize(
    "data",
    [{"contrast": 101}, {"contrast": -101}, {"gamma": 0}, {"gamma": -1.0}, {"width": 0}, {"resample": "bicubic"}],
)
def test_out_of_range_options_are_rejected_not_clamped(data):
    with pytest.raises(InvalidOption) as exc:
        parse_options(data)
    assert exc.value.errors


def test_parse_options_fills_missing_keys_from_defaults():
    opts = parse_options({"contrast": 0, "gamma": None}, gamma=1.8, width=576)
    assert (opts.contrast, opts.gamma, opts.width) == (0, 1.8, 576)
    assert parse_options({"resample": " Nearest "}).resample == "nearest"


def test_json_blocks_parse_by_type():
    blocks = parse_blocks(
        [
            {"type": "text", "content": "Hello", "align": "CENTER", "size": "Big", "bold": True},
            {"type": "separator"},
            {"type": "qr", "content": "https://example.com", "size": 8, "error_correction": "h"},
            {"type": "feed", "lines": 3},
        ]
    )
    text, sep, qr, feed = blocks
    assert isinstance(text, TextBlock) and text.align == "center" and text.size == "big" and text.bold
    assert isinstance(sep, SeparatorBlock) and sep.char == "-"
    assert isinstance(qr, QrCodeBlock) and qr.module_size == 8 and qr.error_correction == "H" and qr.align == "center"
    assert isinstance(feed, FeedBlock) and feed.lines == 3


def test_models_pass_through_unchanged():
    block = TextBlock(content="x")
    assert parse_block(block) is block


def test_blank_inputs_get_defaults():
    assert parse_block({"type": "text", "content": None}).content == ""
    assert parse_block({"type": "separator", "char": ""}).char == "-"


@pytest.mark.parametrize(
    "block",
    [
        {"type": "banner", "content": "x"},
        {"content": "no type"},
        {"type": "text", "content": "bell\x07"},
        {"type": "text", "content": "x", "align": "justify"},
        {"type": "text", "content": "x", "size": "huge"},
        {"type": "separator", "char": "=="},
        {"type": "separator", "char": "\x1b"},
        {"type": "qr", "content": ""},
        {"type": "qr", "content": "x", "size": 0},
        {"type": "qr", "content": "x", "size": 17},
        {"type": "qr", "content": "x" * 7090},
        {"type": "qr", "content": "x", "error_correction": "Z"},
        {"type": "qr", "content": "line\x00break"},
        {"type": "feed", "lines": 0},
        {"type": "feed", "lines": 256},
    ],
)
def test_invalid_blocks_raise_invalid_option(block):
    with pytest.raises(InvalidOption):
        parse_block(block)


def test_parse_blocks_reports_the_failing_index():
    with pytest.raises(InvalidOption, match=r"^block 1: "):
        parse_blocks([{"type": "feed"}, {"type": "feed", "lines": -2}])


def test_text_keeps_newlines_and_tabs():
    assert TextBlock(content="a\tb\nc").content == "a\tb\nc"


def test_blocks_are_immutable():
    block = TextBlock(content="x")
    with pytest.raises(Exception):
        block.content = "y"  # type: ignore[misc]


def test_raw_image_from_pil_converts_palette():
    img = Image.new("P", (3, 2))
    raw = RawImage.from_pil(img)
    assert raw.mode == "RGB"
    assert len(raw.pixels) == 3 * 2 * 3
    assert raw.validate() is raw


def test_raw_image_from_pil_keeps_alpha():
    raw = RawImage.from_pil(Image.new("LA", (2, 2), (0, 0)))
    assert raw.mode == "RGBA"


def test_raw_image_rejects_non_integer_dimensions():
    with pytest.raises(InvalidImage):
        RawImage(width=1.5, height=1, pixels=b"\x00").validate()  # type: ignore[arg-type]


def test_bit_matrix_preview_image():
    matrix = BitMatrix(2, 1, bytearray([1, 0]))
    img = matrix.to_image()
    assert img.mode == "1"
    assert img.size == (2, 1)
    assert img.getpixel((0, 0)) == 0
    assert img.getpixel((1, 0)) == 255


@pytest.mark.parametrize(
    "factory",
    [
        lambda: PrintOptions(contrast=500),
        lambda: PrintOptions(gamma=0),
        lambda: QrCodeBlock(content="x", size=0),
        lambda: TextBlock(content="x", align="justify"),
        lambda: FeedBlock(lines=0),
    ],
)
def test_direct_construction_raises_invalid_option(factory):
    with pytest.raises(InvalidOption) as exc:
        factory()
    assert exc.value.errors
    assert isinstance(exc.value, ThermalPrinterError)
