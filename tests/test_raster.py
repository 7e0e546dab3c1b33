import pytest

from thermal_printer.core.errors import InvalidImage
from thermal_printer.printing.models import BitMatrix
from thermal_printer.printing.raster import pack, pack_rows, raster_command, raster_header, width_bytes


@pytest.mark.parametrize("width,expected", [(1, 1), (7, 1), (8, 1), (9, 2), (384, 48), (576, 72), (2049, 257)])
def test_width_bytes_is_ceil_of_width_over_8(width, expected):
    assert width_bytes(width) == expected


def test_header_splits_width_and_height_little_endian():
    assert raster_header(384, 480) == b"\x1d\x76\x30\x00" + bytes([48, 0, 224, 1])
    assert raster_header(2049, 256) == b"\x1d\x76\x30\x00" + bytes([1, 1, 0, 1])


def test_single_black_pixel():
    matrix = BitMatrix(1, 1, bytearray([1]))
    assert pack_rows(matrix) == b"\x80"
    assert pack(matrix) == b"\x1b\x40" + b"\x1d\x76\x30\x00\x01\x00\x01\x00" + b"\x80" + b"\n\n\n"


def test_bits_are_packed_msb_first_and_padding_is_white():
    bits = bytearray(10)
    bits[0] = 1
    bits[9] = 1
    assert pack_rows(BitMatrix(10, 1, bits)) == bytes([0x80, 0x40])


def test_rows_are_packed_independently():
    # 3 wide, 2 high: row 0 = 1 0 1, row 1 = 0 1 0
    matrix = BitMatrix(3, 2, bytearray([1, 0, 1, 0, 1, 0]))
    assert pack_rows(matrix) == bytes([0b10100000, 0b01000000])


@pytest.mark.parametrize("width,height", [(1, 1), (7, 3), (8, 8), (13, 5), (384, 2)])
def test_packed_length_is_width_bytes_times_height(width, height):
    matrix = BitMatrix(width, height, bytearray([1]) * (width * height))
    data = pack_rows(matrix)
    assert len(data) == width_bytes(width) * height
    assert len(raster_command(matrix)) == 8 + len(data)


@pytest.mark.parametrize("width,height", [(384, 0), (384, 65536), (384, 76800), (0, 10), (65535 * 8 + 1, 1)])
def test_header_rejects_sizes_outside_the_16_bit_fields(width, height):
    with pytest.raises(InvalidImage):
        raster_header(width, height)


def test_header_accepts_the_largest_band():
    assert raster_header(8, 65535) == b"\x1d\x76\x30\x00" + bytes([1, 0, 255, 255])


def test_tall_matrix_is_split_into_bands():
    bits = bytearray(65536)
    bits[-1] = 1
    out = raster_command(BitMatrix(1, 65536, bits))
    first = raster_header(1, 65535) + bytes(65535)
    second = raster_header(1, 1) + b"\x80"
    assert out == first + second
    assert len(out) == 2 * 8 + len(pack_rows(BitMatrix(1, 65536, bits)))
