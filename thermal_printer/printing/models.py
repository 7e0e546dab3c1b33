"""
Data model for the printing pipeline.

Buffers (RawImage, GrayBuffer, BitMatrix) are plain dataclasses: they are
created and dropped within a single build call. Caller-facing inputs
(PrintOptions and the content blocks) are pydantic models so JSON-shaped
requests validate the same way whether they arrive as dicts or models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Annotated, Any, Iterable, List, Literal, Mapping, Optional, Union

from PIL import Image
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from thermal_printer.core.errors import InvalidImage, InvalidOption

CHANNELS = {"L": 1, "RGB": 3, "RGBA": 4}

# GS ( k stores at most 7092 bytes including the 3-byte sub-header.
QR_MAX_PAYLOAD = 7089


def _has_control_chars(s: str) -> bool:
    return any((ord(c) < 32 and c not in "\n\r\t") or ord(c) == 127 for c in s)


@dataclass(frozen=True)
class RawImage:
    """Decoded pixels handed over by the caller, row-major, 8 bits per channel."""

    width: int
    height: int
    pixels: bytes
    mode: str = "L"

    @property
    def channels(self) -> int:
        try:
            return CHANNELS[self.mode]
        except KeyError:
            raise InvalidImage(f"unsupported pixel mode {self.mode!r}; expected one of {sorted(CHANNELS)}") from None

    def validate(self) -> "RawImage":
        if not isinstance(self.width, int) or not isinstance(self.height, int):
            raise InvalidImage("image dimensions must be integers")
        if self.width <= 0 or self.height <= 0:
            raise InvalidImage(f"image dimensions must be positive, got {self.width}x{self.height}")
        if not self.pixels:
            raise InvalidImage("pixel buffer is empty")
        expected = self.width * self.height * self.channels
        if len(self.pixels) != expected:
            raise InvalidImage(
                f"pixel buffer has {len(self.pixels)} bytes, expected {expected} for "
                f"{self.width}x{self.height} {self.mode}"
            )
        return self

    def to_pil(self) -> Image.Image:
        self.validate()
        return Image.frombytes(self.mode, (self.width, self.height), bytes(self.pixels))

    @classmethod
    def from_pil(cls, img: Image.Image) -> "RawImage":
        """
        Wrap an already decoded Pillow image. Palette and other modes are
        converted to RGBA (if they carry transparency) or RGB first.
        """
        if img.mode not in CHANNELS:
            has_alpha = img.mode in ("LA", "PA") or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")
        return cls(width=img.width, height=img.height, pixels=img.tobytes(), mode=img.mode)


@dataclass
class GrayBuffer:
    """Floating-point luminance in [0, 255], flat row-major."""

    width: int
    height: int
    values: List[float]

    def get(self, x: int, y: int) -> float:
        return self.values[y * self.width + x]

    def row(self, y: int) -> List[float]:
        start = y * self.width
        return self.values[start : start + self.width]


@dataclass
class BitMatrix:
    """1-bit pixels, flat row-major. 1 = black ink, 0 = paper."""

    width: int
    height: int
    bits: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if not self.bits:
            self.bits = bytearray(self.width * self.height)

    def get(self, x: int, y: int) -> int:
        return self.bits[y * self.width + x]

    def row(self, y: int) -> bytearray:
        start = y * self.width
        return self.bits[start : start + self.width]

    def to_image(self) -> Image.Image:
        """Mode '1' Pillow image (white paper, black ink) for previews."""
        gray = bytes(0 if b else 255 for b in self.bits)
        return Image.frombytes("L", (self.width, self.height), gray).convert("1")


class TextRendering(str, Enum):
    """How text blocks reach the paper; chosen once per document."""

    NATIVE = "native"
    BITMAP = "bitmap"


class _FrozenModel(BaseModel):
    """
    Immutable request model.

    Direct construction reports bad values as InvalidOption, the same error
    the parse_* helpers raise for JSON-shaped input.
    """

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as e:
            raise _invalid_option(e, type(self).__name__) from e


class PrintOptions(_FrozenModel):
    """Tone and size settings for photo documents."""

    contrast: int = Field(default=30, ge=-100, le=100, description="Contrast adjustment, 0 leaves tones unchanged")
    gamma: float = Field(default=2.8, gt=0, description="Gamma > 1 lightens midtones to offset thermal darkening")
    width: int = Field(default=384, gt=0, le=65535 * 8, description="Target printer width in dots")
    resample: Literal["box", "nearest"] = Field(default="box", description="Resampling filter")

    @field_validator("resample", mode="before")
    @classmethod
    def _resample_norm(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


Align = Literal["left", "center", "right"]
SizeClass = Literal["normal", "wide", "tall", "big"]


def _lower(v: Any) -> Any:
    return v.strip().lower() if isinstance(v, str) else v


class TextBlock(_FrozenModel):
    """A run of text with alignment, size and style toggles."""

    type: Literal["text"] = "text"
    content: str = Field(default="", description="Text to print; wrapped to the line width")
    align: Align = "left"
    size: SizeClass = "normal"
    bold: bool = False
    underline: bool = False
    invert: bool = False

    @field_validator("content", mode="before")
    @classmethod
    def _content_rules(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str) and _has_control_chars(v):
            raise ValueError("control characters not allowed")
        return v

    @field_validator("align", "size", mode="before")
    @classmethod
    def _norm(cls, v: Any) -> Any:
        return _lower(v)


class SeparatorBlock(_FrozenModel):
    """A full-width rule made of one repeated character."""

    type: Literal["separator"] = "separator"
    char: str = Field(default="-", min_length=1, max_length=1)

    @field_validator("char", mode="before")
    @classmethod
    def _char_rules(cls, v: Any) -> Any:
        if v is None or v == "":
            return "-"
        if isinstance(v, str) and _has_control_chars(v):
            raise ValueError("control characters not allowed")
        return v


class QrCodeBlock(_FrozenModel):
    """A native QR code; the payload is sent as raw UTF-8."""

    type: Literal["qr"] = "qr"
    content: str = Field(min_length=1)
    module_size: int = Field(default=6, ge=1, le=16, validation_alias=AliasChoices("module_size", "size"))
    error_correction: Literal["L", "M", "Q", "H"] = "M"
    align: Align = "center"

    @field_validator("content")
    @classmethod
    def _payload_rules(cls, v: str) -> str:
        if _has_control_chars(v):
            raise ValueError("control characters not allowed")
        if len(v.encode("utf-8")) > QR_MAX_PAYLOAD:
            raise ValueError(f"qr payload too long (max {QR_MAX_PAYLOAD} bytes)")
        return v

    @field_validator("error_correction", mode="before")
    @classmethod
    def _ec_norm(cls, v: Any) -> Any:
        return v.strip().upper() if isinstance(v, str) else v

    @field_validator("align", mode="before")
    @classmethod
    def _align_norm(cls, v: Any) -> Any:
        return _lower(v)


class FeedBlock(_FrozenModel):
    """Blank paper: N line feeds."""

    type: Literal["feed"] = "feed"
    lines: int = Field(default=1, ge=1, le=255)


Block = Annotated[Union[TextBlock, SeparatorBlock, QrCodeBlock, FeedBlock], Field(discriminator="type")]

_BLOCK_TYPES = (TextBlock, SeparatorBlock, QrCodeBlock, FeedBlock)
_BLOCK_ADAPTER: TypeAdapter[Block] = TypeAdapter(Block)


def _invalid_option(exc: ValidationError, what: str) -> InvalidOption:
    errors = exc.errors(include_url=False)
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()))
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return InvalidOption(f"invalid {what}: " + "; ".join(parts), errors=errors)


def parse_block(block: Union[Block, Mapping[str, Any]]) -> Block:
    """Validate one block given as a model or a JSON-shaped mapping."""
    if isinstance(block, _BLOCK_TYPES):
        return block
    try:
        return _BLOCK_ADAPTER.validate_python(dict(block) if isinstance(block, Mapping) else block)
    except ValidationError as e:
        raise _invalid_option(e, "block") from e


def parse_blocks(blocks: Iterable[Union[Block, Mapping[str, Any]]]) -> List[Block]:
    """Validate an ordered sequence of blocks, keeping the order."""
    parsed: List[Block] = []
    for idx, block in enumerate(blocks):
        try:
            parsed.append(parse_block(block))
        except InvalidOption as e:
            raise InvalidOption(f"block {idx}: {e}", errors=e.errors) from e.__cause__
    return parsed


def parse_options(options: Union[PrintOptions, Mapping[str, Any], None] = None, **defaults: Any) -> PrintOptions:
    """
    Build PrintOptions from a model, a mapping, or nothing.

    `defaults` fill keys the mapping leaves out (e.g. profile gamma/width).
    """
    if isinstance(options, PrintOptions):
        return options
    data = {k: v for k, v in defaults.items() if v is not None}
    data.update({k: v for k, v in dict(options or {}).items() if v is not None})
    try:
        return PrintOptions.model_validate(data)
    except ValidationError as e:
        raise _invalid_option(e, "print options") from e


__all__ = [
    "Align",
    "BitMatrix",
    "Block",
    "FeedBlock",
    "GrayBuffer",
    "PrintOptions",
    "QR_MAX_PAYLOAD",
    "QrCodeBlock",
    "RawImage",
    "SeparatorBlock",
    "SizeClass",
    "TextBlock",
    "TextRendering",
    "parse_block",
    "parse_blocks",
    "parse_options",
]
