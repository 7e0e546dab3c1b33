"""
Document building: the entry points that turn a print request into bytes.

- build_image_document: RawImage -> pipeline -> Floyd-Steinberg -> GS v 0 job
- build_text_document: ordered blocks -> ESC/POS stream, with text either in
  the printer's own fonts (transcoded) or rasterised with Pillow
- preview_image: the dithered photo as a Pillow image, for on-screen checks

A build is one synchronous call with no I/O; the returned bytes are meant to
be written verbatim to the printer by an external transport.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional, Union

from PIL import Image

from thermal_printer.core.config import resolve_settings
from thermal_printer.core.errors import InvalidOption
from thermal_printer.core.logging import document_context
from thermal_printer.printing import commands, pipeline, raster
from thermal_printer.printing.charset import (
    CodePage,
    FallbackPolicy,
    resolve_codepage,
    resolve_fallback,
    select_command,
    unmappable_characters,
)
from thermal_printer.printing.dither import dither, threshold
from thermal_printer.printing.models import (
    BitMatrix,
    Block,
    FeedBlock,
    GrayBuffer,
    PrintOptions,
    QrCodeBlock,
    RawImage,
    SeparatorBlock,
    TextBlock,
    TextRendering,
    parse_blocks,
    parse_options,
)
from thermal_printer.printing.render import render_separator, render_text_block

logger = logging.getLogger(__name__)

BlockInput = Union[Block, Mapping[str, Any]]


def _resolve_rendering(value: Union[TextRendering, str, None], default: Any) -> TextRendering:
    raw = default if value is None else value
    if isinstance(raw, TextRendering):
        return raw
    try:
        return TextRendering(str(raw).strip().lower())
    except ValueError:
        raise InvalidOption(f"unknown text rendering {raw!r}; expected 'native' or 'bitmap'") from None


def _positive_int(settings: Mapping[str, Any], key: str) -> int:
    try:
        value = int(settings[key])
    except (TypeError, ValueError):
        raise InvalidOption(f"{key} must be an integer, got {settings[key]!r}") from None
    if value < 1:
        raise InvalidOption(f"{key} must be at least 1, got {value}")
    return value


def _image_to_raster(img: Image.Image) -> bytes:
    gray = GrayBuffer(img.width, img.height, [float(v) for v in img.convert("L").tobytes()])
    return raster.raster_command(threshold(gray))


class DocumentBuilder:
    """
    Builds print documents for one printer configuration.

    The builder only reads its settings; it keeps no state between builds, so
    one instance can serve concurrent threads.

    Config keys (all optional, see thermal_printer.core.config):
      printer_profile, printer_width, chars_per_line, contrast, gamma,
      resample, codepage, fallback, text_rendering, font_path, font_size
    """

    def __init__(self, config: Optional[Mapping[str, Any]] = None) -> None:
        try:
            self.settings: dict[str, Any] = resolve_settings(config)
        except KeyError as e:
            raise InvalidOption(str(e.args[0])) from None

    @property
    def chars_per_line(self) -> int:
        return _positive_int(self.settings, "chars_per_line")

    def default_options(self) -> PrintOptions:
        s = self.settings
        return parse_options(
            None,
            contrast=s.get("contrast"),
            gamma=s.get("gamma"),
            width=s.get("printer_width"),
            resample=s.get("resample"),
        )

    def options(self, options: Union[PrintOptions, Mapping[str, Any], None] = None) -> PrintOptions:
        if isinstance(options, PrintOptions):
            return options
        defaults = self.default_options().model_dump()
        return parse_options(options, **defaults)

    # Images

    def dithered(self, image: RawImage, options: Union[PrintOptions, Mapping[str, Any], None] = None) -> BitMatrix:
        opts = self.options(options)
        gray = pipeline.process(image, opts)
        return dither(gray)

    def image_document(self, image: RawImage, options: Union[PrintOptions, Mapping[str, Any], None] = None) -> bytes:
        with document_context() as doc_id:
            opts = self.options(options)
            matrix = self.dithered(image, opts)
            data = raster.pack(matrix)
            logger.info(
                "Built image document %s: %dx%d -> %dx%d dots, contrast=%d gamma=%.2f, %d bytes",
                doc_id,
                image.width,
                image.height,
                matrix.width,
                matrix.height,
                opts.contrast,
                opts.gamma,
                len(data),
            )
            return data

    def preview(self, image: RawImage, options: Union[PrintOptions, Mapping[str, Any], None] = None) -> Image.Image:
        return self.dithered(image, options).to_image()

    # Text

    def _emit_native(
        self,
        block: Block,
        codepage: CodePage,
        fallback: FallbackPolicy,
    ) -> bytes:
        cpl = self.chars_per_line
        if isinstance(block, TextBlock):
            missing = unmappable_characters(block.content, codepage)
            if missing:
                logger.debug("Unmappable in %s (%s): %r", codepage.value, fallback.value, "".join(missing))
            return commands.emit_text(block, cpl, codepage, fallback)
        if isinstance(block, SeparatorBlock):
            return commands.emit_separator(block, cpl, codepage, fallback)
        if isinstance(block, QrCodeBlock):
            return commands.emit_qr(block)
        if isinstance(block, FeedBlock):
            return commands.emit_feed(block)
        raise InvalidOption(f"unsupported block type: {type(block).__name__}")

    def _emit_bitmap(self, block: Block) -> bytes:
        if isinstance(block, TextBlock):
            return commands.align("left") + _image_to_raster(render_text_block(block, self.settings))
        if isinstance(block, SeparatorBlock):
            return commands.align("left") + _image_to_raster(render_separator(block, self.settings))
        if isinstance(block, QrCodeBlock):
            return commands.emit_qr(block)
        if isinstance(block, FeedBlock):
            return commands.emit_feed(block)
        raise InvalidOption(f"unsupported block type: {type(block).__name__}")

    def text_document(
        self,
        blocks: Iterable[BlockInput],
        codepage: Union[CodePage, str, None] = None,
        *,
        rendering: Union[TextRendering, str, None] = None,
        fallback: Union[FallbackPolicy, str, None] = None,
    ) -> bytes:
        """
        Concatenate: printer init, code page select (native text only, once),
        every block in order, then three line feeds.
        """
        with document_context() as doc_id:
            parsed = parse_blocks(blocks)
            cp = resolve_codepage(codepage if codepage is not None else self.settings.get("codepage", CodePage.ASCII))
            policy = resolve_fallback(fallback if fallback is not None else self.settings.get("fallback"), cp)
            mode = _resolve_rendering(rendering, self.settings.get("text_rendering", TextRendering.NATIVE))

            out = bytearray(commands.INIT)
            if mode is TextRendering.NATIVE:
                out += select_command(cp)
                for block in parsed:
                    out += self._emit_native(block, cp, policy)
            else:
                for block in parsed:
                    out += self._emit_bitmap(block)
            out += raster.TRAILING_FEED

            logger.info(
                "Built text document %s: %d block(s), rendering=%s codepage=%s, %d bytes",
                doc_id,
                len(parsed),
                mode.value,
                cp.value,
                len(out),
            )
            return bytes(out)


def build_image_document(
    image: RawImage,
    options: Union[PrintOptions, Mapping[str, Any], None] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> bytes:
    """Photo job: resample, tone-correct, dither and pack `image` as one GS v 0 raster."""
    return DocumentBuilder(config).image_document(image, options)


def build_text_document(
    blocks: Iterable[BlockInput],
    codepage: Union[CodePage, str, None] = None,
    *,
    rendering: Union[TextRendering, str, None] = None,
    fallback: Union[FallbackPolicy, str, None] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> bytes:
    """Structured job: text, separator, QR and feed blocks rendered in order."""
    return DocumentBuilder(config).text_document(blocks, codepage, rendering=rendering, fallback=fallback)


def preview_image(
    image: RawImage,
    options: Union[PrintOptions, Mapping[str, Any], None] = None,
    config: Optional[Mapping[str, Any]] = None,
) -> Image.Image:
    """The dithered photo as a mode '1' image, exactly as it will print."""
    return DocumentBuilder(config).preview(image, options)


__all__ = ["DocumentBuilder", "build_image_document", "build_text_document", "preview_image"]
