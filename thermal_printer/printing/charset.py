"""
Unicode -> printer code page transcoding.

Each supported code page is a static table built once at import:

- 8-bit pages take their native glyphs from Python's codec for bytes
  0x80-0xFF, then borrow the ASCII transliteration for characters the page
  lacks (œ -> "oe" on PC850, € -> "EUR" outside PC858/WPC1252).
- The ASCII page is the transliteration alone: accented Latin letters fold to
  their base letter, ligatures to digraphs, typographic punctuation to ASCII.

Characters no table knows are resolved by a fallback policy ('?' or dropped);
transcoding never raises.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from thermal_printer.core.errors import InvalidOption


class CodePage(str, Enum):
    ASCII = "ascii"
    WPC1252 = "wpc1252"
    PC850 = "pc850"
    PC858 = "pc858"


class FallbackPolicy(str, Enum):
    REPLACE = "replace"
    DROP = "drop"


REPLACEMENT = b"?"

# Explicit transliterations; letters with a canonical decomposition are
# added programmatically below.
_ASCII_SPECIALS: Dict[str, str] = {
    "Æ": "AE", "æ": "ae", "Œ": "OE", "œ": "oe", "ß": "ss", "ẞ": "SS",
    "Ø": "O", "ø": "o", "Đ": "D", "đ": "d", "Ð": "D", "ð": "d",
    "Ł": "L", "ł": "l", "Þ": "TH", "þ": "th", "Ħ": "H", "ħ": "h",
    "ı": "i", "Ŀ": "L", "ŀ": "l", "ĸ": "k", "Ŋ": "N", "ŋ": "n",
    "‘": "'", "’": "'", "‚": "'", "‛": "'", "′": "'",
    "“": '"', "”": '"', "„": '"', "‟": '"', "″": '"',
    "«": "<<", "»": ">>", "‹": "<", "›": ">",
    "‐": "-", "‑": "-", "‒": "-", "–": "-", "—": "-", "―": "-", "−": "-",
    "…": "...", "•": "*", "·": ".", "\u00a0": " ", "\u2009": " ", "\u202f": " ",
    "€": "EUR", "£": "GBP", "¥": "JPY", "¢": "c",
    "©": "(c)", "®": "(R)", "™": "TM", "°": "o",
    "×": "x", "÷": "/", "±": "+/-", "¡": "!", "¿": "?",
    "¼": "1/4", "½": "1/2", "¾": "3/4", "¹": "1", "²": "2", "³": "3",
}


def _build_ascii_table() -> Dict[str, bytes]:
    table: Dict[str, bytes] = {}
    # Latin-1 Supplement through Latin Extended-B
    for cp in range(0x00C0, 0x0250):
        ch = chr(cp)
        base = "".join(c for c in unicodedata.normalize("NFKD", ch) if not unicodedata.combining(c))
        if base and base.isascii() and base.isalpha():
            table[ch] = base.encode("ascii")
    for ch, repl in _ASCII_SPECIALS.items():
        table[ch] = repl.encode("ascii")
    return table


def _build_8bit_table(codec: str, ascii_table: Mapping[str, bytes]) -> Dict[str, bytes]:
    table: Dict[str, bytes] = {}
    for b in range(0x80, 0x100):
        try:
            ch = bytes([b]).decode(codec)
        except UnicodeDecodeError:
            continue
        table.setdefault(ch, bytes([b]))
    for ch, repl in ascii_table.items():
        table.setdefault(ch, repl)
    return table


@dataclass(frozen=True)
class CodepageTable:
    codepage: CodePage
    select: Optional[int]
    mapping: Mapping[str, bytes]
    fallback: FallbackPolicy


_ASCII = _build_ascii_table()

TABLES: Mapping[CodePage, CodepageTable] = MappingProxyType(
    {
        CodePage.ASCII: CodepageTable(CodePage.ASCII, None, MappingProxyType(_ASCII), FallbackPolicy.DROP),
        CodePage.WPC1252: CodepageTable(
            CodePage.WPC1252, 16, MappingProxyType(_build_8bit_table("cp1252", _ASCII)), FallbackPolicy.REPLACE
        ),
        CodePage.PC850: CodepageTable(
            CodePage.PC850, 2, MappingProxyType(_build_8bit_table("cp850", _ASCII)), FallbackPolicy.REPLACE
        ),
        CodePage.PC858: CodepageTable(
            CodePage.PC858, 19, MappingProxyType(_build_8bit_table("cp858", _ASCII)), FallbackPolicy.REPLACE
        ),
    }
)

# Accepted spellings for config files and JSON requests.
_ALIASES = {
    "latin1": CodePage.WPC1252,
    "latin-1": CodePage.WPC1252,
    "cp1252": CodePage.WPC1252,
    "windows-1252": CodePage.WPC1252,
    "cp850": CodePage.PC850,
    "cp858": CodePage.PC858,
}


def resolve_codepage(value: Union[CodePage, str]) -> CodePage:
    if isinstance(value, CodePage):
        return value
    key = str(value).strip().lower()
    try:
        return _ALIASES.get(key) or CodePage(key)
    except ValueError:
        raise InvalidOption(f"unknown codepage {value!r}; expected one of {[c.value for c in CodePage]}") from None


def resolve_fallback(value: Union[FallbackPolicy, str, None], codepage: CodePage) -> FallbackPolicy:
    if value is None:
        return TABLES[codepage].fallback
    if isinstance(value, FallbackPolicy):
        return value
    try:
        return FallbackPolicy(str(value).strip().lower())
    except ValueError:
        raise InvalidOption(f"unknown fallback policy {value!r}; expected 'replace' or 'drop'") from None


def select_command(codepage: Union[CodePage, str]) -> bytes:
    """ESC t n for the code page, or nothing for plain ASCII."""
    table = TABLES[resolve_codepage(codepage)]
    if table.select is None:
        return b""
    return b"\x1b\x74" + bytes([table.select])


def transcode(
    text: str,
    codepage: Union[CodePage, str] = CodePage.ASCII,
    fallback: Union[FallbackPolicy, str, None] = None,
) -> bytes:
    """
    Encode text for the printer, one code point at a time.

    Text is NFC-normalised first so decomposed accents (e + U+0301) hit the
    table as a single character. Lookup order: table, ASCII passthrough,
    fallback policy.
    """
    cp = resolve_codepage(codepage)
    mapping = TABLES[cp].mapping
    policy = resolve_fallback(fallback, cp)
    if text.isascii():
        return text.encode("ascii")

    out = bytearray()
    for ch in unicodedata.normalize("NFC", text):
        mapped = mapping.get(ch)
        if mapped is not None:
            out += mapped
        elif ord(ch) < 128:
            out.append(ord(ch))
        elif policy is FallbackPolicy.REPLACE:
            out += REPLACEMENT
    return bytes(out)


def unmappable_characters(text: str, codepage: Union[CodePage, str] = CodePage.ASCII) -> List[str]:
    """Distinct characters that will go through the fallback policy, in first-seen order."""
    mapping = TABLES[resolve_codepage(codepage)].mapping
    seen: Dict[str, None] = {}
    for ch in unicodedata.normalize("NFC", text):
        if ord(ch) >= 128 and ch not in mapping:
            seen.setdefault(ch, None)
    return list(seen)


__all__ = [
    "CodePage",
    "CodepageTable",
    "FallbackPolicy",
    "REPLACEMENT",
    "TABLES",
    "resolve_codepage",
    "resolve_fallback",
    "select_command",
    "transcode",
    "unmappable_characters",
]
