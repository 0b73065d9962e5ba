"""
RTF writer.

Serializes an ``RtfDocument`` into canonical RTF bytes. The writer is a pure
function of the document: it makes one pass to collect the fonts and colors
in first-use order and a second pass to emit the header, the tables and the
body. The same document always yields byte-identical output.

Every run is written as its own group carrying the complete formatting, and
every bulleted paragraph repeats the full bullet preamble; consecutive
bullets are not merged into one list.

Color references follow the reader's table convention so that reading the
output back gives the same colors: black is ``\\cf1`` and the k-th discovered
color (0-based) is ``\\cf{k+3}``. The emitted table itself keeps the usual
layout of an empty auto entry, then black, then the discovered colors.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from rtfcodec.codec.data_types import Block, CharFormat, RgbColor, RtfDocument

logger = logging.getLogger(__name__)

DEFAULT_FONT_NAME = "Sans Serif"

RTF_HEADER = "{\\rtf1\\ansi\\ansicpg1252\\deff0\n"
BLACK_COLOR_REFERENCE = 1
# auto slot and black precede the discovered colors, and \cfN reads entry N-1
FIRST_COLOR_REFERENCE = 3


@dataclass(frozen=True)
class RtfWriterOptions:
    default_font: str = DEFAULT_FONT_NAME
    bullet_left_indent: int = 720  # in twips
    bullet_first_indent: int = -360  # in twips


def _escape_text(text: str) -> str:
    parts: List[str] = []
    for char in text:
        code = ord(char)
        if char in "\\{}":
            parts.append("\\" + char)
        elif char == "\n":
            parts.append("\\line ")
        elif char == "\t":
            parts.append("\\tab ")
        elif code > 127:
            # \uN takes signed 16-bit UTF-16 units
            encoded = char.encode("utf-16-le", "surrogatepass")
            for i in range(0, len(encoded), 2):
                unit = int.from_bytes(encoded[i : i + 2], "little")
                if unit > 32767:
                    unit -= 65536
                parts.append(f"\\u{unit}?")
        else:
            parts.append(char)
    return "".join(parts)


def _escape_font_name(name: str) -> str:
    parts: List[str] = []
    for char in name:
        code = ord(char)
        if char in "\\{}":
            parts.append("\\" + char)
        elif code > 255:
            parts.append("?")
        elif code > 127:
            parts.append(f"\\'{code:02x}")
        else:
            parts.append(char)
    return "".join(parts)


class _RtfWriter:
    def __init__(self, document: RtfDocument, options: RtfWriterOptions):
        self.document = document
        self.options = options
        self.fonts: List[str] = [options.default_font]
        self.colors: List[RgbColor] = []

    def write(self) -> bytes:
        self._collect_tables()

        parts: List[str] = [RTF_HEADER]
        parts.append(self._font_table())
        parts.append(self._color_table())
        for index, block in enumerate(self.document.blocks):
            if index > 0:
                parts.append("\\par\n")
            parts.append(self._block(block))
        parts.append("}\n")

        logger.debug(
            f"Wrote {len(self.document.blocks)} blocks with {len(self.fonts)} fonts "
            f"and {len(self.colors)} colors"
        )
        return "".join(parts).encode("ascii")

    def _family(self, fmt: CharFormat) -> str:
        return fmt.font_family or self.options.default_font

    def _collect_tables(self) -> None:
        for block in self.document.blocks:
            for run in block.runs:
                family = self._family(run.format)
                if family not in self.fonts:
                    self.fonts.append(family)
                color = run.format.color
                if color is not None and not color.is_black:
                    if color not in self.colors:
                        self.colors.append(color)

    def _font_table(self) -> str:
        entries = "".join(
            f"{{\\f{index}\\fnil {_escape_font_name(name)};}}"
            for index, name in enumerate(self.fonts)
        )
        return f"{{\\fonttbl{entries}}}\n"

    def _color_table(self) -> str:
        entries = "".join(
            f"\\red{c.red}\\green{c.green}\\blue{c.blue};" for c in self.colors
        )
        return f"{{\\colortbl ;\\red0\\green0\\blue0;{entries}}}\n"

    def _color_reference(self, color: Optional[RgbColor]) -> int:
        if color is None:
            return 0
        if color.is_black:
            return BLACK_COLOR_REFERENCE
        return self.colors.index(color) + FIRST_COLOR_REFERENCE

    def _bullet_preamble(self) -> str:
        options = self.options
        return (
            f"\\fi{options.bullet_first_indent}\\li{options.bullet_left_indent}"
            "{\\pntext\\f0 \\'b7\\tab}"
            "{\\*\\pn\\pnlvlblt{\\pntxtb\\'b7}}"
        )

    def _block(self, block: Block) -> str:
        parts = ["\\pard"]
        if block.bullet:
            parts.append(self._bullet_preamble())
        elif block.is_empty:
            # keeps the paragraph visible; doubles as the \pard delimiter
            parts.append(" ")
        for run in block.runs:
            parts.append(self._run(run.text, run.format))
        return "".join(parts)

    def _run(self, text: str, fmt: CharFormat) -> str:
        words = [f"\\f{self.fonts.index(self._family(fmt))}"]
        if fmt.font_size > 0:
            words.append(f"\\fs{fmt.font_size}")
        if fmt.bold:
            words.append("\\b")
        if fmt.italic:
            words.append("\\i")
        if fmt.underline:
            words.append("\\ul")
        if fmt.strikethrough:
            words.append("\\strike")
        color_reference = self._color_reference(fmt.color)
        if color_reference > 0:
            words.append(f"\\cf{color_reference}")
        return "{" + "".join(words) + " " + _escape_text(text) + "}"


def write_rtf(
    document: RtfDocument, options: Optional[RtfWriterOptions] = None
) -> bytes:
    """Serialize a document to RTF bytes. Pure, total and deterministic."""
    return _RtfWriter(document, options or RtfWriterOptions()).write()
