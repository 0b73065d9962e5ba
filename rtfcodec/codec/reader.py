"""
RTF reader.

Builds an ``RtfDocument`` from the token stream produced by the tokenizer.
The reader is a small state machine: a stack of parse modes decides how a
token is interpreted (normal body text, font table, color table or a group
being skipped) and a stack of immutable ``ParserState`` snapshots mirrors
the ``{``/``}`` nesting so that formatting set inside a group is undone when
the group closes.

Only a bounded subset of RTF is interpreted: character formatting, font
family and size, foreground color, paragraph breaks and a single bullet
list style. Other destinations are skipped and unknown control words are
ignored. Reading never fails; ``RtfReadResult.status`` tells the caller how
plausible the input was.

Known quirks kept on purpose:
    - every ``;`` inside ``\\colortbl`` appends an entry, so the conventional
      leading ``;`` (the "auto" slot) becomes a black entry at position 0,
      and ``\\cfN`` resolves to ``color_table[N - 1]``
    - ``\\'XX`` escapes are decoded as Latin-1 code points, not cp1252
    - bullets are detected per paragraph; consecutive bulleted paragraphs
      are not grouped into a list object
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Optional, Sequence

from rtfcodec.codec.data_types import (
    Block,
    CharFormat,
    ReadStatus,
    RgbColor,
    RtfDocument,
    RtfReadResult,
)
from rtfcodec.codec.tokenizer import (
    ControlWord,
    HexEscape,
    Text,
    Token,
    TokenKind,
    tokenize,
)

logger = logging.getLogger(__name__)

# Destinations skipped for the rest of their enclosing group, with or
# without the \* marker
SKIP_DESTINATIONS = frozenset(
    {
        "stylesheet",
        "info",
        "header",
        "footer",
        "headerl",
        "headerr",
        "footerl",
        "footerr",
        "pict",
        "object",
        "field",
        "fldinst",
        "datafield",
        "mmathPr",
        "generator",
        "listtable",
        "listoverridetable",
        "rsidtbl",
        "pgdsctbl",
        "latentstyles",
        "pntext",
        "pntxta",
        "pntxtb",
    }
)

# Destinations that stay readable even when marked ignorable with \*
KNOWN_IGNORABLE_DESTINATIONS = frozenset({"fonttbl", "colortbl", "pn"})

REPLACEMENT_CHARACTER = "\ufffd"
MAX_CODE_POINT = 0x10FFFF
# font ids above this are treated as corrupt input
MAX_FONT_ID = 32767


class ParseMode(Enum):
    NORMAL = "normal"
    FONT_TABLE = "font_table"
    COLOR_TABLE = "color_table"
    SKIP_GROUP = "skip_group"


@dataclass(frozen=True)
class ParagraphFormat:
    left_indent: int = 0  # in twips
    first_line_indent: int = 0  # in twips


@dataclass(frozen=True)
class ParserState:
    """Formatting scope saved on every group entry and restored on exit."""

    char: CharFormat = field(default_factory=CharFormat)
    paragraph: ParagraphFormat = field(default_factory=ParagraphFormat)
    # number of fallback characters following \uN (\ucN)
    unicode_skip: int = 1


def _flag_value(word: ControlWord) -> bool:
    return word.parameter != 0 if word.has_parameter else True


class _RtfReader:
    """Single-use reader; every call to ``parse_rtf`` builds its own."""

    def __init__(self, tokens: Sequence[Token]):
        self.tokens = tokens
        self.pos = 0

        self.document = RtfDocument()
        self.block: Block = self.document.add_block()
        self.saw_rtf_header = False

        # Parsing state
        self._state = ParserState()
        self._states: List[ParserState] = []
        self._modes: List[ParseMode] = [ParseMode.NORMAL]
        self._skip_depth = 0
        self._default_font = 0
        self._pending_list_item = False
        # \pard or \par seen; an empty paragraph is then real content
        self._saw_paragraph = False
        # set by \par, cleared once the new paragraph gets content or a \pard
        self._trailing_par = False
        self._fallback_remaining = 0
        self._high_surrogate: Optional[int] = None

        # Table state
        self._fonts: List[str] = []
        self._colors: List[RgbColor] = []
        self._font_id = 0
        self._font_name: List[str] = []
        self._color = [0, 0, 0]
        self._color_has_component = False

    def read(self) -> RtfReadResult:
        tokens = self.tokens
        while self.pos < len(tokens):
            token = tokens[self.pos]
            self.pos += 1
            mode = self._modes[-1]

            if mode is ParseMode.SKIP_GROUP:
                self._skip_token(token)
                continue

            kind = token.kind
            if kind is TokenKind.GROUP_START:
                self._group_start(mode)
            elif kind is TokenKind.GROUP_END:
                self._group_end(mode)
            elif kind is TokenKind.CONTROL_WORD:
                self._control_word(token, mode)
            elif kind is TokenKind.TEXT:
                self._text(token, mode)
            elif kind is TokenKind.HEX_ESCAPE:
                self._hex_escape(token, mode)

        self._finish()
        return RtfReadResult(
            document=self.document,
            saw_rtf_header=self.saw_rtf_header,
            status=self._status(),
        )

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _group_start(self, mode: ParseMode) -> None:
        self._fallback_remaining = 0
        self._states.append(self._state)

        # {\*\dest ...} for destinations we do not know: skip the whole group
        lookahead = self.tokens[self.pos : self.pos + 2]
        if (
            len(lookahead) == 2
            and lookahead[0].kind is TokenKind.CONTROL_WORD
            and lookahead[0].name == "*"
            and lookahead[1].kind is TokenKind.CONTROL_WORD
            and lookahead[1].name not in KNOWN_IGNORABLE_DESTINATIONS
        ):
            logger.debug(f"Skipping ignorable destination: {lookahead[1].name}")
            self._modes.append(ParseMode.SKIP_GROUP)
            self._skip_depth = 1
            self.pos += 2
            return

        if mode is ParseMode.FONT_TABLE:
            # a sub-group of the font table holds one font entry
            self._reset_font_entry()
        self._modes.append(mode)

    def _group_end(self, mode: ParseMode) -> None:
        self._fallback_remaining = 0
        if mode is ParseMode.FONT_TABLE:
            self._commit_font_entry()
        elif mode is ParseMode.COLOR_TABLE:
            if self._color_has_component:
                self._append_color()

        self._modes.pop()
        if not self._modes:
            self._modes.append(ParseMode.NORMAL)
        self._restore_state()

    def _restore_state(self) -> None:
        if self._states:
            self._state = self._states.pop()
        else:
            logger.debug("Unbalanced group end, keeping current state")

    def _skip_token(self, token: Token) -> None:
        if token.kind is TokenKind.GROUP_START:
            self._skip_depth += 1
        elif token.kind is TokenKind.GROUP_END:
            self._skip_depth -= 1
            if self._skip_depth <= 0:
                self._modes.pop()
                if not self._modes:
                    self._modes.append(ParseMode.NORMAL)
                self._restore_state()

    def _enter_skip(self, destination: str) -> None:
        # at top level there is no enclosing group to skip
        if not self._states:
            return
        logger.debug(f"Skipping destination: {destination}")
        self._modes[-1] = ParseMode.SKIP_GROUP
        self._skip_depth = 1

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def _reset_font_entry(self) -> None:
        self._font_id = 0
        self._font_name = []

    def _commit_font_entry(self) -> None:
        name = "".join(self._font_name).strip()
        self._font_name = []
        if name.endswith(";"):
            name = name[:-1].strip()
        # whitespace between entries is not a font name
        if not name:
            return

        font_id = self._font_id
        if font_id < 0 or font_id > MAX_FONT_ID:
            logger.debug(f"Ignoring font entry with out of range id {font_id}")
            return
        while len(self._fonts) <= font_id:
            self._fonts.append("")
        self._fonts[font_id] = name
        logger.debug(f"Font table entry f{font_id}: {name!r}")

    def _append_color(self) -> None:
        red, green, blue = self._color
        self._colors.append(RgbColor(red, green, blue))
        self._color = [0, 0, 0]
        self._color_has_component = False

    def _font_table_word(self, word: ControlWord) -> None:
        # family, charset and pitch words are irrelevant here
        if word.name == "f" and word.has_parameter:
            self._font_id = word.parameter

    def _color_table_word(self, word: ControlWord) -> None:
        component = {"red": 0, "green": 1, "blue": 2}.get(word.name)
        if component is not None and word.has_parameter:
            self._color[component] = word.parameter
            self._color_has_component = True

    # ------------------------------------------------------------------
    # Control words
    # ------------------------------------------------------------------

    def _set_char(self, **changes) -> None:
        self._state = replace(self._state, char=replace(self._state.char, **changes))

    def _set_paragraph(self, **changes) -> None:
        self._state = replace(
            self._state, paragraph=replace(self._state.paragraph, **changes)
        )

    def _control_word(self, word: ControlWord, mode: ParseMode) -> None:
        self._fallback_remaining = 0
        name = word.name

        if name == "rtf":
            self.saw_rtf_header = True
            return

        if mode is ParseMode.FONT_TABLE:
            self._font_table_word(word)
            return
        if mode is ParseMode.COLOR_TABLE:
            self._color_table_word(word)
            return

        if name == "fonttbl":
            self._modes[-1] = ParseMode.FONT_TABLE
            self._reset_font_entry()
            return
        if name == "colortbl":
            self._modes[-1] = ParseMode.COLOR_TABLE
            self._colors = []
            self._color = [0, 0, 0]
            self._color_has_component = False
            return
        if name in SKIP_DESTINATIONS:
            self._enter_skip(name)
            return

        self._normal_word(word)

    def _normal_word(self, word: ControlWord) -> None:
        name = word.name
        has_param = word.has_parameter
        param = word.parameter

        if name == "deff" and has_param:
            self._default_font = param
            self.document.default_font_index = param
            self._set_char(font_index=param)
        elif name == "f" and has_param:
            self._set_char(font_index=param)
        elif name == "fs" and has_param:
            self._set_char(font_size=param)
        elif name == "b":
            self._set_char(bold=_flag_value(word))
        elif name == "i":
            self._set_char(italic=_flag_value(word))
        elif name == "ul":
            self._set_char(underline=_flag_value(word))
        elif name == "ulnone":
            self._set_char(underline=False)
        elif name == "strike":
            self._set_char(strikethrough=_flag_value(word))
        elif name == "cf" and has_param:
            self._set_char(color_index=param)
        elif name == "pard":
            self._state = ParserState(
                char=CharFormat(font_index=self._default_font),
                unicode_skip=self._state.unicode_skip,
            )
            self._pending_list_item = False
            self._trailing_par = False
            self._saw_paragraph = True
        elif name == "par":
            self._end_paragraph()
        elif name == "line":
            self._insert("\n")
        elif name == "tab":
            self._insert("\t")
        elif name == "pnlvlblt" or (name == "ls" and has_param):
            self._pending_list_item = True
        elif name == "li" and has_param:
            self._set_paragraph(left_indent=param)
        elif name == "fi" and has_param:
            self._set_paragraph(first_line_indent=param)
        elif name == "uc" and has_param:
            self._state = replace(self._state, unicode_skip=max(param, 0))
        elif name == "u" and has_param:
            code_point = param + 65536 if param < 0 else param
            self._insert_code_point(code_point)
            self._fallback_remaining = self._state.unicode_skip

    def _end_paragraph(self) -> None:
        self._flush_surrogate()
        if self._pending_list_item:
            self.block.mark_bullet()
            self._pending_list_item = False
        self.block = self.document.add_block()
        self._trailing_par = True
        self._saw_paragraph = True

    # ------------------------------------------------------------------
    # Text
    # ------------------------------------------------------------------

    def _snapshot(self) -> CharFormat:
        char = self._state.char
        family = None
        if 0 <= char.font_index < len(self._fonts):
            family = self._fonts[char.font_index] or None
        color = None
        if 0 < char.color_index <= len(self._colors):
            color = self._colors[char.color_index - 1]
        return replace(char, font_family=family, color=color)

    def _insert(self, text: str) -> None:
        self._flush_surrogate()
        self._trailing_par = False
        self.block.append(text, self._snapshot())

    def _insert_code_point(self, code_point: int) -> None:
        if not 0 <= code_point <= MAX_CODE_POINT:
            self._insert(REPLACEMENT_CHARACTER)
            return
        # astral characters arrive as two \u escapes holding a UTF-16 pair
        if 0xD800 <= code_point <= 0xDBFF:
            self._flush_surrogate()
            self._high_surrogate = code_point
            return
        if 0xDC00 <= code_point <= 0xDFFF:
            high = self._high_surrogate
            self._high_surrogate = None
            if high is None:
                self._insert(REPLACEMENT_CHARACTER)
            else:
                combined = 0x10000 + ((high - 0xD800) << 10) + (code_point - 0xDC00)
                self._insert(chr(combined))
            return
        self._insert(chr(code_point))

    def _flush_surrogate(self) -> None:
        if self._high_surrogate is not None:
            self._high_surrogate = None
            self.block.append(REPLACEMENT_CHARACTER, self._snapshot())

    def _text(self, token: Text, mode: ParseMode) -> None:
        if mode is ParseMode.FONT_TABLE:
            self._font_name.append(token.text)
            return
        if mode is ParseMode.COLOR_TABLE:
            for _ in range(token.text.count(";")):
                self._append_color()
            return

        text = token.text
        if self._fallback_remaining:
            dropped = min(self._fallback_remaining, len(text))
            text = text[dropped:]
            self._fallback_remaining -= dropped
        if text:
            self._insert(text)

    def _hex_escape(self, token: HexEscape, mode: ParseMode) -> None:
        if mode is ParseMode.FONT_TABLE:
            self._font_name.append(chr(token.value))
            return
        if mode is ParseMode.COLOR_TABLE:
            return
        if self._fallback_remaining:
            self._fallback_remaining -= 1
            return
        self._insert(chr(token.value))

    # ------------------------------------------------------------------
    # Finalization
    # ------------------------------------------------------------------

    def _finish(self) -> None:
        self._flush_surrogate()
        blocks = self.document.blocks
        if self._pending_list_item:
            self.block.mark_bullet()
            self._pending_list_item = False
        elif self._trailing_par and self.block.is_empty and len(blocks) > 1:
            # the last \par terminated the final paragraph
            blocks.pop()
            self.block = blocks[-1]

        # a stream without any paragraph word holds no paragraph at all
        if (
            len(blocks) == 1
            and blocks[0].is_empty
            and not blocks[0].bullet
            and not self._saw_paragraph
        ):
            blocks.clear()

        self.document.font_table = list(self._fonts)
        self.document.color_table = list(self._colors)
        logger.debug(
            f"Read {len(blocks)} blocks, {len(self._fonts)} fonts, "
            f"{len(self._colors)} colors"
        )

    def _status(self) -> ReadStatus:
        if not self.tokens:
            return ReadStatus.EMPTY_INPUT
        if not any(
            token.kind in (TokenKind.GROUP_START, TokenKind.CONTROL_WORD)
            for token in self.tokens
        ):
            return ReadStatus.NOT_RTF
        return ReadStatus.PARSED


def parse_rtf(data: bytes) -> RtfReadResult:
    """Read RTF bytes into a document together with a plausibility status."""
    result = _RtfReader(tokenize(data)).read()
    if not result.saw_rtf_header:
        logger.warning("No RTF header (\\rtf) found in input")
    return result


def read_rtf(data: bytes) -> tuple[RtfDocument, bool]:
    """Read RTF bytes into a document.

    Returns the document and whether an ``\\rtf`` control word was seen. The
    flag is a lightweight validity signal, never a precondition: a document
    is always returned, possibly empty.
    """
    result = parse_rtf(data)
    return result.document, result.saw_rtf_header
