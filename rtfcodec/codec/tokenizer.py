"""
RTF tokenizer.

Turns a raw RTF byte buffer into a flat list of lexical tokens. The
tokenizer keeps no semantic state: it does not know about destinations,
groups that should be skipped or the meaning of any control word. It never
raises; malformed input degrades into a best-effort token stream.

Lexical rules, applied left to right:
    - ``{`` and ``}`` become GroupStart and GroupEnd
    - ``\\'XX`` becomes HexEscape when both hex digits are present,
      otherwise the escape is dropped
    - ``\\~`` becomes a non-breaking space Text token, ``\\*`` the control
      word ``*`` and an escaped CR or LF the control word ``par``
    - any other non-letter after a backslash is passed through as Text
    - letters form a control word, optionally followed by a signed integer
      parameter; one space right after it is a delimiter and is consumed
    - bare CR and LF are dropped
    - every other maximal run of bytes becomes one Text token (Latin-1)
"""

import logging
import typing
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, List

logger = logging.getLogger(__name__)

_GROUP_START = ord("{")
_GROUP_END = ord("}")
_BACKSLASH = ord("\\")
_CR = ord("\r")
_LF = ord("\n")
_SPACE = ord(" ")
_MINUS = ord("-")
_QUOTE = ord("'")

_TEXT_STOP = frozenset({_GROUP_START, _GROUP_END, _BACKSLASH, _CR, _LF})
_HEX_DIGITS = frozenset(b"0123456789abcdefABCDEF")

NON_BREAKING_SPACE = "\u00a0"


class TokenKind(Enum):
    GROUP_START = "group_start"
    GROUP_END = "group_end"
    CONTROL_WORD = "control_word"
    TEXT = "text"
    HEX_ESCAPE = "hex_escape"


@dataclass(frozen=True)
class GroupStart:
    kind: ClassVar[TokenKind] = TokenKind.GROUP_START


@dataclass(frozen=True)
class GroupEnd:
    kind: ClassVar[TokenKind] = TokenKind.GROUP_END


@dataclass(frozen=True)
class ControlWord:
    kind: ClassVar[TokenKind] = TokenKind.CONTROL_WORD

    name: str
    parameter: int = 0
    has_parameter: bool = False


@dataclass(frozen=True)
class Text:
    kind: ClassVar[TokenKind] = TokenKind.TEXT

    text: str


@dataclass(frozen=True)
class HexEscape:
    kind: ClassVar[TokenKind] = TokenKind.HEX_ESCAPE

    value: int  # raw byte value 0-255


Token = typing.Union[GroupStart, GroupEnd, ControlWord, Text, HexEscape]


def _is_letter(byte: int) -> bool:
    return (0x41 <= byte <= 0x5A) or (0x61 <= byte <= 0x7A)


def _is_digit(byte: int) -> bool:
    return 0x30 <= byte <= 0x39


def _read_control_word(data: bytes, i: int) -> tuple[ControlWord, int]:
    """Read a control word starting at ``i`` (first letter after the backslash).

    Returns the token and the index right after it, with the delimiting
    space, if any, already consumed.
    """
    length = len(data)
    start = i
    while i < length and _is_letter(data[i]):
        i += 1
    name = data[start:i].decode("ascii")

    parameter = 0
    has_parameter = False
    if i < length and (data[i] == _MINUS or _is_digit(data[i])):
        negative = data[i] == _MINUS
        if negative:
            i += 1
        digits_start = i
        while i < length and _is_digit(data[i]):
            i += 1
        digits = data[digits_start:i]
        # a lone "-" still marks a parameter, it just evaluates to zero
        parameter = int(digits) if digits else 0
        if negative:
            parameter = -parameter
        has_parameter = True

    if i < length and data[i] == _SPACE:
        i += 1

    return ControlWord(name, parameter, has_parameter), i


def tokenize(data: bytes) -> List[Token]:
    """Split an RTF byte buffer into tokens. Never raises."""
    data = bytes(data)
    tokens: List[Token] = []
    i = 0
    length = len(data)

    while i < length:
        byte = data[i]

        if byte == _GROUP_START:
            tokens.append(GroupStart())
            i += 1
        elif byte == _GROUP_END:
            tokens.append(GroupEnd())
            i += 1
        elif byte == _BACKSLASH:
            i += 1
            if i >= length:
                break
            byte = data[i]

            if byte == _QUOTE:
                i += 1
                pair = data[i : i + 2]
                if len(pair) == 2 and all(b in _HEX_DIGITS for b in pair):
                    tokens.append(HexEscape(int(pair, 16)))
                    i += 2
                continue

            if _is_letter(byte):
                word, i = _read_control_word(data, i)
                tokens.append(word)
                continue

            # control symbol
            if byte in (_CR, _LF):
                tokens.append(ControlWord("par"))
            elif byte == ord("~"):
                tokens.append(Text(NON_BREAKING_SPACE))
            elif byte == ord("*"):
                tokens.append(ControlWord("*"))
            else:
                tokens.append(Text(chr(byte)))
            i += 1
        elif byte in (_CR, _LF):
            i += 1
        else:
            start = i
            while i < length and data[i] not in _TEXT_STOP:
                i += 1
            tokens.append(Text(data[start:i].decode("latin-1")))

    logger.debug("Tokenized %d bytes into %d tokens", length, len(tokens))
    return tokens
