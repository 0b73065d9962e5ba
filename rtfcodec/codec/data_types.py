import json
import typing
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import List, Optional

from rtfcodec.exceptions import EmptyInputError, MissingRtfHeaderError, NotRtfError

# RTF measures font sizes in half-points: \fs24 is 12pt
DEFAULT_FONT_SIZE = 24


@dataclass(frozen=True)
class RgbColor:
    """Represents one entry of an RTF color table."""

    red: int = 0
    green: int = 0
    blue: int = 0

    @property
    def hex_color(self) -> str:
        """Return color as hex string (#RRGGBB)."""
        return f"#{self.red:02x}{self.green:02x}{self.blue:02x}"

    @property
    def is_black(self) -> bool:
        return self.red == 0 and self.green == 0 and self.blue == 0


BLACK = RgbColor(0, 0, 0)


@dataclass(frozen=True)
class CharFormat:
    """Character formatting snapshot attached to a run.

    ``font_index`` and ``color_index`` are the raw table references that were
    active while reading; ``font_family`` and ``color`` hold the values they
    resolved to. Only the resolved values take part in equality, so runs read
    from different tables still compare equal when they look the same.
    """

    bold: bool = False
    italic: bool = False
    underline: bool = False
    strikethrough: bool = False
    font_index: int = field(default=0, compare=False)
    font_size: int = DEFAULT_FONT_SIZE  # in half-points
    color_index: int = field(default=0, compare=False)  # 0 = inherit
    font_family: Optional[str] = None
    color: Optional[RgbColor] = None

    @property
    def point_size(self) -> float:
        return self.font_size / 2.0


@dataclass
class Run:
    """A span of text sharing one character format."""

    text: str = ""
    format: CharFormat = field(default_factory=CharFormat)


@dataclass
class Block:
    """One paragraph of the document."""

    runs: List[Run] = field(default_factory=list)
    # only a single bullet style and a single list level are modelled
    bullet: bool = False
    indent_level: int = 0

    @property
    def text(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def is_empty(self) -> bool:
        return not self.runs

    def append(self, text: str, fmt: CharFormat | None = None) -> None:
        """Append a run; empty text is ignored since runs are never empty."""
        if not text:
            return
        if fmt is None:
            fmt = CharFormat()
        self.runs.append(Run(text=text, format=fmt))

    def mark_bullet(self) -> None:
        self.bullet = True
        self.indent_level = 1

    def coalesced(self) -> "Block":
        """Return a copy whose adjacent runs with equal formatting are merged."""
        runs: List[Run] = []
        for run in self.runs:
            if runs and runs[-1].format == run.format:
                runs[-1] = Run(text=runs[-1].text + run.text, format=runs[-1].format)
            else:
                runs.append(Run(text=run.text, format=run.format))
        return replace(self, runs=runs)


@dataclass
class RtfDocument:
    """Paragraph-structured rich text document.

    The font and color tables are filled by the reader with what the source
    declared. They are informational only: runs already carry resolved values
    and the writer rebuilds its own tables.
    """

    blocks: List[Block] = field(default_factory=list)
    font_table: List[str] = field(default_factory=list, compare=False)
    color_table: List[RgbColor] = field(default_factory=list, compare=False)
    default_font_index: int = field(default=0, compare=False)

    def add_block(self, bullet: bool = False) -> Block:
        block = Block()
        if bullet:
            block.mark_bullet()
        self.blocks.append(block)
        return block

    @property
    def is_empty(self) -> bool:
        return all(block.is_empty for block in self.blocks)

    def iterator(self) -> typing.Iterator[str]:
        """Yield the plain text of each block in document order."""
        for block in self.blocks:
            yield block.text

    def get_full_text(self) -> str:
        """Plain text of the document, one line per block."""
        return "\n".join(self.iterator())

    def coalesced(self) -> "RtfDocument":
        """Copy with adjacent equally formatted runs merged in every block.

        The reader never merges runs, so comparisons of content between a
        document and its re-read RTF should go through this view.
        """
        return replace(self, blocks=[block.coalesced() for block in self.blocks])

    def to_dict(self) -> dict:
        return asdict(self)

    def to_json(self) -> dict:
        from rtfcodec.codec.serialization import serialize_document

        return serialize_document(self)

    def dumps(self, **kwargs) -> str:
        return json.dumps(self.to_json(), **kwargs)


class ReadStatus(Enum):
    EMPTY_INPUT = "empty_input"
    NOT_RTF = "not_rtf"
    PARSED = "parsed"


@dataclass
class RtfReadResult:
    """Outcome of reading a byte buffer.

    The reader never fails; the status lets callers decide which of the
    degraded outcomes they treat as fatal.
    """

    document: RtfDocument = field(default_factory=RtfDocument)
    saw_rtf_header: bool = False
    status: ReadStatus = ReadStatus.EMPTY_INPUT

    def raise_for_status(self, require_header: bool = False) -> "RtfReadResult":
        if self.status is ReadStatus.EMPTY_INPUT:
            raise EmptyInputError()
        if self.status is ReadStatus.NOT_RTF:
            raise NotRtfError()
        if require_header and not self.saw_rtf_header:
            raise MissingRtfHeaderError()
        return self
