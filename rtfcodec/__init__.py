"""
rtf-codec: Rich Text Format reader and writer.

Reads RTF byte streams into a paragraph/run document model and writes that
model back as canonical RTF. Supports bold, italic, underline,
strikethrough, font family, font size, text color, a single bullet list
style and paragraph breaks. Everything else in an RTF file is discarded.
"""

from pathlib import Path

from rtfcodec.codec.data_types import (
    Block,
    CharFormat,
    ReadStatus,
    RgbColor,
    RtfDocument,
    RtfReadResult,
    Run,
)
from rtfcodec.codec.plain_text import document_from_plain_bytes, document_from_text
from rtfcodec.codec.reader import parse_rtf, read_rtf
from rtfcodec.codec.serialization import deserialize_document, serialize_document
from rtfcodec.codec.tokenizer import tokenize
from rtfcodec.codec.writer import RtfWriterOptions, write_rtf
from rtfcodec.exceptions import FileFormatNotSupportedError
from rtfcodec.router import (
    get_loader,
    get_loader_for_type,
    is_supported_file,
    looks_like_rtf,
)

__version__ = "0.1.0"


def read_file(path: str | Path, strict: bool = False) -> RtfDocument:
    """
    Read a file into a document.

    The loader is chosen from the file extension; files with an unknown
    extension are still read as RTF when they start with ``{\\rtf``.

    Args:
        path: Path to the file to read.
        strict: Raise instead of degrading when an RTF file has no header.

    Returns:
        The RtfDocument built from the file content.

    Raises:
        FileFormatNotSupportedError: If the file type is not supported.
        FileNotFoundError: If the file does not exist.
        MissingRtfHeaderError: In strict mode, for RTF without a header.

    Example:
        >>> import rtfcodec
        >>> document = rtfcodec.read_file("notes.rtf")
        >>> print(document.get_full_text())
    """
    path = Path(path)
    with open(path, "rb") as f:
        data = f.read()

    try:
        loader = get_loader(str(path))
    except FileFormatNotSupportedError:
        if not looks_like_rtf(data):
            raise
        loader = get_loader_for_type("rtf")
    return loader(data, strict=strict)


def write_file(
    path: str | Path,
    document: RtfDocument,
    options: RtfWriterOptions | None = None,
) -> None:
    """Write a document to ``path`` as RTF."""
    with open(Path(path), "wb") as f:
        f.write(write_rtf(document, options))


__all__ = [
    # Version
    "__version__",
    # Main functions
    "read_file",
    "write_file",
    "is_supported_file",
    "get_loader",
    "get_loader_for_type",
    "looks_like_rtf",
    # Codec
    "tokenize",
    "read_rtf",
    "parse_rtf",
    "write_rtf",
    "RtfWriterOptions",
    "document_from_text",
    "document_from_plain_bytes",
    "serialize_document",
    "deserialize_document",
    # Model
    "RtfDocument",
    "Block",
    "Run",
    "CharFormat",
    "RgbColor",
    "RtfReadResult",
    "ReadStatus",
]
