"""
Plain text interop.

Builds documents from plain text so that text files can be re-encoded as
RTF, and decodes raw text files with automatic encoding detection.

Encoding Handling
-----------------
Raw bytes are decoded with charset_normalizer:
    - the most likely encoding is detected from the content
    - detection failures fall back to UTF-8 with replacement characters
    - the detected encoding is returned next to the document

Every line of the text becomes one block. All runs share the format given
by the caller; lines starting with the optional bullet prefix become
bulleted blocks with the prefix removed.
"""

import logging
import re
from typing import Optional

from charset_normalizer import from_bytes

from rtfcodec.codec.data_types import CharFormat, RtfDocument

logger = logging.getLogger(__name__)

_RE_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def _detect_and_decode(content: bytes) -> tuple[str, str]:
    """
    Detect encoding and decode bytes to string.

    Returns:
        Tuple of (decoded_text, detected_encoding).
        If detection fails, encoding will be "utf-8" (fallback).
    """
    if not content:
        return "", "utf-8"

    best_match = from_bytes(content).best()

    if best_match is not None:
        encoding = best_match.encoding
        logger.debug("Detected encoding: %s", encoding)
        try:
            return str(best_match), encoding
        except (UnicodeDecodeError, LookupError) as e:
            logger.warning(
                "Failed to decode with detected encoding %s: %s", encoding, e
            )

    logger.debug("Encoding detection failed, falling back to UTF-8")
    return content.decode("utf-8", errors="replace"), "utf-8"


def document_from_text(
    text: str,
    fmt: Optional[CharFormat] = None,
    bullet_prefix: Optional[str] = None,
) -> RtfDocument:
    """Build a document with one block per line of ``text``."""
    document = RtfDocument()
    if not text:
        return document

    # a trailing line break ends the last line instead of opening a new one
    lines = _RE_LINE_BREAK.split(text)
    if len(lines) > 1 and lines[-1] == "":
        lines.pop()

    for line in lines:
        bullet = bool(bullet_prefix) and line.startswith(bullet_prefix)
        if bullet:
            line = line[len(bullet_prefix) :]
        block = document.add_block(bullet=bullet)
        block.append(line, fmt)

    return document


def document_from_plain_bytes(
    content: bytes,
    fmt: Optional[CharFormat] = None,
    bullet_prefix: Optional[str] = None,
) -> tuple[RtfDocument, str]:
    """Decode a plain text file and build a document from it.

    Returns:
        Tuple of (document, detected_encoding).
    """
    text, encoding = _detect_and_decode(content)
    document = document_from_text(text, fmt=fmt, bullet_prefix=bullet_prefix)
    logger.debug(
        f"Built {len(document.blocks)} blocks from plain text ({encoding})"
    )
    return document, encoding
