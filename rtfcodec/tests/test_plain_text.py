import logging
from unittest import TestCase

from rtfcodec.codec.data_types import CharFormat
from rtfcodec.codec.plain_text import document_from_plain_bytes, document_from_text
from rtfcodec.codec.reader import read_rtf
from rtfcodec.codec.writer import write_rtf

logger = logging.getLogger(__name__)

tc = TestCase()


def test_one_block_per_line() -> None:
    document = document_from_text("first\nsecond\r\nthird\rfourth\n")

    tc.assertListEqual(
        ["first", "second", "third", "fourth"], list(document.iterator())
    )
    tc.assertFalse(any(block.bullet for block in document.blocks))


def test_blank_lines_become_empty_blocks() -> None:
    document = document_from_text("a\n\nb")

    tc.assertEqual(3, len(document.blocks))
    tc.assertTrue(document.blocks[1].is_empty)
    tc.assertEqual("a\n\nb", document.get_full_text())


def test_empty_text() -> None:
    tc.assertListEqual([], document_from_text("").blocks)


def test_format_is_applied_to_every_run() -> None:
    fmt = CharFormat(italic=True, font_family="Courier New")

    document = document_from_text("x\ny", fmt=fmt)

    tc.assertListEqual(
        [fmt, fmt], [block.runs[0].format for block in document.blocks]
    )


def test_bullet_prefix() -> None:
    document = document_from_text(
        "Title\n- one\n- two\n-not a bullet", bullet_prefix="- "
    )

    tc.assertListEqual(
        ["Title", "one", "two", "-not a bullet"], list(document.iterator())
    )
    tc.assertListEqual(
        [False, True, True, False], [block.bullet for block in document.blocks]
    )
    tc.assertEqual(1, document.blocks[1].indent_level)


def test_decode_utf8_bytes() -> None:
    content = "Café crème brûlée\nSecond line\n".encode("utf-8")

    document, encoding = document_from_plain_bytes(content)

    tc.assertEqual("Café crème brûlée\nSecond line", document.get_full_text())
    tc.assertIsInstance(encoding, str)


def test_decode_empty_bytes() -> None:
    document, encoding = document_from_plain_bytes(b"")

    tc.assertListEqual([], document.blocks)
    tc.assertEqual("utf-8", encoding)


def test_plain_text_converts_to_rtf() -> None:
    fmt = CharFormat(font_family="Arial")
    document = document_from_text("Shopping\n* milk\n* bread {fresh}\n", fmt, "* ")

    restored, _ = read_rtf(write_rtf(document))

    tc.assertEqual(document.coalesced(), restored.coalesced())
    tc.assertEqual("Shopping\nmilk\nbread {fresh}", restored.get_full_text())
