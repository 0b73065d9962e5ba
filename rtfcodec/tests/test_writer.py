import logging
from unittest import TestCase

from rtfcodec.codec.data_types import BLACK, CharFormat, RgbColor, RtfDocument
from rtfcodec.codec.writer import RtfWriterOptions, write_rtf

logger = logging.getLogger(__name__)

tc = TestCase()
tc.maxDiff = None

HEADER = b"{\\rtf1\\ansi\\ansicpg1252\\deff0\n"
DEFAULT_FONT_TABLE = b"{\\fonttbl{\\f0\\fnil Sans Serif;}}\n"
DEFAULT_COLOR_TABLE = b"{\\colortbl ;\\red0\\green0\\blue0;}\n"
BULLET_PREAMBLE = rb"\fi-360\li720{\pntext\f0 \'b7\tab}{\*\pn\pnlvlblt{\pntxtb\'b7}}"


def _document(*texts: str, fmt: CharFormat = None) -> RtfDocument:
    document = RtfDocument()
    for text in texts:
        document.add_block().append(text, fmt)
    return document


def test_write_empty_document() -> None:
    tc.assertEqual(
        HEADER + DEFAULT_FONT_TABLE + DEFAULT_COLOR_TABLE + b"}\n",
        write_rtf(RtfDocument()),
    )


def test_write_formatted_run() -> None:
    fmt = CharFormat(bold=True, font_family="Arial", color=RgbColor(255, 0, 0))

    expected = (
        HEADER
        + b"{\\fonttbl{\\f0\\fnil Sans Serif;}{\\f1\\fnil Arial;}}\n"
        + b"{\\colortbl ;\\red0\\green0\\blue0;\\red255\\green0\\blue0;}\n"
        + b"\\pard{\\f1\\fs24\\b\\cf3 Hi}}\n"
    )

    tc.assertEqual(expected, write_rtf(_document("Hi", fmt=fmt)))


def test_write_all_character_flags() -> None:
    fmt = CharFormat(
        bold=True, italic=True, underline=True, strikethrough=True, font_size=18
    )

    output = write_rtf(_document("x", fmt=fmt))

    tc.assertIn(rb"{\f0\fs18\b\i\ul\strike x}", output)


def test_blocks_are_separated_by_par() -> None:
    output = write_rtf(_document("one", "two"))

    tc.assertIn(rb"\pard{\f0\fs24 one}" + b"\\par\n" + rb"\pard{\f0\fs24 two}", output)
    tc.assertTrue(output.endswith(b"two}}\n"))


def test_write_is_deterministic() -> None:
    fmt = CharFormat(italic=True, font_family="Georgia", color=RgbColor(0, 0, 255))
    document = _document("first", "second", fmt=fmt)
    document.add_block(bullet=True).append("item")

    tc.assertEqual(write_rtf(document), write_rtf(document))


def test_text_escaping() -> None:
    output = write_rtf(_document("a{b}\\c"))

    tc.assertIn(rb"{\f0\fs24 a\{b\}\\c}", output)


def test_line_breaks_and_tabs() -> None:
    output = write_rtf(_document("a\nb\tc"))

    tc.assertIn(rb"{\f0\fs24 a\line b\tab c}", output)


def test_non_ascii_text_uses_unicode_escapes() -> None:
    output = write_rtf(_document("café ☃ \U0001f600"))

    tc.assertIn(rb"caf\u233? \u9731? \u-10179?\u-8704?", output)
    output.decode("ascii")


def test_bullet_block() -> None:
    document = RtfDocument()
    document.add_block(bullet=True).append("first")
    document.add_block(bullet=True).append("second")

    output = write_rtf(document)

    tc.assertEqual(2, output.count(BULLET_PREAMBLE))
    tc.assertIn(rb"\pard" + BULLET_PREAMBLE + rb"{\f0\fs24 first}", output)


def test_empty_block() -> None:
    document = _document("a")
    document.add_block()
    document.add_block(bullet=True)

    output = write_rtf(document)

    tc.assertIn(b"\\par\n\\pard \\par\n\\pard" + BULLET_PREAMBLE + b"}\n", output)


def test_color_references() -> None:
    blue = RgbColor(0, 0, 255)
    red = RgbColor(255, 0, 0)
    document = RtfDocument()
    block = document.add_block()
    block.append("blue", CharFormat(color=blue))
    block.append("black", CharFormat(color=BLACK))
    block.append("red", CharFormat(color=red))
    block.append("blue again", CharFormat(color=blue))
    block.append("plain", CharFormat())

    output = write_rtf(document)

    tc.assertIn(
        b"{\\colortbl ;\\red0\\green0\\blue0;"
        b"\\red0\\green0\\blue255;\\red255\\green0\\blue0;}\n",
        output,
    )
    tc.assertIn(rb"{\f0\fs24\cf3 blue}", output)
    tc.assertIn(rb"{\f0\fs24\cf1 black}", output)
    tc.assertIn(rb"{\f0\fs24\cf4 red}", output)
    tc.assertIn(rb"{\f0\fs24\cf3 blue again}", output)
    tc.assertIn(rb"{\f0\fs24 plain}", output)


def test_fonts_in_first_use_order() -> None:
    document = RtfDocument()
    block = document.add_block()
    block.append("a", CharFormat(font_family="Times"))
    block.append("b", CharFormat(font_family="Arial"))
    block.append("c", CharFormat(font_family="Times"))
    block.append("d", CharFormat())

    output = write_rtf(document)

    tc.assertIn(
        b"{\\fonttbl{\\f0\\fnil Sans Serif;}"
        b"{\\f1\\fnil Times;}{\\f2\\fnil Arial;}}\n",
        output,
    )
    tc.assertIn(
        rb"{\f1\fs24 a}{\f2\fs24 b}{\f1\fs24 c}{\f0\fs24 d}", output
    )


def test_font_name_escaping() -> None:
    document = _document("x", fmt=CharFormat(font_family="Caf\u00e9 {Bold}"))
    document.add_block().append("y", CharFormat(font_family="\u5b8b\u4f53"))

    output = write_rtf(document)

    tc.assertIn(rb"{\f1\fnil Caf\'e9 \{Bold\};}", output)
    tc.assertIn(rb"{\f2\fnil ??;}", output)


def test_writer_options() -> None:
    options = RtfWriterOptions(
        default_font="Arial", bullet_left_indent=360, bullet_first_indent=-180
    )
    document = RtfDocument()
    document.add_block(bullet=True).append("x")

    output = write_rtf(document, options)

    tc.assertIn(b"{\\fonttbl{\\f0\\fnil Arial;}}\n", output)
    tc.assertIn(rb"\pard\fi-180\li360{\pntext", output)


def test_output_is_ascii() -> None:
    document = _document("\u00e9\u4e2d\u0416", fmt=CharFormat(font_family="\u00c9"))

    write_rtf(document).decode("ascii")
