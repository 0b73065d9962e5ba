import json
from pathlib import Path

import rtfcodec
from rtfcodec.cli import main
from rtfcodec.codec.serialization import serialize_document

RESOURCES = Path(__file__).parent / "resources"


def test_cli_outputs_full_text_by_default(capsys) -> None:
    path = (RESOURCES / "wordpad_sample.rtf").resolve()
    expected = rtfcodec.read_file(path).get_full_text()

    exit_code = main([str(path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out == f"{expected}\n"


def test_cli_outputs_json_with_flag(capsys) -> None:
    path = (RESOURCES / "wordpad_sample.rtf").resolve()
    expected = serialize_document(rtfcodec.read_file(path))

    exit_code = main(["--json", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    payload = json.loads(captured.out.strip())
    assert payload == expected


def test_cli_reads_plain_text(capsys) -> None:
    path = (RESOURCES / "plain.txt").resolve()

    exit_code = main([str(path)])
    captured = capsys.readouterr()

    assert exit_code == 0
    assert captured.out == "First line\n- bullet line\nThird line\n"


def test_cli_writes_rtf_output(capsys, tmp_path) -> None:
    path = (RESOURCES / "wordpad_sample.rtf").resolve()
    output = tmp_path / "copy.rtf"

    exit_code = main([str(path), "--output", str(output)])
    capsys.readouterr()

    assert exit_code == 0
    assert output.read_bytes().startswith(b"{\\rtf1")
    assert (
        rtfcodec.read_file(output).get_full_text()
        == rtfcodec.read_file(path).get_full_text()
    )


def test_cli_rejects_unsupported_file(capsys) -> None:
    path = (RESOURCES / "unsupported.bin").resolve()

    exit_code = main([str(path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.out == ""
    assert "File format not supported" in captured.err


def test_cli_strict_requires_header(capsys) -> None:
    path = (RESOURCES / "headerless.rtf").resolve()

    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "bold only\n"

    exit_code = main(["--strict", str(path)])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "RTF header" in captured.err


def test_cli_missing_file(capsys, tmp_path) -> None:
    exit_code = main([str(tmp_path / "missing.rtf")])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert captured.err.startswith("rtfcodec: ")


def test_cli_rejects_unknown_arguments(capsys) -> None:
    path = (RESOURCES / "plain.txt").resolve()

    exit_code = main([str(path), "--bogus"])
    captured = capsys.readouterr()

    assert exit_code == 1
    assert "--bogus" in captured.err
