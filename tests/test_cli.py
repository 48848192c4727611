"""Tests for the command-line entry point."""

import os
from unittest.mock import patch

import pytest

from md_narrator.cli import build_parser, main
from md_narrator.constants import MAX_LINES_PER_CHUNK, TEMPO, TTS_MODEL
from md_narrator.errors import SynthesisError


def _create_markdown(tmp_path, name="notes.md", content="# Notes\n\nHello there.\n"):
    path = tmp_path / name
    path.write_text(content)
    return str(path)


def test_parser_defaults():
    args = build_parser().parse_args(["doc.md"])
    assert args.input == "doc.md"
    assert args.play is False
    assert args.max_lines == MAX_LINES_PER_CHUNK
    assert args.tempo == TEMPO
    assert args.backend == "edge"
    assert args.workers == 1


def test_parser_play_flag():
    args = build_parser().parse_args(["-p", "doc.md"])
    assert args.play is True


def test_parser_rejects_zero_max_lines():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--max-lines", "0", "doc.md"])


def test_cli_missing_file(tmp_path, capsys):
    """Missing input exits non-zero before anything else happens."""
    with patch("md_narrator.cli.narrate") as mock_narrate:
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing.md")])
    assert excinfo.value.code == 1
    mock_narrate.assert_not_called()
    assert "not found" in capsys.readouterr().err


@patch("shutil.which", return_value=None)
def test_cli_requires_ffmpeg(mock_which, tmp_path, capsys):
    source = _create_markdown(tmp_path)
    with pytest.raises(SystemExit) as excinfo:
        main([source])
    assert excinfo.value.code == 1
    assert "ffmpeg" in capsys.readouterr().err


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_builds_config(mock_which, tmp_path):
    source = _create_markdown(tmp_path)
    final = str(tmp_path / "out" / "notes.mp3")
    with patch("md_narrator.cli.narrate", return_value=final) as mock_narrate:
        result = main([
            source,
            "--max-lines", "7",
            "--backend", "coqui",
            "--model", "tts_models/en/ljspeech/vits",
            "--speaker", "p225",
            "--gpu",
            "--tempo", "1.0",
            "--work-dir", str(tmp_path / "work"),
            "--output-dir", str(tmp_path / "out"),
        ])
    assert result == final
    config = mock_narrate.call_args.args[1]
    assert config.max_lines == 7
    assert config.backend == "coqui"
    assert config.model == "tts_models/en/ljspeech/vits"
    assert config.speaker == "p225"
    assert config.gpu is True
    assert config.tempo == 1.0
    assert config.input_dir == os.path.join(str(tmp_path / "work"), "input")
    assert config.final_dir == str(tmp_path / "out")


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_pipeline_error_exits_nonzero(mock_which, tmp_path, capsys):
    source = _create_markdown(tmp_path)
    error = SynthesisError("chunk 2 (notes-part-00001): TTS server unreachable", chunk_index=1)
    with patch("md_narrator.cli.narrate", side_effect=error):
        with pytest.raises(SystemExit) as excinfo:
            main([source])
    assert excinfo.value.code == 1
    assert "Error: chunk 2 (notes-part-00001)" in capsys.readouterr().err


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_play(mock_which, tmp_path):
    """-p plays the final track once it exists."""
    source = _create_markdown(tmp_path)
    with patch("md_narrator.cli.narrate", return_value="notes.mp3"), \
            patch("md_narrator.cli.AudioSegment.from_file") as mock_load, \
            patch("md_narrator.cli.play") as mock_play:
        main(["-p", source])
    mock_load.assert_called_once_with("notes.mp3")
    mock_play.assert_called_once_with(mock_load.return_value)


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_no_play_by_default(mock_which, tmp_path):
    source = _create_markdown(tmp_path)
    with patch("md_narrator.cli.narrate", return_value="notes.mp3"), \
            patch("md_narrator.cli.play") as mock_play:
        main([source])
    mock_play.assert_not_called()


def test_cli_model_requires_coqui(tmp_path, capsys):
    """edge-tts has no model id, so --model with it is a usage error."""
    source = _create_markdown(tmp_path)
    with patch("md_narrator.cli.narrate") as mock_narrate:
        with pytest.raises(SystemExit) as excinfo:
            main(["--model", "tts_models/en/vctk/vits", source])
    assert excinfo.value.code == 2
    mock_narrate.assert_not_called()
    assert "coqui backend only" in capsys.readouterr().err


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_default_model_for_coqui(mock_which, tmp_path):
    source = _create_markdown(tmp_path)
    with patch("md_narrator.cli.narrate", return_value="notes.mp3") as mock_narrate:
        main([source, "--backend", "coqui"])
    assert mock_narrate.call_args.args[1].model == TTS_MODEL


@patch("shutil.which", return_value="/usr/bin/ffmpeg")
def test_cli_file_error_is_reported(mock_which, tmp_path, make_synthesizer, capsys):
    """A chunk file that can't be written ends in an Error: line, not a traceback."""
    source = _create_markdown(tmp_path)
    work = tmp_path / "work"
    os.makedirs(work / "output" / "notes.txt")
    with patch("md_narrator.assembly.create_synthesizer", return_value=make_synthesizer()):
        with pytest.raises(SystemExit) as excinfo:
            main([
                source,
                "--format", "wav",
                "--tempo", "1.0",
                "--work-dir", str(work),
                "--output-dir", str(tmp_path / "out"),
            ])
    assert excinfo.value.code == 1
    assert "Error: chunk 1 (notes)" in capsys.readouterr().err
