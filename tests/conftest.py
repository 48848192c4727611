"""Shared fixtures for md_narrator tests."""

import pytest
from pydub import AudioSegment

from md_narrator.models import NarrationConfig
from md_narrator.postprocess import AudioPostProcessor
from md_narrator.tts import SpeechSynthesizer


class FakeSynthesizer(SpeechSynthesizer):
    """Writes 100ms of silence per call. Records what it was asked to say.

    fail_on: substring that makes _render raise, to simulate a backend error.
    """

    extension = "wav"
    supports_concurrency = True

    def __init__(self, fail_on=None, **kwargs):
        kwargs.setdefault("base_delay", 0)
        super().__init__(**kwargs)
        self.fail_on = fail_on
        self.texts = []
        self.started = False
        self.stopped = False

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def _render(self, text, output_path):
        self.texts.append(text)
        if self.fail_on and self.fail_on in text:
            raise ConnectionError("TTS server unreachable")
        AudioSegment.silent(duration=100).export(output_path, format="wav")


@pytest.fixture
def config(tmp_path):
    """Config with wav output and no tempo change, so no ffmpeg is needed."""
    return NarrationConfig(
        work_dir=str(tmp_path / "work"),
        final_dir=str(tmp_path / "final"),
        tempo=1.0,
        audio_format="wav",
    )


@pytest.fixture
def synthesizer():
    return FakeSynthesizer()


@pytest.fixture
def post_processor():
    return AudioPostProcessor(tempo=1.0, audio_format="wav")


@pytest.fixture
def write_markdown(tmp_path):
    """Factory: write_markdown(name, lines) -> path of a markdown file."""
    def _write(name, lines):
        path = tmp_path / name
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def tiny_wav(tmp_path):
    """Generate a 100ms silent WAV for testing."""
    path = tmp_path / "tiny.wav"
    AudioSegment.silent(duration=100).export(str(path), format="wav")
    return path


@pytest.fixture
def make_synthesizer():
    """The FakeSynthesizer class, for tests that need a customized backend."""
    return FakeSynthesizer
