"""Data models for markdown narration."""

import os
from dataclasses import dataclass, field

from md_narrator.constants import (
    MAX_LINES_PER_CHUNK,
    TTS_BACKEND,
    TTS_MODEL,
    TTS_SPEAKER,
    TTS_GPU,
    EDGE_VOICE,
    TTS_RATE,
    TEMPO,
    OUTPUT_FORMAT,
    OUTPUT_BITRATE,
    INPUT_DIR,
    OUTPUT_DIR,
)


@dataclass(frozen=True)
class Document:
    path: str
    name: str                  # base filename, extension stripped
    lines: tuple[str, ...]     # line endings kept

    @property
    def line_count(self) -> int:
        return len(self.lines)

    @property
    def text(self) -> str:
        return "".join(self.lines)


@dataclass(frozen=True)
class Chunk:
    document: str
    index: int
    label: str                 # artifact basename, e.g. "notes-part-00002"
    lines: tuple[str, ...]
    path: str                  # text artifact in the input area

    @property
    def line_count(self) -> int:
        return len(self.lines)


@dataclass
class NarrationConfig:
    """Per-run settings. Passed explicitly through the pipeline."""

    work_dir: str = "."
    final_dir: str = "."
    max_lines: int = MAX_LINES_PER_CHUNK
    backend: str = TTS_BACKEND
    model: str = TTS_MODEL
    speaker: str = TTS_SPEAKER
    voice: str = EDGE_VOICE
    rate: str = TTS_RATE
    gpu: bool = TTS_GPU
    tempo: float = TEMPO
    audio_format: str = OUTPUT_FORMAT
    bitrate: str = OUTPUT_BITRATE
    workers: int = 1
    tags: dict = field(default_factory=dict)

    @property
    def input_dir(self) -> str:
        return os.path.join(self.work_dir, INPUT_DIR)

    @property
    def output_dir(self) -> str:
        return os.path.join(self.work_dir, OUTPUT_DIR)

    def ensure_dirs(self) -> None:
        """Create the input, output and final directories."""
        for path in (self.input_dir, self.output_dir, self.final_dir):
            os.makedirs(path, exist_ok=True)
