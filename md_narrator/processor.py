"""Turn one chunk of markdown into one playable audio file."""

import logging
import os
import threading

from md_narrator.errors import ArtifactError, NarrationError
from md_narrator.markdown import read_text
from md_narrator.models import Chunk, NarrationConfig
from md_narrator.postprocess import AudioPostProcessor
from md_narrator.punctuator import narration_text
from md_narrator.tts import SpeechSynthesizer

logger = logging.getLogger(__name__)


def _remove(*paths) -> None:
    for path in paths:
        if path and os.path.isfile(path):
            os.remove(path)


def process_chunk(
    chunk: Chunk,
    config: NarrationConfig,
    synthesizer: SpeechSynthesizer,
    post_processor: AudioPostProcessor,
    cancel_event: threading.Event | None = None,
) -> str | None:
    """Normalize, punctuate, synthesize and post-process a single chunk.

    Writes <label>.txt and the raw audio to the output area, then replaces
    them with <label>.<format>. Returns the playable path, or None when the
    chunk holds no narratable text. Errors carry the chunk index; a file
    that can't be written or moved surfaces as ArtifactError.
    """
    base = os.path.join(config.output_dir, chunk.label)
    text_path = f"{base}.txt"
    playable_path = f"{base}.{post_processor.audio_format}"
    raw_path = f"{base}.{synthesizer.extension}"

    try:
        text = narration_text(read_text(chunk.path))
        if not text.strip():
            logger.info("Chunk %d (%s) has no narratable text, skipping", chunk.index, chunk.label)
            return None

        with open(text_path, "w", encoding="utf-8") as f:
            f.write(text)

        raw_path = synthesizer.synthesize(text, base, cancel_event)
        if raw_path == playable_path:
            # Backend already speaks the target container; keep it aside for conversion.
            moved = f"{base}.raw.{synthesizer.extension}"
            os.replace(raw_path, moved)
            raw_path = moved
        post_processor.convert(raw_path, playable_path)
    except NarrationError as e:
        _remove(text_path, raw_path)
        if e.chunk_index is not None:
            raise
        raise type(e)(f"chunk {chunk.index + 1} ({chunk.label}): {e}", chunk_index=chunk.index) from e
    except OSError as e:
        _remove(text_path, raw_path)
        raise ArtifactError(f"chunk {chunk.index + 1} ({chunk.label}): {e}", chunk_index=chunk.index) from e
    except KeyboardInterrupt:
        _remove(text_path, raw_path)
        raise

    _remove(text_path, raw_path)
    return playable_path
