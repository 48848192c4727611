"""Run every chunk through TTS and merge the results into the final track."""

import glob
import logging
import os
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor

from md_narrator.chunker import create_chunks, load_document
from md_narrator.errors import MergeError, NarrationCancelled
from md_narrator.models import Chunk, Document, NarrationConfig
from md_narrator.postprocess import AudioPostProcessor
from md_narrator.processor import process_chunk
from md_narrator.tts import SpeechSynthesizer, create_synthesizer

logger = logging.getLogger(__name__)


def _run_one(chunk, total, config, synthesizer, post_processor, cancel_event):
    if cancel_event.is_set():
        raise NarrationCancelled(f"chunk {chunk.index + 1} ({chunk.label}): cancelled", chunk_index=chunk.index)
    print(f"  Generating chunk {chunk.index + 1}/{total}: {chunk.label}")
    try:
        return process_chunk(chunk, config, synthesizer, post_processor, cancel_event)
    except Exception:
        # Stop the remaining chunks from calling the backend
        cancel_event.set()
        raise


def _discard(paths) -> None:
    for path in paths:
        if path and os.path.exists(path):
            os.remove(path)


def process_chunks(
    chunks: list[Chunk],
    config: NarrationConfig,
    synthesizer: SpeechSynthesizer,
    post_processor: AudioPostProcessor,
    cancel_event: threading.Event | None = None,
) -> list[str | None]:
    """Process all chunks and return their playable paths in index order.

    Runs sequentially unless config.workers > 1 and the backend allows
    concurrent calls. The first failure stops new synthesis calls and is
    re-raised after in-flight chunks finish; audio already produced for
    other chunks is discarded.
    """
    if cancel_event is None:
        cancel_event = threading.Event()
    args = (len(chunks), config, synthesizer, post_processor, cancel_event)

    if config.workers <= 1 or not synthesizer.supports_concurrency or len(chunks) == 1:
        results = []
        for chunk in chunks:
            try:
                results.append(_run_one(chunk, *args))
            except Exception:
                _discard(results)
                raise
        return results

    with ThreadPoolExecutor(max_workers=config.workers) as pool:
        futures = [pool.submit(_run_one, chunk, *args) for chunk in chunks]

    results = [future.result() for future in futures if future.exception() is None]
    errors = [future.exception() for future in futures if future.exception() is not None]
    if errors:
        _discard(results)
        # Report the failure that triggered the abort, not the cancellations it caused
        causes = [e for e in errors if not isinstance(e, NarrationCancelled)]
        raise (causes or errors)[0]
    return results


def merge_chunks(
    document: Document,
    chunks: list[Chunk],
    chunk_audio: list[str | None],
    config: NarrationConfig,
    post_processor: AudioPostProcessor,
) -> str:
    """Merge per-chunk audio, in index order, into <output_dir>/<name>.<format>.

    On success the per-chunk audio and text artifacts are deleted. On
    failure they are left in place and MergeError is raised.
    """
    final_path = os.path.join(config.output_dir, f"{document.name}.{post_processor.audio_format}")
    paths = [path for path in chunk_audio if path]
    if not paths:
        raise MergeError(f"No narratable text in {document.name}")

    if len(chunks) == 1:
        if paths[0] != final_path:
            try:
                os.replace(paths[0], final_path)
            except OSError as e:
                raise MergeError(f"Could not move {paths[0]} to {final_path}: {e}") from e
        _remove_chunk_text(chunks)
        return final_path

    # The output area must hold exactly these chunks, and list them in index order
    pattern = os.path.join(
        glob.escape(config.output_dir),
        glob.escape(f"{document.name}-part-") + f"*.{post_processor.audio_format}",
    )
    listed = sorted(glob.glob(pattern))
    if listed != paths:
        raise MergeError(
            f"Chunk audio for {document.name} is out of order or incomplete: "
            f"expected {[os.path.basename(p) for p in paths]}, found {[os.path.basename(p) for p in listed]}"
        )

    tags = dict(config.tags)
    tags.setdefault("title", document.name)
    print(f"Merging {len(paths)} audio chunks into {os.path.basename(final_path)}")
    post_processor.concatenate(paths, final_path, tags=tags)

    for path in paths:
        os.remove(path)
    _remove_chunk_text(chunks)
    return final_path


def _remove_chunk_text(chunks: list[Chunk]) -> None:
    for chunk in chunks:
        if os.path.exists(chunk.path):
            os.remove(chunk.path)


def narrate(
    source: str,
    config: NarrationConfig | None = None,
    synthesizer: SpeechSynthesizer | None = None,
    post_processor: AudioPostProcessor | None = None,
    cancel_event: threading.Event | None = None,
) -> str:
    """Convert a markdown file into one narrated audio file.

    The final track is written to config.final_dir as <name>.<format>.
    Returns its path. Raises a NarrationError subclass on any failure; no
    final track is written in that case.
    """
    config = config or NarrationConfig()
    synthesizer = synthesizer or create_synthesizer(config)
    post_processor = post_processor or AudioPostProcessor(
        tempo=config.tempo,
        audio_format=config.audio_format,
        bitrate=config.bitrate,
    )

    document = load_document(source)
    print(f"Processing {document.path}...")
    chunks = create_chunks(document, config)
    logger.info("%s: %d lines in %d chunks of up to %d", document.name, document.line_count, len(chunks), config.max_lines)

    with synthesizer:
        chunk_audio = process_chunks(chunks, config, synthesizer, post_processor, cancel_event)
    merged = merge_chunks(document, chunks, chunk_audio, config, post_processor)

    final_path = os.path.join(config.final_dir, os.path.basename(merged))
    if os.path.abspath(merged) != os.path.abspath(final_path):
        try:
            shutil.move(merged, final_path)
        except OSError as e:
            raise MergeError(f"Could not move {merged} to {final_path}: {e}") from e
    print(f"Final audio file: {final_path}")
    return final_path
