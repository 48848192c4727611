"""Load a markdown document and split it into bounded line chunks."""

import glob
import io
import logging
import os

from md_narrator.constants import CHUNK_INDEX_WIDTH
from md_narrator.errors import ArtifactError, InputNotFound
from md_narrator.markdown import read_text
from md_narrator.models import Chunk, Document, NarrationConfig

logger = logging.getLogger(__name__)


def document_name(path: str) -> str:
    """Base filename without extension.

    "/path/to/notes.md" → "notes"
    """
    return os.path.splitext(os.path.basename(path))[0]


def load_document(path: str) -> Document:
    """Read a markdown file into a Document.

    Raises InputNotFound if the path is not an existing file and DecodeError
    if it is not valid UTF-8.
    """
    if not os.path.isfile(path):
        raise InputNotFound(f"File not found: {path}")
    text = read_text(path)
    return Document(
        path=os.path.abspath(path),
        name=document_name(path),
        lines=tuple(io.StringIO(text, newline="\n").readlines()),
    )


def split_lines(lines, max_lines: int) -> list[list[str]]:
    """Partition lines into consecutive runs of max_lines (last may be shorter).

    A document that already fits is returned whole, as a single part.
    """
    if max_lines < 1:
        raise ValueError(f"max_lines must be at least 1, got {max_lines}")
    lines = list(lines)
    if len(lines) <= max_lines:
        return [lines]
    return [lines[i:i + max_lines] for i in range(0, len(lines), max_lines)]


def chunk_label(name: str, index: int) -> str:
    """Artifact basename for a chunk; zero-padded so lexical == numeric order."""
    return f"{name}-part-{index:0{CHUNK_INDEX_WIDTH}d}"


def remove_stale_chunks(name: str, config: NarrationConfig) -> list[str]:
    """Delete chunk artifacts left behind by an earlier run of the same document.

    Returns the removed paths.
    """
    removed = []
    for area in (config.input_dir, config.output_dir):
        pattern = os.path.join(glob.escape(area), glob.escape(f"{name}-part-") + "*")
        for path in sorted(glob.glob(pattern)):
            if os.path.isfile(path):
                os.remove(path)
                removed.append(path)
    if removed:
        logger.info("Removed %d stale chunk artifacts for %s", len(removed), name)
    return removed


def create_chunks(document: Document, config: NarrationConfig) -> list[Chunk]:
    """Write each chunk of the document to the input area.

    Returns chunks in index order. An unsplit document yields a single chunk
    labelled with the document name itself.
    """
    try:
        config.ensure_dirs()
        remove_stale_chunks(document.name, config)
    except OSError as e:
        raise ArtifactError(f"Could not prepare work area for {document.name}: {e}") from e

    parts = split_lines(document.lines, config.max_lines)
    chunks = []
    for index, lines in enumerate(parts):
        label = document.name if len(parts) == 1 else chunk_label(document.name, index)
        path = os.path.join(config.input_dir, f"{label}.md")
        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write("".join(lines))
        except OSError as e:
            raise ArtifactError(f"chunk {index + 1} ({label}): {e}", chunk_index=index) from e
        chunks.append(Chunk(
            document=document.name,
            index=index,
            label=label,
            lines=tuple(lines),
            path=path,
        ))

    logger.debug("Split %s (%d lines) into %d chunks", document.name, document.line_count, len(chunks))
    return chunks
