"""CLI entry point: narrate a markdown file to an audio file."""

import argparse
import logging
import os
import shutil
import sys

from pydub import AudioSegment
from pydub.playback import play

from md_narrator.assembly import narrate
from md_narrator.constants import (
    MAX_LINES_PER_CHUNK,
    TTS_BACKEND,
    TTS_MODEL,
    TTS_SPEAKER,
    EDGE_VOICE,
    TTS_RATE,
    TEMPO,
    OUTPUT_FORMAT,
    VERSION,
)
from md_narrator.errors import NarrationError
from md_narrator.models import NarrationConfig


def _check_ffmpeg():
    """Verify ffmpeg is installed."""
    if not shutil.which("ffmpeg"):
        print("Error: ffmpeg is required but not found.", file=sys.stderr)
        print("Install with: apt install ffmpeg (or brew install ffmpeg)", file=sys.stderr)
        raise SystemExit(1)


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="narrate-md",
        description=(
            "Converts a markdown file to an audio file using TTS. "
            "The audio file is created in the current directory."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument("input", help="The input markdown file to be converted to audio")
    parser.add_argument("-p", "--play", action="store_true", help="Play the audio file after generation")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--max-lines", type=_positive_int, default=MAX_LINES_PER_CHUNK,
                        help=f"Lines per TTS chunk (default {MAX_LINES_PER_CHUNK})")
    parser.add_argument("--backend", choices=["edge", "coqui"], default=TTS_BACKEND,
                        help="Speech synthesis backend")
    parser.add_argument("--model", default=None, help=f"Coqui model id (default {TTS_MODEL})")
    parser.add_argument("--speaker", default=TTS_SPEAKER, help="Coqui speaker id")
    parser.add_argument("--voice", default=EDGE_VOICE, help="edge-tts voice")
    parser.add_argument("--rate", default=TTS_RATE, help="edge-tts speech rate, e.g. -10%%")
    parser.add_argument("--gpu", action="store_true", help="Run the Coqui model on CUDA")
    parser.add_argument("--tempo", type=float, default=TEMPO, help=f"Playback tempo factor (default {TEMPO})")
    parser.add_argument("--format", dest="audio_format", default=OUTPUT_FORMAT, help="Output audio format")
    parser.add_argument("--workers", type=_positive_int, default=1,
                        help="Chunks synthesized concurrently (edge backend only)")
    parser.add_argument("--work-dir", default=".", help="Root of the input/ and output/ work areas")
    parser.add_argument("--output-dir", default=".", help="Where the final audio file is written")
    return parser


def main(argv=None):
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.model and args.backend != "coqui":
        parser.error("--model applies to the coqui backend only; edge-tts picks its model from --voice")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not os.path.isfile(args.input):
        print(f"Error: File {args.input} not found", file=sys.stderr)
        raise SystemExit(1)

    _check_ffmpeg()

    config = NarrationConfig(
        work_dir=args.work_dir,
        final_dir=args.output_dir,
        max_lines=args.max_lines,
        backend=args.backend,
        model=args.model or TTS_MODEL,
        speaker=args.speaker,
        voice=args.voice,
        rate=args.rate,
        gpu=args.gpu,
        tempo=args.tempo,
        audio_format=args.audio_format,
        workers=args.workers,
    )

    try:
        final_path = narrate(args.input, config)
    except NarrationError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        raise SystemExit(130)

    if args.play:
        play(AudioSegment.from_file(final_path))

    return final_path


if __name__ == "__main__":
    main()
