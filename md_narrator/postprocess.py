"""Re-encode raw TTS audio and join per-chunk files into one track."""

import logging
import os

import ffmpeg
from pydub import AudioSegment

from md_narrator.constants import TEMPO, OUTPUT_FORMAT, OUTPUT_BITRATE
from md_narrator.errors import MergeError, PostProcessError

logger = logging.getLogger(__name__)


class AudioPostProcessor:
    """pydub based conversion; lossless concatenation via pydub or ffmpeg."""

    def __init__(
        self,
        tempo: float = TEMPO,
        audio_format: str = OUTPUT_FORMAT,
        bitrate: str = OUTPUT_BITRATE,
    ):
        self.tempo = tempo
        self.audio_format = audio_format
        self.bitrate = bitrate

    def _export(self, audio: AudioSegment, output_path: str, parameters=None, tags=None) -> None:
        kwargs = {"format": self.audio_format}
        if self.audio_format != "wav":
            kwargs["bitrate"] = self.bitrate
        if parameters:
            kwargs["parameters"] = parameters
        if tags:
            kwargs["tags"] = tags
        audio.export(output_path, **kwargs)

    def convert(self, raw_path: str, output_path: str) -> str:
        """Re-encode raw_path into the target format, applying tempo.

        Tempo goes through ffmpeg's atempo filter, so pitch is preserved.
        Raises PostProcessError on unreadable input.
        """
        parameters = None
        if self.tempo != 1.0:
            parameters = ["-filter:a", f"atempo={self.tempo}"]
        try:
            audio = AudioSegment.from_file(raw_path)
            self._export(audio, output_path, parameters=parameters)
        except Exception as e:
            if os.path.exists(output_path):
                os.remove(output_path)
            raise PostProcessError(f"Could not convert {os.path.basename(raw_path)}: {e}") from e
        return output_path

    def concatenate(self, paths: list[str], output_path: str, tags: dict | None = None) -> str:
        """Join audio files in the given order into output_path without re-encoding.

        WAV chunks are joined sample for sample with pydub. Every other format
        goes through ffmpeg's concat demuxer with stream copy, so the encoded
        frames of each chunk land in the track untouched. Writes to a
        temporary file first; output_path only appears once the join has
        succeeded. Raises MergeError.
        """
        if not paths:
            raise MergeError("No audio to merge")

        root, ext = os.path.splitext(output_path)
        tmp_path = f"{root}.partial{ext}"
        try:
            if self.audio_format == "wav":
                self._join_samples(paths, tmp_path, tags)
            else:
                self._join_streams(paths, tmp_path, tags)
            os.replace(tmp_path, output_path)
        except Exception as e:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise MergeError(f"Could not merge {len(paths)} chunks: {e}") from e

        logger.debug("Merged %d files into %s", len(paths), output_path)
        return output_path

    def _join_samples(self, paths: list[str], output_path: str, tags=None) -> None:
        # PCM in, PCM out: no codec in between
        result = AudioSegment.empty()
        for path in paths:
            result += AudioSegment.from_file(path)
        self._export(result, output_path, tags=tags)

    def _join_streams(self, paths: list[str], output_path: str, tags=None) -> None:
        list_path = f"{output_path}.txt"
        with open(list_path, "w", encoding="utf-8") as f:
            for path in paths:
                escaped = os.path.abspath(path).replace("'", "'\\''")
                f.write(f"file '{escaped}'\n")
        try:
            output = ffmpeg.input(list_path, format="concat", safe=0).output(output_path, c="copy")
            for key, value in (tags or {}).items():
                output = output.global_args("-metadata", f"{key}={value}")
            ffmpeg.run(output, overwrite_output=True, quiet=True)
        except ffmpeg.Error as e:
            stderr = (e.stderr or b"").decode("utf-8", "replace").strip()
            raise MergeError(stderr.splitlines()[-1] if stderr else str(e)) from e
        finally:
            os.remove(list_path)
