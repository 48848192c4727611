"""Speech synthesis backends with retry logic."""

import asyncio
import logging
import os
import threading
import time

import edge_tts

from md_narrator.constants import (
    TTS_RETRY_COUNT,
    TTS_RETRY_BASE_DELAY,
    TTS_MODEL,
    TTS_SPEAKER,
    TTS_GPU,
    EDGE_VOICE,
    TTS_RATE,
)
from md_narrator.errors import NarrationCancelled, SynthesisError
from md_narrator.models import NarrationConfig

logger = logging.getLogger(__name__)


class SpeechSynthesizer:
    """Text in, raw audio file out.

    Backends implement _render(); synthesize() wraps it with retries and
    output validation. Use as a context manager to start/stop the backend.
    """

    extension = "wav"
    supports_concurrency = False

    def __init__(
        self,
        retries: int = TTS_RETRY_COUNT,
        base_delay: float = TTS_RETRY_BASE_DELAY,
    ):
        self.retries = retries
        self.base_delay = base_delay

    def start(self) -> None:
        pass

    def stop(self) -> None:
        pass

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *exc_info):
        self.stop()

    def _render(self, text: str, output_path: str) -> None:
        raise NotImplementedError

    def synthesize(self, text: str, output_base: str, cancel_event: threading.Event | None = None) -> str:
        """Render text to output_base + extension, returning the path.

        Retries on any backend error or a 0-byte output file, with
        exponential backoff. Raises SynthesisError once retries run out, and
        NarrationCancelled as soon as cancel_event is set: no attempt starts
        and no backoff wait continues after that.
        """
        output_path = f"{output_base}.{self.extension}"
        last_error = None
        for attempt in range(self.retries):
            if cancel_event is not None and cancel_event.is_set():
                raise NarrationCancelled("cancelled before synthesis")
            try:
                self._render(text, output_path)

                # Validate output: 0-byte file counts as failure
                if os.path.exists(output_path) and os.path.getsize(output_path) > 0:
                    return output_path

                last_error = Exception(f"TTS produced 0-byte file for: {text[:50]}...")
            except Exception as e:
                last_error = e

            logger.warning("TTS attempt %d/%d failed: %s", attempt + 1, self.retries, last_error)
            if attempt < self.retries - 1:
                delay = self.base_delay * (2 ** attempt)
                if cancel_event is None:
                    time.sleep(delay)
                elif cancel_event.wait(delay):
                    raise NarrationCancelled(f"cancelled while retrying: {last_error}") from last_error

        raise SynthesisError(str(last_error)) from last_error


class EdgeTTSSynthesizer(SpeechSynthesizer):
    """Microsoft Edge online voices via edge-tts.

    The service picks the model from the voice name, so there is no
    separate model id.
    """

    extension = "mp3"
    supports_concurrency = True

    def __init__(self, voice: str = EDGE_VOICE, rate: str = TTS_RATE, **kwargs):
        super().__init__(**kwargs)
        self.voice = voice
        self.rate = rate

    def _render(self, text: str, output_path: str) -> None:
        communicate = edge_tts.Communicate(text, self.voice, rate=self.rate)
        asyncio.run(communicate.save(output_path))


class CoquiTTSSynthesizer(SpeechSynthesizer):
    """Local Coqui TTS model (the coqui-tts package, `pip install md-narrator[coqui]`).

    start() loads `model` once and checks `speaker` against the model's
    speakers; every chunk is then rendered by that one instance, so calls
    are serialized.
    """

    extension = "wav"

    def __init__(
        self,
        model: str = TTS_MODEL,
        speaker: str | None = TTS_SPEAKER,
        gpu: bool = TTS_GPU,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self.model = model
        self.speaker = speaker
        self.gpu = gpu
        self.tts = None

    def start(self) -> None:
        try:
            from TTS.api import TTS
        except ImportError as e:
            raise SynthesisError("The coqui backend needs coqui-tts: pip install 'md-narrator[coqui]'") from e

        device = "cuda" if self.gpu else "cpu"
        try:
            tts = TTS(model_name=self.model, progress_bar=False).to(device)
        except Exception as e:
            raise SynthesisError(f"Could not load TTS model {self.model}: {e}") from e

        speakers = tts.speakers or []
        if self.speaker and speakers and self.speaker not in speakers:
            raise SynthesisError(f"Model {self.model} has no speaker {self.speaker}")
        self.tts = tts
        logger.info("Loaded TTS model %s on %s (speaker %s)", self.model, device, self.speaker)

    def stop(self) -> None:
        self.tts = None

    def _render(self, text: str, output_path: str) -> None:
        if self.tts is None:
            self.start()
        self.tts.tts_to_file(text=text, speaker=self.speaker or None, file_path=output_path)


def create_synthesizer(config: NarrationConfig) -> SpeechSynthesizer:
    """Build the backend named by config.backend ("edge" or "coqui")."""
    if config.backend == "edge":
        return EdgeTTSSynthesizer(voice=config.voice, rate=config.rate)
    if config.backend == "coqui":
        return CoquiTTSSynthesizer(
            model=config.model,
            speaker=config.speaker,
            gpu=config.gpu,
        )
    raise ValueError(f"Unknown TTS backend: {config.backend}")
