"""Error kinds raised by the narration pipeline."""


class NarrationError(Exception):
    """Base class. The CLI reports these and exits non-zero.

    chunk_index is the zero-based index of the failing chunk, when the
    error belongs to one.
    """

    def __init__(self, message: str, chunk_index: int | None = None):
        super().__init__(message)
        self.chunk_index = chunk_index


class InputNotFound(NarrationError):
    pass


class DecodeError(NarrationError):
    pass


class SynthesisError(NarrationError):
    pass


class PostProcessError(NarrationError):
    pass


class MergeError(NarrationError):
    pass


class NarrationCancelled(NarrationError):
    pass


class ArtifactError(NarrationError):
    """A chunk text or audio file could not be written, moved or removed."""
