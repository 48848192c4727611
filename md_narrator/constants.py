"""All magic numbers and configuration constants."""

MAX_LINES_PER_CHUNK = 20            # lines per TTS call
CHUNK_INDEX_WIDTH = 5               # zero-padding of chunk indexes in artifact names
TTS_BACKEND = "edge"                # "edge" or "coqui"
TTS_MODEL = "tts_models/en/vctk/vits"        # coqui model id
TTS_SPEAKER = "p230"                         # VCTK speaker id
TTS_GPU = False                              # run the coqui model on CUDA
EDGE_VOICE = "en-GB-SoniaNeural"             # edge-tts voice
TTS_RATE = "+0%"                             # edge-tts relative speech rate
TTS_RETRY_COUNT = 3                 # max attempts per TTS call
TTS_RETRY_BASE_DELAY = 1.0          # seconds — base delay for exponential backoff
TEMPO = 0.78                        # ffmpeg atempo factor applied to every chunk
OUTPUT_FORMAT = "mp3"
OUTPUT_BITRATE = "128k"
PAUSE_TOKEN = "...."                # appended after every newline of narration text
INPUT_DIR = "input"                 # chunk text artifacts
OUTPUT_DIR = "output"               # chunk audio artifacts and merged track
VERSION = "0.1.0"
