"""Insert pause cues into narration text to slow down synthesized speech."""

from md_narrator.constants import PAUSE_TOKEN
from md_narrator.markdown import normalize

# Order matters: comma doubling runs after the period rule and before every
# rule that inserts commas of its own.
PUNCTUATION_RULES = [
    (". ", ".. "),
    (",", ",,"),
    ("; ", ";, "),
    (": ", ":, "),
    ("(", ",("),
    (")", "),"),
    ("/", ",,"),
    ("e.g.", "e.g.,"),
]


def punctuate(text: str, pause_token: str = PAUSE_TOKEN) -> str:
    """Apply PUNCTUATION_RULES, then follow every newline with a pause token."""
    for old, new in PUNCTUATION_RULES:
        text = text.replace(old, new)
    return text.replace("\n", "\n" + pause_token)


def narration_text(markdown: str) -> str:
    """Markdown source → text ready for the TTS backend."""
    return punctuate(normalize(markdown))
