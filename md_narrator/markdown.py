"""Strip Markdown syntax down to plain narration-ready text."""

import re

from md_narrator.errors import DecodeError

# Applied top to bottom; each rule sees the output of the ones above it.
NORMALIZE_RULES = [
    (r"<!--.*?-->", "", re.DOTALL),                      # HTML comments
    (r"^[ \t]*#{1,6}[ \t]*", "", re.MULTILINE),          # Heading markers
    (r"(?<!!)\[([^\]]+)\]\([^)]+\)", r"\1", 0),          # Links (images left for later)
    (r"\*{1,2}(.*?)\*{1,2}", r"\1", 0),                  # Bold/italic
    (r"_{1,2}(.*?)_{1,2}", r"\1", 0),                    # Underline/italic
    (r"```.*?```", "", re.DOTALL),                       # Fenced code blocks
    (r"`([^`]+)`", r"\1", 0),                            # Inline code
    (r"^[ \t]*[-*+][ \t]+", "", re.MULTILINE),           # List markers
    (r"^[ \t]*[0-9]+\.[ \t]+", "", re.MULTILINE),        # Numbered lists
    (r"!\[.*?\]\(.*?\)", "", 0),                         # Images
    (r"<[^>]+>", "", 0),                                 # HTML tags
    (r"\n{3,}", "\n\n", 0),                              # Excessive newlines
    (r"[ \t]+\n", "\n", 0),                              # Trailing whitespace
]

_COMPILED_RULES = [
    (re.compile(pattern, flags), replacement)
    for pattern, replacement, flags in NORMALIZE_RULES
]


def normalize(text: str) -> str:
    """Remove Markdown syntax from text, keeping the readable content.

    Code blocks and images are dropped entirely; links, emphasis and inline
    code keep their inner text.
    """
    for pattern, replacement in _COMPILED_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def read_text(path: str) -> str:
    """Read a UTF-8 text file, raising DecodeError if it can't be read."""
    try:
        with open(path, "rb") as f:
            data = f.read()
        return data.decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise DecodeError(f"Could not read {path}: {e}") from e
