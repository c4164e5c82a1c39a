"""Text helpers: normalization and word-boundary chunking."""

from __future__ import annotations

import re
from typing import List

_SPACES = re.compile(r"\s+")
_DOTS_SPACES = re.compile(r"(\. )+")
_DOTS = re.compile(r"\.+")


def normalize_text(text: str) -> str:
    """Collapse whitespace runs, then ". " runs, then runs of dots.

    The order matters: the ". " pass relies on the single spaces produced by
    the whitespace pass.
    """
    text = _SPACES.sub(" ", text)
    text = _DOTS_SPACES.sub(". ", text)
    return _DOTS.sub(".", text)


def chunk_words(text: str, chunk_size: int) -> List[str]:
    """Split text on single spaces into chunks of roughly ``chunk_size`` characters.

    Words are appended to a buffer until it holds at least ``chunk_size - 1``
    characters, then the buffer is emitted. Words are never split, so a
    single long word becomes its own oversized chunk. With ``chunk_size <= 1``
    chunking is disabled and the text is returned whole.
    """
    if chunk_size <= 1:
        return [text]

    limit = chunk_size - 1
    chunks: List[str] = []
    current: List[str] = []
    length = 0
    for word in text.split(" "):
        current.append(word)
        length += len(word)
        if length >= limit:
            chunks.append("".join(current))
            current = []
            length = 0
        else:
            current.append(" ")
            length += 1
    if length > 0:
        chunks.append("".join(current))
    return chunks
