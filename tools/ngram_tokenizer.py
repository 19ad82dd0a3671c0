"""Line splitting and word tokenization for n-gram counting."""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass, field
from typing import List

# Only CRLF, CR and LF break lines (str.splitlines also breaks on \v, \f, \x1c...).
LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")

WORD_JOINER = "-"


def is_word_char(ch: str) -> bool:
    """Letters (L*), decimal digits (Nd) and the hyphen are word characters."""
    if ch == WORD_JOINER:
        return True
    cat = unicodedata.category(ch)
    return cat[0] == "L" or cat == "Nd"


def split_lines(text: str) -> List[str]:
    return LINE_BREAK_RE.split(text)


def tokenize_line(line: str) -> List[str]:
    """
    Replace every non-word character with a space and split.

    Apostrophes are separators too: "don't" -> ["don", "t"].
    """
    cleaned = "".join(ch if is_word_char(ch) else " " for ch in line)
    return [tok for tok in cleaned.split(" ") if tok]


@dataclass
class TokenizedText:
    """Token sequences of the non-blank lines plus the input counters."""

    lines: List[List[str]] = field(default_factory=list)
    total_chars: int = 0
    total_lines: int = 0
    total_words: int = 0


def tokenize_text(text: str) -> TokenizedText:
    text = text or ""
    raw_lines = split_lines(text)
    out = TokenizedText(total_chars=len(text), total_lines=len(raw_lines))
    for line in raw_lines:
        if not line.strip():
            continue
        tokens = tokenize_line(line)
        out.total_words += len(tokens)
        out.lines.append(tokens)
    return out
