"""Case-insensitive n-gram counting over tokenized lines."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from tools.ngram_tokenizer import TokenizedText

logger = logging.getLogger(__name__)


def ngram_key(text: str) -> str:
    """Lookup key used for case-insensitive unification of n-grams."""
    return text.lower()


def normalize_sizes(sizes: Iterable[int]) -> List[int]:
    """Sorted, de-duplicated positive sizes."""
    return sorted({int(n) for n in sizes if int(n) > 0})


@dataclass
class NGramEntry:
    text: str
    count: int = 0


@dataclass
class NGramTable:
    """All n-grams of one size. Entries keep first-seen casing and insertion order."""

    n: int
    entries: Dict[str, NGramEntry] = field(default_factory=dict)
    total_positions: int = 0

    def add(self, text: str) -> None:
        key = ngram_key(text)
        entry = self.entries.get(key)
        if entry is None:
            entry = NGramEntry(text=text)
            self.entries[key] = entry
        entry.count += 1

    def __len__(self) -> int:
        return len(self.entries)


def count_ngrams(tokenized: TokenizedText, sizes: Iterable[int]) -> Dict[int, NGramTable]:
    """
    Count overlapping windows of every requested size, line by line.

    Windows never cross a line break. ``total_positions`` of a size is the number
    of windows emitted for it, which is the PPM denominator.
    """
    wanted = normalize_sizes(sizes)
    tables: Dict[int, NGramTable] = {n: NGramTable(n=n) for n in wanted}
    for tokens in tokenized.lines:
        line_len = len(tokens)
        for n in wanted:
            if line_len < n:
                continue
            table = tables[n]
            for i in range(line_len - n + 1):
                table.add(" ".join(tokens[i:i + n]))
            table.total_positions += line_len - n + 1
    for n in wanted:
        logger.debug("n=%d: %d unique n-grams over %d positions", n, len(tables[n]), tables[n].total_positions)
    return tables
