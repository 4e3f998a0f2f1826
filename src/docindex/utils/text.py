"""Text helpers including the term lexer used for documents and queries."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable, Iterator, List

from nltk.stem import PorterStemmer

_STEMMER = PorterStemmer(mode=PorterStemmer.ORIGINAL_ALGORITHM)


@lru_cache(maxsize=65536)
def stem(word: str) -> str:
    """Reduce a lowercase word to its Porter stem."""
    return _STEMMER.stem(word, to_lowercase=False)


def _is_word_char(char: str) -> bool:
    return char.isalpha() or char.isdecimal()


class Lexer:
    """Split text into normalized terms.

    A term is a run of decimal digits (kept verbatim), a stemmed lowercase
    run of letters and digits that starts with a letter, or any other single
    character. Whitespace separates terms and is never emitted. A lexer is
    consumed once.
    """

    def __init__(self, content: str) -> None:
        self.content = content
        self.position = 0

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        token = self.next_token()
        if token is None:
            raise StopIteration
        return token

    def _trim_left(self) -> None:
        while self.position < len(self.content) and self.content[self.position].isspace():
            self.position += 1

    def _chop(self, n: int) -> str:
        token = self.content[self.position : self.position + n]
        self.position += n
        return token

    def _chop_while(self, predicate) -> str:
        start = self.position
        while self.position < len(self.content) and predicate(self.content[self.position]):
            self.position += 1
        return self.content[start : self.position]

    def next_token(self) -> str | None:
        """Return the next term, or ``None`` once the input is exhausted."""
        self._trim_left()
        if self.position >= len(self.content):
            return None

        char = self.content[self.position]
        if char.isdecimal():
            return self._chop_while(str.isdecimal)

        if char.isalpha():
            return stem(self._chop_while(_is_word_char).lower())

        return self._chop(1)


def tokenize(content: str) -> List[str]:
    return list(Lexer(content))


def normalize_whitespace(lines: Iterable[str]) -> str:
    """Collapse whitespace and join lines."""
    return "\n".join(line.strip() for line in lines if line.strip())
