"""Text normalization pipeline: segmentation, stopword removal, stemming.

The pipeline mirrors a composable tokenizer/filter design. A segmenter turns
raw text into word candidates, then filters run in a fixed order. Each stage
is a small callable so alternative segmenters or stemmers can be injected.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from functools import lru_cache
import logging
import re
import threading
from typing import Protocol

import jieba
from nltk.stem import PorterStemmer

from setsearch.search.stopwords import STOPWORDS


logger = logging.getLogger(__name__)

_CJK_PATTERN = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff]")
_WORD_CHAR = re.compile(r"\w", re.UNICODE)


class Segmenter(Protocol):
    """Protocol implemented by segmenters."""

    def __call__(self, text: str) -> Iterator[str]:  # pragma: no cover - interface definition
        ...


class Stemmer(Protocol):
    """Protocol implemented by stemmers."""

    def stem(self, word: str) -> str:  # pragma: no cover - interface definition
        ...


class TokenFilter(Protocol):
    """Protocol implemented by token filters."""

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:  # pragma: no cover - interface definition
        ...


class RegexSegmenter:
    """Splits text on word boundaries for whitespace-delimited scripts."""

    def __init__(self, pattern: str = r"[\w']+", flags: int = re.UNICODE | re.MULTILINE) -> None:
        self.pattern = re.compile(pattern, flags)

    def __call__(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            yield match.group(0)


class JiebaSegmenter:
    """Dictionary-based segmenter for scripts without explicit word boundaries.

    Owns a private ``jieba.Tokenizer`` so custom dictionaries never leak into
    the module-level jieba instance. The dictionary is loaded on first use or
    when :meth:`initialize` is called explicitly.
    """

    def __init__(self, dictionary: str | None = None) -> None:
        self.dictionary = dictionary
        self._tokenizer = jieba.Tokenizer(dictionary=dictionary) if dictionary else jieba.Tokenizer()
        self._lock = threading.Lock()
        self._ready = False

    def initialize(self) -> None:
        """Load the segmentation dictionary."""
        if self._ready:
            return
        with self._lock:
            if not self._ready:
                logger.debug("Loading jieba dictionary", extra={"dictionary": self.dictionary or "default"})
                self._tokenizer.initialize()
                self._ready = True

    def __call__(self, text: str) -> Iterator[str]:
        self.initialize()
        for piece in self._tokenizer.cut(text):
            # jieba emits whitespace and punctuation as standalone pieces
            if _WORD_CHAR.search(piece):
                yield piece.strip()


def shared_jieba_segmenter(dictionary: str | None = None) -> JiebaSegmenter:
    """Return the process-wide segmenter for ``dictionary``; its dictionary loads once."""
    return _jieba_segmenter(dictionary)


@lru_cache(maxsize=None)
def _jieba_segmenter(dictionary: str | None) -> JiebaSegmenter:
    return JiebaSegmenter(dictionary)


class AutoSegmenter:
    """Routes CJK text through jieba and everything else through the regex segmenter."""

    def __init__(
        self,
        *,
        fallback: Segmenter | None = None,
        cjk: Segmenter | None = None,
        cjk_enabled: bool = True,
    ) -> None:
        self.fallback = fallback or RegexSegmenter()
        self.cjk_enabled = cjk_enabled
        self._cjk = cjk

    @property
    def cjk(self) -> Segmenter:
        if self._cjk is None:
            self._cjk = shared_jieba_segmenter()
        return self._cjk

    def __call__(self, text: str) -> Iterator[str]:
        if self.cjk_enabled and _CJK_PATTERN.search(text):
            return self.cjk(text)
        return self.fallback(text)


class StopFilter:
    """Removes tokens that exactly match a stopword (case-sensitive)."""

    def __init__(self, stopwords: Iterable[str] | None = None) -> None:
        self.stopwords = frozenset(stopwords) if stopwords is not None else STOPWORDS

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            if token not in self.stopwords:
                yield token


class StemFilter:
    """Applies a stemmer to every token."""

    def __init__(self, stemmer: Stemmer | None = None) -> None:
        self.stemmer = stemmer or PorterStemmer()

    def __call__(self, tokens: Iterable[str]) -> Iterator[str]:
        for token in tokens:
            yield self.stemmer.stem(token)


class Normalizer:
    """Turns free text into an ordered list of normalized word tokens.

    Steps run in a fixed order: segment, drop empty candidates, drop
    stopwords, stem. Duplicates are kept; they collapse later at the set
    layer.

    Example:
        >>> Normalizer()("running dogs")
        ['run', 'dog']
    """

    def __init__(
        self,
        *,
        segmenter: Segmenter | None = None,
        stopwords: Iterable[str] | None = None,
        stemmer: Stemmer | None = None,
    ) -> None:
        self.segmenter = segmenter or AutoSegmenter()
        self.filters: Sequence[TokenFilter] = [StopFilter(stopwords), StemFilter(stemmer)]

    def __call__(self, text: str | None) -> list[str]:
        return self.normalize(text)

    def normalize(self, text: str | None) -> list[str]:
        if not text:
            return []
        stream: Iterable[str] = (token for token in self.segmenter(text) if token and not token.isspace())
        for token_filter in self.filters:
            stream = token_filter(stream)
        return list(stream)


def create_normalizer(*, cjk_segmentation: bool = True, jieba_dictionary: str | None = None) -> Normalizer:
    """Build the default normalizer from process settings."""
    cjk = shared_jieba_segmenter(jieba_dictionary) if cjk_segmentation else None
    return Normalizer(segmenter=AutoSegmenter(cjk=cjk, cjk_enabled=cjk_segmentation))
