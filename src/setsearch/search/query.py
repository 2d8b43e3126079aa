"""Query model and execution over posting sets.

A :class:`Query` is an immutable value (text, mode, optional facet filters).
Chaining returns new values; execution is delegated to a stateless
:class:`QueryExecutor` that derives the same keys the indexer writes and
issues exactly one ``SINTER`` (AND) or ``SUNION`` (OR).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field, replace
from enum import Enum
import logging
from typing import TYPE_CHECKING, Any

from setsearch.search.analyzers import Normalizer
from setsearch.search.keys import KeyScheme
from setsearch.search.phonetic import PhoneticKeyer
from setsearch.search.schema import FacetExtractor
from setsearch.search.store import SetStore


if TYPE_CHECKING:
    from setsearch.search.index import IndexHandle


logger = logging.getLogger(__name__)


class Mode(str, Enum):
    """Set operation used to combine posting sets."""

    AND = "and"
    OR = "or"

    @classmethod
    def parse(cls, value: Mode | str) -> Mode:
        if isinstance(value, Mode):
            return value
        normalized = str(value).strip().lower()
        if normalized not in _MODE_ALIASES:
            msg = f"Unknown query mode '{value}'. Available: {sorted(_MODE_ALIASES)}"
            raise ValueError(msg)
        return _MODE_ALIASES[normalized]


_MODE_ALIASES: dict[str, Mode] = {
    "and": Mode.AND,
    "intersect": Mode.AND,
    "or": Mode.OR,
    "union": Mode.OR,
}


@dataclass(frozen=True)
class Query:
    """Immutable query bound to an index handle.

    Example:
        ids = handle.query("run dog").mode("or").execute()
    """

    text: str
    match_mode: Mode = Mode.AND
    facets: tuple[tuple[str, Any], ...] = ()
    handle: IndexHandle | None = field(default=None, repr=False, compare=False)

    def mode(self, mode: Mode | str) -> Query:
        """Return a copy using ``mode`` (``and``/``intersect`` or ``or``/``union``)."""
        return replace(self, match_mode=Mode.parse(mode))

    def where(self, field_name: str, value: Any) -> Query:
        """Return a copy that also matches the facet ``field_name:value``."""
        return replace(self, facets=(*self.facets, (field_name, value)))

    def execute(self, callback: Callable[[Exception | None, set[str] | None], None] | None = None) -> set[str] | None:
        """Run the query on the bound index.

        Without ``callback`` the matching ids are returned and store failures
        raise ``StoreError``. With ``callback`` it is called as
        ``callback(error, ids)`` and nothing is raised.
        """
        if self.handle is None:
            raise RuntimeError("Query is not bound to an index; use IndexHandle.query()")
        return self.handle.execute(self, callback)

    end = execute


class QueryExecutor:
    """Stateless query evaluation for one namespace."""

    def __init__(
        self,
        store: SetStore,
        keys: KeyScheme,
        *,
        normalizer: Normalizer,
        keyer: PhoneticKeyer,
        facets: FacetExtractor,
    ) -> None:
        self.store = store
        self.keys = keys
        self.normalizer = normalizer
        self.keyer = keyer
        self.facets = facets

    def keys_for(self, query: Query) -> list[str]:
        """Posting keys addressed by ``query``: distinct word codes, then facets."""
        codes = self.keyer.codes_of(self.normalizer(query.text))
        keys = [self.keys.word_key(code) for code in codes]
        for field_name, value in query.facets:
            for token in self.facets.tokens_for(field_name, value):
                key = self.keys.facet_key(token)
                if key not in keys:
                    keys.append(key)
        return keys

    def execute(self, query: Query) -> set[str]:
        keys = self.keys_for(query)
        if not keys:
            logger.debug("Query %r normalized to no keys; returning empty result", query.text)
            return set()
        if query.match_mode is Mode.AND:
            result = self.store.sinter(keys)
        else:
            result = self.store.sunion(keys)
        logger.debug(
            "Query matched %d documents",
            len(result),
            extra={"mode": query.match_mode.value, "key_count": len(keys)},
        )
        return result
