"""Index mutation: atomic add and remove of a document's postings.

Every posting written for a document is mirrored in its reverse-index entry
(``<ns>:object:<id>``), and both are written in the same store batch. Removal
reads only that entry, never the document's current content, so a document
id sits in a posting set exactly when the set's suffix is recorded in the
id's reverse entry.

Ordering between ``index`` and ``remove`` for the same id is not enforced:
the last batch the store commits wins. Callers needing strict ordering must
serialize per id (e.g. a per-id queue).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

from setsearch.observability.metrics import POSTING_KEYS_WRITTEN
from setsearch.search.analyzers import Normalizer
from setsearch.search.keys import KeyScheme, word_suffix
from setsearch.search.phonetic import PhoneticKeyer
from setsearch.search.schema import Document, FacetExtractor
from setsearch.search.store import SetStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexPlan:
    """Posting suffixes derived from one document, in first-seen order."""

    doc_id: str
    word_suffixes: tuple[str, ...]
    facet_suffixes: tuple[str, ...]

    @property
    def suffixes(self) -> tuple[str, ...]:
        return self.word_suffixes + self.facet_suffixes

    def __bool__(self) -> bool:
        return bool(self.word_suffixes or self.facet_suffixes)


class IndexMutator:
    """Writes and strips document postings for one namespace."""

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

    def plan(self, document: Document) -> IndexPlan:
        """Derive the posting suffixes for ``document`` without touching the store."""
        tokens = self.normalizer(document.text)
        # One posting per token, addressed by its code; equal codes collapse.
        codes = dict.fromkeys(self.keyer.code_of(token) for token in tokens)
        facet_tokens = dict.fromkeys(self.facets(document))
        return IndexPlan(
            doc_id=document.doc_id,
            word_suffixes=tuple(word_suffix(code) for code in codes),
            facet_suffixes=tuple(facet_tokens),
        )

    def index(self, document: Document) -> IndexPlan:
        """Add ``document.id`` to every derived posting set and its reverse entry.

        Purely additive: postings from earlier calls for the same id are kept.
        """
        plan = self.plan(document)
        if not plan:
            logger.debug("Document %s has no indexable content; nothing written", plan.doc_id)
            return plan

        batch = self.store.batch()
        for suffix in plan.suffixes:
            batch.sadd(self.keys.posting_key(suffix), plan.doc_id)
        batch.sadd(self.keys.reverse_key(plan.doc_id), *plan.suffixes)
        batch.execute()

        POSTING_KEYS_WRITTEN.labels(namespace=self.keys.namespace, operation="index").inc(len(plan.suffixes))
        logger.debug(
            "Indexed document %s under %d posting keys",
            plan.doc_id,
            len(plan.suffixes),
            extra={"word_keys": len(plan.word_suffixes), "facet_keys": len(plan.facet_suffixes)},
        )
        return plan

    def remove(self, doc_id: str | int) -> int:
        """Strip ``doc_id`` from every posting set recorded in its reverse entry.

        Returns the number of posting sets touched; an id that was never
        indexed (or was already removed) is a no-op returning 0.
        """
        member = str(doc_id)
        reverse = self.keys.reverse_key(member)
        suffixes = sorted(self.store.smembers(reverse))
        if not suffixes:
            logger.debug("Document %s has no reverse entry; nothing to remove", member)
            return 0

        batch = self.store.batch()
        batch.delete(reverse)
        for suffix in suffixes:
            batch.srem(self.keys.posting_key(suffix), member)
        batch.execute()

        POSTING_KEYS_WRITTEN.labels(namespace=self.keys.namespace, operation="remove").inc(len(suffixes))
        logger.debug("Removed document %s from %d posting keys", member, len(suffixes))
        return len(suffixes)
