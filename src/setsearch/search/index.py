"""Index handles: the public entry point tying the pipeline to a store.

``create_index`` wires one namespace to a set store plus the normalization,
phonetic and facet components. Each handle operation is independent, holds
no mutable state of its own and either completes as a unit or reports a
``StoreError``.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
import logging
from typing import Any, TypeVar

from setsearch.config import Settings, get_settings
from setsearch.errors import StoreError
from setsearch.observability.context import operation_context
from setsearch.observability.metrics import OPERATION_COUNT, OPERATION_LATENCY, track_latency
from setsearch.search.analyzers import Normalizer, create_normalizer
from setsearch.search.indexer import IndexMutator, IndexPlan
from setsearch.search.keys import KeyScheme, validate_namespace
from setsearch.search.phonetic import PhoneticKeyer
from setsearch.search.query import Mode, Query, QueryExecutor
from setsearch.search.schema import Document, FacetExtractor, Schema, create_default_schema
from setsearch.search.store import SetStore, create_store


logger = logging.getLogger(__name__)

T = TypeVar("T")
Callback = Callable[[Exception | None, Any], None]


class IndexHandle:
    """A namespaced index over a shared set store.

    Concurrent calls for different document ids are safe. An ``index`` racing
    a ``remove`` for the same id has no ordering guarantee; serialize those
    calls per id if ordering matters.
    """

    def __init__(
        self,
        namespace: str,
        store: SetStore,
        *,
        settings: Settings | None = None,
        schema: Schema | None = None,
        normalizer: Normalizer | None = None,
        keyer: PhoneticKeyer | None = None,
        owns_store: bool = False,
    ) -> None:
        self.keys = KeyScheme(namespace)
        self.store = store
        self.schema = schema or create_default_schema()
        if normalizer is None:
            settings = settings or get_settings()
            normalizer = create_normalizer(
                cjk_segmentation=settings.cjk_segmentation,
                jieba_dictionary=settings.jieba_dictionary,
            )
        self.normalizer = normalizer
        self.keyer = keyer or PhoneticKeyer()
        self.facets = FacetExtractor(self.schema)
        self.owns_store = owns_store
        components = {"normalizer": self.normalizer, "keyer": self.keyer, "facets": self.facets}
        self.mutator = IndexMutator(store, self.keys, **components)
        self.executor = QueryExecutor(store, self.keys, **components)

    @property
    def namespace(self) -> str:
        return self.keys.namespace

    def index(
        self,
        document: Document | Mapping[str, Any],
        callback: Callback | None = None,
    ) -> IndexPlan | None:
        """Index ``document`` (a :class:`Document` or a mapping with an ``id``).

        Returns the posting plan that was written. Indexing is additive; use
        ``remove`` first to fully replace a document's tokens.
        """
        if not isinstance(document, Document):
            document = Document.from_mapping(document, self.schema)
        return self._run("index", lambda: self.mutator.index(document), callback, doc_id=document.doc_id)

    def remove(self, doc_id: str | int, callback: Callback | None = None) -> int | None:
        """Remove ``doc_id`` from every posting set it was indexed under.

        Idempotent: removing an unknown id succeeds and returns 0.
        """
        return self._run("remove", lambda: self.mutator.remove(doc_id), callback, doc_id=str(doc_id))

    def query(self, text: str, mode: Mode | str = Mode.AND) -> Query:
        """Return an immutable query over this index (AND by default)."""
        return Query(text=text or "", match_mode=Mode.parse(mode), handle=self)

    def execute(self, query: Query, callback: Callback | None = None) -> set[str] | None:
        return self._run("query", lambda: self.executor.execute(query), callback, mode=query.match_mode.value)

    def _run(self, operation: str, action: Callable[[], T], callback: Callback | None, **extra: Any) -> T | None:
        with operation_context(self.namespace, operation, **extra):
            try:
                with track_latency(OPERATION_LATENCY, namespace=self.namespace, operation=operation):
                    result = action()
            except StoreError as exc:
                OPERATION_COUNT.labels(namespace=self.namespace, operation=operation, status="error").inc()
                logger.warning("%s failed on index %s: %s", operation, self.namespace, exc)
                if callback is None:
                    raise
                callback(exc, None)
                return None
        OPERATION_COUNT.labels(namespace=self.namespace, operation=operation, status="ok").inc()
        if callback is not None:
            callback(None, result)
        return result

    def close(self) -> None:
        """Close the store when this handle created it."""
        if self.owns_store:
            self.store.close()

    def __enter__(self) -> IndexHandle:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"IndexHandle(namespace={self.namespace!r})"


def create_index(
    namespace: str,
    *,
    store: SetStore | None = None,
    settings: Settings | None = None,
    schema: Schema | None = None,
    normalizer: Normalizer | None = None,
    keyer: PhoneticKeyer | None = None,
) -> IndexHandle:
    """Create an index handle for ``namespace``.

    Raises ``ConfigError`` for an empty namespace before any store is built.
    Pass ``store`` to share one connection across handles; otherwise a store
    is created from ``settings`` and closed with the handle.
    """
    validate_namespace(namespace)
    owns_store = store is None
    settings = settings or get_settings()
    if store is None:
        store = create_store(settings)
    logger.debug("Created index handle for namespace %s", namespace)
    return IndexHandle(
        namespace,
        store,
        settings=settings,
        schema=schema,
        normalizer=normalizer,
        keyer=keyer,
        owns_store=owns_store,
    )
