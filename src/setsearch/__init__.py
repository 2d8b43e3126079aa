"""Full-text and faceted search over a remote set store."""

from setsearch.config import Settings, get_settings
from setsearch.errors import ConfigError, SetSearchError, StoreError
from setsearch.observability.logging import configure_logging_from_settings
from setsearch.search.analyzers import Normalizer
from setsearch.search.index import IndexHandle, create_index
from setsearch.search.phonetic import PhoneticKeyer
from setsearch.search.query import Mode, Query
from setsearch.search.schema import Cardinality, Document, FacetField, Schema, create_default_schema
from setsearch.search.store import RedisSetStore, create_store


__version__ = "0.2.0"

__all__ = [
    "Cardinality",
    "ConfigError",
    "Document",
    "FacetField",
    "IndexHandle",
    "Mode",
    "Normalizer",
    "PhoneticKeyer",
    "Query",
    "RedisSetStore",
    "Schema",
    "SetSearchError",
    "Settings",
    "StoreError",
    "__version__",
    "configure_logging_from_settings",
    "create_default_schema",
    "create_index",
    "create_store",
    "get_settings",
]
