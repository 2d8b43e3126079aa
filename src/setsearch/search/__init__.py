"""
Indexing and query engine over a set-oriented key-value store.

- analyzers: segmentation, stopword removal and stemming
- phonetic: phonetic keying of normalized tokens
- schema: documents, facet field descriptors and facet extraction
- keys: namespaced store key derivation
- store: set store contract and the redis adapter
- indexer: atomic posting writes and reverse-index removal
- query: immutable queries and set-algebra execution
- index: index handles tying it together
"""
