"""Key scheme mapping codes and facet tokens to store keys.

Layout (``ns`` is the index namespace):

- ``<ns>:word:<phonetic code>``  posting set for a word code
- ``<ns>:<field>:<value>``       posting set for a facet value
- ``<ns>:object:<doc id>``       reverse-index entry for a document

Reverse entries hold key suffixes (``word:<code>`` or ``<field>:<value>``);
``posting_key_from_suffix`` is the only inverse used at removal time, so write
and read paths cannot drift apart. These strings are the addressing contract
between writers and readers and must stay stable.
"""

from __future__ import annotations

from setsearch.errors import ConfigError
from setsearch.search.schema import KEY_SEPARATOR, REVERSE_CATEGORY, WORD_CATEGORY


def validate_namespace(namespace: object) -> str:
    """Return ``namespace`` if usable as a key prefix, else raise ``ConfigError``."""
    if not isinstance(namespace, str) or not namespace.strip():
        raise ConfigError("create_index() requires a non-empty namespace string")
    if KEY_SEPARATOR in namespace:
        msg = f"Namespace '{namespace}' must not contain '{KEY_SEPARATOR}'"
        raise ConfigError(msg)
    return namespace


def word_suffix(code: str) -> str:
    return f"{WORD_CATEGORY}{KEY_SEPARATOR}{code}"


def word_key(namespace: str, code: str) -> str:
    return posting_key_from_suffix(namespace, word_suffix(code))


def facet_key(namespace: str, facet_token: str) -> str:
    """Key for a ``<field>:<value>`` facet token."""
    category, sep, value = facet_token.partition(KEY_SEPARATOR)
    if not sep or not category or not value:
        msg = f"Malformed facet token: {facet_token!r}"
        raise ValueError(msg)
    return posting_key_from_suffix(namespace, facet_token)


def reverse_key(namespace: str, doc_id: str | int) -> str:
    return f"{namespace}{KEY_SEPARATOR}{REVERSE_CATEGORY}{KEY_SEPARATOR}{doc_id}"


def posting_key_from_suffix(namespace: str, suffix: str) -> str:
    return f"{namespace}{KEY_SEPARATOR}{suffix}"


class KeyScheme:
    """Key derivation bound to one namespace."""

    def __init__(self, namespace: str) -> None:
        self.namespace = validate_namespace(namespace)

    def word_key(self, code: str) -> str:
        return word_key(self.namespace, code)

    def facet_key(self, facet_token: str) -> str:
        return facet_key(self.namespace, facet_token)

    def reverse_key(self, doc_id: str | int) -> str:
        return reverse_key(self.namespace, doc_id)

    def posting_key(self, suffix: str) -> str:
        return posting_key_from_suffix(self.namespace, suffix)

    def __repr__(self) -> str:
        return f"KeyScheme(namespace={self.namespace!r})"
