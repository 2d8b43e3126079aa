"""
Document and facet schema definitions.

A schema is an explicit, enumerable list of facet field descriptors. Facet
extraction iterates the descriptors rather than whatever keys a document
happens to carry, so unknown attributes are ignored and each field's
cardinality is declared up front:

- SINGLE: one facet token ``<field>:<value>`` when the value is present
- REPEATABLE: one facet token ``<field>:<value>`` per element
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from setsearch.errors import ConfigError


WORD_CATEGORY = "word"
REVERSE_CATEGORY = "object"
RESERVED_CATEGORIES = frozenset({WORD_CATEGORY, REVERSE_CATEGORY})
KEY_SEPARATOR = ":"


class Cardinality(str, Enum):
    """How many values a facet field may carry."""

    SINGLE = "single"
    REPEATABLE = "repeatable"


@dataclass(frozen=True)
class FacetField:
    """
    Structured attribute indexed by exact value.

    Args:
        name: Field name, used verbatim as the key category (e.g. "tag", "city")
        cardinality: SINGLE or REPEATABLE (default: SINGLE)
    """

    name: str
    cardinality: Cardinality = Cardinality.SINGLE

    @property
    def repeatable(self) -> bool:
        return self.cardinality is Cardinality.REPEATABLE

    def tokens(self, value: Any) -> Iterator[str]:
        """Yield the facet tokens contributed by ``value``."""
        if self.repeatable:
            values = [value] if isinstance(value, (str, bytes)) else value or ()
        elif isinstance(value, Iterable) and not isinstance(value, (str, bytes)):
            msg = f"Facet field '{self.name}' is single-valued; got {type(value).__name__}"
            raise ValueError(msg)
        else:
            values = (value,)
        for item in values:
            text = _facet_text(item)
            if text:
                yield f"{self.name}{KEY_SEPARATOR}{text}"

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "cardinality": self.cardinality.value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FacetField:
        return cls(name=data["name"], cardinality=Cardinality(data.get("cardinality", "single")))


def _facet_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return str(value).strip()


@dataclass
class Schema:
    """
    Facet schema for an index.

    Example:
        schema = Schema(
            facets=[
                FacetField("tag", Cardinality.REPEATABLE),
                FacetField("city"),
            ],
        )
    """

    facets: list[FacetField]
    name: str = "default"

    def __post_init__(self) -> None:
        self._field_map: dict[str, FacetField] = {}
        for facet in self.facets:
            _validate_facet_name(facet.name)
            if facet.name in self._field_map:
                msg = f"Duplicate facet field '{facet.name}' in schema '{self.name}'"
                raise ConfigError(msg)
            self._field_map[facet.name] = facet

    def __getitem__(self, name: str) -> FacetField:
        return self._field_map[name]

    def __contains__(self, name: object) -> bool:
        return name in self._field_map

    def __iter__(self) -> Iterator[FacetField]:
        return iter(self.facets)

    def __len__(self) -> int:
        return len(self.facets)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.facets]

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "facets": [f.to_dict() for f in self.facets]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Schema:
        return cls(
            facets=[FacetField.from_dict(f) for f in data["facets"]],
            name=data.get("name", "default"),
        )


def _validate_facet_name(name: str) -> None:
    if not name or not isinstance(name, str):
        raise ConfigError("Facet field names must be non-empty strings")
    if KEY_SEPARATOR in name:
        msg = f"Facet field name '{name}' must not contain '{KEY_SEPARATOR}'"
        raise ConfigError(msg)
    if name in RESERVED_CATEGORIES:
        msg = f"Facet field name '{name}' is reserved (reserved: {sorted(RESERVED_CATEGORIES)})"
        raise ConfigError(msg)


def create_default_schema() -> Schema:
    """
    Create the default facet schema.

    Fields:
    - tag: free-form labels (repeatable)
    - city, device, user, public, originality: categorical (single)
    """
    return Schema(
        name="default",
        facets=[
            FacetField("tag", Cardinality.REPEATABLE),
            FacetField("city"),
            FacetField("device"),
            FacetField("user"),
            FacetField("public"),
            FacetField("originality"),
        ],
    )


@dataclass(frozen=True)
class Document:
    """A unit to index: a caller-owned id, optional free text and facet values."""

    id: str | int
    text: str | None = None
    facets: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.id is None or (isinstance(self.id, str) and not self.id):
            raise ValueError("Document id must be a non-empty string or an integer")
        if isinstance(self.id, bool) or not isinstance(self.id, (str, int)):
            msg = f"Document id must be a string or an integer, got {type(self.id).__name__}"
            raise TypeError(msg)

    @property
    def doc_id(self) -> str:
        """Id as stored in posting sets."""
        return str(self.id)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], schema: Schema | None = None) -> Document:
        """Build a document from a loosely-typed mapping.

        Picks ``id`` and ``text`` plus the fields the schema declares; any
        other key is ignored.
        """
        if "id" not in data:
            raise ValueError("Document mapping requires an 'id' key")
        schema = schema or create_default_schema()
        facets = {name: data[name] for name in schema.field_names if name in data}
        return cls(id=data["id"], text=data.get("text"), facets=facets)


class FacetExtractor:
    """Maps a document's structured attributes to facet tokens."""

    def __init__(self, schema: Schema | None = None) -> None:
        self.schema = schema or create_default_schema()

    def __call__(self, document: Document) -> list[str]:
        return self.extract(document)

    def extract(self, document: Document) -> list[str]:
        tokens: list[str] = []
        for facet in self.schema:
            if facet.name in document.facets:
                tokens.extend(facet.tokens(document.facets[facet.name]))
        return tokens

    def tokens_for(self, field_name: str, values: Any) -> list[str]:
        """Facet tokens for an explicit field/value pair (used by facet queries).

        Repeatable fields accept a collection; single fields accept one value.
        """
        if field_name not in self.schema:
            msg = f"Unknown facet field '{field_name}'. Available: {self.schema.field_names}"
            raise ValueError(msg)
        return list(self.schema[field_name].tokens(values))
