"""
JSON-LD node model for jsonld-graph.

Property values inside a JSON-LD node come in three shapes: object
references (``{"@id": ...}``), literal objects (``{"@value": ...}``
with optional ``@language``/``@type``) and bare primitives.  They are
resolved once, through :func:`classify_value`, into the tagged union
``Reference | Literal | Primitive`` so that later passes dispatch on a
type instead of probing keys.

:class:`EntityIndex` is the lookup structure every pass shares: it maps
``@id`` to node and target ``@id`` to the nodes referencing it.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Iterator, Optional, Sequence, Union


# ── Tagged value union ─────────────────────────────────────────────


def _lexical(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, sort_keys=True)
    return str(value)


@dataclass(frozen=True)
class Reference:
    """An object reference to another node."""

    iri: str

    @property
    def lexical(self) -> str:
        return self.iri


@dataclass(frozen=True)
class Literal:
    """A ``@value`` literal object."""

    value: Any
    language: Optional[str] = None
    datatype: Optional[str] = None

    @property
    def lexical(self) -> str:
        return _lexical(self.value)


@dataclass(frozen=True)
class Primitive:
    """A bare JSON value, or an object with neither ``@id`` nor ``@value``."""

    value: Any

    @property
    def lexical(self) -> str:
        return _lexical(self.value)

    @property
    def datatype(self) -> Optional[str]:
        """XSD datatype implied by the JSON type of the value."""
        if isinstance(self.value, bool):
            return "xsd:boolean"
        if isinstance(self.value, int):
            return "xsd:integer"
        if isinstance(self.value, float):
            if math.isfinite(self.value) and self.value.is_integer():
                return "xsd:integer"
            return "xsd:decimal"
        return None


Value = Union[Reference, Literal, Primitive]


def classify_value(raw: Any) -> Value:
    """Resolve a raw JSON-LD property value into the tagged union."""
    if isinstance(raw, dict):
        if "@id" in raw:
            return Reference(raw["@id"])
        if "@value" in raw:
            language = raw.get("@language")
            datatype = raw.get("@type")
            if datatype is None and language:
                datatype = "rdf:langString"
            return Literal(raw["@value"], language or None, datatype)
    return Primitive(raw)


# ── Node helpers ───────────────────────────────────────────────────


def as_list(value: Any) -> list[Any]:
    """Normalise a single value or a list of values to a list."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def get_types(node: dict[str, Any]) -> list[str]:
    """Return the ``@type`` values of *node* as a list."""
    return [t for t in as_list(node.get("@type")) if t]


def predicates(node: dict[str, Any]) -> Iterator[tuple[str, list[Any]]]:
    """Yield ``(predicate, values)`` for every non-keyword key of *node*."""
    for key, value in node.items():
        if key.startswith("@"):
            continue
        yield key, as_list(value)


def validate_nodes(jsonld: Any, where: str) -> None:
    """Fail fast unless *jsonld* is a sequence of node dicts."""
    if not isinstance(jsonld, (list, tuple)):
        raise TypeError(
            f"{where}: expected a list of JSON-LD node objects, "
            f"got {type(jsonld).__name__}"
        )
    for i, node in enumerate(jsonld):
        if not isinstance(node, dict):
            raise TypeError(
                f"{where}: element {i} must be a JSON-LD node object, "
                f"got {type(node).__name__}"
            )


def validate_node_ids(jsonld: Any, where: str) -> None:
    """Fail fast unless every node carries a non-blank string ``@id``."""
    validate_nodes(jsonld, where)
    for i, node in enumerate(jsonld):
        node_id = node.get("@id")
        if not isinstance(node_id, str) or not node_id.strip():
            raise TypeError(f"{where}: node {i} has no string '@id'")


# ── Entity index ───────────────────────────────────────────────────


class EntityIndex:
    """Id lookup and inbound-reference index over a node array.

    Lookups return the first node carrying a given ``@id``.  The inbound
    index lists ``(source_id, predicate)`` pairs per target in document
    order, so scanning it is equivalent to rescanning the whole graph.
    """

    def __init__(self, jsonld: Sequence[dict[str, Any]]):
        validate_nodes(jsonld, "EntityIndex")
        self.nodes = list(jsonld)
        self._by_id: dict[str, dict[str, Any]] = {}
        self._referrers: dict[str, list[tuple[str, str]]] = {}

        for node in self.nodes:
            node_id = node.get("@id")
            if not isinstance(node_id, str) or not node_id.strip():
                continue
            self._by_id.setdefault(node_id, node)
            for predicate, values in predicates(node):
                for raw in values:
                    value = classify_value(raw)
                    if isinstance(value, Reference) and isinstance(value.iri, str):
                        self._referrers.setdefault(value.iri, []).append(
                            (node_id, predicate)
                        )

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, node_id: str) -> Optional[dict[str, Any]]:
        return self._by_id.get(node_id)

    def ids(self) -> list[str]:
        """Distinct node ids in document order."""
        return list(self._by_id)

    def referrers(self, node_id: str) -> list[tuple[str, str]]:
        """``(source_id, predicate)`` pairs whose value references *node_id*."""
        return self._referrers.get(node_id, [])


def as_index(graph: Union[EntityIndex, Sequence[dict[str, Any]]]) -> EntityIndex:
    """Accept either a prebuilt :class:`EntityIndex` or a node array."""
    if isinstance(graph, EntityIndex):
        return graph
    return EntityIndex(graph)
