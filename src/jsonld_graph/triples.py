"""Triple extraction from JSON-LD node arrays."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, Union

from jsonld_graph.nodes import (
    Literal,
    Reference,
    as_list,
    classify_value,
    predicates,
    validate_node_ids,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Triple:
    """A ``(subject, predicate, object)`` assertion with literal metadata."""

    subject: str
    predicate: str
    object: Any
    object_term_type: Optional[str] = None
    object_language: Optional[str] = None
    object_datatype: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "subject": self.subject,
            "predicate": self.predicate,
            "object": self.object,
        }
        if self.object_term_type is not None:
            out["objectTermType"] = self.object_term_type
        if self.object_term_type == "literal":
            out["objectLanguage"] = self.object_language
            out["objectDatatype"] = self.object_datatype
        return out


TripleLike = Union[Triple, Mapping[str, Any]]


def _to_triple(subject: str, predicate: str, raw: Any) -> Triple:
    value = classify_value(raw)
    if isinstance(value, Reference):
        return Triple(subject, predicate, value.iri, "IRI")
    if isinstance(value, Literal):
        return Triple(
            subject, predicate, value.lexical, "literal",
            value.language, value.datatype,
        )
    return Triple(subject, predicate, value.lexical, "literal", None, value.datatype)


def extract_triples(jsonld: Sequence[dict[str, Any]]) -> list[Triple]:
    """Flatten a JSON-LD node array into triples.

    Regular predicates come first, in key order, one triple per value;
    then one ``@type`` triple per type.  Keyword keys other than ``@type``
    are not predicates and ``null`` values assert nothing.

    Raises:
        TypeError: If *jsonld* is not a list of node objects, or a node
            has no string ``@id``.
    """
    validate_node_ids(jsonld, "extract_triples")

    triples: list[Triple] = []
    for node in jsonld:
        subject = node["@id"]

        for predicate, values in predicates(node):
            for raw in values:
                if raw is None:
                    continue
                triples.append(_to_triple(subject, predicate, raw))

        for type_iri in as_list(node.get("@type")):
            triples.append(Triple(subject, "@type", type_iri, "IRI"))

    logger.debug("Extracted %d triples from %d nodes", len(triples), len(jsonld))
    return triples


def create_triple(subject: str, predicate: str, obj: Any) -> Triple:
    """Build a plain ``{subject, predicate, object}`` triple.

    ``{"@id": ...}`` and ``{"@value": ...}`` objects are unwrapped; strings
    and ``None`` are used as they are.
    """
    if not isinstance(subject, str):
        raise TypeError(f"Expected subject to be a string, got {type(subject).__name__}")
    if not isinstance(predicate, str):
        raise TypeError(f"Expected predicate to be a string, got {type(predicate).__name__}")
    if obj is not None and not isinstance(obj, (str, dict)):
        raise TypeError(
            f"Expected object to be a string, object or None, got {type(obj).__name__}"
        )

    if isinstance(obj, dict):
        if "@id" in obj:
            return Triple(subject, predicate, obj["@id"])
        if "@value" in obj:
            return Triple(subject, predicate, obj["@value"])
    return Triple(subject, predicate, obj)


def coerce_triple(triple: TripleLike, index: int = 0) -> Triple:
    """Accept a :class:`Triple` or a mapping with string subject/predicate/object."""
    if isinstance(triple, Triple):
        candidate = triple
    elif isinstance(triple, Mapping):
        candidate = Triple(
            triple.get("subject"),
            triple.get("predicate"),
            triple.get("object"),
            triple.get("objectTermType"),
            triple.get("objectLanguage"),
            triple.get("objectDatatype"),
        )
    else:
        raise TypeError(
            f"Invalid triple at index {index}: expected a Triple or mapping, "
            f"got {type(triple).__name__}"
        )
    if not all(
        isinstance(part, str)
        for part in (candidate.subject, candidate.predicate, candidate.object)
    ):
        raise TypeError(
            f"Invalid triple at index {index}: expected subject, predicate "
            f"and object as strings"
        )
    return candidate


def coerce_triples(triples: Sequence[TripleLike]) -> list[Triple]:
    if not isinstance(triples, (list, tuple)):
        raise TypeError(
            f"Expected 'triples' to be a list, got {type(triples).__name__}"
        )
    return [coerce_triple(t, i) for i, t in enumerate(triples)]
