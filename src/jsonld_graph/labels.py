"""
Label resolution for JSON-LD entities.

Two fallback chains are provided:

:func:`resolve_label`
    The schema-facing chain: formal label, then any literal property
    value, then a synthesised ``"<TypeLabel> <id prefix>"`` name for
    ``owl:NamedIndividual`` entities, then the IRI local name.

:func:`resolve_entity_label`
    The entity-graph chain used to name nodes and links: formal label,
    then a type-prefixed name built from the first meaningful type, then
    the local name.

Both accept either a node array or a prebuilt
:class:`~jsonld_graph.nodes.EntityIndex`.
"""

from __future__ import annotations

import re
from typing import Any, Optional, Sequence, Union

from jsonld_graph.nodes import EntityIndex, as_index, as_list, get_types
from jsonld_graph.vocab import LABEL_KEYS, OWL_NAMED_INDIVIDUAL, is_term

GraphLike = Union[EntityIndex, Sequence[dict[str, Any]]]

# Type local names that say nothing about what an entity is.
_UNINFORMATIVE_TYPES = frozenset({
    "Class", "ObjectProperty", "Restriction", "Unknown", "NamedIndividual",
})

_ID_PREFIX_LENGTH = 5

_IRI_SEPARATORS = re.compile(r"[/#]")


# ── Local names ────────────────────────────────────────────────────


def extract_local_name(iri: str) -> str:
    """Extract the local name of a full IRI or CURIE.

    ``ex:Person`` → ``Person``; ``http://example.org/Person/123`` → ``123``;
    ``http://example.org#Thing`` → ``Thing``.

    Raises:
        TypeError: If *iri* is not a non-empty string.
        ValueError: If a full IRI has nothing after its last ``/`` or ``#``.
    """
    if not isinstance(iri, str) or not iri.strip():
        raise TypeError("Input must be a non-empty string.")

    if ":" in iri and not iri.startswith("http"):
        local = iri.partition(":")[2]
        return local or iri

    local = _IRI_SEPARATORS.split(iri)[-1]
    if not local:
        raise ValueError(f"Could not extract local name from IRI: {iri!r}")
    return local


def extract_local_names(iris: Sequence[str]) -> list[str]:
    """Batch form of :func:`extract_local_name`."""
    if not isinstance(iris, (list, tuple)):
        raise TypeError("extract_local_names expects a list of strings.")
    for i, iri in enumerate(iris):
        if not isinstance(iri, str) or not iri.strip():
            raise TypeError(f"Item at index {i} is not a valid non-empty string.")
    return [extract_local_name(iri) for iri in iris]


# ── Argument checks ────────────────────────────────────────────────


def _check_id(node_id: Any) -> None:
    if not isinstance(node_id, str) or not node_id.strip():
        raise TypeError("The 'id' parameter must be a non-empty string.")


def _check_language(language: Any) -> Optional[str]:
    """Validate *language*; blank means no filtering."""
    if language is not None and not isinstance(language, str):
        raise TypeError("The 'language' parameter must be a string if provided.")
    return language if language and language.strip() else None


def _label_value(label: Any, language: Optional[str]) -> Optional[str]:
    """The text of one label value if it passes the language filter."""
    if isinstance(label, dict):
        text = label.get("@value")
        if text and (language is None or label.get("@language") == language):
            return str(text)
        return None
    if isinstance(label, str) and label and language is None:
        return label
    return None


# ── Label steps ────────────────────────────────────────────────────


def get_formal_label(
    graph: GraphLike, node_id: str, language: Optional[str] = None
) -> Optional[str]:
    """Return the ``rdfs:label`` (or ``label``) of an entity.

    Label keys are searched in order (full IRI, ``rdfs:label``,
    ``label``); the first value in *language* wins.  With no language,
    the first value of any language wins.  Returns ``None`` when the
    entity or a matching label is absent.
    """
    index = as_index(graph)
    _check_id(node_id)
    language = _check_language(language)

    entity = index.get(node_id)
    if entity is None:
        return None
    for key in LABEL_KEYS:
        for label in as_list(entity.get(key)):
            text = _label_value(label, language)
            if text:
                return text
    return None


def get_literal_label(entity: dict[str, Any], language: Optional[str] = None) -> Optional[str]:
    """Return the first ``@value`` literal among the entity's own values."""
    if not isinstance(entity, dict):
        raise TypeError("The 'entity' parameter must be a non-null object.")
    language = _check_language(language)

    for key, value in entity.items():
        if key.startswith("@"):
            continue
        for item in as_list(value):
            if not isinstance(item, dict):
                continue
            text = item.get("@value")
            if text and (language is None or item.get("@language") == language):
                return str(text)
    return None


def _is_individual_type(type_iri: Any) -> bool:
    return is_term(type_iri, OWL_NAMED_INDIVIDUAL, "owl:NamedIndividual")


def _synthesised_name(type_label: str, node_id: str) -> str:
    local_id = extract_local_name(node_id)
    return f"{type_label} {local_id[:_ID_PREFIX_LENGTH]}"


def get_label_from_named_individual(
    graph: GraphLike, node_id: str, language: Optional[str] = None
) -> Optional[str]:
    """Name a ``owl:NamedIndividual`` after its class.

    The label of the first non-individual type (in *language*, then in
    any language, then the type's local name) is joined with the first
    five characters of the individual's local id, e.g. ``"Person 123"``.
    Returns ``None`` for anything that is not a named individual.
    """
    index = as_index(graph)
    _check_id(node_id)
    language = _check_language(language)

    entity = index.get(node_id)
    if entity is None:
        return None
    types = get_types(entity)
    if not any(_is_individual_type(t) for t in types):
        return None

    for type_iri in types:
        if _is_individual_type(type_iri):
            continue
        type_label = (
            get_formal_label(index, type_iri, language)
            or get_formal_label(index, type_iri)
            or extract_local_name(type_iri)
        )
        if type_label:
            return _synthesised_name(type_label, node_id)
    return None


# ── Fallback chains ────────────────────────────────────────────────


def resolve_label(
    graph: GraphLike, node_id: str, language: Optional[str] = None
) -> str:
    """Resolve a human-readable label for *node_id*.

    Order: formal label (*language*, then any), literal property value
    (*language*, then any), named-individual synthesis, IRI local name.
    The last step always succeeds for a well-formed IRI or CURIE.

    Raises:
        TypeError: If *graph*, *node_id* or *language* has the wrong type.
        ValueError: If the final local-name step meets a malformed IRI.
    """
    index = as_index(graph)
    _check_id(node_id)
    language = _check_language(language)

    formal = get_formal_label(index, node_id, language) or get_formal_label(index, node_id)
    if formal:
        return formal

    entity = index.get(node_id)
    if entity is not None:
        literal = get_literal_label(entity, language) or get_literal_label(entity)
        if literal:
            return literal

    individual = get_label_from_named_individual(index, node_id, language)
    if individual:
        return individual

    return extract_local_name(node_id)


def _direct_label(entity: dict[str, Any], language: Optional[str]) -> Optional[str]:
    for key in LABEL_KEYS:
        labels = as_list(entity.get(key))
        if not labels:
            continue
        if language:
            for label in labels:
                if isinstance(label, dict) and label.get("@language") == language:
                    text = label.get("@value")
                    if text:
                        return str(text)
        text = _label_value(labels[0], None)
        if text:
            return text
    return None


def resolve_entity_label(
    graph: GraphLike,
    node_id: str,
    language: Optional[str] = None,
    _visiting: frozenset[str] = frozenset(),
) -> str:
    """Name an entity for display in an entity graph.

    Order: direct label (*language* match, else the first label), then
    ``"<TypeLabel> <id prefix>"`` from the first type that is not a
    generic OWL construct, then the local name, then the raw id.
    """
    index = as_index(graph)
    if not isinstance(node_id, str):
        raise TypeError("resolve_entity_label expects id to be a string.")
    language = _check_language(language)

    entity = index.get(node_id)
    if entity is not None:
        label = _direct_label(entity, language)
        if label:
            return label

        visiting = _visiting | {node_id}
        for type_iri in get_types(entity):
            if not isinstance(type_iri, str) or type_iri in visiting:
                continue
            if extract_local_name(type_iri) in _UNINFORMATIVE_TYPES:
                continue
            type_label = resolve_entity_label(index, type_iri, language, visiting)
            if type_label:
                return _synthesised_name(type_label, node_id)

    return extract_local_name(node_id) if node_id.strip() else node_id
