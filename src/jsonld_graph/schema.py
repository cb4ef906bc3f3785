"""
Ontology Schema Inference for jsonld-graph.

Derives an OWL class-level schema from a JSON-LD node array in three
cooperating passes and one merge:

  1. **Class pass**: explicit ``owl:Class`` declarations and
     ``rdfs:subClassOf`` links (superclasses become placeholders).
  2. **Property pass**: ``owl:ObjectProperty`` / ``owl:DatatypeProperty``
     declarations with their ``rdfs:domain`` and ``rdfs:range``.
  3. **Instance pass**: properties observed on ``owl:NamedIndividual``
     nodes, attributed to the individuals' classes, plus class-level
     assertions propagated to classes that have instances.
  4. **Merge**: everything is folded into one :class:`SchemaArena`
     keyed by IRI, so every referenced class exists exactly once.

The inference is deliberately shallow: one level of instance-driven
discovery, no reasoning over the class hierarchy.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from jsonld_graph.labels import resolve_label
from jsonld_graph.nodes import (
    EntityIndex,
    Literal,
    Reference,
    as_list,
    classify_value,
    get_types,
    predicates,
    validate_node_ids,
    validate_nodes,
)
from jsonld_graph.triples import TripleLike, coerce_triples, extract_triples
from jsonld_graph.vocab import (
    OWL_CLASS,
    OWL_DATATYPE_PROPERTY,
    OWL_NAMED_INDIVIDUAL,
    OWL_OBJECT_PROPERTY,
    PREDICATE_TO_DATATYPE,
    RDFS_DOMAIN,
    RDFS_RANGE,
    RDFS_SUBCLASS_OF,
    SCHEMA_CONTEXT,
    is_term,
    normalize_datatype,
)

logger = logging.getLogger(__name__)


def _is_class_type(type_iri: Any) -> bool:
    return is_term(type_iri, OWL_CLASS, "owl:Class")


def _is_individual_type(type_iri: Any) -> bool:
    return is_term(type_iri, OWL_NAMED_INDIVIDUAL, "owl:NamedIndividual")


class SchemaInferenceError(RuntimeError):
    """Raised when a schema inference pass fails on well-formed input."""


# ── Data Structures ────────────────────────────────────────────────


@dataclass
class PropertyDefinition:
    """An explicitly declared OWL property."""

    id: str
    types: list[str] = field(default_factory=list)
    domain: Optional[str] = None
    range: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "@id": self.id,
            "types": list(self.types),
            "domain": self.domain,
            "range": self.range,
        }


def _property_fields(prop: Any) -> tuple[Optional[str], Any, Any]:
    if isinstance(prop, PropertyDefinition):
        return prop.id, prop.domain, prop.range
    if isinstance(prop, Mapping):
        return prop.get("@id", prop.get("id")), prop.get("domain"), prop.get("range")
    raise TypeError(
        f"Property definitions must be PropertyDefinition or mapping, "
        f"got {type(prop).__name__}"
    )


def _dedup_key(value: Any) -> str:
    """Identity used to deduplicate schema values: ``@id`` or JSON form."""
    if isinstance(value, dict) and "@id" in value:
        return "@id:" + json.dumps(value["@id"], sort_keys=True, default=str)
    return json.dumps(value, sort_keys=True, default=str)


def _collapse(values: list[Any]) -> Any:
    return values[0] if len(values) == 1 else values


# ═══════════════════════════════════════════════════════════════════
# CLASS AND PROPERTY PASSES
# ═══════════════════════════════════════════════════════════════════


def get_class_map(triples: Sequence[TripleLike]) -> dict[str, dict[str, Any]]:
    """Build the class map from triples.

    Every subject typed ``owl:Class`` gets an entry.  Each
    ``rdfs:subClassOf`` triple records ``{"@id": superclass}`` on its
    subject and creates placeholder entries for subject and superclass
    when they were not declared.

    Raises:
        TypeError: If *triples* is not a list of triples with string parts.
    """
    checked = coerce_triples(triples)
    class_map: dict[str, dict[str, Any]] = {}

    for t in checked:
        if t.predicate == "@type" and _is_class_type(t.object):
            class_map.setdefault(t.subject, {"@id": t.subject, "@type": "owl:Class"})

    for t in checked:
        if not is_term(t.predicate, RDFS_SUBCLASS_OF, "rdfs:subClassOf"):
            continue
        entry = class_map.setdefault(t.subject, {"@id": t.subject, "@type": "owl:Class"})
        entry["rdfs:subClassOf"] = {"@id": t.object}
        class_map.setdefault(t.object, {"@id": t.object, "@type": "owl:Class"})

    logger.debug("Class map holds %d classes", len(class_map))
    return class_map


def get_properties(triples: Sequence[TripleLike]) -> dict[str, PropertyDefinition]:
    """Build the property map from triples.

    Subjects typed ``owl:ObjectProperty`` or ``owl:DatatypeProperty`` get
    one :class:`PropertyDefinition` each; ``types`` accumulates both kinds
    when a property is declared as both.  ``rdfs:domain``/``rdfs:range``
    triples of those subjects fill in domain and range.
    """
    checked = coerce_triples(triples)
    prop_map: dict[str, PropertyDefinition] = {}

    for t in checked:
        if t.predicate != "@type":
            continue
        if is_term(t.object, OWL_OBJECT_PROPERTY, "owl:ObjectProperty"):
            kind = OWL_OBJECT_PROPERTY
        elif is_term(t.object, OWL_DATATYPE_PROPERTY, "owl:DatatypeProperty"):
            kind = OWL_DATATYPE_PROPERTY
        else:
            continue
        prop = prop_map.setdefault(t.subject, PropertyDefinition(t.subject))
        if kind not in prop.types:
            prop.types.append(kind)

    for t in checked:
        prop = prop_map.get(t.subject)
        if prop is None:
            continue
        if is_term(t.predicate, RDFS_DOMAIN, "rdfs:domain"):
            prop.domain = t.object
        elif is_term(t.predicate, RDFS_RANGE, "rdfs:range"):
            prop.range = t.object

    logger.debug("Property map holds %d properties", len(prop_map))
    return prop_map


# ═══════════════════════════════════════════════════════════════════
# INSTANCE PASS
# ═══════════════════════════════════════════════════════════════════


class _ValueSet:
    """Insertion-ordered set of schema values."""

    def __init__(self) -> None:
        self._items: dict[str, Any] = {}

    def add(self, value: Any) -> None:
        self._items.setdefault(_dedup_key(value), value)

    def values(self) -> list[Any]:
        return list(self._items.values())


def _datatype_marker(datatype: str) -> dict[str, str]:
    return {"@id": datatype, "@type": OWL_DATATYPE_PROPERTY}


def infer_props_from_individuals(
    jsonld: Sequence[dict[str, Any]],
    *,
    predicate_datatypes: Optional[Mapping[str, str]] = None,
) -> dict[str, dict[str, Any]]:
    """Infer per-class properties from named individuals.

    For every ``owl:NamedIndividual``, each of its predicate values is
    attributed to each of its other types as one of:

    - a datatype marker ``{"@id": "xsd:...", "@type": owl:DatatypeProperty}``
      when the predicate is in *predicate_datatypes*;
    - ``{"@id": C}`` for every class ``C`` of a referenced individual;
    - a datatype marker from a literal's ``@type`` (``xsd:``/``rdf:`` only)
      or ``rdf:langString`` for language-tagged literals;
    - ``{"@id": v, "@type": owl:NamedIndividual}`` for a string that names
      no known individual;
    - the raw value otherwise.

    Predicates asserted on non-individual nodes (class-level assertions)
    are copied to the node's own entry when the node has instances.

    Returns:
        ``{class: {predicate: value_or_list}}``; a predicate with a single
        distinct value maps to that value, otherwise to a list.
    """
    validate_nodes(jsonld, "infer_props_from_individuals")
    datatypes = PREDICATE_TO_DATATYPE if predicate_datatypes is None else predicate_datatypes

    def non_individual_types(node: dict[str, Any]) -> list[str]:
        return [t for t in get_types(node) if not _is_individual_type(t)]

    def is_individual(node: dict[str, Any]) -> bool:
        return any(_is_individual_type(t) for t in get_types(node))

    # Step 1: individual -> classes and class -> instances
    individual_classes: dict[str, list[str]] = {}
    class_instances: dict[str, list[str]] = {}
    for node in jsonld:
        if not is_individual(node):
            continue
        classes = non_individual_types(node)
        individual_classes[node.get("@id")] = classes
        for cls in classes:
            instances = class_instances.setdefault(cls, [])
            if node.get("@id") not in instances:
                instances.append(node.get("@id"))

    # Step 2: class-level assertions on non-individual nodes
    class_predicates: dict[str, list[tuple[str, list[Any]]]] = {}
    for node in jsonld:
        if is_individual(node):
            continue
        props = list(predicates(node))
        if props:
            class_predicates[node.get("@id")] = props

    inferred: dict[str, dict[str, _ValueSet]] = {}

    def slot(cls: str, predicate: str) -> _ValueSet:
        return inferred.setdefault(cls, {}).setdefault(predicate, _ValueSet())

    def add_reference(target: _ValueSet, iri: Any) -> None:
        if isinstance(iri, str) and iri in individual_classes:
            for cls in individual_classes[iri]:
                target.add({"@id": cls})
        elif isinstance(iri, str):
            target.add({"@id": iri, "@type": OWL_NAMED_INDIVIDUAL})
        else:
            target.add(iri)

    # Step 3: properties observed on individuals
    for node in jsonld:
        if not is_individual(node):
            continue
        classes = non_individual_types(node)
        if not classes:
            continue
        for predicate, values in predicates(node):
            for cls in classes:
                target = slot(cls, predicate)
                for raw in values:
                    if raw is None:
                        continue
                    if predicate in datatypes:
                        target.add(_datatype_marker(datatypes[predicate]))
                        continue
                    value = classify_value(raw)
                    if isinstance(value, Reference):
                        add_reference(target, value.iri)
                    elif isinstance(value, Literal) and (
                        value.datatype is not None or value.language
                    ):
                        for dt in as_list(raw.get("@type")) or ["rdf:langString"]:
                            dt = normalize_datatype(dt)
                            if isinstance(dt, str) and dt.startswith(("xsd:", "rdf:")):
                                target.add(_datatype_marker(dt))
                    elif isinstance(value, Literal):
                        add_reference(target, value.value)
                    elif isinstance(value.value, str):
                        add_reference(target, value.value)
                    else:
                        target.add(value.value)

    # Step 4: propagate class-level assertions to classes with instances
    for cls, props in class_predicates.items():
        if not class_instances.get(cls):
            continue
        for predicate, values in props:
            target = slot(cls, predicate)
            for v in values:
                if isinstance(v, str) and v in class_instances:
                    for instance in class_instances[v]:
                        target.add({"@id": instance, "@type": OWL_NAMED_INDIVIDUAL})
                else:
                    target.add(v)

    # Step 5: sets to scalars / lists
    result: dict[str, dict[str, Any]] = {}
    for cls, props in inferred.items():
        result[cls] = {pred: _collapse(values.values()) for pred, values in props.items()}
        logger.debug("Inferred %d properties for class %s", len(result[cls]), cls)
    return result


# ═══════════════════════════════════════════════════════════════════
# MERGE
# ═══════════════════════════════════════════════════════════════════


class SchemaArena:
    """Single owner of every schema node, keyed by IRI.

    All placeholder creation goes through :meth:`ensure`, so a class that
    is referenced from several passes still ends up as one node.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, dict[str, Any]] = {}
        self._merged: dict[str, set[str]] = {}

    def __contains__(self, iri: object) -> bool:
        return iri in self._nodes

    def ensure(self, iri: Any, node_type: Any = "owl:Class") -> Optional[dict[str, Any]]:
        """Return the node for *iri*, creating ``{"@id", "@type"}`` if absent."""
        if not iri or not isinstance(iri, str):
            return None
        node = self._nodes.get(iri)
        if node is None:
            node = {"@id": iri, "@type": node_type}
            self._nodes[iri] = node
        return node

    def merge(self, iri: str, patch: Mapping[str, Any]) -> dict[str, Any]:
        """Ensure *iri* exists and overlay *patch* onto it."""
        node = self.ensure(iri)
        if node is None:
            raise TypeError(f"SchemaArena.merge: invalid class id {iri!r}")
        node.update(copy.deepcopy(dict(patch)))
        return node

    def merge_values(self, iri: str, predicate: str, incoming: Any) -> None:
        """Fold *incoming* into ``node[predicate]``, deduplicated.

        References deduplicate by ``@id``, other values by equality.  A
        single surviving value is stored as a scalar.
        """
        node = self.ensure(iri)
        if node is None:
            raise TypeError(f"SchemaArena.merge_values: invalid class id {iri!r}")
        items = _ValueSet()
        for value in as_list(node.get(predicate)) + as_list(incoming):
            items.add(value)
        node[predicate] = _collapse(items.values())
        self._merged.setdefault(iri, set()).add(predicate)

    def flatten(self, entity: Any) -> Any:
        """Lift a nested entity to a top-level node and return a reference."""
        if isinstance(entity, list):
            return [self.flatten(item) for item in entity]
        if not (isinstance(entity, dict) and entity.get("@id")):
            return entity
        iri = entity["@id"]
        top = self.ensure(iri, entity.get("@type") or "owl:NamedIndividual")
        for key, value in entity.items():
            if key in ("@id", "@type"):
                continue
            top[key] = self.flatten(value)
        return {"@id": iri}

    def dedup_unmerged_arrays(self) -> None:
        """Deduplicate list values the merge step did not already fold."""
        for iri, node in self._nodes.items():
            merged = self._merged.get(iri, set())
            for key, value in list(node.items()):
                if not isinstance(value, list) or key in merged:
                    continue
                unique = _ValueSet()
                for item in value:
                    if isinstance(item, dict) and item.get("@id"):
                        item = item["@id"]
                    unique.add(item)
                node[key] = [
                    {"@id": item} if isinstance(item, str) else item
                    for item in unique.values()
                ]

    def values(self) -> list[dict[str, Any]]:
        return list(self._nodes.values())


def merge_props_into_classes(
    class_map: Mapping[str, Mapping[str, Any]],
    prop_map: Mapping[str, Any],
    inferred_props: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> list[dict[str, Any]]:
    """Merge declared and inferred properties into the class definitions.

    1. Every class of *class_map* is copied into the arena.
    2. Every property with a domain sets ``domain[prop] = {"@id": range}``
       (``None`` without a range); domain and range become placeholder
       classes when undeclared.
    3. Inferred properties are flattened (nested entities become
       top-level nodes, the value keeps only ``{"@id"}``) and merged into
       their class with deduplication; one value collapses to a scalar.
    4. Remaining list values are deduplicated by id; they are not
       collapsed.

    Inputs are not mutated.

    Raises:
        TypeError: If any argument is not a mapping.
    """
    if inferred_props is None:
        inferred_props = {}
    for name, arg in (
        ("class_map", class_map),
        ("prop_map", prop_map),
        ("inferred_props", inferred_props),
    ):
        if not isinstance(arg, Mapping):
            raise TypeError(
                f"merge_props_into_classes: {name} must be a mapping, "
                f"got {type(arg).__name__}"
            )

    arena = SchemaArena()

    for class_id, class_def in class_map.items():
        if not isinstance(class_def, Mapping):
            raise TypeError(
                f"merge_props_into_classes: class {class_id!r} must be a mapping"
            )
        arena.ensure(class_id, "owl:Class")
        arena.merge(class_id, class_def)

    for prop in prop_map.values():
        prop_id, domain, range_ = _property_fields(prop)
        if not domain:
            continue
        domain_node = arena.ensure(domain, "owl:Class")
        if domain_node is None:
            continue
        if isinstance(range_, str) and range_:
            arena.ensure(range_, "owl:Class")
            domain_node[prop_id] = {"@id": range_}
        else:
            domain_node[prop_id] = None

    for class_id, props in inferred_props.items():
        if not isinstance(props, Mapping):
            raise TypeError(
                f"merge_props_into_classes: inferred properties of {class_id!r} "
                f"must be a mapping"
            )
        arena.ensure(class_id, "owl:Class")
        for prop_iri, value in props.items():
            arena.merge_values(class_id, prop_iri, arena.flatten(value))

    arena.dedup_unmerged_arrays()

    result = arena.values()
    logger.debug("Merged schema holds %d nodes", len(result))
    return result


# ═══════════════════════════════════════════════════════════════════
# PIPELINE
# ═══════════════════════════════════════════════════════════════════


def infer_jsonld_schema(
    jsonld: Sequence[dict[str, Any]],
    language: str = "en",
    *,
    predicate_datatypes: Optional[Mapping[str, str]] = None,
) -> list[dict[str, Any]]:
    """Infer the schema graph of a JSON-LD node array.

    Runs triple extraction, the class, property and instance passes and
    the merge, then attaches ``rdfs:label`` in *language* to every class.

    Raises:
        TypeError: If *jsonld* is not a list of node objects or a node has
            no string ``@id``.
        SchemaInferenceError: If a pass fails; the cause is chained.
    """
    validate_node_ids(jsonld, "infer_jsonld_schema")
    if language is not None and not isinstance(language, str):
        raise TypeError("infer_jsonld_schema: language must be a string")

    try:
        triples = extract_triples(jsonld)
        class_map = get_class_map(triples)
        prop_map = get_properties(triples)
        inferred = infer_props_from_individuals(
            jsonld, predicate_datatypes=predicate_datatypes,
        )
        schema = merge_props_into_classes(class_map, prop_map, inferred)

        index = EntityIndex(jsonld)
        labelled: list[dict[str, Any]] = []
        for cls in schema:
            label = resolve_label(index, cls["@id"], language)
            labelled.append({
                **cls,
                "rdfs:label": [{"@value": label, "@language": language}],
            })
    except Exception as exc:
        raise SchemaInferenceError(f"Schema inference failed: {exc}") from exc

    logger.info("Inferred schema with %d classes", len(labelled))
    return labelled


def to_schema_document(
    schema: Sequence[dict[str, Any]],
    context: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    """Wrap a schema graph in a JSON-LD document with the OWL prefixes."""
    return {
        "@context": dict(SCHEMA_CONTEXT if context is None else context),
        "@graph": list(schema),
    }


def infer_class_relations(
    jsonld: Sequence[dict[str, Any]],
    *,
    updated_only: bool = False,
) -> list[dict[str, Any]]:
    """Attach the classes of referenced individuals to ``owl:Class`` nodes.

    For each individual typed with a declared class ``C`` and each of its
    values referencing another individual ``I``, every non-individual
    type of ``I`` is appended to ``C[predicate]`` as ``{"@id": type}``
    unless already present.

    Returns:
        Copies of all declared classes, or only the updated ones (in the
        order they were first updated) when *updated_only* is set.
    """
    validate_nodes(jsonld, "infer_class_relations")

    classes: dict[str, dict[str, Any]] = {}
    individuals: dict[str, dict[str, Any]] = {}
    for node in jsonld:
        types = get_types(node)
        if any(_is_class_type(t) for t in types):
            classes[node.get("@id")] = copy.deepcopy(node)
        elif any(_is_individual_type(t) for t in types):
            individuals[node.get("@id")] = node

    updated: list[str] = []
    for individual in individuals.values():
        for type_id in get_types(individual):
            class_def = classes.get(type_id)
            if class_def is None:
                continue
            for predicate, values in predicates(individual):
                for raw in values:
                    value = classify_value(raw)
                    if not isinstance(value, Reference):
                        continue
                    referenced = individuals.get(value.iri)
                    if referenced is None:
                        continue
                    existing = as_list(class_def.get(predicate))
                    known = {v.get("@id") for v in existing if isinstance(v, dict)}
                    for resolved in get_types(referenced):
                        if _is_individual_type(resolved) or resolved in known:
                            continue
                        existing = existing + [{"@id": resolved}]
                        known.add(resolved)
                        if type_id not in updated:
                            updated.append(type_id)
                    if existing:
                        class_def[predicate] = existing

    if updated_only:
        return [classes[class_id] for class_id in updated]
    return list(classes.values())
