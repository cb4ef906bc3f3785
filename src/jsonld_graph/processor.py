"""
GraphProcessor: JSON-LD schema and entity graph front end.

Loads JSON-LD documents through PyLD and runs the schema inference and
entity graph passes with processor-wide defaults.
"""

from __future__ import annotations
from typing import Any, Optional

from pyld import jsonld

from jsonld_graph.nodes import validate_nodes
from jsonld_graph.triples import extract_triples, create_triple
from jsonld_graph.labels import (
    extract_local_name, extract_local_names, get_formal_label,
    get_literal_label, get_label_from_named_individual, resolve_label,
    resolve_entity_label,
)
from jsonld_graph.schema import (
    get_class_map, get_properties, infer_props_from_individuals,
    merge_props_into_classes, infer_jsonld_schema, to_schema_document,
    infer_class_relations,
)
from jsonld_graph.links import (
    link_assertions_equivalent, eliminate_redundant_link_assertions,
    restrict_links_to_existing_entities,
)
from jsonld_graph.entity_graph import (
    derive_representational_attributes, construct_graph_node,
    derive_entity_relation_assertions, trace_entity_relations,
    generate_entity_graph,
)
from jsonld_graph.vocab import PREDICATE_TO_DATATYPE

DEFAULT_GRAPH_OPTIONS: dict[str, Any] = {
    "language": "en",
    "max_depth": None,
    "mark_inbound": True,
    "predicate_datatypes": PREDICATE_TO_DATATYPE,
}

_DEFAULT = object()


class GraphProcessor:
    """Schema and entity graph processor over JSON-LD documents."""

    def __init__(self, options: Optional[dict[str, Any]] = None):
        self._options = {**DEFAULT_GRAPH_OPTIONS, **(options or {})}

    @property
    def options(self) -> dict[str, Any]:
        return dict(self._options)

    # ── Loading ──────────────────────────────────────────────────

    def load(self, document: Any, **kwargs: Any) -> list[dict[str, Any]]:
        """Return the node array of *document*.

        A node array passes through unchanged and a bare ``{"@graph": [...]}``
        wrapper is unwrapped.  Any other document (a ``@context``, nested
        nodes) is flattened with PyLD into expanded node objects.
        """
        if isinstance(document, list):
            validate_nodes(document, "GraphProcessor.load")
            return document
        if not isinstance(document, dict):
            raise TypeError(
                f"GraphProcessor.load expects a JSON-LD document or node list, "
                f"got {type(document).__name__}"
            )
        if set(document) == {"@graph"} and isinstance(document["@graph"], list):
            validate_nodes(document["@graph"], "GraphProcessor.load")
            return document["@graph"]

        flattened = jsonld.flatten(document, None, kwargs)
        if isinstance(flattened, dict):
            flattened = flattened.get("@graph", [])
        return flattened

    # ── Schema ───────────────────────────────────────────────────

    def infer_schema(
        self, document: Any, language: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Infer the OWL class schema of *document*."""
        return infer_jsonld_schema(
            self.load(document),
            language or self._options["language"],
            predicate_datatypes=self._options["predicate_datatypes"],
        )

    def schema_document(
        self,
        document: Any,
        language: Optional[str] = None,
        context: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        """Infer the schema of *document* and wrap it as a JSON-LD document."""
        return to_schema_document(self.infer_schema(document, language), context)

    # ── Entity Graph ─────────────────────────────────────────────

    def entity_graph(
        self,
        document: Any,
        start_id: Optional[str] = None,
        max_depth: Any = _DEFAULT,
    ) -> dict[str, list[dict[str, Any]]]:
        """Generate the ``{nodes, links}`` entity graph of *document*."""
        if max_depth is _DEFAULT:
            max_depth = self._options["max_depth"]
        return generate_entity_graph(
            self.load(document),
            start_id,
            max_depth,
            language=self._options["language"],
            mark_inbound=self._options["mark_inbound"],
        )

    # ── Triples and Labels ───────────────────────────────────────

    extract_triples = staticmethod(extract_triples)
    create_triple = staticmethod(create_triple)
    extract_local_name = staticmethod(extract_local_name)
    extract_local_names = staticmethod(extract_local_names)
    get_formal_label = staticmethod(get_formal_label)
    get_literal_label = staticmethod(get_literal_label)
    get_label_from_named_individual = staticmethod(get_label_from_named_individual)
    resolve_label = staticmethod(resolve_label)
    resolve_entity_label = staticmethod(resolve_entity_label)

    # ── Schema Passes ────────────────────────────────────────────

    get_class_map = staticmethod(get_class_map)
    get_properties = staticmethod(get_properties)
    infer_props_from_individuals = staticmethod(infer_props_from_individuals)
    merge_props_into_classes = staticmethod(merge_props_into_classes)
    infer_class_relations = staticmethod(infer_class_relations)

    # ── Graph Passes ─────────────────────────────────────────────

    derive_representational_attributes = staticmethod(derive_representational_attributes)
    construct_graph_node = staticmethod(construct_graph_node)
    derive_entity_relation_assertions = staticmethod(derive_entity_relation_assertions)
    trace_entity_relations = staticmethod(trace_entity_relations)
    link_assertions_equivalent = staticmethod(link_assertions_equivalent)
    eliminate_redundant_link_assertions = staticmethod(eliminate_redundant_link_assertions)
    restrict_links_to_existing_entities = staticmethod(restrict_links_to_existing_entities)
