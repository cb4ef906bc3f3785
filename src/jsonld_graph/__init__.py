"""
jsonld-graph: Ontology Schema Inference and Entity Graphs for JSON-LD

Infers an OWL class schema from a JSON-LD node array and builds the
bounded entity-relationship graph that graph renderers draw.
Wraps PyLD for loading arbitrary JSON-LD documents.
"""

__version__ = "0.3.0"

from jsonld_graph.processor import GraphProcessor, DEFAULT_GRAPH_OPTIONS
from jsonld_graph.nodes import (
    Reference,
    Literal,
    Primitive,
    classify_value,
    EntityIndex,
)
from jsonld_graph.triples import Triple, extract_triples, create_triple
from jsonld_graph.labels import (
    extract_local_name,
    extract_local_names,
    get_formal_label,
    get_literal_label,
    get_label_from_named_individual,
    resolve_label,
    resolve_entity_label,
)
from jsonld_graph.schema import (
    PropertyDefinition,
    SchemaArena,
    SchemaInferenceError,
    get_class_map,
    get_properties,
    infer_props_from_individuals,
    merge_props_into_classes,
    infer_jsonld_schema,
    to_schema_document,
    infer_class_relations,
)
from jsonld_graph.links import (
    GraphLink,
    link_assertions_equivalent,
    eliminate_redundant_link_assertions,
    restrict_links_to_existing_entities,
)
from jsonld_graph.entity_graph import (
    GraphNode,
    TraversalState,
    EntityGraphError,
    derive_representational_attributes,
    construct_graph_node,
    derive_entity_relation_assertions,
    normalize_max_depth,
    trace_entity_relations,
    generate_entity_graph,
)

__all__ = [
    "GraphProcessor",
    "DEFAULT_GRAPH_OPTIONS",
    # Node model
    "Reference",
    "Literal",
    "Primitive",
    "classify_value",
    "EntityIndex",
    # Triples
    "Triple",
    "extract_triples",
    "create_triple",
    # Labels
    "extract_local_name",
    "extract_local_names",
    "get_formal_label",
    "get_literal_label",
    "get_label_from_named_individual",
    "resolve_label",
    "resolve_entity_label",
    # Schema
    "PropertyDefinition",
    "SchemaArena",
    "SchemaInferenceError",
    "get_class_map",
    "get_properties",
    "infer_props_from_individuals",
    "merge_props_into_classes",
    "infer_jsonld_schema",
    "to_schema_document",
    "infer_class_relations",
    # Links
    "GraphLink",
    "link_assertions_equivalent",
    "eliminate_redundant_link_assertions",
    "restrict_links_to_existing_entities",
    # Entity graph
    "GraphNode",
    "TraversalState",
    "EntityGraphError",
    "derive_representational_attributes",
    "construct_graph_node",
    "derive_entity_relation_assertions",
    "normalize_max_depth",
    "trace_entity_relations",
    "generate_entity_graph",
]
