"""
Example 01: Schema Inference
============================

Infers an OWL class schema from a small set of declarations and named
individuals, then wraps it as a JSON-LD document.

Use case: A catalogue team has individuals but only a partial ontology and
wants to see which classes and properties the data actually implies.
"""

import json

from jsonld_graph import GraphProcessor

OWL = "http://www.w3.org/2002/07/owl#"
RDFS = "http://www.w3.org/2000/01/rdf-schema#"
NI = OWL + "NamedIndividual"

processor = GraphProcessor()

graph = [
    {"@id": "ex:Person", "@type": OWL + "Class",
     RDFS + "label": [{"@value": "Person", "@language": "en"}]},
    {"@id": "ex:Employee", "@type": OWL + "Class",
     RDFS + "subClassOf": {"@id": "ex:Person"}},
    {"@id": "ex:worksFor", "@type": OWL + "ObjectProperty",
     RDFS + "domain": "ex:Employee", RDFS + "range": "ex:Organization"},
    {"@id": "ex:alice", "@type": [NI, "ex:Employee"],
     "ex:worksFor": {"@id": "ex:acme"},
     "ex:nickname": {"@value": "Al", "@language": "en"},
     "ex:startYear": {"@value": "2019", "@type": "http://www.w3.org/2001/XMLSchema#gYear"}},
    {"@id": "ex:acme", "@type": [NI, "ex:Organization"]},
]

# ── 1. The individual passes ─────────────────────────────────────

print("=== 1. Triples ===\n")
for triple in processor.extract_triples(graph):
    print(f"  {triple.subject} {triple.predicate} {triple.object}")

print("\n=== 2. Properties observed on individuals ===\n")
for cls, props in processor.infer_props_from_individuals(graph).items():
    print(f"  {cls}")
    for pred, value in props.items():
        print(f"    {pred}: {value}")

# ── 2. The merged schema ─────────────────────────────────────────

print("\n=== 3. Schema document ===\n")
print(json.dumps(processor.schema_document(graph), indent=2))
