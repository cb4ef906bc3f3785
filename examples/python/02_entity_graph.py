"""
Example 02: Entity Graph
========================

Loads a compact JSON-LD document through PyLD and builds the bounded
entity graph around one person, ready for a force-directed renderer.
"""

import json
import logging

from jsonld_graph import GraphProcessor

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

document = {
    "@context": {
        "ex": "http://example.org/",
        "rdfs": "http://www.w3.org/2000/01/rdf-schema#",
        "name": "ex:name",
        "knows": {"@id": "ex:knows", "@type": "@id"},
        "label": {"@id": "rdfs:label", "@language": "en"},
    },
    "@graph": [
        {"@id": "ex:Person", "label": "Person"},
        {"@id": "ex:knows", "label": "knows"},
        {"@id": "ex:john", "@type": "ex:Person", "name": "John Doe", "knows": "ex:jane"},
        {"@id": "ex:jane", "@type": "ex:Person", "name": "Jane Smith", "knows": ["ex:john", "ex:max"]},
        {"@id": "ex:max", "@type": "ex:Person", "name": "Max Mustermann"},
    ],
}

processor = GraphProcessor({"max_depth": 1})

# ── 1. One hop around John ───────────────────────────────────────

print("=== 1. Depth 1 from ex:john ===\n")
result = processor.entity_graph(document, "http://example.org/john")
for node in result["nodes"]:
    print(f"  node {node['name']!r} types={node['type']}")
for link in result["links"]:
    print(f"  link {link['source']} -[{link['label']}]-> {link['target']}")

# ── 2. Whole graph ───────────────────────────────────────────────

print("\n=== 2. Full graph ===\n")
full = processor.entity_graph(document, max_depth=None)
print(json.dumps({"nodes": len(full["nodes"]), "links": len(full["links"])}))
