"""Tests for entity graph nodes, relation candidates and traversal."""

import logging
import math
from unittest.mock import patch

import pytest

from jsonld_graph.entity_graph import (
    EntityGraphError,
    GraphNode,
    TraversalState,
    construct_graph_node,
    derive_entity_relation_assertions,
    derive_representational_attributes,
    generate_entity_graph,
    normalize_max_depth,
    trace_entity_relations,
)
from jsonld_graph.links import GraphLink

RDFS_LABEL = "http://www.w3.org/2000/01/rdf-schema#label"
NI = "http://www.w3.org/2002/07/owl#NamedIndividual"
EX = "http://example.org/"


# ═══════════════════════════════════════════════════════════════════
# Fixtures
# ═══════════════════════════════════════════════════════════════════


@pytest.fixture
def john_and_jane():
    return [
        {"@id": EX + "Person", "label": {"@value": "Person", "@language": "en"}},
        {"@id": EX + "name", "label": {"@value": "Name", "@language": "en"}},
        {"@id": EX + "knows", "label": {"@value": "Knows", "@language": "en"}},
        {
            "@id": EX + "JohnDoe",
            "@type": [EX + "Person", EX + "NamedIndividual"],
            EX + "name": {"@value": "John Doe", "@language": "en"},
            EX + "knows": {"@id": EX + "JaneSmith"},
        },
        {
            "@id": EX + "JaneSmith",
            "@type": [EX + "Person"],
            EX + "name": {"@value": "Jane Smith", "@language": "en"},
            EX + "knows": {"@id": EX + "JohnDoe"},
        },
    ]


@pytest.fixture
def participation():
    bfo = "http://purl.obolibrary.org/obo/BFO_0000056"
    return [
        {"@id": "ex:Person", "@type": "rdfs:Class",
         "rdfs:label": [{"@value": "Person", "@language": "en"}]},
        {"@id": "ex:Agent", "@type": "rdfs:Class",
         "rdfs:label": [{"@value": "Agent", "@language": "en"}]},
        {"@id": "ex:NamedIndividual", "@type": "rdfs:Class",
         "rdfs:label": [{"@value": "Named Individual", "@language": "en"}]},
        {"@id": "ex:name", "rdfs:label": [{"@value": "Name", "@language": "en"}]},
        {"@id": "ex:knows", "rdfs:label": [{"@value": "Knows", "@language": "en"}]},
        {
            "@id": bfo,
            "@type": ["http://www.w3.org/2002/07/owl#ObjectProperty"],
            "http://www.w3.org/2000/01/rdf-schema#domain": [{"@id": "_:b0"}],
            RDFS_LABEL: [{"@value": "participates in", "@language": "en"}],
        },
        {
            "@id": "ex:person123",
            "@type": ["ex:Person", "ex:Agent", "ex:NamedIndividual"],
            "ex:name": {"@value": "Alice", "@language": "en"},
            bfo: {"@id": "ex:person456"},
        },
        {
            "@id": "ex:person456",
            "@type": ["ex:Person", "ex:NamedIndividual"],
            "ex:name": {"@value": "Bob", "@language": "en"},
        },
    ]


def _edges(links):
    return [(l.source, l.target, l.label) for l in links]


# ═══════════════════════════════════════════════════════════════════
# Nodes
# ═══════════════════════════════════════════════════════════════════


class TestRepresentationalAttributes:
    def test_iri_types_and_literals(self, john_and_jane):
        props = derive_representational_attributes(john_and_jane, EX + "JohnDoe")
        assert props == [
            {"property": "iri", "value": EX + "JohnDoe"},
            {"property": "type", "value": EX + "Person"},
            {"property": "type", "value": EX + "NamedIndividual"},
            {"property": "Name", "value": "John Doe", "language": "en"},
        ]

    def test_literal_without_language(self):
        graph = [{"@id": "ex:a", "ex:age": {"@value": 3}}]
        props = derive_representational_attributes(graph, "ex:a")
        assert props[-1] == {"property": "age", "value": 3}

    def test_missing_entity(self):
        with pytest.raises(ValueError):
            derive_representational_attributes([], "ex:a")

    def test_rejects_non_string_iri(self):
        with pytest.raises(TypeError):
            derive_representational_attributes([], 5)


class TestConstructGraphNode:
    def test_name_and_type_names(self):
        person = "http://example.org/classes#Person"
        a123 = "http://example.org/individuals#A123"
        graph = [
            {"@id": person, "rdfs:label": [{"@value": "Person", "@language": "en"}]},
            {"@id": a123, "@type": [person, NI]},
            {"@id": NI, "rdfs:label": [{"@value": "NamedIndividual", "@language": "en"}]},
        ]
        props = [
            {"property": "type", "value": NI},
            {"property": "type", "value": person},
        ]
        node = construct_graph_node(a123, props, graph)
        assert node == GraphNode(a123, "Person A123", ["NamedIndividual", "Person"], props)
        assert node.to_dict()["name"] == "Person A123"

    def test_rejects_bad_arguments(self):
        with pytest.raises(TypeError):
            construct_graph_node(1, [], [])
        with pytest.raises(TypeError):
            construct_graph_node("ex:a", {}, [])


# ═══════════════════════════════════════════════════════════════════
# Relation candidates
# ═══════════════════════════════════════════════════════════════════


class TestRelationAssertions:
    GRAPH = [
        {"@id": "ex:Person", "rdfs:label": [{"@value": "Person", "@language": "en"}]},
        {"@id": "ex:knows", "rdfs:label": [{"@value": "Knows", "@language": "en"}]},
        {"@id": "ex:person123", "@type": ["ex:Person"],
         "ex:name": {"@value": "Alice", "@language": "en"},
         "ex:knows": {"@id": "ex:person456"}},
        {"@id": "ex:person456", "@type": ["ex:Person"],
         "ex:name": {"@value": "Bob", "@language": "en"}},
    ]

    def test_outbound(self):
        links = derive_entity_relation_assertions(
            self.GRAPH, "ex:person123", self.GRAPH[2], "outbound",
        )
        assert links == [GraphLink("ex:person123", "ex:person456", "Knows")]

    def test_inbound(self):
        links = derive_entity_relation_assertions(self.GRAPH, "ex:person456", direction="inbound")
        assert links == [GraphLink("ex:person123", "ex:person456", "Knows")]

    def test_both_is_outbound_then_inbound(self):
        graph = self.GRAPH + [{"@id": "ex:person789", "ex:knows": {"@id": "ex:person123"}}]
        links = derive_entity_relation_assertions(graph, "ex:person123")
        assert _edges(links) == [
            ("ex:person123", "ex:person456", "Knows"),
            ("ex:person789", "ex:person123", "Knows"),
        ]

    def test_bad_direction(self):
        with pytest.raises(ValueError):
            derive_entity_relation_assertions(self.GRAPH, "ex:person123", direction="sideways")


# ═══════════════════════════════════════════════════════════════════
# Depth limits
# ═══════════════════════════════════════════════════════════════════


class TestNormalizeMaxDepth:
    @pytest.mark.parametrize("raw,expected", [
        (None, math.inf),
        (math.inf, math.inf),
        (0, 0),
        (3, 3),
        ("infinity", math.inf),
        ("Infinity", math.inf),
        ("2", 2),
        ("4 hops", 4),
        ("lots", math.inf),
    ])
    def test_accepted(self, raw, expected):
        assert normalize_max_depth(raw) == expected

    @pytest.mark.parametrize("raw", [-1, "-2", float("nan"), True, [1], {}])
    def test_rejected(self, raw):
        with pytest.raises(TypeError):
            normalize_max_depth(raw)


# ═══════════════════════════════════════════════════════════════════
# Traversal
# ═══════════════════════════════════════════════════════════════════


class TestTraceEntityRelations:
    def test_mutual_acquaintance(self, john_and_jane):
        state = trace_entity_relations(john_and_jane, EX + "JohnDoe", max_depth=1)
        assert list(state.nodes) == [EX + "JohnDoe", EX + "JaneSmith"]
        assert state.nodes[EX + "JohnDoe"].name == "Person JohnD"
        assert state.nodes[EX + "JaneSmith"].name == "Person JaneS"
        assert _edges(state.links) == [
            (EX + "JohnDoe", EX + "JaneSmith", "Knows"),
            (EX + "JaneSmith", EX + "JohnDoe", "Knows"),
            (EX + "JaneSmith", EX + "JaneSmith", "Knows"),
            (EX + "JohnDoe", EX + "JohnDoe", "Knows"),
        ]

    def test_without_inbound_markers(self, john_and_jane):
        state = trace_entity_relations(
            john_and_jane, EX + "JohnDoe", max_depth=1, mark_inbound=False,
        )
        assert _edges(state.links) == [
            (EX + "JohnDoe", EX + "JaneSmith", "Knows"),
            (EX + "JaneSmith", EX + "JohnDoe", "Knows"),
        ]

    def test_depth_zero_records_links_but_not_neighbours(self, john_and_jane):
        state = trace_entity_relations(john_and_jane, EX + "JohnDoe", max_depth=0)
        assert list(state.nodes) == [EX + "JohnDoe"]
        assert (EX + "JohnDoe", EX + "JaneSmith", "Knows") in _edges(state.links)

    def test_debug_info_per_depth(self, john_and_jane):
        state = trace_entity_relations(john_and_jane, EX + "JohnDoe", max_depth=1)
        assert state.debug_info[0] == {"nodes": 1, "links": 2}
        assert state.debug_info[1] == {"nodes": 1, "links": 2}

    def test_depth_bound(self):
        chain = [{"@id": f"ex:n{i}", "ex:next": {"@id": f"ex:n{i + 1}"}} for i in range(6)]
        state = trace_entity_relations(chain, "ex:n0", max_depth=2, mark_inbound=False)
        assert list(state.nodes) == ["ex:n0", "ex:n1", "ex:n2"]

    def test_long_chain_does_not_recurse(self):
        chain = [{"@id": f"ex:n{i}", "ex:next": {"@id": f"ex:n{i + 1}"}} for i in range(5000)]
        state = trace_entity_relations(chain, "ex:n0")
        assert len(state.nodes) == 5000

    def test_missing_reference_skipped(self, caplog):
        graph = [{"@id": "ex:a", "ex:p": {"@id": "ex:ghost"}}]
        with caplog.at_level(logging.WARNING, logger="jsonld_graph.entity_graph"):
            state = trace_entity_relations(graph, "ex:a")
        assert list(state.nodes) == ["ex:a"]
        assert _edges(state.links) == [("ex:a", "ex:ghost", "p")]
        assert "ex:ghost" in caplog.text

    def test_missing_start(self):
        state = trace_entity_relations([], "ex:a")
        assert state.nodes == {} and state.links == []

    def test_shared_state_accumulates(self, john_and_jane):
        state = TraversalState()
        trace_entity_relations(john_and_jane, EX + "JohnDoe", state, 0)
        trace_entity_relations(john_and_jane, EX + "JaneSmith", state, 0)
        assert set(state.nodes) == {EX + "JohnDoe", EX + "JaneSmith"}
        assert len(state.links) == len(set(state.links))

    @pytest.mark.parametrize("start", ["", "   ", None, 3])
    def test_rejects_bad_start(self, start):
        with pytest.raises(TypeError):
            trace_entity_relations([], start)

    def test_rejects_bad_state(self):
        with pytest.raises(TypeError):
            trace_entity_relations([], "ex:a", {"nodes": {}, "links": []})


class TestGenerateEntityGraph:
    def test_participation(self, participation):
        result = generate_entity_graph(participation, "ex:person123", 2)
        assert [n["id"] for n in result["nodes"]] == ["ex:person123", "ex:person456"]
        assert [n["name"] for n in result["nodes"]] == ["Person perso", "Person perso"]
        assert result["nodes"][0]["properties"] == [
            {"property": "iri", "value": "ex:person123"},
            {"property": "type", "value": "ex:Person"},
            {"property": "type", "value": "ex:Agent"},
            {"property": "type", "value": "ex:NamedIndividual"},
            {"property": "Name", "value": "Alice", "language": "en"},
        ]
        assert result["links"] == [
            {"source": "ex:person123", "target": "ex:person456", "label": "participates in"},
            {"source": "ex:person456", "target": "ex:person456", "label": "participates in"},
        ]

    def test_unknown_start_yields_empty_graph(self, participation, caplog):
        with caplog.at_level(logging.WARNING, logger="jsonld_graph.entity_graph"):
            result = generate_entity_graph(participation, "ex:nobody")
        assert result == {"nodes": [], "links": []}
        assert "ex:nobody" in caplog.text

    def test_full_graph_includes_isolated_nodes(self, john_and_jane):
        result = generate_entity_graph(john_and_jane)
        assert {n["id"] for n in result["nodes"]} == {
            EX + "Person", EX + "name", EX + "knows", EX + "JohnDoe", EX + "JaneSmith",
        }
        ids = {n["id"] for n in result["nodes"]}
        for link in result["links"]:
            assert link["source"] in ids and link["target"] in ids

    def test_links_to_unvisited_entities_dropped(self):
        chain = [{"@id": f"ex:n{i}", "ex:next": {"@id": f"ex:n{i + 1}"}} for i in range(4)]
        result = generate_entity_graph(chain, "ex:n0", 1, mark_inbound=False)
        assert [(l["source"], l["target"]) for l in result["links"]] == [("ex:n0", "ex:n1")]

    def test_string_depth(self, john_and_jane):
        result = generate_entity_graph(john_and_jane, EX + "JohnDoe", "infinity")
        assert len(result["nodes"]) == 2

    def test_argument_errors(self, john_and_jane):
        with pytest.raises(TypeError):
            generate_entity_graph({"@id": "ex:a"})
        with pytest.raises(TypeError):
            generate_entity_graph(john_and_jane, 42)
        with pytest.raises(TypeError):
            generate_entity_graph(john_and_jane, max_depth=-1)

    def test_unnameable_node_skipped(self, caplog):
        graph = [
            {"@id": "ex:a", "ex:p": {"@id": "ex:b"}},
            {"@id": "ex:b", "@type": "http://example.org/types/"},
        ]
        with caplog.at_level(logging.WARNING, logger="jsonld_graph.entity_graph"):
            result = generate_entity_graph(graph, "ex:a", mark_inbound=False)
        assert [n["id"] for n in result["nodes"]] == ["ex:a"]
        assert result["links"] == []
        assert "ex:b" in caplog.text

    def test_traversal_failure_wrapped(self):
        graph = [{"@id": "ex:a", "http://example.org/rel/": {"@id": "ex:b"}}]
        with pytest.raises(EntityGraphError, match="Graph traversal failed") as info:
            generate_entity_graph(graph, "ex:a")
        assert isinstance(info.value.__cause__, ValueError)

    def test_link_post_processing_failure_wrapped(self, john_and_jane):
        with patch(
            "jsonld_graph.entity_graph.restrict_links_to_existing_entities",
            side_effect=RuntimeError("boom"),
        ):
            with pytest.raises(EntityGraphError, match="Link post-processing failed") as info:
                generate_entity_graph(john_and_jane, EX + "JohnDoe")
        assert isinstance(info.value.__cause__, RuntimeError)
