"""Tests for link equivalence, deduplication and referential filtering."""

import pytest

from jsonld_graph.links import (
    GraphLink,
    eliminate_redundant_link_assertions,
    link_assertions_equivalent,
    restrict_links_to_existing_entities,
)


class TestLinkEquivalence:
    def test_equal_links(self):
        assert link_assertions_equivalent(
            {"source": "A", "target": "B", "label": "relatedTo"},
            {"source": "A", "target": "B", "label": "relatedTo"},
        )

    def test_label_matters(self):
        assert not link_assertions_equivalent(
            GraphLink("A", "B", "r"), GraphLink("A", "B", "s"),
        )

    def test_record_and_mapping_compare(self):
        assert link_assertions_equivalent(
            GraphLink("A", "B", "r"), {"source": "A", "target": "B", "label": "r"},
        )

    def test_missing_key(self):
        with pytest.raises(TypeError, match="label"):
            link_assertions_equivalent({"source": "A", "target": "B"}, GraphLink("A", "B", "r"))

    def test_non_link(self):
        with pytest.raises(TypeError):
            link_assertions_equivalent(None, GraphLink("A", "B", "r"))


class TestEliminateRedundantLinks:
    def test_first_occurrence_kept(self):
        links = [
            {"source": "A", "target": "B", "label": "r"},
            {"source": "A", "target": "B", "label": "r"},
            {"source": "B", "target": "C", "label": "l"},
        ]
        result = eliminate_redundant_link_assertions(links)
        assert result == [
            {"source": "A", "target": "B", "label": "r"},
            {"source": "B", "target": "C", "label": "l"},
        ]
        assert result[0] is links[0]

    def test_empty(self):
        assert eliminate_redundant_link_assertions([]) == []

    def test_rejects_non_list(self):
        with pytest.raises(TypeError):
            eliminate_redundant_link_assertions(GraphLink("A", "B", "r"))


class TestRestrictLinks:
    LINKS = [
        {"source": "Food", "target": "_g_L25C1292", "label": "is_part_of"},
        {"source": "Cheese", "target": "Pizza", "label": "subClassOf"},
        {"source": "Chicken_Fingers", "target": "Food", "label": "subClassOf"},
    ]
    EXPECTED = [
        {"source": "Cheese", "target": "Pizza", "label": "subClassOf"},
        {"source": "Chicken_Fingers", "target": "Food", "label": "subClassOf"},
    ]

    def test_mapping_keys(self):
        ids = {"Food": {}, "Pizza": {}, "Cheese": {}, "Chicken_Fingers": {}}
        assert restrict_links_to_existing_entities(self.LINKS, ids) == self.EXPECTED

    @pytest.mark.parametrize("ids", [
        {"Food", "Pizza", "Cheese", "Chicken_Fingers"},
        ["Food", "Pizza", "Cheese", "Chicken_Fingers"],
        ("Food", "Pizza", "Cheese", "Chicken_Fingers"),
    ])
    def test_collections(self, ids):
        assert restrict_links_to_existing_entities(self.LINKS, ids) == self.EXPECTED

    def test_rejects_bad_ids(self):
        with pytest.raises(TypeError):
            restrict_links_to_existing_entities(self.LINKS, "Food")

    def test_rejects_bad_links(self):
        with pytest.raises(TypeError):
            restrict_links_to_existing_entities("links", set())
