"""
Entity Graph Tracer for jsonld-graph.

Builds the bounded ``{nodes, links}`` view of a JSON-LD node array that
graph renderers draw.  Starting from one entity, the tracer follows
outbound references and inbound references (found through the
:class:`~jsonld_graph.nodes.EntityIndex`) depth-first, up to
``max_depth`` hops.

Traversal uses an explicit stack of ``(id, depth, edges)`` frames rather
than recursion, so deep chains cannot exhaust the interpreter stack.
Edges are visited in the same order a recursive walk would visit them:
every newly discovered neighbour is explored before the next edge of
the current node.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

from jsonld_graph.labels import extract_local_name, resolve_entity_label
from jsonld_graph.links import (
    GraphLink,
    eliminate_redundant_link_assertions,
    restrict_links_to_existing_entities,
)
from jsonld_graph.nodes import (
    EntityIndex,
    Literal,
    Reference,
    as_index,
    classify_value,
    get_types,
    predicates,
)

logger = logging.getLogger(__name__)

_DIRECTIONS = ("outbound", "inbound", "both")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class EntityGraphError(RuntimeError):
    """Raised when entity graph generation fails."""


# ── Data Structures ────────────────────────────────────────────────


@dataclass
class GraphNode:
    """A renderable entity: display name, type names and attributes."""

    id: str
    name: str
    type: list[str] = field(default_factory=list)
    properties: list[dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": list(self.type),
            "properties": [dict(p) for p in self.properties],
        }


@dataclass
class TraversalState:
    """Accumulated result of one or more traversals.

    ``debug_info`` maps a depth to the number of nodes and links first
    recorded at that depth.
    """

    nodes: dict[str, GraphNode] = field(default_factory=dict)
    links: list[GraphLink] = field(default_factory=list)
    seen: set[str] = field(default_factory=set)
    debug_info: dict[int, dict[str, int]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes.values()],
            "links": [link.to_dict() for link in self.links],
        }


class _LabelCache:
    """Memoised :func:`resolve_entity_label` for one traversal."""

    def __init__(self, index: EntityIndex, language: Optional[str]):
        self._index = index
        self._language = language
        self._labels: dict[str, str] = {}

    def __call__(self, iri: str) -> str:
        label = self._labels.get(iri)
        if label is None:
            label = resolve_entity_label(self._index, iri, self._language)
            self._labels[iri] = label
        return label


# ═══════════════════════════════════════════════════════════════════
# NODES
# ═══════════════════════════════════════════════════════════════════


def derive_representational_attributes(
    graph: Union[EntityIndex, list[dict[str, Any]]],
    iri: str,
    language: Optional[str] = "en",
) -> list[dict[str, Any]]:
    """List the displayable attributes of an entity.

    The result starts with ``{"property": "iri"}`` and one
    ``{"property": "type"}`` entry per type (full IRIs), followed by one
    entry per ``@value`` literal, keyed by the predicate's label and
    carrying ``language`` when the literal has one.

    Raises:
        TypeError: If *iri* is not a string.
        ValueError: If no entity has ``@id`` *iri*.
    """
    index = as_index(graph)
    if not isinstance(iri, str):
        raise TypeError("derive_representational_attributes expects iri to be a string.")
    entity = index.get(iri)
    if entity is None:
        raise ValueError(f"Entity with IRI {iri!r} not found in the graph.")
    return _attributes(index, entity, _LabelCache(index, language))


def _attributes(
    index: EntityIndex, entity: dict[str, Any], label_for: _LabelCache
) -> list[dict[str, Any]]:
    props: list[dict[str, Any]] = [{"property": "iri", "value": entity["@id"]}]
    for type_iri in get_types(entity):
        props.append({"property": "type", "value": type_iri})

    for predicate, values in predicates(entity):
        label = None
        for raw in values:
            value = classify_value(raw)
            if not isinstance(value, Literal):
                continue
            if label is None:
                label = label_for(predicate)
            out: dict[str, Any] = {"property": label, "value": value.value}
            if value.language:
                out["language"] = value.language
            props.append(out)
    return props


def construct_graph_node(
    node_id: str,
    properties: list[dict[str, Any]],
    graph: Union[EntityIndex, list[dict[str, Any]]],
    language: Optional[str] = "en",
) -> GraphNode:
    """Build a :class:`GraphNode` from an id and its attribute list.

    ``name`` is the entity label; ``type`` holds the local names of the
    ``type`` attributes.
    """
    if not isinstance(node_id, str):
        raise TypeError("construct_graph_node expects id to be a string.")
    if not isinstance(properties, list):
        raise TypeError("construct_graph_node expects properties to be a list.")
    index = as_index(graph)
    return _build_node(index, node_id, properties, _LabelCache(index, language))


def _build_node(
    index: EntityIndex,
    node_id: str,
    properties: list[dict[str, Any]],
    label_for: _LabelCache,
) -> GraphNode:
    types = []
    for prop in properties:
        if prop.get("property") != "type":
            continue
        value = prop.get("value")
        types.append(extract_local_name(value) or value)
    return GraphNode(node_id, label_for(node_id), types, properties)


# ═══════════════════════════════════════════════════════════════════
# EDGES
# ═══════════════════════════════════════════════════════════════════


def _candidate_links(
    index: EntityIndex,
    node_id: str,
    entity: Optional[dict[str, Any]],
    direction: str,
    label_for: _LabelCache,
    mark_inbound: bool = False,
) -> Iterator[GraphLink]:
    if entity is not None and direction in ("outbound", "both"):
        for predicate, values in predicates(entity):
            for raw in values:
                value = classify_value(raw)
                if isinstance(value, Reference) and isinstance(value.iri, str):
                    yield GraphLink(node_id, value.iri, label_for(predicate))

    if direction in ("inbound", "both"):
        for source_id, predicate in index.referrers(node_id):
            label = label_for(predicate)
            yield GraphLink(source_id, node_id, label)
            if mark_inbound:
                yield GraphLink(node_id, node_id, label)


def derive_entity_relation_assertions(
    graph: Union[EntityIndex, list[dict[str, Any]]],
    node_id: str,
    entity: Optional[dict[str, Any]] = None,
    direction: str = "both",
    language: Optional[str] = "en",
) -> list[GraphLink]:
    """List the links touching *node_id*, outbound first, then inbound.

    Each outbound reference ``node_id -p-> t`` and each inbound reference
    ``s -p-> node_id`` yields one link labelled with the entity label of
    ``p``.  *entity* defaults to the node found under *node_id*.

    Raises:
        ValueError: If *direction* is not ``outbound``, ``inbound`` or
            ``both``.
    """
    if direction not in _DIRECTIONS:
        raise ValueError(
            f"direction must be one of {', '.join(_DIRECTIONS)}; got {direction!r}"
        )
    index = as_index(graph)
    if entity is None:
        entity = index.get(node_id)
    return list(
        _candidate_links(index, node_id, entity, direction, _LabelCache(index, language))
    )


# ═══════════════════════════════════════════════════════════════════
# TRAVERSAL
# ═══════════════════════════════════════════════════════════════════


def normalize_max_depth(max_depth: Any) -> Union[int, float]:
    """Coerce a depth limit to a non-negative int or ``math.inf``.

    ``None`` and ``"infinity"`` mean unbounded; strings are read by their
    leading integer and are unbounded when they have none.

    Raises:
        TypeError: If the limit is negative, NaN or not a number/string.
    """
    if max_depth is None:
        return math.inf
    if isinstance(max_depth, str):
        if max_depth.strip().lower() == "infinity":
            return math.inf
        match = _LEADING_INT.match(max_depth)
        if match is None:
            return math.inf
        max_depth = int(match.group(1))
    if isinstance(max_depth, bool) or not isinstance(max_depth, (int, float)):
        raise TypeError(
            f"max_depth must be a non-negative number or 'infinity', "
            f"got {type(max_depth).__name__}"
        )
    if math.isnan(max_depth) or max_depth < 0:
        raise TypeError(f"max_depth must be a non-negative number, got {max_depth!r}")
    return max_depth


def trace_entity_relations(
    graph: Union[EntityIndex, list[dict[str, Any]]],
    start_id: str,
    state: Optional[TraversalState] = None,
    max_depth: Any = None,
    *,
    language: Optional[str] = "en",
    mark_inbound: bool = True,
) -> TraversalState:
    """Trace the entities reachable from *start_id* within *max_depth* hops.

    Each visited entity becomes a :class:`GraphNode` once.  Its outbound
    and inbound references become links; a link that is already in the
    state is skipped, otherwise it is recorded and its far end is visited
    next when that entity exists, is unseen, and is within the depth
    limit.  Links to entities beyond the limit are still recorded.

    With *mark_inbound*, every inbound reference of a visited entity also
    records a ``(id, id, label)`` loop so renderers can mark entities that
    are referenced from elsewhere.

    Pass an existing *state* to accumulate several traversals.

    Raises:
        TypeError: On a bad *start_id*, *state* or *max_depth*.
    """
    if not isinstance(start_id, str) or not start_id.strip():
        raise TypeError(f"start_id must be a non-empty string, got {start_id!r}")
    if state is None:
        state = TraversalState()
    elif not isinstance(state, TraversalState):
        raise TypeError(
            f"state must be a TraversalState, got {type(state).__name__}"
        )
    limit = normalize_max_depth(max_depth)
    index = as_index(graph)
    label_for = _LabelCache(index, language)
    recorded = set(state.links)

    def visit(node_id: str, depth: int):
        stats = state.debug_info.setdefault(depth, {"nodes": 0, "links": 0})
        if node_id in state.seen:
            return None
        entity = index.get(node_id)
        if entity is None:
            logger.warning("No entity found for id %s; skipping", node_id)
            return None
        state.seen.add(node_id)
        if node_id not in state.nodes:
            try:
                props = _attributes(index, entity, label_for)
                state.nodes[node_id] = _build_node(index, node_id, props, label_for)
                stats["nodes"] += 1
            except ValueError as exc:
                logger.warning("Failed to build node for %s: %s", node_id, exc)
        logger.debug("Visiting %s at depth %d", node_id, depth)
        edges = _candidate_links(index, node_id, entity, "both", label_for, mark_inbound)
        return node_id, depth, edges

    stack = []
    root = visit(start_id, 0)
    if root is not None:
        stack.append(root)

    while stack:
        node_id, depth, edges = stack[-1]
        link = next(edges, None)
        if link is None:
            stack.pop()
            continue
        if link in recorded:
            continue
        recorded.add(link)
        state.links.append(link)
        state.debug_info[depth]["links"] += 1

        if depth + 1 > limit:
            continue
        far_end = link.target if link.source == node_id else link.source
        frame = visit(far_end, depth + 1)
        if frame is not None:
            stack.append(frame)

    return state


def generate_entity_graph(
    graph: Union[EntityIndex, list[dict[str, Any]]],
    start_id: Optional[str] = None,
    max_depth: Any = None,
    *,
    language: Optional[str] = "en",
    mark_inbound: bool = True,
) -> dict[str, list[dict[str, Any]]]:
    """Generate the ``{"nodes": [...], "links": [...]}`` entity graph.

    With *start_id*, traces from that entity; an unknown id yields an
    empty graph.  Without it, every entity is traced as a root into one
    shared state and entities left without links are added as isolated
    nodes.  Links are then deduplicated and restricted to the recorded
    nodes.

    Raises:
        TypeError: On a bad *graph*, *start_id* or *max_depth*.
        EntityGraphError: If traversal or link post-processing fails; the
            cause is chained.
    """
    index = as_index(graph)
    limit = normalize_max_depth(max_depth)
    if start_id is not None and not isinstance(start_id, str):
        raise TypeError(
            f"start_id must be a string or None, got {type(start_id).__name__}"
        )

    state = TraversalState()
    try:
        if start_id:
            if start_id not in index:
                logger.warning("Target node %s not found", start_id)
                return {"nodes": [], "links": []}
            trace_entity_relations(
                index, start_id, state, limit,
                language=language, mark_inbound=mark_inbound,
            )
        else:
            for node_id in index.ids():
                trace_entity_relations(
                    index, node_id, state, limit,
                    language=language, mark_inbound=mark_inbound,
                )
            label_for = _LabelCache(index, language)
            for node_id in index.ids():
                if node_id in state.nodes:
                    continue
                try:
                    props = _attributes(index, index.get(node_id), label_for)
                    state.nodes[node_id] = _build_node(index, node_id, props, label_for)
                except ValueError as exc:
                    logger.warning("Skipped isolated node %s: %s", node_id, exc)
    except Exception as exc:
        raise EntityGraphError(f"Graph traversal failed: {exc}") from exc

    try:
        unique = eliminate_redundant_link_assertions(state.links)
        links = restrict_links_to_existing_entities(unique, state.nodes)
    except Exception as exc:
        raise EntityGraphError(f"Link post-processing failed: {exc}") from exc

    logger.info(
        "Entity graph generated: %d nodes, %d links", len(state.nodes), len(links)
    )
    return {
        "nodes": [node.to_dict() for node in state.nodes.values()],
        "links": [link.to_dict() for link in links],
    }
