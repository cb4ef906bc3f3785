"""
Link post-processing for entity graphs.

A link is a ``(source, target, label)`` edge.  The functions here accept
:class:`GraphLink` records or plain mappings with those three keys, and
always return the very objects they were given.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence, Union


@dataclass(frozen=True)
class GraphLink:
    """A labelled, directed edge between two entity ids."""

    source: str
    target: str
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"source": self.source, "target": self.target, "label": self.label}


LinkLike = Union[GraphLink, Mapping[str, Any]]

_LINK_KEYS = ("source", "target", "label")


def _link_key(link: Any, position: str = "Link") -> tuple[Any, Any, Any]:
    if isinstance(link, GraphLink):
        return link.source, link.target, link.label
    if not isinstance(link, Mapping):
        raise TypeError(
            f"{position} must be a GraphLink or mapping, got {type(link).__name__}"
        )
    for key in _LINK_KEYS:
        if key not in link:
            raise TypeError(f"{position} is missing key {key!r}")
    return link["source"], link["target"], link["label"]


def link_assertions_equivalent(a: LinkLike, b: LinkLike) -> bool:
    """True when both links have equal source, target and label."""
    return _link_key(a, "First link") == _link_key(b, "Second link")


def eliminate_redundant_link_assertions(links: Sequence[LinkLike]) -> list[LinkLike]:
    """Drop equivalent links, keeping the first occurrence in order."""
    if not isinstance(links, (list, tuple)):
        raise TypeError(
            "eliminate_redundant_link_assertions expects a list of links, "
            f"got {type(links).__name__}"
        )
    seen: set[tuple[Any, Any, Any]] = set()
    unique: list[LinkLike] = []
    for i, link in enumerate(links):
        key = _link_key(link, f"Link at index {i}")
        if key in seen:
            continue
        seen.add(key)
        unique.append(link)
    return unique


def _id_set(valid_ids: Any) -> set[Any]:
    if isinstance(valid_ids, (set, frozenset)):
        return set(valid_ids)
    if isinstance(valid_ids, (list, tuple)):
        return set(valid_ids)
    if isinstance(valid_ids, Mapping):
        return set(valid_ids.keys())
    raise TypeError(
        "restrict_links_to_existing_entities: valid_ids must be a set, "
        f"list or mapping, got {type(valid_ids).__name__}"
    )


def restrict_links_to_existing_entities(
    links: Sequence[LinkLike],
    valid_ids: Union[Iterable[str], Mapping[str, Any]],
) -> list[LinkLike]:
    """Keep only links whose source and target are both in *valid_ids*.

    *valid_ids* may be a set, a list/tuple, or a mapping whose keys are
    the ids.
    """
    if not isinstance(links, (list, tuple)):
        raise TypeError(
            "restrict_links_to_existing_entities: links must be a list, "
            f"got {type(links).__name__}"
        )
    ids = _id_set(valid_ids)
    kept: list[LinkLike] = []
    for i, link in enumerate(links):
        source, target, _ = _link_key(link, f"Link at index {i}")
        if source in ids and target in ids:
            kept.append(link)
    return kept
