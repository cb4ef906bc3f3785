"""
Benchmark: Entity Graph Traversal

Measures traversal throughput on the two shapes that stress it most:

  T1: Deep chains (one long path, unbounded depth)
  T2: Dense cycles (every node references every other node)
  T3: Schema inference over many individuals

Each case reports the mean and minimum of 10 timed trials after 2 warmups.
"""

from __future__ import annotations

import json
import time
from typing import Any, Callable

from jsonld_graph import generate_entity_graph, infer_jsonld_schema

NI = "http://www.w3.org/2002/07/owl#NamedIndividual"

TRIALS = 10
WARMUP = 2


def _timed(fn: Callable[[], Any]) -> dict[str, float]:
    for _ in range(WARMUP):
        fn()
    times = []
    for _ in range(TRIALS):
        start = time.perf_counter()
        fn()
        times.append(time.perf_counter() - start)
    return {
        "mean_ms": round(sum(times) / len(times) * 1000, 3),
        "min_ms": round(min(times) * 1000, 3),
    }


def chain(n: int) -> list[dict[str, Any]]:
    return [{"@id": f"ex:n{i}", "ex:next": {"@id": f"ex:n{i + 1}"}} for i in range(n)]


def clique(n: int) -> list[dict[str, Any]]:
    ids = [f"ex:c{i}" for i in range(n)]
    return [
        {"@id": i, "ex:knows": [{"@id": j} for j in ids if j != i]}
        for i in ids
    ]


def population(n: int) -> list[dict[str, Any]]:
    nodes = [{"@id": f"ex:org{i}", "@type": [NI, "ex:Organization"]} for i in range(10)]
    nodes += [
        {"@id": f"ex:p{i}", "@type": [NI, "ex:Person"],
         "ex:worksFor": {"@id": f"ex:org{i % 10}"},
         "ex:age": {"@value": str(20 + i % 40), "@type": "xsd:integer"}}
        for i in range(n)
    ]
    return nodes


def run() -> dict[str, Any]:
    results: dict[str, Any] = {}
    for n in (100, 1000, 5000):
        graph = chain(n)
        results[f"T1_chain_{n}"] = _timed(lambda: generate_entity_graph(graph, "ex:n0"))
    for n in (10, 30, 60):
        graph = clique(n)
        results[f"T2_clique_{n}"] = _timed(lambda: generate_entity_graph(graph, "ex:c0"))
    for n in (100, 1000):
        graph = population(n)
        results[f"T3_schema_{n}"] = _timed(lambda: infer_jsonld_schema(graph))
    return results


if __name__ == "__main__":
    print(json.dumps(run(), indent=2))
