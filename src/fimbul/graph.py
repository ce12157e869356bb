# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Graph - synchronous dependency resolution.

Nodes are plain functions fn(params, deps) -> value. Resolution is
depth-first: a node's dependencies are resolved (in declaration order)
before the node itself, and every computed value is stored in the results
mapping so a shared dependency runs once per call.

Example:
    worldgen = Graph(name="worldgen")
    worldgen.define("height", lambda p, _: p["x"] + p["y"])
    worldgen.define("temperature", lambda p, d: p["y"] - d["height"], ["height"])

    results = {}
    worldgen.get("temperature", {"x": 1, "y": 5}, results)  # -1
    results["height"]                                       # 6
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, MutableMapping
from typing import Any

from .base import GraphBase
from .config import GraphConfig

logger = logging.getLogger(__name__)

__all__ = ("Graph", "create_graph")

Results = MutableMapping[Hashable, Any]


class Graph(GraphBase):
    """Synchronous computation graph.

    Single-threaded and run-to-completion: get()/get_many() block until the
    requested values (and their dependencies) are computed.
    """

    def get(self, node_id: Hashable, params: Any, results: Results | None = None) -> Any:
        """Compute (or fetch from results) the value of one node.

        Args:
            node_id: Node to compute.
            params: Passed unchanged to every node function.
            results: Values already known. Mutated in place with every
                value computed during this call.

        Returns:
            The node's value.

        Raises:
            NodeNotFoundError: If node_id is neither in results nor defined.
            Exception: Whatever a node function raises, unchanged.
        """
        if results is None:
            results = {}
        self._check_requested((node_id,), results)
        return self._resolve(node_id, params, results)

    def get_many(
        self,
        node_ids: Iterable[Hashable],
        params: Any,
        results: Results | None = None,
    ) -> Results:
        """Compute several nodes in order against one shared results mapping.

        Later ids see values cached by earlier ones.

        Returns:
            The results mapping, holding at least every requested id.

        Raises:
            NodeNotFoundError: If any id is unknown (checked before computing).
        """
        if results is None:
            results = {}
        for node_id in self._check_requested(node_ids, results):
            self._resolve(node_id, params, results)
        return results

    def _resolve(self, node_id: Hashable, params: Any, results: Results) -> Any:
        if node_id in results:
            logger.debug("%s: cache hit for %r", self.name, node_id)
            return results[node_id]

        node = self.registry.get(node_id)
        deps = {dep: self._resolve(dep, params, results) for dep in node.dependencies}

        logger.debug("%s: computing %r", self.name, node_id)
        try:
            value = node.fn(params, deps)
        except Exception:
            logger.debug("%s: node %r failed", self.name, node_id)
            raise

        results[node_id] = value
        return value


def create_graph(config: GraphConfig | None = None, **overrides: Any) -> Graph:
    """Create an empty synchronous graph."""
    return Graph(config, **overrides)
