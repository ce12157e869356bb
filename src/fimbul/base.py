# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""GraphBase: definition surface shared by Graph and AsyncGraph.

Holds node definitions only. Computed values live in the caller-owned
results mapping passed to each resolution call, never on the graph.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Container, Hashable, Iterable
from typing import Any, TypeVar

from .config import GraphConfig
from .errors import NodeNotFoundError
from .registry import ComputationNode, NodeFunction, NodeRegistry

logger = logging.getLogger(__name__)

__all__ = ("GraphBase",)

F = TypeVar("F", bound=Callable[..., Any])


class GraphBase:
    """Node definitions plus introspection.

    Attributes:
        config: GraphConfig (name, max_concurrency).
        registry: NodeRegistry holding every ComputationNode.
    """

    def __init__(self, config: GraphConfig | None = None, **overrides: Any) -> None:
        """Initialize an empty graph.

        Args:
            config: Base configuration. Defaults to GraphConfig().
            **overrides: Field overrides applied on top of config,
                e.g. ``Graph(name="worldgen")``.
        """
        config = config or GraphConfig()
        if overrides:
            config = GraphConfig.model_validate({**config.model_dump(), **overrides})
        self.config = config
        self.registry = NodeRegistry()

    @property
    def name(self) -> str:
        return self.config.name

    def define(
        self,
        node_id: Hashable,
        fn: NodeFunction,
        dependencies: Iterable[Hashable] | None = None,
    ) -> None:
        """Define a computation node.

        Args:
            node_id: Unique identifier for the node.
            fn: Called as fn(params, deps) where deps maps each dependency
                id to its resolved value (empty dict for leaf nodes).
            dependencies: Ids this node depends on. Each must already be
                defined, which keeps the graph acyclic.

        Raises:
            DuplicateNodeError: If node_id is already defined.
            UnknownDependencyError: If a dependency is not defined yet.
            InvalidNodeError: If fn is not callable.
        """
        self.registry.register(node_id, fn, dependencies)

    def node(
        self,
        node_id: Hashable | None = None,
        dependencies: Iterable[Hashable] | None = None,
    ) -> Callable[[F], F]:
        """Decorator form of define(). Id defaults to the function name.

        Example:
            @graph.node(dependencies=["height"])
            def temperature(params, deps):
                return params["y"] - deps["height"]
        """

        def decorator(fn: F) -> F:
            self.define(fn.__name__ if node_id is None else node_id, fn, dependencies)
            return fn

        return decorator

    def has(self, node_id: Hashable) -> bool:
        """Check if a node is defined. Never raises."""
        return self.registry.has(node_id)

    def get_node(self, node_id: Hashable) -> ComputationNode:
        """Return the ComputationNode for node_id or raise NodeNotFoundError."""
        return self.registry.get(node_id)

    def dependencies_of(self, node_id: Hashable) -> tuple[Hashable, ...]:
        """Declared dependencies of node_id (direct only)."""
        return self.registry.get(node_id).dependencies

    def list_ids(self) -> list[Hashable]:
        """All defined ids in definition order (a valid topological order)."""
        return self.registry.list_ids()

    def _check_requested(
        self, node_ids: Iterable[Hashable], results: Container[Hashable]
    ) -> list[Hashable]:
        """Fail fast on ids that are neither cached nor defined.

        Runs before any computation so an unknown id leaves results untouched.
        """
        node_ids = list(node_ids)
        for node_id in node_ids:
            if node_id not in results and not self.registry.has(node_id):
                logger.debug("%s: requested unknown node %r", self.name, node_id)
                raise NodeNotFoundError(node_id)
        return node_ids

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.registry

    def __len__(self) -> int:
        return len(self.registry)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, nodes={self.list_ids()})"
