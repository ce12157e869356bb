# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Node registry: id -> ComputationNode with definition-time validation.

Per-graph registry (not global). Registration is create-once: there is no
override or removal, so a node's dependencies always predate it and the
graph stays acyclic by construction. Definition order is therefore a valid
topological order.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    DuplicateNodeError,
    InvalidNodeError,
    NodeNotFoundError,
    UnknownDependencyError,
)

logger = logging.getLogger(__name__)

__all__ = ("ComputationNode", "NodeFunction", "NodeRegistry")

NodeFunction = Callable[[Any, dict[Hashable, Any]], Any]
"""Node signature: (params, deps) -> value (or awaitable of value for AsyncGraph)."""


class ComputationNode(BaseModel):
    """Immutable registry entry.

    Attributes:
        id: Unique node identifier.
        fn: User function called as fn(params, deps).
        dependencies: Ids resolved into ``deps`` before fn runs.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: Hashable
    fn: Callable[..., Any] = Field(..., exclude=True)
    dependencies: tuple[Hashable, ...] = ()

    @property
    def is_leaf(self) -> bool:
        """True if the node declares no dependencies."""
        return not self.dependencies

    def __repr__(self) -> str:
        fn_name = getattr(self.fn, "__qualname__", type(self.fn).__name__)
        return f"ComputationNode(id={self.id!r}, fn={fn_name}, dependencies={list(self.dependencies)})"


class NodeRegistry:
    """Map node ids to ComputationNode entries.

    Example:
        registry = NodeRegistry()
        registry.register("height", lambda p, _: p["x"] + p["y"])
        registry.register("temperature", lambda p, d: p["y"] - d["height"], ["height"])
        registry.get("temperature").dependencies  # ("height",)
    """

    def __init__(self) -> None:
        self._nodes: dict[Hashable, ComputationNode] = {}

    def register(
        self,
        node_id: Hashable,
        fn: NodeFunction,
        dependencies: Iterable[Hashable] | None = None,
    ) -> ComputationNode:
        """Validate and store a node.

        Args:
            node_id: Unique id, must not be registered yet.
            fn: Callable invoked as fn(params, deps).
            dependencies: Ids that must already be registered. Duplicates
                are collapsed, keeping first-seen order.

        Returns:
            The stored ComputationNode.

        Raises:
            DuplicateNodeError: If node_id is already registered.
            UnknownDependencyError: If any dependency is not registered.
            InvalidNodeError: If node_id is unhashable or fn is not callable.
        """
        if not isinstance(node_id, Hashable):
            raise InvalidNodeError(
                "Node id must be hashable",
                details={"id_type": type(node_id).__name__},
            )
        if node_id in self._nodes:
            raise DuplicateNodeError(node_id)
        if not callable(fn):
            raise InvalidNodeError(
                f'Function for "{node_id}" is not callable',
                details={"node_id": node_id, "fn_type": type(fn).__name__},
            )

        deps = tuple(dict.fromkeys(dependencies or ()))
        for dep in deps:
            if dep not in self._nodes:
                raise UnknownDependencyError(node_id, dep)

        node = ComputationNode(id=node_id, fn=fn, dependencies=deps)
        self._nodes[node_id] = node
        logger.debug("Registered node %r with dependencies %s", node_id, list(deps))
        return node

    def get(self, node_id: Hashable) -> ComputationNode:
        """Get node by id. Raises NodeNotFoundError if not registered."""
        try:
            return self._nodes[node_id]
        except KeyError:
            raise NodeNotFoundError(node_id) from None

    def has(self, node_id: Hashable) -> bool:
        """Check if id is registered. Never raises."""
        return node_id in self

    def list_ids(self) -> list[Hashable]:
        """Return all registered ids in definition order."""
        return list(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        try:
            return node_id in self._nodes
        except TypeError:
            # unhashable ids are never registered
            return False

    def __iter__(self) -> Iterator[ComputationNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __repr__(self) -> str:
        return f"NodeRegistry(nodes={self.list_ids()})"
