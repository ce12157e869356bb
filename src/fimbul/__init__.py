# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""fimbul - computation manager for dependency graphs.

Define named nodes (each optionally depending on already-defined nodes)
and request any node's value for a set of params. Dependencies are
resolved recursively and each node is computed at most once per call.

- Graph: synchronous, depth-first resolution.
- AsyncGraph: concurrent resolution with in-flight deduplication.

    from fimbul import Graph

    worldgen = Graph()
    worldgen.define("height", lambda p, _: p["x"] + p["y"])
    worldgen.define("temperature", lambda p, d: p["y"] - d["height"], ["height"])
    worldgen.get("temperature", {"x": 1, "y": 5})  # -1
"""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Lazy import mapping
_LAZY_IMPORTS: dict[str, tuple[str, str]] = {
    # graphs
    "AsyncGraph": ("fimbul.async_graph", "AsyncGraph"),
    "Graph": ("fimbul.graph", "Graph"),
    "GraphBase": ("fimbul.base", "GraphBase"),
    "create_async_graph": ("fimbul.async_graph", "create_async_graph"),
    "create_graph": ("fimbul.graph", "create_graph"),
    # registry
    "ComputationNode": ("fimbul.registry", "ComputationNode"),
    "NodeRegistry": ("fimbul.registry", "NodeRegistry"),
    # cache
    "Pending": ("fimbul.cache", "Pending"),
    "PendingState": ("fimbul.cache", "PendingState"),
    "ResolutionCache": ("fimbul.cache", "ResolutionCache"),
    # config
    "GraphConfig": ("fimbul.config", "GraphConfig"),
    # errors
    "DependencyFailureError": ("fimbul.errors", "DependencyFailureError"),
    "DuplicateNodeError": ("fimbul.errors", "DuplicateNodeError"),
    "FimbulError": ("fimbul.errors", "FimbulError"),
    "NodeNotFoundError": ("fimbul.errors", "NodeNotFoundError"),
    "UnknownDependencyError": ("fimbul.errors", "UnknownDependencyError"),
}

_LOADED: dict[str, object] = {}


def __getattr__(name: str) -> object:
    """Lazy import attributes on first access."""
    if name in _LOADED:
        return _LOADED[name]

    if name in _LAZY_IMPORTS:
        from importlib import import_module

        module_name, attr_name = _LAZY_IMPORTS[name]
        module = import_module(module_name)
        value = getattr(module, attr_name)
        _LOADED[name] = value
        return value

    raise AttributeError(f"module 'fimbul' has no attribute {name!r}")


def __dir__() -> list[str]:
    """Return all available attributes for autocomplete."""
    return list(__all__)


if TYPE_CHECKING:
    from fimbul.async_graph import AsyncGraph, create_async_graph
    from fimbul.base import GraphBase
    from fimbul.cache import Pending, PendingState, ResolutionCache
    from fimbul.config import GraphConfig
    from fimbul.errors import (
        DependencyFailureError,
        DuplicateNodeError,
        FimbulError,
        NodeNotFoundError,
        UnknownDependencyError,
    )
    from fimbul.graph import Graph, create_graph
    from fimbul.registry import ComputationNode, NodeRegistry

__all__ = (
    "AsyncGraph",
    "ComputationNode",
    "DependencyFailureError",
    "DuplicateNodeError",
    "FimbulError",
    "Graph",
    "GraphBase",
    "GraphConfig",
    "NodeNotFoundError",
    "NodeRegistry",
    "Pending",
    "PendingState",
    "ResolutionCache",
    "UnknownDependencyError",
    "create_async_graph",
    "create_graph",
)
