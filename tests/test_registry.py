# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Tests for fimbul.registry and the shared GraphBase definition surface."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from fimbul import AsyncGraph, Graph, GraphConfig, create_async_graph, create_graph
from fimbul.errors import (
    DuplicateNodeError,
    InvalidNodeError,
    NodeNotFoundError,
    UnknownDependencyError,
)
from fimbul.registry import ComputationNode, NodeRegistry


def const(value):
    return lambda params, deps: value


class TestNodeRegistry:
    """Tests for NodeRegistry validation and lookups."""

    def test_register_returns_node(self):
        registry = NodeRegistry()

        node = registry.register("a", const(1))

        assert isinstance(node, ComputationNode)
        assert node.id == "a"
        assert node.dependencies == ()
        assert node.is_leaf

    def test_register_with_dependencies(self):
        registry = NodeRegistry()
        registry.register("a", const(1))
        registry.register("b", const(2))

        node = registry.register("c", const(3), ["a", "b"])

        assert node.dependencies == ("a", "b")
        assert not node.is_leaf

    def test_duplicate_dependencies_collapsed(self):
        registry = NodeRegistry()
        registry.register("a", const(1))

        node = registry.register("b", const(2), ["a", "a"])

        assert node.dependencies == ("a",)

    def test_duplicate_id_raises(self):
        registry = NodeRegistry()
        original = const(1)
        registry.register("a", original)

        with pytest.raises(DuplicateNodeError) as exc_info:
            registry.register("a", const(2))

        assert exc_info.value.node_id == "a"
        assert registry.get("a").fn is original

    def test_unknown_dependency_raises(self):
        registry = NodeRegistry()

        with pytest.raises(UnknownDependencyError) as exc_info:
            registry.register("triple", const(3), ["double"])

        assert exc_info.value.dependency == "double"
        assert not registry.has("triple")

    def test_self_dependency_rejected(self):
        """A node cannot depend on itself: it is not registered yet."""
        registry = NodeRegistry()

        with pytest.raises(UnknownDependencyError):
            registry.register("loop", const(0), ["loop"])

    def test_non_callable_rejected(self):
        registry = NodeRegistry()

        with pytest.raises(InvalidNodeError):
            registry.register("a", 42)

    def test_unhashable_id_rejected(self):
        registry = NodeRegistry()

        with pytest.raises(InvalidNodeError):
            registry.register(["a"], const(1))

    def test_get_missing_raises(self):
        with pytest.raises(NodeNotFoundError):
            NodeRegistry().get("missing")

    def test_has_never_raises(self):
        registry = NodeRegistry()
        registry.register("a", const(1))

        assert registry.has("a")
        assert not registry.has("b")
        assert not registry.has(["unhashable"])

    def test_list_ids_in_definition_order(self):
        registry = NodeRegistry()
        for node_id in ("z", "a", "m"):
            registry.register(node_id, const(node_id))

        assert registry.list_ids() == ["z", "a", "m"]
        assert [node.id for node in registry] == ["z", "a", "m"]
        assert len(registry) == 3

    def test_non_string_ids(self):
        registry = NodeRegistry()
        registry.register(1, const("one"))
        registry.register(("pair", 2), const("two"), [1])

        assert registry.get(("pair", 2)).dependencies == (1,)

    def test_node_is_frozen(self):
        node = NodeRegistry().register("a", const(1))

        with pytest.raises(PydanticValidationError):
            node.dependencies = ("b",)


@pytest.mark.parametrize("graph_cls", [Graph, AsyncGraph])
class TestGraphDefinition:
    """Definition surface is identical for both variants."""

    def test_define_and_has(self, graph_cls):
        graph = graph_cls()
        graph.define("result", const(42))

        assert graph.has("result")
        assert "result" in graph
        assert not graph.has("other")
        assert len(graph) == 1

    def test_define_duplicate_raises_synchronously(self, graph_cls):
        graph = graph_cls()
        graph.define("a", const(1))

        with pytest.raises(DuplicateNodeError):
            graph.define("a", const(2))

    def test_define_unknown_dependency_raises_synchronously(self, graph_cls):
        graph = graph_cls()

        with pytest.raises(UnknownDependencyError):
            graph.define("triple", const(3), ["double"])

    def test_failed_define_keeps_other_nodes(self, graph_cls):
        graph = graph_cls()
        graph.define("a", const(1))

        with pytest.raises(UnknownDependencyError):
            graph.define("b", const(2), ["a", "missing"])

        assert graph.list_ids() == ["a"]

    def test_node_decorator(self, graph_cls):
        graph = graph_cls()
        graph.define("height", const(6))

        @graph.node(dependencies=["height"])
        def temperature(params, deps):
            return params["y"] - deps["height"]

        @graph.node("renamed")
        def something(params, deps):
            return 0

        assert callable(temperature)
        assert graph.dependencies_of("temperature") == ("height",)
        assert graph.has("renamed")
        assert not graph.has("something")

    def test_get_node(self, graph_cls):
        graph = graph_cls()
        fn = const(1)
        graph.define("a", fn)

        assert graph.get_node("a").fn is fn
        with pytest.raises(NodeNotFoundError):
            graph.get_node("b")

    def test_repr(self, graph_cls):
        graph = graph_cls(name="worldgen")
        graph.define("height", const(1))

        assert repr(graph) == f"{graph_cls.__name__}(name='worldgen', nodes=['height'])"


class TestGraphConfig:
    def test_defaults(self):
        config = GraphConfig()

        assert config.name == "graph"
        assert config.max_concurrency is None
        assert not config.throttled

    def test_overrides_on_top_of_config(self):
        graph = Graph(GraphConfig(name="base", max_concurrency=3), name="child")

        assert graph.name == "child"
        assert graph.config.max_concurrency == 3

    def test_invalid_max_concurrency(self):
        with pytest.raises(PydanticValidationError):
            GraphConfig(max_concurrency=0)

    def test_unknown_field_rejected(self):
        with pytest.raises(PydanticValidationError):
            Graph(unknown_option=True)

    def test_factories(self):
        assert isinstance(create_graph(name="g"), Graph)
        async_graph = create_async_graph(max_concurrency=2)
        assert isinstance(async_graph, AsyncGraph)
        assert async_graph.config.throttled
