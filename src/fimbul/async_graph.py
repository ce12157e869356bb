# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""AsyncGraph - concurrent dependency resolution on one event loop.

Node functions may be ``async def``, return any awaitable, or return a
plain value. A node's dependencies are resolved concurrently in a task
group, and the function receives their settled values (never awaitables).

Each node runs at most once per ResolutionCache: the first requester
stores a Pending cell before suspending, and every concurrent requester
awaits that same cell.

Example:
    worldgen = AsyncGraph(name="worldgen")
    worldgen.define("height", lambda p, _: p["x"] + p["y"])

    @worldgen.node(dependencies=["height"])
    async def temperature(params, deps):
        reading = await sensor.read(params["x"], params["y"])
        return reading - deps["height"]

    value = await worldgen.get("temperature", {"x": 1, "y": 5})
    results = await worldgen.get_many(["height", "temperature"], {"x": 1, "y": 5})
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, MutableMapping
from typing import Any

from .base import GraphBase
from .cache import Pending, ResolutionCache
from .config import GraphConfig
from .errors import DependencyFailureError, ExecutionError
from .registry import ComputationNode
from .utils.concurrency import CapacityLimiter, create_task_group, maybe_await

logger = logging.getLogger(__name__)

__all__ = ("AsyncGraph", "create_async_graph")

Results = MutableMapping[Hashable, Any]


class AsyncGraph(GraphBase):
    """Asynchronous computation graph.

    Concurrency is cooperative (single event loop). The engine adds no
    timeouts or cancellation; wrap calls in ``anyio.fail_after`` if needed.
    ``config.max_concurrency`` caps concurrently running node functions
    per resolution call.
    """

    async def get(
        self,
        node_id: Hashable,
        params: Any,
        results: Results | ResolutionCache | None = None,
    ) -> Any:
        """Resolve one node.

        Args:
            node_id: Node to compute.
            params: Passed unchanged to every node function.
            results: Known values (mutated with every value settled during
                the call), or a ResolutionCache shared with other calls.

        Returns:
            The node's value.

        Raises:
            NodeNotFoundError: If node_id is neither cached nor defined.
            DependencyFailureError: If one of the node's dependencies failed.
            Exception: Whatever the node's own function raises, unchanged.
        """
        cache = self._as_cache(results)
        self._check_requested((node_id,), cache)
        return await self._resolve(node_id, params, cache, self._make_limiter())

    async def get_many(
        self,
        node_ids: Iterable[Hashable],
        params: Any,
        results: Results | ResolutionCache | None = None,
    ) -> Results:
        """Resolve several nodes concurrently on one shared cache.

        Returns:
            The results mapping with every settled value (at least the
            requested ids).

        Raises:
            NodeNotFoundError: If any id is unknown (checked before computing).
            Exception: The first failure among the requested ids. Siblings
                are not cancelled; they run to completion first.
        """
        cache = self._as_cache(results)
        node_ids = self._check_requested(node_ids, cache)
        limiter = self._make_limiter()
        failures: list[Exception] = []

        async def resolve_one(node_id: Hashable) -> None:
            try:
                await self._resolve(node_id, params, cache, limiter)
            except Exception as exc:
                failures.append(exc)

        async with create_task_group() as tg:
            for node_id in node_ids:
                tg.start_soon(resolve_one, node_id)

        if failures:
            raise failures[0]
        return cache.results

    def _as_cache(self, results: Results | ResolutionCache | None) -> ResolutionCache:
        if isinstance(results, ResolutionCache):
            return results
        return ResolutionCache(results)

    def _make_limiter(self) -> CapacityLimiter | None:
        if not self.config.throttled:
            return None
        return CapacityLimiter(self.config.max_concurrency)

    async def _resolve(
        self,
        node_id: Hashable,
        params: Any,
        cache: ResolutionCache,
        limiter: CapacityLimiter | None,
    ) -> Any:
        cell = cache.lookup(node_id)
        if cell is not None:
            logger.debug("%s: cache hit for %r (%s)", self.name, node_id, cell.state.value)
            return await cell.wait()

        node = self.registry.get(node_id)
        # stored before the first await so concurrent requesters share it
        cell = cache.start(node_id)
        try:
            deps = await self._resolve_dependencies(node, params, cache, limiter)
            value = await self._invoke(node, params, deps, limiter)
        except Exception as exc:
            logger.debug("%s: node %r failed: %s", self.name, node_id, exc)
            cache.fail(cell, exc)
            raise
        except BaseException:
            self._abandon(cache, cell)
            raise

        cache.settle(cell, value)
        return value

    async def _resolve_dependencies(
        self,
        node: ComputationNode,
        params: Any,
        cache: ResolutionCache,
        limiter: CapacityLimiter | None,
    ) -> dict[Hashable, Any]:
        if node.is_leaf:
            return {}

        values: dict[Hashable, Any] = {}
        failures: list[DependencyFailureError] = []

        async def resolve_one(dep: Hashable) -> None:
            try:
                values[dep] = await self._resolve(dep, params, cache, limiter)
            except Exception as exc:
                failures.append(DependencyFailureError(dep, node.id, exc))

        async with create_task_group() as tg:
            for dep in node.dependencies:
                tg.start_soon(resolve_one, dep)

        if failures:
            raise failures[0]
        return {dep: values[dep] for dep in node.dependencies}

    async def _invoke(
        self,
        node: ComputationNode,
        params: Any,
        deps: dict[Hashable, Any],
        limiter: CapacityLimiter | None,
    ) -> Any:
        logger.debug("%s: computing %r", self.name, node.id)
        if limiter is None:
            return await maybe_await(node.fn(params, deps))
        async with limiter:
            return await maybe_await(node.fn(params, deps))

    def _abandon(self, cache: ResolutionCache, cell: Pending) -> None:
        """Fail a cell whose computing task was cancelled, so waiters don't hang."""
        cache.fail(
            cell,
            ExecutionError(
                f'Computation of "{cell.node_id}" was cancelled',
                details={"node_id": cell.node_id},
            ),
        )


def create_async_graph(config: GraphConfig | None = None, **overrides: Any) -> AsyncGraph:
    """Create an empty asynchronous graph."""
    return AsyncGraph(config, **overrides)
