# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""In-flight result cache for AsyncGraph.

A Pending cell is the awaitable handle for one node's value within one
cache. The first requester stores a cell before it suspends, so every
later requester awaits that same cell instead of invoking the node again.

ResolutionCache wraps the caller's plain results mapping: it is seeded
from it (known values become settled cells) and writes every settled value
back into it.
"""

from __future__ import annotations

from collections.abc import Generator, Hashable, MutableMapping
from enum import Enum
from typing import Any

from .utils.concurrency import Event

__all__ = ("Pending", "PendingState", "ResolutionCache")


class PendingState(str, Enum):
    IN_PROGRESS = "in_progress"
    SETTLED = "settled"
    FAILED = "failed"


class Pending:
    """Awaitable handle for a node value that may still be computing.

    Example:
        cell = Pending("height")
        ...                      # computing task calls cell.set_result(6)
        await cell               # 6, for every waiter
    """

    __slots__ = ("_error", "_event", "_value", "node_id", "state")

    def __init__(self, node_id: Hashable) -> None:
        self.node_id = node_id
        self.state = PendingState.IN_PROGRESS
        self._value: Any = None
        self._error: BaseException | None = None
        # Event needs a running loop; settled() cells never create one
        self._event: Event | None = None

    @classmethod
    def settled(cls, node_id: Hashable, value: Any) -> Pending:
        """Build an already-settled cell (seeded value)."""
        cell = cls(node_id)
        cell.state = PendingState.SETTLED
        cell._value = value
        return cell

    @property
    def done(self) -> bool:
        return self.state is not PendingState.IN_PROGRESS

    def set_result(self, value: Any) -> None:
        self._settle(PendingState.SETTLED, value=value)

    def set_error(self, error: BaseException) -> None:
        self._settle(PendingState.FAILED, error=error)

    def _settle(
        self, state: PendingState, value: Any = None, error: BaseException | None = None
    ) -> None:
        if self.done:
            raise RuntimeError(f'Result for "{self.node_id}" already settled')
        self.state = state
        self._value = value
        self._error = error
        if self._event is not None:
            self._event.set()

    def result(self) -> Any:
        """Settled value without waiting. Raises the stored error if failed."""
        if not self.done:
            raise RuntimeError(f'Result for "{self.node_id}" is still in progress')
        if self._error is not None:
            raise self._error
        return self._value

    async def wait(self) -> Any:
        """Wait until settled, then return the value or raise the error."""
        if not self.done:
            if self._event is None:
                self._event = Event()
            await self._event.wait()
        return self.result()

    def __await__(self) -> Generator[Any, None, Any]:
        return self.wait().__await__()

    def __repr__(self) -> str:
        return f"Pending(node_id={self.node_id!r}, state={self.state.value})"


class ResolutionCache:
    """Per-resolution map of node id -> Pending, backed by a results mapping.

    Pass one instance as ``results`` to several AsyncGraph calls on the same
    event loop to share in-flight computations between them.

    Attributes:
        results: Plain id -> value mapping; receives every settled value.
    """

    def __init__(self, results: MutableMapping[Hashable, Any] | None = None) -> None:
        self.results: MutableMapping[Hashable, Any] = {} if results is None else results
        self._cells: dict[Hashable, Pending] = {}

    def lookup(self, node_id: Hashable) -> Pending | None:
        """Existing cell for node_id, promoting a seeded value to a cell."""
        cell = self._cells.get(node_id)
        if cell is None and node_id in self.results:
            cell = self._cells[node_id] = Pending.settled(node_id, self.results[node_id])
        return cell

    def start(self, node_id: Hashable) -> Pending:
        """Register a new in-progress cell. Must run before any suspension."""
        if self.lookup(node_id) is not None:
            raise RuntimeError(f'"{node_id}" already has a cached result')
        cell = self._cells[node_id] = Pending(node_id)
        return cell

    def settle(self, cell: Pending, value: Any) -> None:
        cell.set_result(value)
        self.results[cell.node_id] = value

    def fail(self, cell: Pending, error: BaseException) -> None:
        cell.set_error(error)

    def state_of(self, node_id: Hashable) -> PendingState | None:
        """Current state for node_id, or None if unseen."""
        cell = self.lookup(node_id)
        return None if cell is None else cell.state

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._cells or node_id in self.results

    def __len__(self) -> int:
        return len(self._cells.keys() | self.results.keys())

    def __repr__(self) -> str:
        counts: dict[str, int] = {}
        for cell in self._cells.values():
            counts[cell.state.value] = counts.get(cell.state.value, 0) + 1
        return f"ResolutionCache(results={len(self.results)}, cells={counts})"
