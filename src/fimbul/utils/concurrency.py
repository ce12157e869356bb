# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Structured concurrency primitives (anyio-backed).

The async engine imports anyio only through this module, so it runs on
whichever backend the caller's event loop uses.
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable
from typing import TypeVar

import anyio

__all__ = (
    "CapacityLimiter",
    "Event",
    "create_task_group",
    "current_time",
    "maybe_await",
    "sleep",
)

T = TypeVar("T")

CapacityLimiter = anyio.CapacityLimiter
Event = anyio.Event
create_task_group = anyio.create_task_group
current_time = anyio.current_time


async def sleep(seconds: float) -> None:
    await anyio.sleep(seconds)


async def maybe_await(value: T | Awaitable[T]) -> T:
    """Await ``value`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(value):
        return await value
    return value  # type: ignore[return-value]

