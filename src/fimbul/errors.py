# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy for graph definition and resolution.

All errors derive from FimbulError and carry a message, a ``details`` dict,
a ``retryable`` flag and an optional ``cause``. Definition errors are raised
by ``define``; resolution errors by ``get``/``get_many``.

    FimbulError
    ├── ValidationError
    │   └── InvalidNodeError
    ├── ExistsError
    │   └── DuplicateNodeError
    ├── NotFoundError (also KeyError)
    │   ├── UnknownDependencyError
    │   └── NodeNotFoundError
    └── ExecutionError
        └── DependencyFailureError
"""

from __future__ import annotations

from collections.abc import Hashable
from typing import Any, ClassVar

__all__ = (
    "DependencyFailureError",
    "DuplicateNodeError",
    "ExecutionError",
    "ExistsError",
    "FimbulError",
    "InvalidNodeError",
    "NodeNotFoundError",
    "NotFoundError",
    "UnknownDependencyError",
    "ValidationError",
)


class FimbulError(Exception):
    """Base error with structured details.

    Attributes:
        message: Human-readable description.
        details: Extra context (node ids, etc.), JSON-friendly where possible.
        retryable: Whether repeating the call could succeed.
        cause: Underlying exception, also set as ``__cause__``.
    """

    default_message: ClassVar[str] = "Graph error"
    default_retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        retryable: bool | None = None,
        cause: BaseException | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.details = details or {}
        self.retryable = self.default_retryable if retryable is None else retryable
        self.cause = cause
        super().__init__(self.message)
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict (error name, message, retryable, details)."""
        data: dict[str, Any] = {
            "error": type(self).__name__,
            "message": self.message,
            "retryable": self.retryable,
            "details": dict(self.details),
        }
        if self.cause is not None:
            data["cause"] = repr(self.cause)
        return data


class ValidationError(FimbulError):
    default_message = "Validation failed"


class InvalidNodeError(ValidationError):
    """Node definition is malformed (e.g. the function is not callable)."""

    default_message = "Invalid node definition"


class ExistsError(FimbulError):
    default_message = "Item already exists"


class DuplicateNodeError(ExistsError):
    """A node with this id is already registered."""

    default_message = "Node already defined"

    def __init__(self, node_id: Hashable, **kwargs: Any) -> None:
        self.node_id = node_id
        kwargs.setdefault("details", {"node_id": node_id})
        super().__init__(f'"{node_id}" already defined', **kwargs)


class NotFoundError(FimbulError, KeyError):
    """Lookup of an unknown id.

    Also a KeyError so mapping-style callers can catch it as usual.
    """

    default_message = "Item not found"


class UnknownDependencyError(NotFoundError):
    """A declared dependency is not registered at definition time."""

    default_message = "Unknown dependency"

    def __init__(self, node_id: Hashable, dependency: Hashable, **kwargs: Any) -> None:
        self.node_id = node_id
        self.dependency = dependency
        kwargs.setdefault("details", {"node_id": node_id, "dependency": dependency})
        super().__init__(
            f'"{dependency}" not found (declared as dependency of "{node_id}")',
            **kwargs,
        )


class NodeNotFoundError(NotFoundError):
    """Requested node is neither registered nor present in the results."""

    default_message = "Node not found"

    def __init__(self, node_id: Hashable, **kwargs: Any) -> None:
        self.node_id = node_id
        kwargs.setdefault("details", {"node_id": node_id})
        super().__init__(f'"{node_id}" not found', **kwargs)


class ExecutionError(FimbulError):
    default_message = "Execution failed"


class DependencyFailureError(ExecutionError):
    """A dependency failed while resolving a dependent node.

    ``node_id`` is the dependency that failed, ``dependent`` the node that
    needed it. The original error is kept as ``cause``/``__cause__``.
    """

    default_message = "Failed to resolve dependency"

    def __init__(
        self,
        node_id: Hashable,
        dependent: Hashable,
        cause: BaseException,
        **kwargs: Any,
    ) -> None:
        self.node_id = node_id
        self.dependent = dependent
        kwargs.setdefault("details", {"node_id": node_id, "dependent": dependent})
        super().__init__(
            f'Failed to resolve dependency "{node_id}" of "{dependent}": {cause}',
            cause=cause,
            **kwargs,
        )
