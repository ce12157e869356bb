# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Graph configuration."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

__all__ = ("GraphConfig",)


class GraphConfig(BaseModel):
    """Configuration shared by Graph and AsyncGraph.

    Attributes:
        name: Label used in repr and log lines.
        max_concurrency: Max node functions running at once (AsyncGraph
            only). None means unlimited.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(default="graph", min_length=1)
    max_concurrency: int | None = Field(
        default=None,
        ge=1,
        description="Cap on concurrently running node functions. None disables.",
    )

    @property
    def throttled(self) -> bool:
        """True if a concurrency cap is configured."""
        return self.max_concurrency is not None
