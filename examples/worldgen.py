# Copyright (c) 2025 - 2026, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""World generation: the same node set on Graph and AsyncGraph.

Demonstrates:
- Leaf nodes reading params, dependents reading deps
- One results mapping filled across a call
- AsyncGraph overlapping two slow "sensor" nodes
"""

from __future__ import annotations

import logging
import math
import random

import anyio

from fimbul import AsyncGraph, Graph


def height(params, deps):
    return math.cos(params["x"]) * math.sin(params["y"])


def temperature(params, deps):
    return params["y"] - deps["height"] * 0.8


def biome(params, deps):
    h, t = deps["height"], deps["temperature"]
    if h < 0.3:
        return "ocean"
    if h > 0.9:
        return "snow"
    if h > 0.7:
        return "mountain"
    if t < 0.3:
        return "tundra"
    if t > 0.8:
        return "desert"
    return "forest"


def build_sync() -> Graph:
    worldgen = Graph(name="worldgen")
    worldgen.define("height", height)
    worldgen.define("temperature", temperature, ["height"])
    worldgen.define("biome", biome, ["height", "temperature"])
    return worldgen


def build_async() -> AsyncGraph:
    worldgen = AsyncGraph(name="worldgen-async")

    @worldgen.node("height")
    async def slow_height(params, deps):
        await anyio.sleep(0.5)  # pretend to query a terrain service
        return height(params, deps)

    @worldgen.node("rainfall")
    async def slow_rainfall(params, deps):
        await anyio.sleep(0.5)
        return abs(math.sin(params["x"] * params["y"]))

    worldgen.define("temperature", temperature, ["height"])
    worldgen.define("biome", biome, ["height", "temperature", "rainfall"])
    return worldgen


async def main():
    params = {"x": random.random(), "y": random.random()}

    print("=" * 60)
    print(f"Params: {params}")
    print("-" * 40)

    results = {}
    print(f"sync biome:  {build_sync().get('biome', params, results)}")
    print(f"sync results: {results}")

    start = anyio.current_time()
    values = await build_async().get_many(["biome", "rainfall"], params)
    elapsed = anyio.current_time() - start
    print(f"async results: {values}")
    print(f"async elapsed: {elapsed:.2f}s (two 0.5s nodes overlapped)")
    print("=" * 60)


if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    anyio.run(main)
