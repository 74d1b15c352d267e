#!/usr/bin/env python3
"""
Simple example demonstrating mapspace usage.

This example shows:
1. Creating a workload and level hierarchy
2. Sizing the mapspace
3. Decoding a few mapping ids
"""

import random

from conv_mapspace import (
    ConvWorkload,
    LevelHierarchy,
    MapSpace,
    TilingLevel,
)
from conv_mapspace.utils import format_number, validate_mapping


def main():
    print("=" * 60)
    print("Conv Mapspace - Simple Example")
    print("=" * 60)

    # =========================================
    # Step 1: Create workload and levels
    # =========================================
    print("\n1. Creating workload and levels...")

    workload = ConvWorkload(
        name="conv3x3_64",
        R=3, S=3,           # 3x3 filter
        P=14, Q=14,         # 14x14 output
        C=64, K=128,        # 64->128 channels
        N=1,                # Batch size 1
    )
    print(workload.summary())

    hierarchy = LevelHierarchy([
        TilingLevel(name="RegisterFile", permutation=["R", "S"]),
        TilingLevel(name="PEArray", spatial=True, factors={"R": 1, "S": 1}),
        TilingLevel(name="GlobalBuffer"),
        TilingLevel(name="DRAM", factors={"R": 1, "S": 1}),
    ])
    print(hierarchy.summary())

    # =========================================
    # Step 2: Size the mapspace
    # =========================================
    print("\n2. Building mapspace...")

    mapspace = MapSpace(workload, hierarchy)
    print(mapspace.summary())

    # =========================================
    # Step 3: Decode mappings
    # =========================================
    print("\n3. Decoding mappings...")

    rng = random.Random(0)
    for mapping_id in [0, mapspace.size() - 1] + [rng.randrange(mapspace.size()) for _ in range(2)]:
        mapping = mapspace.decode(mapping_id)
        print()
        print(mapping.pretty_print())
        errors = validate_mapping(mapping, workload)
        print(f"  valid: {not errors}")

    print(f"\nTotal mappings: {format_number(mapspace.size())}")


if __name__ == "__main__":
    main()
