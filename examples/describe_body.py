#!/usr/bin/env python
"""Example: Decode one rigid static and report its shapes.

Usage:
    python examples/describe_body.py <collection.xml> [--body ID] [--export out.glb]
"""

import argparse
import sys
from pathlib import Path

from physx_scene import PhysxSceneDecoder, SceneLoadError


def main():
    parser = argparse.ArgumentParser(
        description="Decode a PhysX XML collection and describe one body."
    )
    parser.add_argument("collection", help="Path to PhysX XML file")
    parser.add_argument(
        "--body",
        type=int,
        default=0,
        help="Rigid static id (default: first in the document)",
    )
    parser.add_argument("--export", help="Optional output scene (.glb, .obj, ...)")
    args = parser.parse_args()

    decoder = PhysxSceneDecoder()
    try:
        decoder.load_file(args.collection)
    except SceneLoadError as e:
        print(f"Error: {e}")
        return 1

    print("=" * 60)
    print(f"Collection: {args.collection}")
    for table, count in decoder.get_stats().items():
        print(f"  {table}: {count}")
    print()

    group = decoder.build(args.body)
    if group is None:
        print(f"Error: Rigid static {args.body} not found")
        return 1

    print(f"Body {group.body_id}: {len(group.children)} shapes")
    for shape in group.children:
        bounds = shape.world_surface().bounds
        print(f"  Shape {shape.shape_id} ({shape.kind.value})")
        print(f"    Min: [{bounds[0][0]:.3f}, {bounds[0][1]:.3f}, {bounds[0][2]:.3f}]")
        print(f"    Max: [{bounds[1][0]:.3f}, {bounds[1][1]:.3f}, {bounds[1][2]:.3f}]")

    if args.export:
        Path(args.export).parent.mkdir(parents=True, exist_ok=True)
        group.to_scene().export(args.export)
        print(f"\nExported to {args.export}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
