"""Command-line interface for inspecting serialized PhysX collections."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from physx_scene.config import DecoderConfig
from physx_scene.decoder import PhysxSceneDecoder, SceneLoadError
from physx_scene.scene import DEFAULT_BODY_ID, shape_refs


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="physx-scene",
        description="Decode PhysX XML collections into renderable geometry",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log skipped and dropped elements",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML decoder configuration",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    stats = commands.add_parser("stats", help="Print index table sizes")
    stats.add_argument("input", type=Path, help="PhysX XML file")

    listing = commands.add_parser("list", help="List rigid statics and their shapes")
    listing.add_argument("input", type=Path, help="PhysX XML file")

    export = commands.add_parser("export", help="Export one body as a mesh scene")
    export.add_argument("input", type=Path, help="PhysX XML file")
    export.add_argument(
        "output",
        type=Path,
        help="Output file; format from extension (.glb, .ply, .obj, ...)",
    )
    export.add_argument(
        "--body",
        type=int,
        default=DEFAULT_BODY_ID,
        help="Rigid static id (default: first in the document)",
    )

    show = commands.add_parser("show", help="Display one body with PyVista")
    show.add_argument("input", type=Path, help="PhysX XML file")
    show.add_argument(
        "--body",
        type=int,
        default=DEFAULT_BODY_ID,
        help="Rigid static id (default: first in the document)",
    )

    return parser


def _load(args) -> Optional[PhysxSceneDecoder]:
    config = DecoderConfig.from_yaml(args.config) if args.config else DecoderConfig()
    decoder = PhysxSceneDecoder(config)

    try:
        decoder.load_file(args.input)
    except SceneLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None

    return decoder


def _build(decoder: PhysxSceneDecoder, body_id: int):
    group = decoder.build(body_id)
    if group is None:
        print(f"Error: Rigid static {body_id} not found", file=sys.stderr)
    return group


def main(argv: Optional[List[str]] = None) -> int:
    """Run the physx-scene command."""
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    decoder = _load(args)
    if decoder is None:
        return 1

    if args.command == "stats":
        for table, count in decoder.get_stats().items():
            print(f"{table}: {count}")
        print(f"default body: {decoder.default_body_id}")
        return 0

    if args.command == "list":
        for body_id, entry in decoder.get_all_statics().items():
            refs = shape_refs(entry.element, decoder.config.accept_unprefixed_tags)
            shape_ids = " ".join(str(ref) for ref in refs if ref is not None)
            print(f"{body_id}: {shape_ids}")
        return 0

    group = _build(decoder, args.body)
    if group is None:
        return 1

    if args.command == "export":
        args.output.parent.mkdir(parents=True, exist_ok=True)
        group.to_scene().export(str(args.output))
        print(f"Exported body {group.body_id} ({len(group.children)} shapes) to {args.output}")
        return 0

    from physx_scene.visualization import visualize_group

    visualize_group(group, title=f"PhysX body {group.body_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
