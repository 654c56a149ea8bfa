"""
Command line front end: load a drawing, build its SOLID meshes and export them.

Usage:
    python -m dxfmesh DRAWING [-o OUTPUT] [--format json|stl] [--config FILE]
                      [--strict-color] [--color INDEX] [--workers N] [-v | -q]

``DRAWING`` is a ``.dxf`` file or CAD JSON (optionally gzip-compressed).
Without ``-o`` the JSON scene is written to stdout.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from dxfmesh import __version__
from dxfmesh.config import EXPORT_FORMATS, ViewerConfig, load_config
from dxfmesh.errors import DxfMeshError
from dxfmesh.io import write_scene_json, write_stl
from dxfmesh.loader import load_document
from dxfmesh.scene import build_scene, count_by_layer

logger = logging.getLogger("dxfmesh")

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dxfmesh",
        description="Triangulate the SOLID entities of a CAD drawing into colored meshes.",
    )
    parser.add_argument("drawing", type=Path, help=".dxf or CAD JSON (.json, .json.gz) file")
    parser.add_argument("-o", "--output", type=Path, help="output file (default: JSON on stdout)")
    parser.add_argument("--format", choices=EXPORT_FORMATS, help="export format")
    parser.add_argument("--config", type=Path, help="YAML or JSON settings file")
    parser.add_argument("--strict-color", action="store_true",
                        help="reject negative color indices instead of using their absolute value")
    parser.add_argument("--color", type=int, metavar="INDEX",
                        help="ACI color used for every solid")
    parser.add_argument("--workers", type=int, help="number of build threads")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="warnings and errors only")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def _resolve_config(args: argparse.Namespace) -> ViewerConfig:
    config = load_config(args.config) if args.config else ViewerConfig()
    fmt = args.format
    if fmt is None and args.output is not None and args.output.suffix.lower() == ".stl":
        fmt = "stl"
    return config.replace(
        tolerant_color=False if args.strict_color else None,
        default_color_index=args.color,
        workers=args.workers,
        export_format=fmt,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        config = _resolve_config(args)
    except (OSError, DxfMeshError) as exc:
        logger.error("configuration error: %s", exc)
        return 1

    try:
        document = load_document(args.drawing)
    except (OSError, DxfMeshError) as exc:
        logger.error("cannot load %s: %s", args.drawing, exc)
        return 1

    result = build_scene(document, config)
    for layer, count in count_by_layer(result):
        logger.debug("layer %s: %d meshes", layer, count)

    if config.export_format == "stl":
        if args.output is None:
            write_stl(result.meshes, sys.stdout.buffer, name=args.drawing.stem)
        else:
            write_stl(result.meshes, args.output, name=args.drawing.stem)
    elif args.output is None:
        write_scene_json(result, sys.stdout, name=args.drawing.name)
        sys.stdout.write("\n")
    else:
        write_scene_json(result, args.output, name=args.drawing.name)

    if args.output is not None:
        logger.info("wrote %s", args.output)
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
