#!/usr/bin/env python3
"""
Decode TinyVG (.tvg) files and rasterize them to PNG.

Usage:
    python tvg_to_png.py INPUT [-o OUTPUT] [--width 256] [--svg out.svg]
    python tvg_to_png.py DIR_OR_FILES... [-o OUTPUT_DIR] [--dump-text]

A directory argument expands to the ``*.tvg`` files directly inside it. With
more than one input, ``-o`` names an output directory instead of a file.

Exit codes:
    0 -> success
    1 -> malformed input / rendering failure (in batch mode: any file failed)
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Sequence

from tinyvg import (
    DEFAULT_MAX_COUNT,
    DEFAULT_MAX_PIXELS,
    DEFAULT_TOLERANCE,
    DecodeLimits,
    DecodeTraceLogger,
    Document,
    RenderOptions,
    SvgContext,
    TinyVGError,
    decode,
    encode_png,
    render_to_raster,
    to_text,
)


def write_png(document: Document, destination: Path, *, width: int | None, height: int | None, options: RenderOptions) -> None:
    buffer = render_to_raster(document, width, height, options=options)
    data = encode_png(buffer)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    print(f"[+] PNG written to {destination} ({buffer.width}x{buffer.height})")


def write_svg(document: Document, destination: Path, options: RenderOptions) -> None:
    context = SvgContext(document.header.width, document.header.height)
    document.render(context, options)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(context.to_svg(), encoding="utf-8")
    print(f"[+] SVG written to {destination}")


def write_text_dump(document: Document, destination: Path) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(to_text(document), encoding="utf-8")
    print(f"[+] Text dump written to {destination}")


def collect_inputs(paths: Sequence[Path]) -> List[Path]:
    """Expand directories to their ``*.tvg`` files, keeping the given order otherwise."""

    collected: List[Path] = []
    for path in paths:
        if path.is_dir():
            collected.extend(sorted(path.glob("*.tvg")))
        else:
            collected.append(path)
    return collected


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render TinyVG files into PNG images.")
    parser.add_argument("inputs", type=Path, nargs="+", help="Source .tvg files or directories of them")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="PNG destination for a single input (defaults to <input>.png), or an output directory for several",
    )
    parser.add_argument("--width", type=int, default=None, help="Output width in pixels (default: header width)")
    parser.add_argument("--height", type=int, default=None, help="Output height in pixels (default: header height)")
    parser.add_argument(
        "--tolerance",
        type=float,
        default=DEFAULT_TOLERANCE,
        help=f"Curve flattening tolerance in output pixels (default: {DEFAULT_TOLERANCE})",
    )
    parser.add_argument(
        "--supersample",
        type=int,
        default=1,
        help="Render at N times the resolution and box-filter down for anti-aliasing",
    )
    parser.add_argument(
        "--max-pixels",
        type=int,
        default=DEFAULT_MAX_PIXELS,
        help=f"Refuse canvases larger than this many pixels after supersampling, 0 for no limit (default: {DEFAULT_MAX_PIXELS})",
    )
    parser.add_argument("--svg", type=Path, help="Also re-emit the drawing as SVG to this path (single input only)")
    parser.add_argument(
        "--dump-text",
        action="store_true",
        help="Also write the text dump of each document beside its PNG (<output>.txt)",
    )
    parser.add_argument(
        "--trace-log",
        type=Path,
        help="Write the offset and summary of every decoded record to this path (single input only)",
    )
    parser.add_argument(
        "--max-count",
        type=int,
        default=DEFAULT_MAX_COUNT,
        help="Reject documents declaring more elements than this in a single count",
    )
    return parser.parse_args(argv)


def convert(
    source: Path,
    output_path: Path,
    args: argparse.Namespace,
    options: RenderOptions,
    trace: DecodeTraceLogger | None = None,
) -> None:
    blob = source.read_bytes()
    print(f"[+] Loaded {source} ({len(blob)} bytes)")
    try:
        document = decode(blob, limits=DecodeLimits(max_count=args.max_count), trace=trace)
    finally:
        if trace:
            trace.flush()
    header = document.header
    print(
        f"[+] Decoded {header.width}x{header.height} image: {len(document.color_table)} colors, "
        f"{len(document.commands)} commands"
    )
    if document.trailer:
        print(f"[i] Ignoring {len(document.trailer)} trailing bytes after the end of the command stream")

    if args.dump_text:
        write_text_dump(document, output_path.with_suffix(".txt"))
    write_png(document, output_path, width=args.width, height=args.height, options=options)
    if args.svg:
        write_svg(document, args.svg, options)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        options = RenderOptions(
            tolerance=args.tolerance,
            supersample=args.supersample,
            max_pixels=args.max_pixels or None,
        )
    except ValueError as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    batch = len(args.inputs) > 1 or any(path.is_dir() for path in args.inputs)
    if not batch:
        source = args.inputs[0]
        trace = DecodeTraceLogger(args.trace_log) if args.trace_log else None
        try:
            convert(source, args.output or source.with_suffix(".png"), args, options, trace)
        except (TinyVGError, ValueError, OSError, MemoryError) as exc:
            print(f"[error] {exc}", file=sys.stderr)
            return 1
        return 0

    if args.svg or args.trace_log:
        print("[error] --svg and --trace-log take a single input", file=sys.stderr)
        return 1
    sources = collect_inputs(args.inputs)
    if not sources:
        print("[error] no .tvg files found", file=sys.stderr)
        return 1

    failures = 0
    for source in sources:
        output_path = args.output / f"{source.stem}.png" if args.output else source.with_suffix(".png")
        try:
            convert(source, output_path, args, options)
        except (TinyVGError, ValueError, OSError, MemoryError) as exc:
            print(f"[error] {source}: {exc}", file=sys.stderr)
            failures += 1
    print(f"[+] Rendered {len(sources) - failures} of {len(sources)} files")
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
