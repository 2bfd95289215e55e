#!/usr/bin/env python3
"""
Print a TinyVG file in the parenthesized text notation.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Sequence

from tinyvg import TinyVGError, decode_file, to_text


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dump a TinyVG file as text.")
    parser.add_argument("input", type=Path, help="Path to the source .tvg file")
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        help="Write the dump here instead of stdout",
    )
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        document = decode_file(args.input)
    except (TinyVGError, OSError) as exc:
        print(f"[error] {exc}", file=sys.stderr)
        return 1

    text = to_text(document)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(text, encoding="utf-8")
        print(f"[+] Text dump written to {args.output}")
    else:
        sys.stdout.write(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
