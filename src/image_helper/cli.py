#!/usr/bin/env python3
"""
cli.py: Run an image batch from a JSON manifest and write its encoded artifacts.

Each encoded image is written to <output_dir>/<key>.txt and each nine-slice
record to <output_dir>/<key>.nineslice.json.

Usage:
    image-helper assets/manifest.json -o build/encoded [--timeout 10]
"""

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .api import PillowHostEngine
from .config import PipelineConfig
from .core import BatchReport, ImageDescriptor, ImagePipeline, load_manifest
from .utils.log_utils import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Load images from a manifest, derive slices and nine-slices, and write data URLs to files."
    )
    parser.add_argument(
        "manifest",
        help="Path to a JSON manifest of image descriptors."
    )
    parser.add_argument(
        "-o", "--output-dir",
        required=True,
        help="Directory where encoded images and nine-slice records will be written."
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for the batch to load before reporting stalled loads (default: wait forever)."
    )
    parser.add_argument(
        "--strict-bounds",
        action="store_true",
        help="Reject slices and nine-slices that extend past their source image."
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error", "critical", "none"],
        default="warning",
        help="Set logging level (default: warning; 'none' disables logging)"
    )
    return parser.parse_args(argv)


def write_artifacts(pipeline: ImagePipeline, descriptors: List[ImageDescriptor], output_dir: Path) -> int:
    """Write every cached artifact of ``descriptors`` under ``output_dir``. Returns files written."""
    output_dir.mkdir(parents=True, exist_ok=True)
    written = 0
    for descriptor in descriptors:
        for key in descriptor.keys() + [k for k, _ in descriptor.variant_urls()[1:]]:
            encoded = pipeline.cache.lookup(key)
            if isinstance(encoded, str):
                (output_dir / f"{key}.txt").write_text(encoded, encoding="utf-8")
                written += 1
            data = pipeline.cache.lookup_nine_slice(key)
            if not isinstance(data, Exception):
                out_path = output_dir / f"{key}.nineslice.json"
                out_path.write_text(json.dumps(data.to_dict(), indent=2), encoding="utf-8")
                written += 1
            logger.debug("Wrote artifacts for '%s'", key)
    return written


def print_summary(console: Console, report: BatchReport, written: int) -> None:
    table = Table(title="Image batch")
    table.add_column("Key")
    table.add_column("Status")
    for key in report.derived:
        table.add_row(key, "[green]derived[/green]")
    for key, fault in report.faults.items():
        table.add_row(key, f"[red]{type(fault).__name__}[/red]: {escape(str(fault))}")
    console.print(table)
    console.print(f"{written} files written in {report.elapsed:.2f}s")


async def run(args) -> BatchReport:
    descriptors = load_manifest(Path(args.manifest))
    config = PipelineConfig.from_env()
    if args.timeout is not None:
        config = replace(config, batch_timeout=args.timeout)
    if args.strict_bounds:
        config = replace(config, strict_bounds=True)

    host = PillowHostEngine()
    pipeline = ImagePipeline(host, config=config)
    try:
        report = await pipeline.load(descriptors)
        await pipeline.wait_ready()
    finally:
        await host.close()

    written = write_artifacts(pipeline, descriptors, Path(args.output_dir))
    print_summary(Console(), report, written)
    return report


def main(argv=None):
    args = parse_args(argv)
    if args.log_level.lower() != 'none':
        configure_logging(getattr(logging, args.log_level.upper()))
    if not os.path.isfile(args.manifest):
        print(f"Error: Manifest '{args.manifest}' does not exist.", file=sys.stderr)
        sys.exit(1)

    report = asyncio.run(run(args))
    sys.exit(0 if report.ok else 2)


if __name__ == "__main__":
    main()
