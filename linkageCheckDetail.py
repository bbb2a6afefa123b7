#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# ****************************************************************************************************************************************************
# * BSD 3-Clause License
# *
# * Copyright (c) 2025, Mana Battery
# * All rights reserved.
# *
# * Redistribution and use in source and binary forms, with or without modification, are permitted provided that the following conditions are met:
# *
# * 1. Redistributions of source code must retain the above copyright notice, this list of conditions and the following disclaimer.
# * 2. Redistributions in binary form must reproduce the above copyright notice, this list of conditions and the following disclaimer in the
# *    documentation and/or other materials provided with the distribution.
# * 3. Neither the name of the copyright holder nor the names of its contributors may be used to endorse or promote products derived from this
# *    software without specific prior written permission.
# *
# * THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO,
# * THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR
# * CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO,
# * PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF
# * LIABILITY, WHETHER IN CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE,
# * EVEN IF ADVISED OF THE POSSIBILITY OF SUCH DAMAGE.
# ****************************************************************************************************************************************************
"""Linkage check detail for one artifact pair.

Version: 1.0.0

PURPOSE:
    Explains a single matrix cell: which symbol problems appear when the two
    artifacts share a classpath, which classes reference them, and which
    problems each artifact already has on its own.

WHAT IT DOES:
    - Fetches the self-pair result of both artifacts (inherent problems)
    - Fetches the pair result and subtracts both inherent sets
    - Lists every new problem with its referencing classes
    - Lists both inherent problem lists and the checked classpath
    - Optionally writes the same view as an HTML page

USE CASES:
    - "Why is the cell for guava 28.0 x grpc-core 1.20 red?"
    - "Which of my classes reference the missing symbol?"
    - "Is this problem new, or did the artifact already have it?"

OUTPUT:
    New symbol problems (or the failure message of the combined check),
    followed by the inherent problems of artifact1 and artifact2.
"""
__version__ = "1.0.0"

import sys
import asyncio
import argparse
import logging
from typing import Optional

from linkagelib.package_verification import require_package

require_package("httpx", "fetching pair results")
require_package("Jinja2", "HTML reports")

from linkagelib.color_utils import Colors, print_error, print_warning, should_use_color
from linkagelib.constants import (
    EXIT_INVALID_ARGS,
    EXIT_RUNTIME_ERROR,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_SUCCESS,
    ArgumentError,
    ArtifactFetchError,
    LinkageCheckError,
    ValidationError,
)
from linkagelib.coordinates import ArtifactCoordinate, parse, same_artifact_different_version
from linkagelib.diff_engine import summarize_pair
from linkagelib.html_report import render_pair_detail_html, write_html
from linkagelib.inherent_errors import InherentErrorIndex
from linkagelib.linkage_types import PairDetail, PairResult
from linkagelib.matrix_display import print_pair_detail
from linkagelib.pair_store import PairResultStore, create_store


async def fetch_pair_detail(artifact1: ArtifactCoordinate, artifact2: ArtifactCoordinate, store: PairResultStore) -> PairDetail:
    """Fetch both baselines and the pair result, then build the detail view.

    An unavailable pair result becomes the detail's error instead of an
    exception; the store is closed in every case.

    Args:
        artifact1: First artifact
        artifact2: Second artifact
        store: Pair result store

    Returns:
        PairDetail for the pair
    """
    try:
        index = InherentErrorIndex.from_self_pairs(await store.fetch_self_pairs([artifact1, artifact2]))

        pair_result: Optional[PairResult] = None
        fetch_error: Optional[str] = None
        try:
            pair_result = await store.fetch(artifact1, artifact2)
        except ArtifactFetchError as e:
            logging.warning("Pair %s x %s unavailable: %s", artifact1, artifact2, e)
            fetch_error = str(e)

        return summarize_pair(artifact1, artifact2, pair_result, index, fetch_error)
    finally:
        await store.aclose()


def main() -> int:
    """Main entry point for the pair detail tool.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    # Configure logging
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Show the new and inherent symbol problems of one artifact pair.",
        epilog="""
Examples:
  linkageCheckDetail.py --data-dir linkage-check-cache \\
      --artifact1 com.google.guava:guava:28.0-jre --artifact2 io.grpc:grpc-core:1.20.0
  linkageCheckDetail.py --base-url https://example.org/linkage/ --bom com.google.cloud:libraries-bom:2.0.0 \\
      --artifact1 ... --artifact2 ... --html cell.html
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}", help="Show version and exit")

    parser.add_argument("--artifact1", type=str, required=True, metavar="COORD", help="Row artifact (group:artifact:version)")

    parser.add_argument("--artifact2", type=str, required=True, metavar="COORD", help="Column artifact (group:artifact:version)")

    parser.add_argument("--bom", type=str, metavar="COORD", help="BOM coordinate used only to locate the pair result files")

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--data-dir", type=str, metavar="DIR", help="Directory containing the pair result files")
    source.add_argument("--base-url", type=str, metavar="URL", help="Base URL serving the pair result files")

    parser.add_argument("--timeout", type=float, metavar="SECONDS", help="HTTP timeout per pair result (default: none)")

    parser.add_argument("--html", type=str, metavar="FILE.html", help="Write the detail view as an HTML page")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    args: argparse.Namespace = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    try:
        artifact1 = parse(args.artifact1)
        artifact2 = parse(args.artifact2)
        if same_artifact_different_version(artifact1, artifact2):
            raise ArgumentError(f"{artifact1} and {artifact2} are versions of the same artifact and are never compared")

        namespace = parse(args.bom) if args.bom else None
        store = create_store(args.data_dir, args.base_url, namespace, timeout=args.timeout)

        detail = asyncio.run(fetch_pair_detail(artifact1, artifact2, store))
        print_pair_detail(detail)

        if args.html:
            write_html(args.html, render_pair_detail_html(detail))

        return EXIT_SUCCESS

    except (ValidationError, ValueError) as e:
        logging.error("Validation error: %s", e)
        print_error(str(e))
        return EXIT_INVALID_ARGS

    except (LinkageCheckError, RuntimeError, IOError) as e:
        logging.error("Runtime error: %s", e)
        print_error(f"Runtime error: {e}")
        return getattr(e, "exit_code", EXIT_RUNTIME_ERROR)

    except Exception as e:  # pylint: disable=broad-exception-caught
        logging.critical("Unexpected error: %s", e, exc_info=True)
        print_error(f"Fatal error: {e}")
        print_warning("Run with --verbose for more details", prefix=False)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print_warning("\nInterrupted by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
