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
"""Cross-artifact linkage check matrix.

Version: 1.0.0

PURPOSE:
    Shows, for every pair of artifacts in a set (typically the members of a BOM),
    how many symbol problems appear only when the two artifacts share one
    classpath. Problems that either artifact already has on its own ("inherent"
    problems) are subtracted, so a non-zero cell points at a real
    incompatibility between the two artifacts.

WHAT IT DOES:
    - Reads precomputed linkage check results, one JSON document per pair,
      from a local directory or a static HTTP server
    - Fetches every self-pair first to build each artifact's inherent error set
    - Fetches all cross pairs concurrently and computes non-inherent counts
    - Renders the matrix with group:artifact spanning headers and colored cells
    - Highlights selected artifact versions (one per group:artifact)
    - Exports HTML, CSV, conflict graphs and reloadable results

USE CASES:
    - "Which artifacts in my BOM conflict with each other?"
    - "Does upgrading artifact X to version 2 introduce linkage errors with Y?"
    - "Which artifacts have the most conflicting pairs?"
    - "Which artifacts could not be checked at all?"

METHOD:
    For a pair (A, B) the non-inherent count is
        |keys(problems(A, B)) \\ (inherent(A) | inherent(B))|
    where inherent(X) is the set of problem keys of the self-pair (X, X). If a
    self-pair is unavailable its inherent set is empty, so no problem of that
    artifact is hidden. Two versions of the same artifact are never compared.

OUTPUT:
    1. Matrix: rows and columns in input order, diagonal shows inherent counts
       in parentheses, N/A for versions of one artifact, "error" for failures
    2. Summary: compared/conflicting/error pair counts, worst artifacts,
       artifacts without a baseline
"""
__version__ = "1.0.0"

import sys
import asyncio
import argparse
import logging
from typing import List, Optional, Sequence

from linkagelib.package_verification import require_package

require_package("httpx", "fetching pair results")
require_package("networkx", "graph export")
require_package("Jinja2", "HTML reports")

from linkagelib.color_utils import Colors, print_error, print_warning, print_success, should_use_color
from linkagelib.constants import (
    DEFAULT_MAX_CONCURRENCY,
    EXIT_INVALID_ARGS,
    EXIT_RUNTIME_ERROR,
    EXIT_KEYBOARD_INTERRUPT,
    EXIT_SUCCESS,
    ArgumentError,
    LinkageCheckError,
    ValidationError,
)
from linkagelib.coordinates import ArtifactCoordinate, parse, parse_artifact_list
from linkagelib.export_utils import export_matrix_to_csv, export_linkage_graph
from linkagelib.html_report import render_matrix_html, write_html
from linkagelib.linkage_types import CellOutcome
from linkagelib.matrix_builder import LinkageMatrix, LinkageMatrixSession
from linkagelib.matrix_display import visualize_matrix, print_summary
from linkagelib.matrix_serialization import save_matrix_results, load_matrix_results
from linkagelib.pair_store import PairResultStore, create_store
from linkagelib.selection import CellClassRenderer, Select, SelectionController


def parse_artifacts_argument(text: str) -> List[ArtifactCoordinate]:
    """Parse --artifacts, dropping malformed entries with a warning.

    Raises:
        ArgumentError: If no valid coordinate remains
    """
    artifacts, errors = parse_artifact_list(text)
    for error in errors:
        logging.warning("%s", error)
        print_warning(f"{error} (excluded from matrix)")

    if not artifacts:
        raise ArgumentError("No valid artifact coordinates in --artifacts")

    return artifacts


def parse_selection(selections: Optional[Sequence[str]], artifacts: Sequence[ArtifactCoordinate]) -> List[ArtifactCoordinate]:
    """Parse --select coordinates and check they are part of the matrix.

    Raises:
        FormatError: If a coordinate is malformed
        ArgumentError: If a coordinate is not one of the artifacts
    """
    selected: List[ArtifactCoordinate] = []
    for text in selections or []:
        coordinate = parse(text)
        if coordinate not in artifacts:
            raise ArgumentError(f"--select {text} is not one of the matrix artifacts")
        selected.append(coordinate)
    return selected


def _log_cell(artifacts: Sequence[ArtifactCoordinate]):
    def on_cell(row: int, column: int, outcome: CellOutcome) -> None:
        logging.debug("Cell %s x %s = %s", artifacts[row], artifacts[column], outcome.display_value)

    return on_cell


async def compute_matrix(artifacts: Sequence[ArtifactCoordinate], store: PairResultStore) -> LinkageMatrix:
    """Build the matrix and release the store.

    Args:
        artifacts: Artifacts in matrix order
        store: Pair result store

    Returns:
        Completed LinkageMatrix
    """
    session = LinkageMatrixSession(artifacts, store)
    try:
        return await session.build(on_cell=_log_cell(session.artifacts))
    finally:
        await store.aclose()


def main() -> int:
    """Main entry point for the linkage check matrix tool.

    Orchestrates the complete workflow:
    1. Parse and validate command-line arguments
    2. Fetch self-pairs and build inherent error sets
    3. Fetch cross pairs and compute the matrix
    4. Apply selection highlights and display results
    5. Export data if requested

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    # Configure logging
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        description="Cross-artifact linkage check matrix.",
        epilog="""
This tool shows, for every pair of artifacts, how many symbol problems are
introduced by putting both on one classpath, after subtracting the problems
each artifact already has on its own.

Pair results are JSON documents named
  [<bom>/]<artifact1>___<artifact2>.json
where ':' and '.' in coordinates are replaced by '_'.

Examples:
  linkageCheckMatrix.py --data-dir linkage-check-cache \\
      --artifacts com.google.guava:guava:27.1-jre,com.google.guava:guava:28.0-jre,io.grpc:grpc-core:1.20.0
  linkageCheckMatrix.py --base-url https://example.org/linkage/ --bom com.google.cloud:libraries-bom:2.0.0 \\
      --artifacts ... --select com.google.guava:guava:28.0-jre --html matrix.html
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}", help="Show version and exit")

    parser.add_argument("--artifacts", type=str, metavar="COORDS", help="Comma-separated group:artifact:version coordinates (order preserved)")

    parser.add_argument("--bom", type=str, metavar="COORD", help="BOM coordinate used only to locate the pair result files")

    source = parser.add_mutually_exclusive_group()
    source.add_argument("--data-dir", type=str, metavar="DIR", help="Directory containing the pair result files")
    source.add_argument("--base-url", type=str, metavar="URL", help="Base URL serving the pair result files")

    parser.add_argument(
        "--select",
        type=str,
        action="append",
        metavar="COORD",
        help="Highlight the row and column of an artifact version (can be used multiple times; "
        "later selections of another version of the same artifact replace earlier ones)",
    )

    parser.add_argument("--html", type=str, metavar="FILE.html", help="Write the matrix as an HTML page")

    parser.add_argument("--export", type=str, metavar="FILE.csv", help="Export full matrix to CSV file")

    parser.add_argument("--export-graph", type=str, metavar="FILE", help="Export conflicting pairs as a graph (formats: .graphml, .gexf, .json)")

    parser.add_argument("--save-results", type=str, metavar="FILE.json.gz", help="Save the computed matrix (gzip compressed JSON)")

    parser.add_argument("--load-results", type=str, metavar="FILE.json.gz", help="Display a previously saved matrix instead of fetching pair results")

    parser.add_argument(
        "--max-concurrency", type=int, default=DEFAULT_MAX_CONCURRENCY, help=f"Maximum pair results fetched at once (default: {DEFAULT_MAX_CONCURRENCY})"
    )

    parser.add_argument("--timeout", type=float, metavar="SECONDS", help="HTTP timeout per pair result (default: none)")

    parser.add_argument("--no-legend", action="store_true", help="Do not print the matrix legend")

    parser.add_argument("--no-color", action="store_true", help="Disable colored output")

    parser.add_argument("--verbose", action="store_true", help="Enable verbose debug logging")

    args: argparse.Namespace = parser.parse_args()

    # Set logging level based on verbose flag
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")

    if not should_use_color(no_color=args.no_color):
        Colors.disable()

    try:
        # Phase 1: Validate arguments
        if args.load_results:
            if args.artifacts or args.data_dir or args.base_url:
                raise ArgumentError("--load-results cannot be combined with --artifacts, --data-dir or --base-url")
        else:
            if not args.artifacts:
                raise ArgumentError("--artifacts is required")
            if not (args.data_dir or args.base_url):
                raise ArgumentError("One of --data-dir or --base-url is required")
            if args.max_concurrency < 1:
                raise ArgumentError(f"--max-concurrency must be positive, got {args.max_concurrency}")

        # Phase 2: Compute (or load) the matrix
        matrix: LinkageMatrix
        if args.load_results:
            matrix = load_matrix_results(args.load_results)
        else:
            artifacts = parse_artifacts_argument(args.artifacts)
            namespace = parse(args.bom) if args.bom else None
            store = create_store(args.data_dir, args.base_url, namespace, args.max_concurrency, args.timeout)

            print(f"\n{Colors.BRIGHT}{'='*80}{Colors.RESET}")
            print(f"{Colors.BRIGHT}LINKAGE CHECK MATRIX{Colors.RESET}")
            print(f"{Colors.BRIGHT}{'='*80}{Colors.RESET}\n")

            matrix = asyncio.run(compute_matrix(artifacts, store))
            print_success(f"Computed {matrix.size}x{matrix.size} matrix from {store.fetch_count} pair results", prefix=False)

        # Phase 3: Selection highlights
        renderer = CellClassRenderer()
        controller = SelectionController(matrix.artifacts, renderer)
        for coordinate in parse_selection(args.select, matrix.artifacts):
            controller.dispatch(Select(coordinate))

        # Phase 4: Display results
        visualize_matrix(matrix, renderer.highlights, show_legend=not args.no_legend)
        print_summary(matrix.summary(), matrix.index.failures)

        # Phase 5: Export data (if requested)
        if args.html:
            write_html(args.html, render_matrix_html(matrix, renderer.highlights))

        if args.export:
            export_matrix_to_csv(args.export, matrix)

        if args.export_graph:
            export_linkage_graph(args.export_graph, matrix)

        if args.save_results:
            save_matrix_results(matrix, args.save_results)

        return EXIT_SUCCESS

    except (ValidationError, ValueError) as e:
        # Validation errors - user fixable
        logging.error("Validation error: %s", e)
        print_error(str(e))
        return EXIT_INVALID_ARGS

    except (LinkageCheckError, RuntimeError, IOError) as e:
        logging.error("Runtime error: %s", e)
        print_error(f"Runtime error: {e}")
        print_warning("Run with --verbose for more details", prefix=False)
        return getattr(e, "exit_code", EXIT_RUNTIME_ERROR)

    except Exception as e:  # pylint: disable=broad-exception-caught
        # Unexpected errors - catch all to provide user-friendly error message
        logging.critical("Unexpected error: %s", e, exc_info=True)
        print_error(f"Fatal error: {e}")
        print_warning("Run with --verbose for more details", prefix=False)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    try:
        exit_code = main()
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        print_warning("\nInterrupted by user", prefix=False)
        sys.exit(EXIT_KEYBOARD_INTERRUPT)
