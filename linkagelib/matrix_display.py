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
"""Terminal rendering of linkage check matrices and pair details."""

import sys
from typing import FrozenSet, List, Optional, TextIO

from .color_utils import Colors, colored, print_warning
from .constants import CLASS_DEEMPHASIZED, CLASS_SELECTED, MAX_LABEL_WIDTH, PENDING_CELL
from .coordinates import group_artifact_key
from .linkage_types import CellOutcome, MatrixSummary, PairDetail
from .matrix_builder import LinkageMatrix
from .selection import Highlights

MIN_CELL_WIDTH = 5


def _truncate(label: str, width: int) -> str:
    if len(label) <= width:
        return label
    if width <= 3:
        return label[:width]
    return label[: width - 3] + "..."


def _cell_color(outcome: CellOutcome) -> str:
    if outcome.is_error:
        return Colors.MAGENTA
    if outcome.is_not_applicable:
        return Colors.DIM
    if outcome.is_self_pair:
        return Colors.CYAN
    if outcome.is_flagged:
        return Colors.RED
    return Colors.GREEN


def _style_for(classes: FrozenSet[str]) -> str:
    if CLASS_SELECTED in classes:
        return Colors.BRIGHT + Colors.BG_BLUE
    if CLASS_DEEMPHASIZED in classes:
        return Colors.DIM
    return ""


def format_matrix(matrix: LinkageMatrix, highlights: Optional[Highlights] = None) -> List[str]:
    """Format a matrix as terminal lines.

    Columns are numbered; the row labels carry group:artifact (once per span),
    version and index. A two-level column header shows group:artifact spans
    above the column numbers.

    Args:
        matrix: Computed matrix
        highlights: Optional selection highlight classes per cell

    Returns:
        Lines without trailing newlines
    """
    highlights = highlights or {}
    n = matrix.size
    if n == 0:
        return []

    cell_width = max([MIN_CELL_WIDTH, len(str(n - 1)) + 2] + [len(c.display_value) + 2 for c in matrix.cells.values()])
    group_width = min(MAX_LABEL_WIDTH, max(len(span.key) for span in matrix.header_spans))
    version_width = min(MAX_LABEL_WIDTH, max(len(a.version) for a in matrix.artifacts))
    index_width = len(str(n - 1)) + 2
    label_width = group_width + 1 + version_width + 1 + index_width

    lines: List[str] = []

    # Level 1: group:artifact spans
    header = " " * (label_width + 1)
    for span in matrix.header_spans:
        text = _truncate(span.key, span.span * cell_width - 1)
        header += colored(text, Colors.WHITE, Colors.BRIGHT) + " " * (span.span * cell_width - len(text))
    lines.append(header.rstrip())

    # Level 2: column numbers
    numbers = " " * (label_width + 1) + "".join(str(j).center(cell_width) for j in range(n))
    lines.append(colored(numbers.rstrip(), Colors.DIM))

    first_rows = {span.start_index for span in matrix.header_spans}
    for i, artifact in enumerate(matrix.artifacts):
        group_label = _truncate(group_artifact_key(artifact), group_width) if i in first_rows else ""
        label = f"{group_label:<{group_width}} {_truncate(artifact.version, version_width):<{version_width}} {f'[{i}]':>{index_width}}"
        label_style = _style_for(highlights.get((i, i), frozenset()))
        row = (colored(label, "", label_style) if label_style else label) + " "

        for j in range(n):
            outcome = matrix.cells.get((i, j))
            text = outcome.display_value if outcome is not None else PENDING_CELL
            plain = text.center(cell_width)
            color = _cell_color(outcome) if outcome is not None else ""
            style = _style_for(highlights.get((i, j), frozenset()))
            row += colored(plain, color, style) if (color or style) else plain
        lines.append(row.rstrip())

    return lines


def visualize_matrix(matrix: LinkageMatrix, highlights: Optional[Highlights] = None, show_legend: bool = True, file: Optional[TextIO] = None) -> None:
    """Print a linkage check matrix with an optional legend."""
    if file is None:
        file = sys.stdout

    if matrix.size == 0:
        print_warning("No artifacts to display in matrix", prefix=False)
        return

    title = f"Linkage Check Matrix ({matrix.size} artifacts)"
    if matrix.namespace is not None:
        title += f" for {matrix.namespace}"
    print(f"\n{Colors.BRIGHT}{title}:{Colors.RESET}", file=file)
    print(f"{Colors.DIM}Cells count symbol problems introduced by combining the row and column artifacts{Colors.RESET}\n", file=file)

    for line in format_matrix(matrix, highlights):
        print(line, file=file)

    if not show_legend:
        return

    print(f"\n{Colors.BRIGHT}Legend:{Colors.RESET}", file=file)
    print(f"  {colored('n', Colors.RED)} = n new symbol problems for the pair", file=file)
    print(f"  {colored('0', Colors.GREEN)} = no new symbol problems", file=file)
    print(f"  {colored('(n)', Colors.CYAN)} = inherent problems of the artifact alone", file=file)
    print(f"  {colored('N/A', Colors.DIM)} = two versions of one artifact (not compared)", file=file)
    print(f"  {colored('error', Colors.MAGENTA)} = check failed or result unavailable", file=file)
    if highlights:
        print(f"  {colored('selected', '', Colors.BRIGHT + Colors.BG_BLUE)} / {colored('de-emphasized', '', Colors.DIM)} = selection", file=file)


def print_summary(summary: MatrixSummary, failures: Optional[dict] = None, file: Optional[TextIO] = None) -> None:
    """Print aggregate pair statistics and baseline failures."""
    if file is None:
        file = sys.stdout

    print(f"\n{Colors.BRIGHT}Summary:{Colors.RESET}", file=file)
    print(f"  Artifacts:        {summary.artifact_count}", file=file)
    print(f"  Compared pairs:   {summary.compared_pairs}", file=file)
    print(f"  Conflicting:      {colored(str(summary.conflicting_pairs), Colors.RED if summary.conflicting_pairs else Colors.GREEN)}", file=file)
    print(f"  Non-conflicting:  {summary.non_conflicting_pairs}", file=file)
    if summary.error_cells:
        print(f"  Error cells:      {colored(str(summary.error_cells), Colors.MAGENTA)}", file=file)
    if summary.not_applicable_cells:
        print(f"  Not applicable:   {summary.not_applicable_cells}", file=file)

    worst = [(a, c) for a, c in sorted(summary.conflicts_per_artifact.items(), key=lambda x: (-x[1], x[0])) if c > 0]
    if worst:
        print(f"\n{Colors.BRIGHT}Artifacts with most conflicting pairs:{Colors.RESET}", file=file)
        for artifact, count in worst[:10]:
            print(f"  {count:3d}  {artifact}", file=file)

    if failures:
        print(f"\n{Colors.YELLOW}Artifacts without a baseline (all their problems count as new):{Colors.RESET}", file=file)
        for artifact, message in sorted(failures.items(), key=lambda x: str(x[0])):
            print(f"  {artifact}: {message}", file=file)


def print_pair_detail(detail: PairDetail, file: Optional[TextIO] = None) -> None:
    """Print the detail view of one artifact pair."""
    if file is None:
        file = sys.stdout

    print(f"\n{Colors.BRIGHT}{detail.artifact1} x {detail.artifact2}{Colors.RESET}\n", file=file)

    if detail.error is not None:
        print(colored(f"Linkage check unavailable: {detail.error}", Colors.MAGENTA), file=file)
    elif not detail.new_problems:
        print(colored("No new symbol problems", Colors.GREEN), file=file)
    else:
        print(f"{Colors.BRIGHT}New symbol problems ({len(detail.new_problems)}):{Colors.RESET}", file=file)
        for problem in detail.new_problems:
            print(f"  {colored(problem.key, Colors.RED)}", file=file)
            if problem.references:
                print(f"    {Colors.DIM}referenced by{Colors.RESET}", file=file)
            for reference in problem.references:
                location = f" ({reference.coordinates})" if reference.coordinates else ""
                print(f"      {reference.class_name}{location}", file=file)

    for artifact, problems in ((detail.artifact1, detail.inherent_problems1), (detail.artifact2, detail.inherent_problems2)):
        print(f"\n{Colors.BRIGHT}Inherent problems of {artifact} ({len(problems)}):{Colors.RESET}", file=file)
        if str(artifact) in detail.baseline_errors:
            print(colored(f"  baseline unavailable: {detail.baseline_errors[str(artifact)]}", Colors.YELLOW), file=file)
        for problem in problems:
            print(f"  {problem}", file=file)

    if detail.class_path_artifacts:
        print(f"\n{Colors.BRIGHT}Class path:{Colors.RESET}", file=file)
        for entry in detail.class_path_artifacts:
            print(f"  {entry}", file=file)
