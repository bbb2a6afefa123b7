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
"""Pairwise diff engine: which problems does combining two artifacts introduce?

A problem found when two artifacts share a classpath is only interesting if it
could not have been predicted from either artifact's self-check. The engine
subtracts the union of both inherent error sets from the pair's problem keys.
All functions are pure.
"""

from typing import AbstractSet, List, Optional

from .constants import ERROR_MARKER, NOT_APPLICABLE_MARKER, SELF_PAIR_FORMAT
from .coordinates import ArtifactCoordinate
from .inherent_errors import InherentErrorIndex
from .linkage_types import CellOutcome, LinkageCheckFailure, LinkageCheckSuccess, PairDetail, PairResult, ProblemDetail


def compute_cell(pair_result: PairResult, inherent_union: AbstractSet[str], is_self_pair: bool) -> CellOutcome:
    """Compute the display state of one matrix cell.

    Args:
        pair_result: Linkage result for the pair
        inherent_union: inherent(a) | inherent(b); ignored for self-pairs
        is_self_pair: Whether the cell is on the diagonal

    Returns:
        CellOutcome with the display value and highlight flags
    """
    if isinstance(pair_result, LinkageCheckFailure):
        return error_cell(pair_result.error, is_self_pair)

    if is_self_pair:
        count = len(pair_result.symbol_problems)
        return CellOutcome(display_value=SELF_PAIR_FORMAT.format(count=count), count=count, is_self_pair=True)

    count = sum(1 for key in pair_result.symbol_problems if key not in inherent_union)
    return CellOutcome(display_value=str(count), is_flagged=count > 0, count=count)


def error_cell(message: str, is_self_pair: bool = False) -> CellOutcome:
    """Cell for a failed check or an unavailable pair result."""
    return CellOutcome(display_value=ERROR_MARKER, is_error=True, is_self_pair=is_self_pair, message=message)


def not_applicable_cell() -> CellOutcome:
    """Cell for two versions of the same artifact (never compared)."""
    return CellOutcome(display_value=NOT_APPLICABLE_MARKER, is_not_applicable=True)


def non_inherent_problems(pair_result: LinkageCheckSuccess, inherent_union: AbstractSet[str]) -> List[ProblemDetail]:
    """List the problems of a pair that neither artifact has on its own.

    Args:
        pair_result: Successful linkage result for the pair
        inherent_union: inherent(a) | inherent(b)

    Returns:
        ProblemDetail entries in result order, each with its referencing classes
    """
    return [
        ProblemDetail(key=key, references=tuple(references))
        for key, references in pair_result.symbol_problems.items()
        if key not in inherent_union
    ]


def summarize_pair(
    artifact1: ArtifactCoordinate,
    artifact2: ArtifactCoordinate,
    pair_result: Optional[PairResult],
    index: InherentErrorIndex,
    fetch_error: Optional[str] = None,
) -> PairDetail:
    """Build the detail view of one pair.

    Args:
        artifact1: First artifact
        artifact2: Second artifact
        pair_result: Linkage result for the pair, None if it could not be fetched
        index: Inherent errors of both artifacts
        fetch_error: Message explaining why pair_result is None

    Returns:
        PairDetail with new problems and both inherent problem lists
    """
    baseline_errors = {str(a): index.failures[a] for a in (artifact1, artifact2) if a in index.failures}
    detail = PairDetail(
        artifact1=artifact1,
        artifact2=artifact2,
        new_problems=[],
        inherent_problems1=sorted(index.get(artifact1)),
        inherent_problems2=sorted(index.get(artifact2)),
        baseline_errors=baseline_errors,
    )

    if pair_result is None:
        detail.error = fetch_error or ERROR_MARKER
    elif isinstance(pair_result, LinkageCheckFailure):
        detail.error = pair_result.error
    else:
        detail.class_path_artifacts = list(pair_result.class_path_artifacts)
        if artifact1 == artifact2:
            detail.new_problems = [ProblemDetail(key=k, references=tuple(v)) for k, v in pair_result.symbol_problems.items()]
        else:
            detail.new_problems = non_inherent_problems(pair_result, index.union(artifact1, artifact2))
    return detail
