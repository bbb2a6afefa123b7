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
"""Matrix builder: lays out N artifacts as an N×N linkage check grid.

Building a matrix happens in two phases on one event loop:

1. Barrier: every self-pair result is fetched and awaited together, producing
   the inherent error index. A failed self-pair only empties that artifact's
   inherent set.
2. Fill: one task per remaining cross pair. Each task computes its cell as soon
   as its fetch resolves, so cells complete in any order, but every cell is
   computed exactly once and the final matrix is deterministic.

Headers merge adjacent artifacts sharing group:artifact into spanning cells on
both axes, in input order.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .constants import ArtifactFetchError
from .coordinates import ArtifactCoordinate, group_artifact_key, same_artifact_different_version
from .diff_engine import compute_cell, error_cell, not_applicable_cell
from .inherent_errors import InherentErrorIndex
from .linkage_types import CellOutcome, HeaderSpan, MatrixSummary, PairResult
from .pair_store import PairResultStore, SelfPairOutcome

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]
CellHandler = Callable[[int, int, CellOutcome], None]


def build_header_spans(coordinates: Sequence[ArtifactCoordinate]) -> List[HeaderSpan]:
    """Merge adjacent coordinates sharing group:artifact into header spans.

    Non-contiguous entries of one group:artifact produce separate spans.

    Args:
        coordinates: Artifacts in matrix order

    Returns:
        List of HeaderSpan covering every index exactly once
    """
    spans: List[HeaderSpan] = []
    for index, coordinate in enumerate(coordinates):
        key = group_artifact_key(coordinate)
        if spans and spans[-1].key == key:
            last = spans[-1]
            spans[-1] = HeaderSpan(key=key, span=last.span + 1, start_index=last.start_index)
        else:
            spans.append(HeaderSpan(key=key, span=1, start_index=index))
    return spans


@dataclass
class LinkageMatrix:
    """A fully computed linkage check matrix.

    Attributes:
        artifacts: Artifacts in row/column order
        cells: (row, column) -> CellOutcome for every cell
        index: Inherent error index built from the self-pairs
        namespace: Optional BOM coordinate the data was read from
    """

    artifacts: List[ArtifactCoordinate]
    cells: Dict[CellKey, CellOutcome]
    index: InherentErrorIndex
    namespace: Optional[ArtifactCoordinate] = None
    header_spans: List[HeaderSpan] = field(init=False)

    def __post_init__(self) -> None:
        self.header_spans = build_header_spans(self.artifacts)

    @property
    def size(self) -> int:
        return len(self.artifacts)

    def cell(self, row: int, column: int) -> CellOutcome:
        return self.cells[(row, column)]

    def row(self, row: int) -> List[CellOutcome]:
        return [self.cells[(row, column)] for column in range(self.size)]

    def summary(self) -> MatrixSummary:
        return compute_summary(self)


def compute_summary(matrix: LinkageMatrix) -> MatrixSummary:
    """Aggregate pair statistics over the off-diagonal cells.

    Args:
        matrix: Computed matrix

    Returns:
        MatrixSummary with conflicting/non-conflicting/error counts
    """
    compared = conflicting = errors = not_applicable = 0
    conflicts_per_artifact: Dict[str, int] = {str(a): 0 for a in matrix.artifacts}

    for (row, column), outcome in sorted(matrix.cells.items()):
        if outcome.is_not_applicable:
            not_applicable += 1
            continue
        if outcome.is_error:
            errors += 1
            continue
        if outcome.is_self_pair:
            continue
        compared += 1
        if outcome.is_flagged:
            conflicting += 1
            conflicts_per_artifact[str(matrix.artifacts[row])] += 1
            conflicts_per_artifact[str(matrix.artifacts[column])] += 1

    return MatrixSummary(
        artifact_count=matrix.size,
        compared_pairs=compared,
        conflicting_pairs=conflicting,
        non_conflicting_pairs=compared - conflicting,
        error_cells=errors,
        not_applicable_cells=not_applicable,
        conflicts_per_artifact=conflicts_per_artifact,
    )


class LinkageMatrixSession:
    """Owns the mutable state of one matrix build.

    The inherent error index is written once by load_inherent_errors() and is
    read-only afterwards; cells are written once each by fill_cells().
    """

    def __init__(self, artifacts: Sequence[ArtifactCoordinate], store: PairResultStore):
        self.artifacts: List[ArtifactCoordinate] = list(artifacts)
        self.store = store
        self.index: Optional[InherentErrorIndex] = None
        self.cells: Dict[CellKey, CellOutcome] = {}
        self.failures: Dict[CellKey, str] = {}
        self._self_pairs: Dict[ArtifactCoordinate, SelfPairOutcome] = {}

    async def load_inherent_errors(self) -> InherentErrorIndex:
        """Fetch every self-pair and build the inherent error index (barrier)."""
        logger.info("Fetching %d self-pair results", len(self.artifacts))
        self._self_pairs = await self.store.fetch_self_pairs(self.artifacts)
        self.index = InherentErrorIndex.from_self_pairs(self._self_pairs)
        return self.index

    def cross_pairs(self) -> List[CellKey]:
        """Cells that need their own fetch, in row-major order."""
        pairs = []
        for i, a in enumerate(self.artifacts):
            for j, b in enumerate(self.artifacts):
                if a == b or same_artifact_different_version(a, b):
                    continue
                pairs.append((i, j))
        return pairs

    def _set_cell(self, row: int, column: int, outcome: CellOutcome, on_cell: Optional[CellHandler]) -> None:
        key = (row, column)
        if key in self.cells:
            raise RuntimeError(f"Cell {key} computed twice")
        self.cells[key] = outcome
        if on_cell is not None:
            on_cell(row, column, outcome)

    def _self_pair_cell(self, artifact: ArtifactCoordinate) -> CellOutcome:
        outcome = self._self_pairs.get(artifact)
        if outcome is None:
            return error_cell(f"No self-pair result for {artifact}", is_self_pair=True)
        if isinstance(outcome, ArtifactFetchError):
            return error_cell(str(outcome), is_self_pair=True)
        return compute_cell(outcome, frozenset(), is_self_pair=True)

    async def _fill_cross_pair(self, row: int, column: int, on_cell: Optional[CellHandler]) -> None:
        if self.index is None:
            raise RuntimeError("Inherent errors must be loaded before filling cells")
        a, b = self.artifacts[row], self.artifacts[column]
        result: PairResult
        try:
            result = await self.store.fetch(a, b)
        except ArtifactFetchError as e:
            logger.warning("Pair %s x %s unavailable: %s", a, b, e)
            self.failures[(row, column)] = str(e)
            self._set_cell(row, column, error_cell(str(e)), on_cell)
            return

        outcome = compute_cell(result, self.index.union(a, b), is_self_pair=False)
        if outcome.is_error:
            self.failures[(row, column)] = outcome.message
        self._set_cell(row, column, outcome, on_cell)

    async def fill_cells(self, on_cell: Optional[CellHandler] = None) -> Dict[CellKey, CellOutcome]:
        """Compute every cell; cross pairs are fetched concurrently.

        Args:
            on_cell: Completion handler called once per cell as it is computed

        Returns:
            Mapping of (row, column) -> CellOutcome

        Raises:
            RuntimeError: If load_inherent_errors() has not completed
        """
        if self.index is None:
            raise RuntimeError("Inherent errors must be loaded before filling cells")

        for i, a in enumerate(self.artifacts):
            for j, b in enumerate(self.artifacts):
                if same_artifact_different_version(a, b):
                    self._set_cell(i, j, not_applicable_cell(), on_cell)
                elif a == b:
                    self._set_cell(i, j, self._self_pair_cell(a), on_cell)

        pairs = self.cross_pairs()
        logger.info("Fetching %d cross-pair results", len(pairs))
        tasks = [asyncio.ensure_future(self._fill_cross_pair(i, j, on_cell)) for i, j in pairs]
        await asyncio.gather(*tasks)
        return self.cells

    async def build(self, on_cell: Optional[CellHandler] = None) -> LinkageMatrix:
        """Run both phases and return the completed matrix."""
        index = await self.load_inherent_errors()
        await self.fill_cells(on_cell)
        return LinkageMatrix(artifacts=self.artifacts, cells=dict(self.cells), index=index, namespace=self.store.namespace)
