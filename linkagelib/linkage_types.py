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
"""Type definitions for linkage check matrices.

This module contains dataclasses and type definitions used across the matrix,
detail and rendering modules.
"""

from typing import Dict, List, Optional, Tuple, Union
from dataclasses import dataclass, field

from .coordinates import ArtifactCoordinate


@dataclass(frozen=True)
class SymbolReference:
    """A class that references a problematic symbol.

    Attributes:
        class_name: Fully qualified name of the referencing class
        coordinates: Coordinate of the artifact that contains the class
    """

    class_name: str
    coordinates: str


@dataclass(frozen=True)
class LinkageCheckSuccess:
    """Precomputed linkage check result for an artifact pair.

    Attributes:
        symbol_problems: Problem key -> classes referencing the missing symbol
        references: Problem key -> referencing classes (self-pair files only)
        class_path_artifacts: Coordinates on the checked classpath, in order
    """

    symbol_problems: Dict[str, List[SymbolReference]]
    references: Dict[str, List[SymbolReference]] = field(default_factory=dict)
    class_path_artifacts: List[str] = field(default_factory=list)

    @property
    def problem_keys(self) -> List[str]:
        return list(self.symbol_problems)


@dataclass(frozen=True)
class LinkageCheckFailure:
    """The linkage check itself could not run (e.g., resolution failure).

    Attributes:
        error: Message to display verbatim
    """

    error: str


PairResult = Union[LinkageCheckSuccess, LinkageCheckFailure]


@dataclass(frozen=True)
class CellOutcome:
    """Display state of one matrix cell.

    Attributes:
        display_value: Text shown in the cell
        is_error: The check failed or the pair file was unavailable
        is_flagged: Cross pair with at least one newly introduced problem
        count: Numeric problem count, None for error and N/A cells
        is_self_pair: Diagonal cell showing the inherent count
        is_not_applicable: Two versions of the same artifact
        message: Error message for error cells
    """

    display_value: str
    is_error: bool = False
    is_flagged: bool = False
    count: Optional[int] = None
    is_self_pair: bool = False
    is_not_applicable: bool = False
    message: str = ""


@dataclass(frozen=True)
class HeaderSpan:
    """Merged matrix header for an adjacent run of one group:artifact.

    Attributes:
        key: group:artifact shared by the run
        span: Number of columns (or rows) covered
        start_index: Index of the first artifact in the run
    """

    key: str
    span: int
    start_index: int


@dataclass(frozen=True)
class ProblemDetail:
    """A symbol problem with its referencing classes.

    Attributes:
        key: Problem key
        references: Classes that reference the problematic symbol
    """

    key: str
    references: Tuple[SymbolReference, ...] = ()


@dataclass
class PairDetail:
    """Detail view of one artifact pair.

    Attributes:
        artifact1: First artifact
        artifact2: Second artifact
        new_problems: Problems attributable to neither artifact alone
        inherent_problems1: Problems of artifact1 checked alone
        inherent_problems2: Problems of artifact2 checked alone
        class_path_artifacts: Classpath of the combined check
        error: Failure message when the combined check did not run
        baseline_errors: Artifact coordinate -> message for failed self-checks
    """

    artifact1: ArtifactCoordinate
    artifact2: ArtifactCoordinate
    new_problems: List[ProblemDetail]
    inherent_problems1: List[str]
    inherent_problems2: List[str]
    class_path_artifacts: List[str] = field(default_factory=list)
    error: Optional[str] = None
    baseline_errors: Dict[str, str] = field(default_factory=dict)


@dataclass
class MatrixSummary:
    """Aggregate statistics of a computed matrix.

    Attributes:
        artifact_count: Number of artifacts in the matrix
        compared_pairs: Cross pairs with a numeric result
        conflicting_pairs: Cross pairs with newly introduced problems
        non_conflicting_pairs: Cross pairs without newly introduced problems
        error_cells: Cells whose check failed or could not be fetched
        not_applicable_cells: Cells for two versions of one artifact
        conflicts_per_artifact: Coordinate -> number of conflicting cross pairs
    """

    artifact_count: int
    compared_pairs: int
    conflicting_pairs: int
    non_conflicting_pairs: int
    error_cells: int
    not_applicable_cells: int
    conflicts_per_artifact: Dict[str, int] = field(default_factory=dict)
