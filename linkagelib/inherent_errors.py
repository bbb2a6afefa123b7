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
"""Inherent error index: symbol problems each artifact has on its own.

The index is built once from the self-pair results. An artifact whose baseline
cannot be determined (failed check or missing file) maps to the empty set, so
every problem in its pairs is reported as new rather than silently hidden.
"""

import logging
from typing import Dict, FrozenSet, Mapping

from .constants import ArtifactFetchError
from .coordinates import ArtifactCoordinate
from .linkage_types import LinkageCheckFailure, LinkageCheckSuccess
from .pair_store import SelfPairOutcome

logger = logging.getLogger(__name__)

EMPTY: FrozenSet[str] = frozenset()


def inherent_problem_keys(result: LinkageCheckSuccess) -> FrozenSet[str]:
    """Return the problem keys a self-pair result defines as inherent."""
    return frozenset(result.problem_keys)


class InherentErrorIndex:
    """Per-artifact inherent error sets.

    Attributes:
        failures: Artifact -> message for artifacts without a known baseline
    """

    def __init__(self) -> None:
        self._errors: Dict[ArtifactCoordinate, FrozenSet[str]] = {}
        self.failures: Dict[ArtifactCoordinate, str] = {}

    @classmethod
    def from_self_pairs(cls, outcomes: Mapping[ArtifactCoordinate, SelfPairOutcome]) -> "InherentErrorIndex":
        """Build the index from self-pair fetch outcomes.

        Args:
            outcomes: Artifact -> self-pair PairResult or the fetch error raised

        Returns:
            Populated InherentErrorIndex
        """
        index = cls()
        for artifact, outcome in outcomes.items():
            if isinstance(outcome, LinkageCheckSuccess):
                index._errors[artifact] = inherent_problem_keys(outcome)
                logger.debug("%s: %d inherent problems", artifact, len(index._errors[artifact]))
            elif isinstance(outcome, LinkageCheckFailure):
                index._record_failure(artifact, outcome.error)
            elif isinstance(outcome, ArtifactFetchError):
                index._record_failure(artifact, str(outcome))
            else:
                raise TypeError(f"Unexpected self-pair outcome for {artifact}: {outcome!r}")
        return index

    def _record_failure(self, artifact: ArtifactCoordinate, message: str) -> None:
        logger.info("No baseline for %s (%s); all its pair problems count as new", artifact, message)
        self._errors[artifact] = EMPTY
        self.failures[artifact] = message

    def get(self, artifact: ArtifactCoordinate) -> FrozenSet[str]:
        """Return the inherent problem keys of an artifact (empty if unknown)."""
        return self._errors.get(artifact, EMPTY)

    def union(self, a: ArtifactCoordinate, b: ArtifactCoordinate) -> FrozenSet[str]:
        """Return inherent(a) | inherent(b)."""
        return self.get(a) | self.get(b)

    def has_baseline(self, artifact: ArtifactCoordinate) -> bool:
        return artifact in self._errors and artifact not in self.failures

    def __contains__(self, artifact: object) -> bool:
        return artifact in self._errors

    def __len__(self) -> int:
        return len(self._errors)
