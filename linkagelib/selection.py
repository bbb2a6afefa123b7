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
"""Selection state machine for highlighting matrix rows and columns.

For each group:artifact at most one version is selected at a time (radio-button
semantics across versions of one artifact, independent across artifacts).
Selecting a version highlights every cell in its row and column; a sibling
version displaced by the selection is de-emphasized until the family is
deselected.

The transition function is pure. Rendering is a separate, swappable side effect
driven by SelectionController.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, FrozenSet, Optional, Sequence, Tuple, Union

from .constants import CLASS_DEEMPHASIZED, CLASS_SELECTED
from .coordinates import ArtifactCoordinate, group_artifact_key

logger = logging.getLogger(__name__)

CellKey = Tuple[int, int]
Highlights = Dict[CellKey, FrozenSet[str]]


@dataclass(frozen=True)
class SelectionState:
    """Selection per artifact family.

    Attributes:
        selected: group:artifact -> the selected version's coordinate
        deemphasized: group:artifact -> versions displaced by the current selection
    """

    selected: Dict[str, ArtifactCoordinate] = field(default_factory=dict)
    deemphasized: Dict[str, FrozenSet[ArtifactCoordinate]] = field(default_factory=dict)

    def is_selected(self, coordinate: ArtifactCoordinate) -> bool:
        return self.selected.get(group_artifact_key(coordinate)) == coordinate

    def is_deemphasized(self, coordinate: ArtifactCoordinate) -> bool:
        return coordinate in self.deemphasized.get(group_artifact_key(coordinate), frozenset())


@dataclass(frozen=True)
class Select:
    coordinate: ArtifactCoordinate


@dataclass(frozen=True)
class Deselect:
    coordinate: ArtifactCoordinate


@dataclass(frozen=True)
class Toggle:
    coordinate: ArtifactCoordinate


SelectionEvent = Union[Select, Deselect, Toggle]


def _select(state: SelectionState, coordinate: ArtifactCoordinate) -> SelectionState:
    key = group_artifact_key(coordinate)
    previous = state.selected.get(key)
    if previous == coordinate:
        return state

    displaced = set(state.deemphasized.get(key, frozenset()))
    if previous is not None:
        displaced.add(previous)
    displaced.discard(coordinate)

    selected = dict(state.selected)
    selected[key] = coordinate
    deemphasized = dict(state.deemphasized)
    if displaced:
        deemphasized[key] = frozenset(displaced)
    else:
        deemphasized.pop(key, None)
    return replace(state, selected=selected, deemphasized=deemphasized)


def _deselect(state: SelectionState, coordinate: ArtifactCoordinate) -> SelectionState:
    key = group_artifact_key(coordinate)
    if state.selected.get(key) != coordinate:
        return state

    selected = dict(state.selected)
    del selected[key]
    # Every displaced sibling was marked by the chain of selections ending here
    deemphasized = dict(state.deemphasized)
    deemphasized.pop(key, None)
    return replace(state, selected=selected, deemphasized=deemphasized)


def transition(state: SelectionState, event: SelectionEvent) -> SelectionState:
    """Apply one selection event.

    Args:
        state: Current state (not modified)
        event: Select, Deselect or Toggle of one artifact version

    Returns:
        The new state
    """
    if isinstance(event, Select):
        return _select(state, event.coordinate)
    if isinstance(event, Deselect):
        return _deselect(state, event.coordinate)
    if isinstance(event, Toggle):
        if state.is_selected(event.coordinate):
            return _deselect(state, event.coordinate)
        return _select(state, event.coordinate)
    raise TypeError(f"Unknown selection event: {event!r}")


def _line_classes(state: SelectionState, coordinate: ArtifactCoordinate) -> FrozenSet[str]:
    classes = set()
    if state.is_selected(coordinate):
        classes.add(CLASS_SELECTED)
    if state.is_deemphasized(coordinate):
        classes.add(CLASS_DEEMPHASIZED)
    return frozenset(classes)


def cell_highlights(state: SelectionState, artifacts: Sequence[ArtifactCoordinate]) -> Highlights:
    """Derive per-cell highlight classes from the selection state.

    A cell gets the classes of its row artifact and of its column artifact.

    Args:
        state: Selection state
        artifacts: Artifacts in matrix order

    Returns:
        (row, column) -> classes, only for cells with at least one class
    """
    line_classes = [_line_classes(state, a) for a in artifacts]
    highlights: Highlights = {}
    for i, row_classes in enumerate(line_classes):
        for j, column_classes in enumerate(line_classes):
            classes = row_classes | column_classes
            if classes:
                highlights[(i, j)] = classes
    return highlights


class HighlightRenderer:
    """Receives the highlight classes after every selection change."""

    def apply(self, highlights: Highlights) -> None:
        raise NotImplementedError


class CellClassRenderer(HighlightRenderer):
    """Keeps the latest highlight classes for renderers that draw later."""

    def __init__(self) -> None:
        self.highlights: Highlights = {}

    def apply(self, highlights: Highlights) -> None:
        self.highlights = dict(highlights)

    def classes_for(self, row: int, column: int) -> FrozenSet[str]:
        return self.highlights.get((row, column), frozenset())


class SelectionController:
    """Runs the state machine and pushes highlights to a renderer."""

    def __init__(self, artifacts: Sequence[ArtifactCoordinate], renderer: Optional[HighlightRenderer] = None):
        self.artifacts = list(artifacts)
        self.renderer = renderer if renderer is not None else CellClassRenderer()
        self.state = SelectionState()

    def dispatch(self, event: SelectionEvent) -> SelectionState:
        self.state = transition(self.state, event)
        logger.debug("Selection after %s: %s", event, {k: str(v) for k, v in self.state.selected.items()})
        self.renderer.apply(cell_highlights(self.state, self.artifacts))
        return self.state
